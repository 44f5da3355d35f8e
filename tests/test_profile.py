"""
Component tests for the current-user profile, password change and address book.
"""
from conftest import auth_headers
from common.security import verify_password
from modules.customer.address_models import Address
from modules.user.models import User


class TestCurrentUser:

    def test_includes_live_addresses(self, client, buyer):
        resp = client.get("/api/current-user", headers=auth_headers(buyer))
        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == buyer.id
        assert len(body["address"]) == 1
        assert body["address"][0]["city"] == "Springfield"


class TestUpdateProfile:

    def test_updates_user_and_first_address(self, client, db, buyer):
        resp = client.put("/api/update-profile", headers=auth_headers(buyer), json={
            "name": "New Name", "email": "new@example.com",
            "phone": "555-9999", "address": "9 Elm Street",
        })
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "new@example.com"

        db.expire_all()
        user = db.get(User, buyer.id)
        assert user.name == "New Name"
        address = db.query(Address).filter(Address.user_id == buyer.id).one()
        assert (address.phone, address.address) == ("555-9999", "9 Elm Street")

    def test_creates_address_when_none(self, client, db, make_user):
        user = make_user(email="bare@example.com", with_address=False)
        resp = client.put("/api/update-profile", headers=auth_headers(user), json={
            "name": "Bare", "email": "bare@example.com", "address": "3 Oak Road",
        })
        assert resp.status_code == 200
        address = db.query(Address).filter(Address.user_id == user.id).one()
        assert address.is_default

    def test_email_taken_by_someone_else(self, client, buyer, seller):
        resp = client.put("/api/update-profile", headers=auth_headers(buyer), json={
            "name": "Buyer", "email": "seller@example.com",
        })
        assert resp.status_code == 409

    def test_requires_name_and_email(self, client, buyer):
        resp = client.put("/api/update-profile", headers=auth_headers(buyer), json={"name": "x"})
        assert resp.status_code == 400


class TestProfileImage:

    def test_data_url_accepted(self, client, buyer, png_data_url):
        resp = client.put("/api/update-profile-image", headers=auth_headers(buyer),
                          json={"profile_image_url": png_data_url})
        assert resp.status_code == 200
        assert resp.json()["profile_image_url"] == png_data_url

    def test_empty_resets_to_default(self, client, buyer):
        resp = client.put("/api/update-profile-image", headers=auth_headers(buyer),
                          json={"profile_image_url": ""})
        assert resp.json()["profile_image_url"] == "/images/default-profile.png"

    def test_bad_url_rejected(self, client, buyer):
        resp = client.put("/api/update-profile-image", headers=auth_headers(buyer),
                          json={"profile_image_url": "javascript:alert(1)"})
        assert resp.status_code == 400


class TestChangePassword:

    def test_success(self, client, db, buyer):
        resp = client.put("/api/change-password", headers=auth_headers(buyer), json={
            "current_password": "secret123", "new_password": "brandnew1",
        })
        assert resp.status_code == 200
        db.expire_all()
        assert verify_password("brandnew1", db.get(User, buyer.id).password_hash)

    def test_wrong_current_password(self, client, buyer):
        resp = client.put("/api/change-password", headers=auth_headers(buyer), json={
            "current_password": "nope", "new_password": "brandnew1",
        })
        assert resp.status_code == 400
        assert resp.json() == {"error": "Current password is incorrect"}

    def test_new_password_too_short(self, client, buyer):
        resp = client.put("/api/change-password", headers=auth_headers(buyer), json={
            "current_password": "secret123", "new_password": "abc",
        })
        assert resp.status_code == 400

    def test_new_password_over_bcrypt_limit(self, client, db, buyer):
        resp = client.put("/api/change-password", headers=auth_headers(buyer), json={
            "current_password": "secret123", "new_password": "y" * 73,
        })
        assert resp.status_code == 400
        assert resp.json() == {"error": "New password must be at most 72 bytes"}
        db.expire_all()
        assert verify_password("secret123", db.get(User, buyer.id).password_hash)

    def test_social_account_has_no_password(self, client, db):
        user = User(name="Social", email="s@example.com", password_hash=None, auth_provider="firebase")
        db.add(user)
        db.commit()
        resp = client.put("/api/change-password", headers=auth_headers(user), json={
            "current_password": "anything", "new_password": "brandnew1",
        })
        assert resp.status_code == 400


class TestAddresses:

    def test_new_default_clears_previous(self, client, db, buyer):
        resp = client.post("/api/addresses", headers=auth_headers(buyer), json={
            "first_name": "B", "last_name": "Y", "address": "77 Pine", "city": "Shelbyville",
            "postal_code": "54321", "is_default": True,
        })
        assert resp.status_code == 201
        new_id = resp.json()["id"]

        listing = client.get("/api/addresses", headers=auth_headers(buyer)).json()
        assert [a["id"] for a in listing][0] == new_id
        assert [a["is_default"] for a in listing] == [True, False]

    def test_non_default_keeps_existing_default(self, client, buyer):
        client.post("/api/addresses", headers=auth_headers(buyer), json={"address": "2 Side St"})
        listing = client.get("/api/addresses", headers=auth_headers(buyer)).json()
        assert len(listing) == 2
        assert listing[0]["address"] == "1 Main Street"
        assert listing[0]["is_default"]

    def test_first_address_becomes_default(self, client, make_user):
        user = make_user(email="fresh@example.com", with_address=False)
        resp = client.post("/api/addresses", headers=auth_headers(user), json={"address": "5 First Ave"})
        assert resp.json()["is_default"] is True

    def test_street_required(self, client, buyer):
        resp = client.post("/api/addresses", headers=auth_headers(buyer), json={"city": "Nowhere"})
        assert resp.status_code == 400
