"""
Component tests for categories and product management.

Covers ownership checks and the all-or-nothing product deletion that
removes cart lines, images and the product together.
"""
import pytest
from sqlalchemy.exc import SQLAlchemyError

from conftest import auth_headers, make_png_data_url
from modules.cart.models import CartItem
from modules.catalog.models import Product, ProductImage


@pytest.fixture
def product_payload(category, png_data_url):
    return {
        "name": "Desk Lamp",
        "description": "Warm light",
        "price": "45.50",
        "category_id": category.id,
        "images": [png_data_url],
    }


class TestCategories:

    def test_create_and_list(self, client):
        assert client.post("/categories", json={"name": "Books"}).status_code == 201
        assert client.post("/categories", json={"name": "Games"}).status_code == 201
        names = [c["name"] for c in client.get("/categories").json()]
        assert names == ["Books", "Games"]

    def test_duplicate_conflict(self, client, category):
        resp = client.post("/categories", json={"name": category.name})
        assert resp.status_code == 409

    def test_name_required(self, client):
        assert client.post("/categories", json={"name": "  "}).status_code == 400


class TestCreateProduct:

    def test_success(self, client, seller, product_payload):
        resp = client.post("/api/products", headers=auth_headers(seller), json=product_payload)
        assert resp.status_code == 201
        body = resp.json()
        assert body["price"] == 45.5
        assert body["user_id"] == seller.id
        assert body["category"]["name"] == "Electronics"
        assert len(body["images"]) == 1

    def test_requires_login(self, client, product_payload):
        assert client.post("/api/products", json=product_payload).status_code == 401

    @pytest.mark.parametrize("field, value, message", [
        ("name", "", "Name and description are required"),
        ("price", "0", "Price must be at least 0.01"),
        ("category_id", 9999, "Invalid category ID"),
        ("images", [], "At least one image is required"),
        ("images", ["not-an-image"], "Image 1 must be a valid base64 encoded image"),
    ])
    def test_validation(self, client, seller, product_payload, field, value, message):
        product_payload[field] = value
        resp = client.post("/api/products", headers=auth_headers(seller), json=product_payload)
        assert resp.status_code == 400
        assert resp.json() == {"error": message}

    def test_too_many_images(self, client, seller, product_payload):
        product_payload["images"] = [make_png_data_url((i, i, i)) for i in range(6)]
        resp = client.post("/api/products", headers=auth_headers(seller), json=product_payload)
        assert resp.status_code == 400


class TestBrowseProducts:

    def test_public_listing_and_detail(self, client, make_product):
        lamp = make_product(name="Lamp")
        make_product(name="Chair")
        listing = client.get("/products").json()
        assert {p["name"] for p in listing} == {"Lamp", "Chair"}

        detail = client.get(f"/products/{lamp.id}")
        assert detail.status_code == 200
        assert detail.json()["user"]["email"] == "seller@example.com"

    def test_unknown_product(self, client):
        assert client.get("/products/404").status_code == 404

    def test_my_products_only_lists_own(self, client, make_product, buyer):
        make_product(name="Mine")
        make_product(name="Theirs", owner=buyer)
        resp = client.get("/api/user/products", headers=auth_headers(buyer))
        assert [p["name"] for p in resp.json()] == ["Theirs"]


class TestUpdateProduct:

    def test_owner_replaces_images(self, client, db, seller, make_product, product_payload):
        product = make_product()
        product_payload["images"] = [make_png_data_url((1, 2, 3)), make_png_data_url((4, 5, 6))]
        resp = client.put(f"/api/products/{product.id}", headers=auth_headers(seller), json=product_payload)
        assert resp.status_code == 200
        assert resp.json()["name"] == "Desk Lamp"
        assert len(resp.json()["images"]) == 2

        rows = db.query(ProductImage).filter(ProductImage.product_id == product.id).all()
        assert sum(1 for r in rows if r.deleted_at is None) == 2
        assert sum(1 for r in rows if r.deleted_at is not None) == 1

    def test_non_owner_forbidden(self, client, db, buyer, make_product, product_payload):
        product = make_product(price="10.00")
        resp = client.put(f"/api/products/{product.id}", headers=auth_headers(buyer), json=product_payload)
        assert resp.status_code == 403
        db.expire_all()
        assert db.get(Product, product.id).name == "Headphones"


class TestDeleteProduct:

    def test_removes_cart_items_images_and_product(self, client, db, seller, buyer, make_product, fill_cart):
        product = make_product()
        keeper = make_product(name="Keeper")
        fill_cart(buyer, (product, 2), (keeper, 1))

        resp = client.delete(f"/api/products/{product.id}", headers=auth_headers(seller))
        assert resp.status_code == 200
        assert resp.json()["cart_items_removed"] == 1
        assert resp.json()["images_removed"] == 1

        db.expire_all()
        assert db.query(CartItem).filter(CartItem.product_id == product.id).count() == 0
        assert db.query(CartItem).filter(CartItem.product_id == keeper.id).count() == 1
        assert db.get(Product, product.id).deleted_at is not None
        assert client.get(f"/products/{product.id}").status_code == 404
        assert [p["name"] for p in client.get("/products").json()] == ["Keeper"]

    def test_non_owner_forbidden(self, client, db, buyer, make_product):
        product = make_product()
        resp = client.delete(f"/api/products/{product.id}", headers=auth_headers(buyer))
        assert resp.status_code == 403
        db.expire_all()
        assert db.get(Product, product.id).deleted_at is None

    def test_failure_rolls_everything_back(self, client, db, seller, buyer, make_product, fill_cart, monkeypatch):
        product = make_product()
        fill_cart(buyer, (product, 1))

        def explode(db, product_id):
            raise SQLAlchemyError("disk full")

        monkeypatch.setattr("modules.catalog.service.images.retire_images", explode)
        resp = client.delete(f"/api/products/{product.id}", headers=auth_headers(seller))
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error"}

        db.expire_all()
        assert db.query(CartItem).filter(CartItem.product_id == product.id).count() == 1
        assert db.get(Product, product.id).deleted_at is None
        assert db.query(ProductImage).filter(
            ProductImage.product_id == product.id, ProductImage.deleted_at.is_(None),
        ).count() == 1
