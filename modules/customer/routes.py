"""
Profile & Address Routes
==========================
Current-user profile view/edit, password change and the address book.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_login
from modules.user.models import User
from modules.customer.service import address_service, profile_service

router = APIRouter(prefix="/api", tags=["profile"])


# ==========================================
# Schemas
# ==========================================

class UpdateProfileRequest(BaseModel):
    name: str = ""
    email: str = ""
    profile_image_url: str = ""
    phone: str = ""
    address: str = ""


class ProfileImageRequest(BaseModel):
    profile_image_url: str = ""


class ChangePasswordRequest(BaseModel):
    current_password: str = ""
    new_password: str = ""


class AddressRequest(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    is_default: bool = False


# ==========================================
# 👤 Profile
# ==========================================

@router.get("/current-user")
async def current_user(
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    user = profile_service.get_user(db, me.id)
    return user.to_dict(include_addresses=True)


@router.put("/update-profile")
async def update_profile(
    data: UpdateProfileRequest,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    user = profile_service.update_profile(db, me.id, data.model_dump())
    return {
        "message": "Profile updated successfully",
        "user": user.to_dict(include_addresses=True),
    }


@router.put("/update-profile-image")
async def update_profile_image(
    data: ProfileImageRequest,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    user = profile_service.update_profile_image(db, me.id, data.profile_image_url)
    return {
        "message": "Profile image updated successfully",
        "profile_image_url": user.profile_image_url,
    }


@router.put("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    profile_service.change_password(db, me.id, data.current_password, data.new_password)
    return {"message": "Password changed successfully"}


# ==========================================
# 📍 Addresses
# ==========================================

@router.get("/addresses")
async def list_addresses(
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    return [a.to_dict() for a in address_service.list_addresses(db, me.id)]


@router.post("/addresses", status_code=201)
async def create_address(
    data: AddressRequest,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    address = address_service.create(db, me.id, data.model_dump())
    return JSONResponse(address.to_dict(), status_code=201)
