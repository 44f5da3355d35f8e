"""
Auth Module - Routes
=====================
Public JSON endpoints: signup, signin, social login.

Endpoints:
  POST /signup                   Create a password account
  POST /signin                   Email + password → bearer token
  POST /api/auth/social-login    Verified provider token → bearer token
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.service import auth_service, token_response

router = APIRouter(tags=["auth"])


# ==========================================
# Schemas
# ==========================================

class SignUpRequest(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""
    phone: str = ""
    address: str = ""
    profile_image_url: str = ""


class SignInRequest(BaseModel):
    email: str = ""
    password: str = ""


class SocialLoginRequest(BaseModel):
    token: str = ""
    provider: str = ""


# ==========================================
# POST /signup
# ==========================================

@router.post("/signup", status_code=201)
async def signup(data: SignUpRequest, db: Session = Depends(get_db)):
    user = auth_service.signup(
        db,
        name=data.name,
        email=data.email,
        password=data.password,
        phone=data.phone,
        address=data.address,
        profile_image_url=data.profile_image_url,
    )
    return JSONResponse({
        "message": "Sign-up successful",
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "profile_image_url": user.profile_image_url,
    }, status_code=201)


# ==========================================
# POST /signin
# ==========================================

@router.post("/signin")
async def signin(data: SignInRequest, db: Session = Depends(get_db)):
    user = auth_service.signin(db, data.email, data.password)
    return token_response(user)


# ==========================================
# POST /api/auth/social-login
# ==========================================

@router.post("/api/auth/social-login")
async def social_login(data: SocialLoginRequest, db: Session = Depends(get_db)):
    user = auth_service.social_login(db, data.provider, data.token)
    return token_response(user)
