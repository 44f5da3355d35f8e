"""
Catalog Routes
================
Public product/category browsing and seller product management.

Endpoints:
  GET    /products                  All live products
  GET    /products/{id}             Product detail
  GET    /categories                Category list
  POST   /categories                Create category
  POST   /api/products              Create product (owner = caller)
  GET    /api/user/products         Caller's products
  PUT    /api/products/{id}         Update owned product
  DELETE /api/products/{id}         Delete owned product
"""

from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_login
from modules.user.models import User
from modules.catalog.service import category_service, product_service

router = APIRouter(tags=["catalog"])


# ==========================================
# Schemas
# ==========================================

class CategoryRequest(BaseModel):
    name: str = ""


class ProductRequest(BaseModel):
    name: str = ""
    description: str = ""
    price: Decimal = Decimal("0")
    category_id: int = 0
    images: List[str] = []


# ==========================================
# 🗂️ Categories (public)
# ==========================================

@router.get("/categories")
async def list_categories(db: Session = Depends(get_db)):
    return [c.to_dict() for c in category_service.list_categories(db)]


@router.post("/categories", status_code=201)
async def create_category(data: CategoryRequest, db: Session = Depends(get_db)):
    category = category_service.create_category(db, data.name)
    return JSONResponse(category.to_dict(), status_code=201)


# ==========================================
# 📦 Products (public)
# ==========================================

@router.get("/products")
async def list_products(db: Session = Depends(get_db)):
    return [p.to_dict() for p in product_service.list_all(db)]


@router.get("/products/{product_id}")
async def product_detail(product_id: int, db: Session = Depends(get_db)):
    return product_service.get_by_id(db, product_id).to_dict()


# ==========================================
# 🏷️ Seller Products
# ==========================================

@router.post("/api/products", status_code=201)
async def create_product(
    data: ProductRequest,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    product = product_service.create(db, me.id, data.model_dump())
    return JSONResponse(product.to_dict(), status_code=201)


@router.get("/api/user/products")
async def my_products(
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    return [p.to_dict(include_owner=False) for p in product_service.list_by_owner(db, me.id)]


@router.put("/api/products/{product_id}")
async def update_product(
    product_id: int,
    data: ProductRequest,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    product = product_service.update(db, me.id, product_id, data.model_dump())
    return product.to_dict()


@router.delete("/api/products/{product_id}")
async def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    result = product_service.delete(db, me.id, product_id)
    return {"message": "Product deleted successfully", **result}
