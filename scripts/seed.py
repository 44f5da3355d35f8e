"""
Blackbasket - Demo Data Seeder
================================
Seeds users, addresses, categories and products for local testing.

Usage:
    python scripts/seed.py          # Seed (skips rows that already exist)
    python scripts/seed.py --reset  # Drop all data and reseed

Seeded:
  1. Users (two sellers, one buyer) with default addresses
  2. Categories
  3. Products with generated placeholder images
"""

import sys
import os
import io
import base64
from decimal import Decimal

from PIL import Image

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.database import SessionLocal, Base, engine
from common.security import hash_password
from modules.user.models import User
from modules.customer.address_models import Address
from modules.catalog.models import Category, Product, ProductImage
from modules.cart.models import Cart, CartItem  # noqa: F401
from modules.order.models import Order, OrderItem  # noqa: F401
from modules.payment.models import Payment  # noqa: F401

DEMO_PASSWORD = "password123"

USERS = [
    {"name": "Sam Seller", "email": "seller@example.com", "city": "Portland"},
    {"name": "Robin Maker", "email": "maker@example.com", "city": "Austin"},
    {"name": "Alex Buyer", "email": "buyer@example.com", "city": "Denver"},
]

CATEGORIES = ["Electronics", "Books", "Home", "Clothing"]

PRODUCTS = [
    # (owner email, category, name, description, price, colour)
    ("seller@example.com", "Electronics", "Wireless Headphones", "Over-ear, 30h battery", "249.00", (20, 20, 20)),
    ("seller@example.com", "Electronics", "Mechanical Keyboard", "Hot-swappable switches", "1199.00", (60, 60, 90)),
    ("seller@example.com", "Home", "Cast Iron Pan", "Pre-seasoned 12 inch skillet", "89.50", (90, 50, 30)),
    ("maker@example.com", "Books", "Field Guide to Birds", "Illustrated, 400 species", "39.99", (40, 120, 60)),
    ("maker@example.com", "Clothing", "Wool Sweater", "Merino, crew neck", "540.00", (150, 30, 30)),
]


def placeholder_image(colour) -> str:
    """Solid-colour PNG as a data URL."""
    buf = io.BytesIO()
    Image.new("RGB", (32, 32), colour).save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        print("[1/3] Users...")
        users = {}
        for u in USERS:
            user = db.query(User).filter(User.email == u["email"]).first()
            if not user:
                user = User(name=u["name"], email=u["email"], password_hash=hash_password(DEMO_PASSWORD))
                db.add(user)
                db.flush()
                db.add(Address(
                    user_id=user.id,
                    first_name=u["name"].split()[0],
                    last_name=u["name"].split()[-1],
                    email=u["email"],
                    phone="555-0100",
                    address="1 Main Street",
                    city=u["city"],
                    postal_code="10001",
                    is_default=True,
                ))
                print(f"  + {u['email']}")
            users[u["email"]] = user

        print("[2/3] Categories...")
        categories = {}
        for name in CATEGORIES:
            category = db.query(Category).filter(Category.name == name).first()
            if not category:
                category = Category(name=name)
                db.add(category)
                db.flush()
                print(f"  + {name}")
            categories[name] = category

        print("[3/3] Products...")
        for owner, cat, name, desc, price, colour in PRODUCTS:
            if db.query(Product).filter(Product.name == name, Product.deleted_at.is_(None)).first():
                continue
            product = Product(
                name=name,
                description=desc,
                price=Decimal(price),
                category_id=categories[cat].id,
                user_id=users[owner].id,
            )
            db.add(product)
            db.flush()
            db.add(ProductImage(url=placeholder_image(colour), product_id=product.id))
            print(f"  + {name} ({price})")

        db.commit()

        print("\n--- Credentials ---")
        for u in USERS:
            print(f"  {u['email']} / {DEMO_PASSWORD}")
    except Exception as e:
        db.rollback()
        print(f"\nSeed failed: {e}")
        raise
    finally:
        db.close()


def reset_and_seed():
    """Drop all tables and recreate + seed."""
    Base.metadata.drop_all(bind=engine)
    print("All tables dropped")
    seed()


if __name__ == "__main__":
    if "--reset" in sys.argv:
        confirm = input("This will DELETE ALL DATA. Type 'yes' to confirm: ")
        if confirm.strip().lower() == "yes":
            reset_and_seed()
        else:
            print("Aborted.")
    else:
        seed()
