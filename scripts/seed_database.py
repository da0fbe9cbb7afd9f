#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from sqlalchemy.orm import Session  # noqa: E402

import coffee_menu.models  # noqa: E402,F401
from coffee_menu.core.database import Base, SessionLocal, engine  # noqa: E402
from coffee_menu.core.logging_setup import configure_logging  # noqa: E402
from coffee_menu.models.category import Category  # noqa: E402
from coffee_menu.models.coffee_shop import CoffeeShop  # noqa: E402
from coffee_menu.models.menu_item import MenuItem  # noqa: E402
from coffee_menu.models.principals import MainAdmin, ShopAdmin  # noqa: E402
from coffee_menu.models.tenant import Tenant  # noqa: E402
from coffee_menu.services.passwords import hash_password  # noqa: E402

logger = logging.getLogger("seed_database")

DEFAULT_CATEGORIES = [
    ("coffee", "Coffee", "☕", "from-amber-400 to-orange-500"),
    ("shake", "Shakes", "🥤", "from-pink-400 to-rose-500"),
    ("cold_bar", "Cold Bar", "🧊", "from-sky-400 to-blue-500"),
    ("hot_bar", "Hot Bar", "🔥", "from-red-500 to-orange-500"),
    ("tea", "Tea", "🍵", "from-lime-400 to-green-500"),
    ("cake", "Cakes", "🍰", "from-fuchsia-500 to-pink-600"),
    ("food", "Food", "🍽️", "from-indigo-400 to-purple-500"),
    ("breakfast", "Breakfast", "🌅", "from-yellow-400 to-amber-500"),
]

# (category name, item name, price, premium price)
SAMPLE_ITEMS = [
    ("coffee", "Espresso (80/20 arabica)", 45000, 55000),
    ("coffee", "Iced Americano (50/50 arabica)", 35000, 45000),
    ("coffee", "Cappuccino", 55000, 65000),
    ("shake", "Chocolate Shake", 90000, None),
    ("cold_bar", "Lemonade", 60000, None),
    ("hot_bar", "Hot Chocolate", 70000, None),
    ("tea", "Black Tea", 30000, None),
    ("cake", "Cheesecake", 85000, None),
    ("food", "Club Sandwich", 180000, None),
    ("breakfast", "Omelette", 120000, None),
]


def seed_main_admin(db: Session, *, username: str, password: str) -> None:
    if db.query(MainAdmin).count() > 0:
        logger.info("Main admin already exists, skipping")
        return
    db.add(MainAdmin(username=username, password_hash=hash_password(password), is_active=True))
    db.commit()
    logger.info("Created main admin username=%s", username)


def seed_categories(db: Session) -> None:
    if db.query(Category).count() > 0:
        logger.info("Categories already exist, skipping")
        return
    for order_index, (name, display_name, emoji, color) in enumerate(DEFAULT_CATEGORIES, start=1):
        db.add(
            Category(
                name=name,
                display_name=display_name,
                emoji=emoji,
                color=color,
                order_index=order_index,
                is_active=True,
            )
        )
    db.commit()
    logger.info("Created %s categories", len(DEFAULT_CATEGORIES))


def seed_demo_tenant(db: Session, *, shop_admin_password: str) -> None:
    if db.query(Tenant).count() > 0:
        logger.info("Sample tenant already exists, skipping")
        return

    tenant = Tenant(subdomain="demo", name="Demo Coffee Shop", is_active=True)
    db.add(tenant)
    db.flush()

    shop = CoffeeShop(
        tenant_id=tenant.id,
        name="Demo Coffee Shop",
        location="Tehran, Iran",
        phone="+98-21-12345678",
        instagram_url="https://instagram.com/democoffee",
        logo_url="https://images.unsplash.com/photo-1495474472287-4d71bcdd2085?w=200",
        hero_image_url="https://images.unsplash.com/photo-1554118811-1e0d58224f24?w=800",
        description="Best coffee in Tehran",
        is_active=True,
    )
    db.add(shop)
    db.flush()

    db.add(
        ShopAdmin(
            coffee_shop_id=shop.id,
            username="shopadmin",
            password_hash=hash_password(shop_admin_password),
            is_active=True,
        )
    )

    category_ids = {category.name: category.id for category in db.query(Category).all()}
    created = 0
    for order_index, (category_name, name, price, premium) in enumerate(SAMPLE_ITEMS, start=1):
        category_id = category_ids.get(category_name)
        if category_id is None:
            continue
        db.add(
            MenuItem(
                coffee_shop_id=shop.id,
                category_id=category_id,
                name=name,
                price=price,
                price_premium=premium,
                has_dual_pricing=premium is not None,
                order_index=order_index,
                is_available=True,
            )
        )
        created += 1

    db.commit()
    logger.info("Created sample tenant subdomain=%s shop_id=%s items=%s", tenant.subdomain, shop.id, created)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the database with default and demo data.")
    parser.add_argument("--admin-username", default="admin", help="Main admin username")
    parser.add_argument("--admin-password", default="admin123", help="Main admin password")
    parser.add_argument("--shop-admin-password", default="shop123", help="Demo shop admin password")
    parser.add_argument("--skip-demo", action="store_true", help="Do not create the demo tenant")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    configure_logging()

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_main_admin(db, username=args.admin_username, password=args.admin_password)
        seed_categories(db)
        if not args.skip_demo:
            seed_demo_tenant(db, shop_admin_password=args.shop_admin_password)
    finally:
        db.close()

    logger.info("Database seeded successfully")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
