from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from coffee_menu.models.category import Category
from coffee_menu.models.coffee_shop import CoffeeShop
from coffee_menu.models.menu_item import MenuItem


def category_summary(category: Optional[Category]) -> Optional[dict]:
    if category is None:
        return None
    return {
        "id": category.id,
        "name": category.name,
        "display_name": category.display_name,
        "emoji": category.emoji,
        "color": category.color,
        "order_index": category.order_index,
    }


def menu_item_to_dict(item: MenuItem, category: Optional[Category] = None) -> dict:
    return {
        "id": item.id,
        "coffee_shop_id": item.coffee_shop_id,
        "category_id": item.category_id,
        "name": item.name,
        "price": item.price,
        "price_premium": item.price_premium,
        "has_dual_pricing": item.has_dual_pricing,
        "image_url": item.image_url,
        "order_index": item.order_index,
        "is_available": item.is_available,
        "category": category_summary(category),
    }


def _with_categories(db: Session, items: list[MenuItem]) -> list[dict]:
    category_ids = {item.category_id for item in items}
    categories = {}
    if category_ids:
        categories = {
            category.id: category
            for category in db.query(Category).filter(Category.id.in_(category_ids)).all()
        }
    return [menu_item_to_dict(item, categories.get(item.category_id)) for item in items]


def list_shop_items(db: Session, shop_id: int) -> list[dict]:
    items = (
        db.query(MenuItem)
        .filter(MenuItem.coffee_shop_id == shop_id)
        .order_by(MenuItem.order_index.asc(), MenuItem.id.asc())
        .all()
    )
    return _with_categories(db, items)


def list_public_items(db: Session, tenant_id: int) -> list[dict]:
    """Available items across the tenant's active shops."""
    active_shop_ids = select(CoffeeShop.id).where(
        CoffeeShop.tenant_id == tenant_id,
        CoffeeShop.is_active.is_(True),
    )
    items = (
        db.query(MenuItem)
        .filter(
            MenuItem.coffee_shop_id.in_(active_shop_ids),
            MenuItem.is_available.is_(True),
        )
        .order_by(MenuItem.order_index.asc(), MenuItem.id.asc())
        .all()
    )
    return _with_categories(db, items)


def get_shop_item(db: Session, shop_id: int, item_id: int) -> Optional[MenuItem]:
    return (
        db.query(MenuItem)
        .filter(MenuItem.id == item_id, MenuItem.coffee_shop_id == shop_id)
        .first()
    )


def first_active_shop(db: Session, tenant_id: int) -> Optional[CoffeeShop]:
    return (
        db.query(CoffeeShop)
        .filter(CoffeeShop.tenant_id == tenant_id, CoffeeShop.is_active.is_(True))
        .order_by(CoffeeShop.id.asc())
        .first()
    )


def list_active_categories(db: Session) -> list[Category]:
    return (
        db.query(Category)
        .filter(Category.is_active.is_(True))
        .order_by(Category.order_index.asc(), Category.id.asc())
        .all()
    )
