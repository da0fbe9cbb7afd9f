from __future__ import annotations

from sqlalchemy.orm import Session

from coffee_menu.models.coffee_shop import CoffeeShop
from coffee_menu.models.principals import MainAdmin, ShopAdmin
from coffee_menu.services.passwords import hash_password, password_looks_hashed


def _password_hash(password: str) -> str:
    if password_looks_hashed(password):
        return password
    return hash_password(password)


def upsert_main_admin(db: Session, *, username: str, password: str | None) -> tuple[MainAdmin, bool]:
    """Create the main admin, or reactivate it and optionally reset its password.

    Returns ``(admin, created)``.
    """
    existing = db.query(MainAdmin).filter(MainAdmin.username == username).first()
    if existing:
        existing.is_active = True
        if password:
            existing.password_hash = _password_hash(password)
        db.commit()
        db.refresh(existing)
        return existing, False

    if not password:
        raise ValueError("A password is required to create a new main admin.")

    admin = MainAdmin(username=username, password_hash=_password_hash(password), is_active=True)
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin, True


def upsert_shop_admin(
    db: Session,
    *,
    shop_id: int,
    username: str,
    password: str | None,
) -> tuple[ShopAdmin, bool]:
    shop = db.query(CoffeeShop).filter(CoffeeShop.id == shop_id).first()
    if not shop:
        raise ValueError(f"Coffee shop {shop_id} not found.")

    existing = db.query(ShopAdmin).filter(ShopAdmin.username == username).first()
    if existing:
        if existing.coffee_shop_id != shop.id:
            raise ValueError(f"Username {username!r} already belongs to another shop.")
        existing.is_active = True
        if password:
            existing.password_hash = _password_hash(password)
        db.commit()
        db.refresh(existing)
        return existing, False

    if not password:
        raise ValueError("A password is required to create a new shop admin.")

    admin = ShopAdmin(
        coffee_shop_id=shop.id,
        username=username,
        password_hash=_password_hash(password),
        is_active=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin, True
