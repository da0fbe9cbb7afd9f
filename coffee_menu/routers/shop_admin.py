from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field, HttpUrl, field_validator
from sqlalchemy.orm import Session

from coffee_menu.core.auth_context import RequestScope
from coffee_menu.core.database import get_db
from coffee_menu.deps import require_shop_admin
from coffee_menu.models.category import Category
from coffee_menu.models.coffee_shop import CoffeeShop
from coffee_menu.models.menu_item import MenuItem
from coffee_menu.routers.admin_categories import CategoryOut, category_to_dict
from coffee_menu.routers.admin_tenants import CoffeeShopOut, CoffeeShopUpdate, apply_shop_update, shop_to_dict
from coffee_menu.services.menu_catalog import (
    get_shop_item,
    list_active_categories,
    list_shop_items,
    menu_item_to_dict,
)

router = APIRouter(prefix="/api/admin", tags=["shop-admin"])
logger = logging.getLogger(__name__)


class MenuItemCategory(BaseModel):
    id: int
    name: str
    display_name: str
    emoji: Optional[str] = None
    color: Optional[str] = None
    order_index: int


class MenuItemOut(BaseModel):
    id: int
    coffee_shop_id: int
    category_id: int
    name: str
    price: int
    price_premium: Optional[int] = None
    has_dual_pricing: bool
    image_url: Optional[str] = None
    order_index: int
    is_available: bool
    category: Optional[MenuItemCategory] = None


class MenuItemCreate(BaseModel):
    category_id: int
    name: str = Field(..., min_length=2, max_length=100)
    price: int = Field(..., ge=0)
    price_premium: Optional[int] = Field(None, ge=0)
    has_dual_pricing: bool = False
    image_url: Optional[HttpUrl] = None
    order_index: int = Field(0, ge=0)
    is_available: bool = True

    @field_validator("image_url", mode="before")
    @classmethod
    def _empty_url_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class MenuItemUpdate(BaseModel):
    category_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    price: Optional[int] = Field(None, ge=0)
    price_premium: Optional[int] = Field(None, ge=0)
    has_dual_pricing: Optional[bool] = None
    image_url: Optional[HttpUrl] = None
    order_index: Optional[int] = Field(None, ge=0)
    is_available: Optional[bool] = None

    @field_validator("image_url", mode="before")
    @classmethod
    def _empty_url_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


def _ensure_category_exists(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category not found")
    return category


def _get_item_or_404(db: Session, shop_id: int, item_id: int) -> MenuItem:
    item = get_shop_item(db, shop_id, item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu item not found")
    return item


# Menu items

@router.get("/menu", response_model=List[MenuItemOut])
def list_menu_items(
    db: Session = Depends(get_db),
    scope: RequestScope = Depends(require_shop_admin),
):
    return list_shop_items(db, scope.shop_id)


@router.post("/menu", response_model=MenuItemOut, status_code=status.HTTP_201_CREATED)
def create_menu_item(
    payload: MenuItemCreate,
    db: Session = Depends(get_db),
    scope: RequestScope = Depends(require_shop_admin),
):
    category = _ensure_category_exists(db, payload.category_id)

    item = MenuItem(
        coffee_shop_id=scope.shop_id,
        category_id=category.id,
        name=payload.name.strip(),
        price=payload.price,
        price_premium=payload.price_premium,
        has_dual_pricing=payload.has_dual_pricing,
        image_url=str(payload.image_url) if payload.image_url else None,
        order_index=payload.order_index,
        is_available=payload.is_available,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    logger.info("Menu item created: item_id=%s shop_id=%s", item.id, scope.shop_id)
    return menu_item_to_dict(item, category)


@router.get("/menu/categories", response_model=List[CategoryOut])
def list_menu_categories(
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_shop_admin),
):
    return [category_to_dict(category) for category in list_active_categories(db)]


@router.get("/menu/{item_id}", response_model=MenuItemOut)
def get_menu_item(
    item_id: int,
    db: Session = Depends(get_db),
    scope: RequestScope = Depends(require_shop_admin),
):
    item = _get_item_or_404(db, scope.shop_id, item_id)
    category = db.query(Category).filter(Category.id == item.category_id).first()
    return menu_item_to_dict(item, category)


@router.put("/menu/{item_id}", response_model=MenuItemOut)
def update_menu_item(
    item_id: int,
    payload: MenuItemUpdate,
    db: Session = Depends(get_db),
    scope: RequestScope = Depends(require_shop_admin),
):
    item = _get_item_or_404(db, scope.shop_id, item_id)

    if payload.category_id is not None:
        item.category_id = _ensure_category_exists(db, payload.category_id).id
    if payload.name is not None:
        item.name = payload.name.strip()
    if payload.price is not None:
        item.price = payload.price
    if "price_premium" in payload.model_fields_set:
        item.price_premium = payload.price_premium
    if payload.has_dual_pricing is not None:
        item.has_dual_pricing = payload.has_dual_pricing
    if "image_url" in payload.model_fields_set:
        item.image_url = str(payload.image_url) if payload.image_url else None
    if payload.order_index is not None:
        item.order_index = payload.order_index
    if payload.is_available is not None:
        item.is_available = payload.is_available

    db.commit()
    db.refresh(item)
    category = db.query(Category).filter(Category.id == item.category_id).first()
    return menu_item_to_dict(item, category)


@router.delete("/menu/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(
    item_id: int,
    db: Session = Depends(get_db),
    scope: RequestScope = Depends(require_shop_admin),
):
    item = _get_item_or_404(db, scope.shop_id, item_id)
    db.delete(item)
    db.commit()
    logger.info("Menu item deleted: item_id=%s shop_id=%s", item_id, scope.shop_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Shop settings

def _get_scoped_shop(db: Session, scope: RequestScope) -> CoffeeShop:
    shop = db.query(CoffeeShop).filter(CoffeeShop.id == scope.shop_id).first()
    if not shop:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Coffee shop not found")
    return shop


@router.get("/settings", response_model=CoffeeShopOut)
def get_shop_settings(
    db: Session = Depends(get_db),
    scope: RequestScope = Depends(require_shop_admin),
):
    return shop_to_dict(_get_scoped_shop(db, scope))


@router.put("/settings", response_model=CoffeeShopOut)
def update_shop_settings(
    payload: CoffeeShopUpdate,
    db: Session = Depends(get_db),
    scope: RequestScope = Depends(require_shop_admin),
):
    shop = _get_scoped_shop(db, scope)
    apply_shop_update(shop, payload)
    db.commit()
    db.refresh(shop)
    logger.info("Shop settings updated: shop_id=%s", shop.id)
    return shop_to_dict(shop)
