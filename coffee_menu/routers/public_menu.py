from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from coffee_menu.core.database import get_db
from coffee_menu.deps import require_request_tenant
from coffee_menu.models.tenant import Tenant
from coffee_menu.routers.admin_categories import CategoryOut, category_to_dict
from coffee_menu.routers.admin_tenants import CoffeeShopOut, shop_to_dict
from coffee_menu.routers.shop_admin import MenuItemOut
from coffee_menu.services.menu_catalog import first_active_shop, list_active_categories, list_public_items

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/public", tags=["public-menu"])


@router.get("/menu", response_model=List[MenuItemOut])
def public_menu(
    tenant: Tenant = Depends(require_request_tenant),
    db: Session = Depends(get_db),
):
    items = list_public_items(db, tenant.id)
    logger.info("Public menu served: tenant_id=%s items=%s", tenant.id, len(items))
    return items


@router.get("/shop", response_model=CoffeeShopOut)
def public_shop(
    tenant: Tenant = Depends(require_request_tenant),
    db: Session = Depends(get_db),
):
    shop = first_active_shop(db, tenant.id)
    if not shop:
        raise HTTPException(status_code=404, detail="Coffee shop not found")
    return shop_to_dict(shop)


@router.get("/categories", response_model=List[CategoryOut])
def public_categories(db: Session = Depends(get_db)):
    return [category_to_dict(category) for category in list_active_categories(db)]
