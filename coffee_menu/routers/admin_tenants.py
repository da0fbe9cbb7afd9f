from __future__ import annotations

import logging
import re
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, HttpUrl, field_validator
from sqlalchemy.orm import Session

from coffee_menu.core.auth_context import RequestScope
from coffee_menu.core.database import get_db
from coffee_menu.deps import commit_or_conflict, require_main_admin
from coffee_menu.models.coffee_shop import CoffeeShop
from coffee_menu.models.principals import ShopAdmin
from coffee_menu.models.tenant import Tenant
from coffee_menu.services.passwords import hash_password
from coffee_menu.services.tenant_resolver import RESERVED_SUBDOMAINS

router = APIRouter(prefix="/api/admin", tags=["admin-tenants"])
logger = logging.getLogger(__name__)

SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9-]{3,50}$")
SUBDOMAIN_TAKEN = "Subdomain already in use"
USERNAME_TAKEN = "Username already exists"


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TenantCreate(BaseModel):
    subdomain: str = Field(..., min_length=3, max_length=50)
    name: str = Field(..., min_length=2, max_length=100)


class TenantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    is_active: Optional[bool] = None


class TenantOut(BaseModel):
    id: int
    subdomain: str
    name: str
    is_active: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ShopProfileFields(BaseModel):
    location: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)
    instagram_url: Optional[HttpUrl] = None
    logo_url: Optional[HttpUrl] = None
    hero_image_url: Optional[HttpUrl] = None
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("instagram_url", "logo_url", "hero_image_url", mode="before")
    @classmethod
    def _empty_url_is_none(cls, value):
        return _blank_to_none(value)


class CoffeeShopCreate(ShopProfileFields):
    name: str = Field(..., min_length=2, max_length=100)


class CoffeeShopUpdate(ShopProfileFields):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    is_active: Optional[bool] = None


class CoffeeShopOut(BaseModel):
    id: int
    tenant_id: int
    name: str
    location: Optional[str] = None
    phone: Optional[str] = None
    instagram_url: Optional[str] = None
    logo_url: Optional[str] = None
    hero_image_url: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TenantDetailOut(TenantOut):
    coffee_shops: List[CoffeeShopOut]


class ShopAdminCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=100)


class ShopAdminUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    password: Optional[str] = Field(None, min_length=6, max_length=100)
    is_active: Optional[bool] = None


class ShopAdminOut(BaseModel):
    id: int
    coffee_shop_id: int
    username: str
    is_active: bool
    created_at: Optional[str] = None


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _tenant_to_dict(tenant: Tenant) -> dict:
    return {
        "id": tenant.id,
        "subdomain": tenant.subdomain,
        "name": tenant.name,
        "is_active": tenant.is_active,
        "created_at": _iso(tenant.created_at),
        "updated_at": _iso(tenant.updated_at),
    }


def shop_to_dict(shop: CoffeeShop) -> dict:
    return {
        "id": shop.id,
        "tenant_id": shop.tenant_id,
        "name": shop.name,
        "location": shop.location,
        "phone": shop.phone,
        "instagram_url": shop.instagram_url,
        "logo_url": shop.logo_url,
        "hero_image_url": shop.hero_image_url,
        "description": shop.description,
        "is_active": shop.is_active,
        "created_at": _iso(shop.created_at),
        "updated_at": _iso(shop.updated_at),
    }


def _shop_admin_to_dict(admin: ShopAdmin) -> dict:
    return {
        "id": admin.id,
        "coffee_shop_id": admin.coffee_shop_id,
        "username": admin.username,
        "is_active": admin.is_active,
        "created_at": _iso(admin.created_at),
    }


def apply_shop_update(shop: CoffeeShop, payload: CoffeeShopUpdate) -> None:
    """Copy the fields present in ``payload`` onto ``shop``; tenant_id never changes."""
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field in {"instagram_url", "logo_url", "hero_image_url"} and value is not None:
            value = str(value)
        if field in {"name", "is_active"} and value is None:
            continue
        setattr(shop, field, value)


def _get_tenant_or_404(db: Session, tenant_id: int) -> Tenant:
    tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
    if not tenant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")
    return tenant


def _get_shop_or_404(db: Session, shop_id: int) -> CoffeeShop:
    shop = db.query(CoffeeShop).filter(CoffeeShop.id == shop_id).first()
    if not shop:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Coffee shop not found")
    return shop


def _ensure_username_available(db: Session, username: str, exclude_id: int | None = None) -> None:
    query = db.query(ShopAdmin).filter(ShopAdmin.username == username)
    if exclude_id is not None:
        query = query.filter(ShopAdmin.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=USERNAME_TAKEN)


def _ensure_subdomain_available(db: Session, subdomain: str) -> None:
    if db.query(Tenant).filter(Tenant.subdomain == subdomain).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=SUBDOMAIN_TAKEN)


# Tenants

@router.get("/tenants", response_model=List[TenantOut])
def list_tenants(
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    tenants = db.query(Tenant).order_by(Tenant.id.asc()).all()
    return [_tenant_to_dict(tenant) for tenant in tenants]


@router.post("/tenants", response_model=TenantOut, status_code=status.HTTP_201_CREATED)
def create_tenant(
    payload: TenantCreate,
    db: Session = Depends(get_db),
    scope: RequestScope = Depends(require_main_admin),
):
    subdomain = payload.subdomain.strip()
    if not SUBDOMAIN_PATTERN.match(subdomain) or subdomain in RESERVED_SUBDOMAINS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid subdomain. Use lowercase letters, digits and hyphens (3-50 chars).",
        )

    _ensure_subdomain_available(db, subdomain)

    tenant = Tenant(subdomain=subdomain, name=payload.name.strip(), is_active=True)
    db.add(tenant)
    commit_or_conflict(db, detail=SUBDOMAIN_TAKEN)
    db.refresh(tenant)
    logger.info("Tenant created: tenant_id=%s subdomain=%s by=%s", tenant.id, tenant.subdomain, scope.principal_id)
    return _tenant_to_dict(tenant)


@router.get("/tenants/{tenant_id}", response_model=TenantDetailOut)
def get_tenant(
    tenant_id: int,
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    tenant = _get_tenant_or_404(db, tenant_id)
    shops = db.query(CoffeeShop).filter(CoffeeShop.tenant_id == tenant.id).order_by(CoffeeShop.id.asc()).all()
    return {**_tenant_to_dict(tenant), "coffee_shops": [shop_to_dict(shop) for shop in shops]}


@router.put("/tenants/{tenant_id}", response_model=TenantOut)
def update_tenant(
    tenant_id: int,
    payload: TenantUpdate,
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    tenant = _get_tenant_or_404(db, tenant_id)

    if payload.name is not None:
        tenant.name = payload.name.strip()
    if payload.is_active is not None:
        tenant.is_active = payload.is_active

    db.commit()
    db.refresh(tenant)
    return _tenant_to_dict(tenant)


@router.delete("/tenants/{tenant_id}", response_model=TenantOut)
def deactivate_tenant(
    tenant_id: int,
    db: Session = Depends(get_db),
    scope: RequestScope = Depends(require_main_admin),
):
    tenant = _get_tenant_or_404(db, tenant_id)
    tenant.is_active = False
    db.commit()
    db.refresh(tenant)
    logger.info("Tenant deactivated: tenant_id=%s by=%s", tenant.id, scope.principal_id)
    return _tenant_to_dict(tenant)


# Coffee shops

@router.get("/tenants/{tenant_id}/shops", response_model=List[CoffeeShopOut])
def list_tenant_shops(
    tenant_id: int,
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    _get_tenant_or_404(db, tenant_id)
    shops = db.query(CoffeeShop).filter(CoffeeShop.tenant_id == tenant_id).order_by(CoffeeShop.id.asc()).all()
    return [shop_to_dict(shop) for shop in shops]


@router.post("/tenants/{tenant_id}/shops", response_model=CoffeeShopOut, status_code=status.HTTP_201_CREATED)
def create_tenant_shop(
    tenant_id: int,
    payload: CoffeeShopCreate,
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    tenant = _get_tenant_or_404(db, tenant_id)

    shop = CoffeeShop(
        tenant_id=tenant.id,
        name=payload.name,
        location=payload.location,
        phone=payload.phone,
        instagram_url=str(payload.instagram_url) if payload.instagram_url else None,
        logo_url=str(payload.logo_url) if payload.logo_url else None,
        hero_image_url=str(payload.hero_image_url) if payload.hero_image_url else None,
        description=payload.description,
        is_active=True,
    )
    db.add(shop)
    db.commit()
    db.refresh(shop)
    return shop_to_dict(shop)


@router.get("/shops/{shop_id}", response_model=CoffeeShopOut)
def get_shop(
    shop_id: int,
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    return shop_to_dict(_get_shop_or_404(db, shop_id))


@router.put("/shops/{shop_id}", response_model=CoffeeShopOut)
def update_shop(
    shop_id: int,
    payload: CoffeeShopUpdate,
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    shop = _get_shop_or_404(db, shop_id)
    apply_shop_update(shop, payload)
    db.commit()
    db.refresh(shop)
    return shop_to_dict(shop)


@router.delete("/shops/{shop_id}", response_model=CoffeeShopOut)
def deactivate_shop(
    shop_id: int,
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    shop = _get_shop_or_404(db, shop_id)
    shop.is_active = False
    db.commit()
    db.refresh(shop)
    return shop_to_dict(shop)


# Shop admins

@router.get("/shops/{shop_id}/admins", response_model=List[ShopAdminOut])
def list_shop_admins(
    shop_id: int,
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    _get_shop_or_404(db, shop_id)
    admins = db.query(ShopAdmin).filter(ShopAdmin.coffee_shop_id == shop_id).order_by(ShopAdmin.id.asc()).all()
    return [_shop_admin_to_dict(admin) for admin in admins]


@router.post("/shops/{shop_id}/admins", response_model=ShopAdminOut, status_code=status.HTTP_201_CREATED)
def create_shop_admin(
    shop_id: int,
    payload: ShopAdminCreate,
    db: Session = Depends(get_db),
    scope: RequestScope = Depends(require_main_admin),
):
    shop = _get_shop_or_404(db, shop_id)
    username = payload.username.strip()
    _ensure_username_available(db, username)

    admin = ShopAdmin(
        coffee_shop_id=shop.id,
        username=username,
        password_hash=hash_password(payload.password),
        is_active=True,
    )
    db.add(admin)
    commit_or_conflict(db, detail=USERNAME_TAKEN)
    db.refresh(admin)
    logger.info(
        "Shop admin created: shop_admin_id=%s shop_id=%s by=%s",
        admin.id,
        shop.id,
        scope.principal_id,
    )
    return _shop_admin_to_dict(admin)


@router.put("/shop-admins/{admin_id}", response_model=ShopAdminOut)
def update_shop_admin(
    admin_id: int,
    payload: ShopAdminUpdate,
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    admin = db.query(ShopAdmin).filter(ShopAdmin.id == admin_id).first()
    if not admin:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shop admin not found")

    if payload.username is not None:
        username = payload.username.strip()
        _ensure_username_available(db, username, exclude_id=admin.id)
        admin.username = username
    if payload.password is not None:
        admin.password_hash = hash_password(payload.password)
    if payload.is_active is not None:
        admin.is_active = payload.is_active

    commit_or_conflict(db, detail=USERNAME_TAKEN)
    db.refresh(admin)
    return _shop_admin_to_dict(admin)
