from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from coffee_menu.core.auth_context import RequestScope
from coffee_menu.core.database import get_db
from coffee_menu.deps import commit_or_conflict, require_main_admin
from coffee_menu.models.category import Category
from coffee_menu.models.menu_item import MenuItem

router = APIRouter(prefix="/api/admin", tags=["admin-categories"])

CATEGORY_NAME_TAKEN = "Category name already exists"


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    display_name: str = Field(..., min_length=2, max_length=100)
    emoji: Optional[str] = Field(None, max_length=10)
    color: Optional[str] = Field(None, max_length=50)
    order_index: int = Field(0, ge=0)


class CategoryUpdate(BaseModel):
    display_name: Optional[str] = Field(None, min_length=2, max_length=100)
    emoji: Optional[str] = Field(None, max_length=10)
    color: Optional[str] = Field(None, max_length=50)
    order_index: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class CategoryOut(BaseModel):
    id: int
    name: str
    display_name: str
    emoji: Optional[str] = None
    color: Optional[str] = None
    order_index: int
    is_active: bool


def category_to_dict(category: Category) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "display_name": category.display_name,
        "emoji": category.emoji,
        "color": category.color,
        "order_index": category.order_index,
        "is_active": category.is_active,
    }


def _get_category_or_404(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


def _ensure_category_name_available(db: Session, name: str) -> None:
    if db.query(Category).filter(Category.name == name).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=CATEGORY_NAME_TAKEN)


@router.get("/categories", response_model=List[CategoryOut])
def list_categories(
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    categories = db.query(Category).order_by(Category.order_index.asc(), Category.id.asc()).all()
    return [category_to_dict(category) for category in categories]


@router.post("/categories", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    name = payload.name.strip().lower()
    _ensure_category_name_available(db, name)

    category = Category(
        name=name,
        display_name=payload.display_name.strip(),
        emoji=payload.emoji,
        color=payload.color,
        order_index=payload.order_index,
        is_active=True,
    )
    db.add(category)
    commit_or_conflict(db, detail=CATEGORY_NAME_TAKEN)
    db.refresh(category)
    return category_to_dict(category)


@router.get("/categories/{category_id}", response_model=CategoryOut)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    return category_to_dict(_get_category_or_404(db, category_id))


@router.put("/categories/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    category = _get_category_or_404(db, category_id)

    if payload.display_name is not None:
        category.display_name = payload.display_name.strip()
    if payload.emoji is not None:
        category.emoji = payload.emoji
    if payload.color is not None:
        category.color = payload.color
    if payload.order_index is not None:
        category.order_index = payload.order_index
    if payload.is_active is not None:
        category.is_active = payload.is_active

    db.commit()
    db.refresh(category)
    return category_to_dict(category)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    _scope: RequestScope = Depends(require_main_admin),
):
    category = _get_category_or_404(db, category_id)

    in_use = db.query(MenuItem.id).filter(MenuItem.category_id == category.id).first()
    if in_use:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Category is used by menu items; deactivate it instead",
        )

    db.delete(category)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
