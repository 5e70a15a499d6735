"""Category routes: admin maintenance and public listing."""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from eventboard.database import get_db
from eventboard.errors import ConflictError
from eventboard.models.category import Category
from eventboard.models.event import Event
from eventboard.schemas.category import CategoryIn, CategoryOut
from eventboard.services.event_service import ensure_pagination, get_category

logger = logging.getLogger(__name__)
admin_router = APIRouter()
public_router = APIRouter()


def _ensure_unique_name(db: Session, name: str, exclude_id: int | None = None) -> None:
    query = db.query(Category).filter(Category.name == name)
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first():
        raise ConflictError(f"Category name '{name}' is already used")


@admin_router.post("/", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryIn, db: Session = Depends(get_db)):
    _ensure_unique_name(db, payload.name)
    category = Category(name=payload.name)
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info("Created category %s (%s)", category.id, category.name)
    return category


@admin_router.patch("/{category_id}", response_model=CategoryOut)
def rename_category(category_id: int, payload: CategoryIn, db: Session = Depends(get_db)):
    category = get_category(db, category_id)
    _ensure_unique_name(db, payload.name, exclude_id=category_id)
    category.name = payload.name
    db.commit()
    db.refresh(category)
    return category


@admin_router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    """Delete an unused category."""
    category = get_category(db, category_id)
    if db.query(Event.id).filter(Event.category_id == category_id).first():
        raise ConflictError(f"Category {category_id} still has events")
    db.delete(category)
    db.commit()
    logger.info("Deleted category %s", category_id)


@public_router.get("/", response_model=list[CategoryOut])
def list_categories(
    from_: int = Query(0, alias="from"),
    size: int = Query(10),
    db: Session = Depends(get_db),
):
    ensure_pagination(from_, size)
    return db.query(Category).order_by(Category.id).offset(from_).limit(size).all()


@public_router.get("/{category_id}", response_model=CategoryOut)
def get_category_by_id(category_id: int, db: Session = Depends(get_db)):
    return get_category(db, category_id)
