# pos_api/services/category_service.py
from datetime import datetime
from typing import Optional

from sqlmodel import Session, func, select

from pos_api.errors import ConflictError, NotFoundError, ValidationError
from pos_api.models.category import Category
from pos_api.models.product import Product


def _find_by_name(session: Session, name: str, exclude_id: Optional[int] = None):
    query = select(Category).where(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        query = query.where(Category.id != exclude_id)
    return session.exec(query).first()


def list_categories(session: Session):
    return session.exec(select(Category).order_by(Category.name.asc())).all()


def get_category(session: Session, category_id: int) -> Category:
    category = session.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")
    return category


def create_category(session: Session, name: str) -> Category:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required")

    if _find_by_name(session, name):
        raise ConflictError("A category with this name already exists")

    category = Category(name=name)
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


def update_category(session: Session, category_id: int, name: Optional[str]) -> Category:
    category = get_category(session, category_id)

    if name:
        name = name.strip()
        if _find_by_name(session, name, exclude_id=category_id):
            raise ConflictError("A category with this name already exists")
        category.name = name

    category.updated_at = datetime.now()
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


def delete_category(session: Session, category_id: int) -> Category:
    category = get_category(session, category_id)

    product_count = session.exec(
        select(func.count(Product.id)).where(Product.category_id == category_id)
    ).one()
    if product_count:
        raise ConflictError(
            "Cannot delete category with associated products. "
            "Please reassign the products first."
        )

    session.delete(category)
    session.commit()
    return category
