# pos_api/services/product_service.py
import logging
from datetime import datetime
from typing import Optional

from fastapi import UploadFile
from sqlmodel import Session, func, or_, select

from pos_api.config import Settings, settings as default_settings
from pos_api.errors import ConflictError, NotFoundError, ValidationError
from pos_api.models.category import Category
from pos_api.models.order_item import OrderItem
from pos_api.models.product import Product
from pos_api.services.file_storage import PRODUCT_IMAGE_FOLDER
from pos_api.utils.pagination import paginate

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "created_at": Product.created_at,
    "name": Product.name,
    "price": Product.price,
    "stock": Product.stock,
}


class ProductService:
    def __init__(self, session: Session, file_storage=None, settings: Optional[Settings] = None):
        self.session = session
        self.file_storage = file_storage
        self.settings = settings or default_settings

    def _check_category(self, category_id: int):
        if not self.session.get(Category, category_id):
            raise ValidationError(f"Category with ID {category_id} does not exist")

    def _validate_numbers(self, price: Optional[float], stock: Optional[int]):
        if price is not None and price < 0:
            raise ValidationError("Price must not be negative")
        if stock is not None and stock < 0:
            raise ValidationError("Stock must not be negative")

    def _save_image(self, image: UploadFile) -> str:
        return self.file_storage.save_image(
            image,
            folder=PRODUCT_IMAGE_FOLDER,
            prefix="product",
            max_size=self.settings.max_product_image_size,
        )

    def get_product(self, product_id: int) -> Product:
        product = self.session.get(Product, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def create_product(
        self,
        name: str,
        price: float,
        stock: int,
        category_id: int,
        description: Optional[str] = None,
        image: Optional[UploadFile] = None,
    ) -> Product:
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        self._validate_numbers(price, stock)
        self._check_category(category_id)

        image_url = self._save_image(image) if image else None

        product = Product(
            name=name.strip(),
            description=description,
            price=price,
            stock=stock,
            category_id=category_id,
            image_url=image_url,
        )
        try:
            self.session.add(product)
            self.session.commit()
        except Exception:
            self.session.rollback()
            if image_url:
                self.file_storage.delete(image_url)
            raise

        self.session.refresh(product)
        return product

    def list_products(
        self,
        category_id: Optional[int] = None,
        search: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        in_stock: Optional[bool] = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ):
        query = select(Product)

        if category_id is not None:
            query = query.where(Product.category_id == category_id)

        if search:
            like = f"%{search}%"
            query = query.where(
                or_(Product.name.ilike(like), Product.description.ilike(like))
            )

        if min_price is not None:
            query = query.where(Product.price >= min_price)

        if max_price is not None:
            query = query.where(Product.price <= max_price)

        if in_stock:
            query = query.where(Product.stock > 0)

        column = SORTABLE_FIELDS.get(sort_by)
        if column is None:
            raise ValidationError(f"Cannot sort products by {sort_by}")
        query = query.order_by(column.asc() if sort_order == "asc" else column.desc())

        return paginate(session=self.session, query=query, page=page, limit=limit)

    def update_product(
        self,
        product_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        price: Optional[float] = None,
        stock: Optional[int] = None,
        category_id: Optional[int] = None,
        image: Optional[UploadFile] = None,
    ) -> Product:
        product = self.get_product(product_id)
        self._validate_numbers(price, stock)

        if name is not None:
            product.name = name
        if description is not None:
            product.description = description
        if price is not None:
            product.price = price
        if stock is not None:
            product.stock = stock
        if category_id is not None:
            self._check_category(category_id)
            product.category_id = category_id

        old_image_url = None
        new_image_url = None
        if image:
            old_image_url = product.image_url
            new_image_url = self._save_image(image)
            product.image_url = new_image_url

        product.updated_at = datetime.now()
        try:
            self.session.add(product)
            self.session.commit()
        except Exception:
            self.session.rollback()
            if new_image_url:
                self.file_storage.delete(new_image_url)
            raise

        self.session.refresh(product)

        if old_image_url:
            self.file_storage.delete(old_image_url)

        return product

    def update_stock(self, product_id: int, stock: int) -> Product:
        return self.update_product(product_id, stock=stock)

    def delete_product(self, product_id: int) -> Product:
        product = self.get_product(product_id)

        referenced = self.session.exec(
            select(func.count(OrderItem.id)).where(OrderItem.product_id == product_id)
        ).one()
        if referenced:
            raise ConflictError("Cannot delete a product that appears in orders")

        image_url = product.image_url
        self.session.delete(product)
        self.session.commit()

        if image_url and self.file_storage is not None:
            self.file_storage.delete(image_url)

        logger.info(f"Product {product_id} deleted")
        return product
