from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from sqlalchemy import DateTime

if TYPE_CHECKING:
    from .category import Category


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    price: float
    stock: int = Field(default=0)
    image_url: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))

    category_id: int = Field(foreign_key="categories.id", index=True)
    category: Optional["Category"] = Relationship(back_populates="products")

    @property
    def in_stock(self) -> bool:
        return self.stock > 0
