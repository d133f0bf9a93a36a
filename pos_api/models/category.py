from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING, List
from datetime import datetime
from sqlalchemy import DateTime

if TYPE_CHECKING:
    from .product import Product


class Category(SQLModel, table=True):
    __tablename__ = "categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))

    products: List["Product"] = Relationship(back_populates="category")
