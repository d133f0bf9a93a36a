from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from sqlalchemy import DateTime

if TYPE_CHECKING:
    from .order import Order
    from .product import Product


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="orders.id", index=True, ondelete="CASCADE")
    product_id: int = Field(foreign_key="products.id", index=True, ondelete="RESTRICT")

    quantity: int
    # price x quantity at the time the order was placed
    subtotal: float

    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))

    order: Optional["Order"] = Relationship(back_populates="items")
    product: Optional["Product"] = Relationship()
