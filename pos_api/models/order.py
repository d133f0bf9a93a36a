from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional
from datetime import datetime
from sqlalchemy import DateTime

from pos_api.constants.order_status import OrderStatus, PaymentMethod
from pos_api.models.order_item import OrderItem
from pos_api.models.payment_proof import PaymentProof


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    customer_name: str

    # fixed at creation, never recomputed
    total_amount: float

    status: OrderStatus = Field(default=OrderStatus.PENDING, index=True)
    payment_method: PaymentMethod = Field(default=PaymentMethod.BANK_TRANSFER, index=True)

    created_at: datetime = Field(
        default_factory=datetime.now, sa_type=DateTime(timezone=False), index=True
    )
    updated_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))

    items: List["OrderItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "OrderItem.id"},
    )
    payment_proof: Optional["PaymentProof"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"uselist": False, "cascade": "all, delete-orphan"},
    )
