from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from sqlalchemy import DateTime

if TYPE_CHECKING:
    from .order import Order


class PaymentProof(SQLModel, table=True):
    __tablename__ = "payment_proofs"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="orders.id", unique=True, ondelete="CASCADE")
    file_url: str

    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))

    order: Optional["Order"] = Relationship(back_populates="payment_proof")
