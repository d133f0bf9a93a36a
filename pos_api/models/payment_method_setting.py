from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from sqlalchemy import DateTime


class PaymentMethodSetting(SQLModel, table=True):
    __tablename__ = "payment_method_settings"

    id: Optional[int] = Field(default=None, primary_key=True)
    method: str = Field(index=True, unique=True)
    name: str
    description: Optional[str] = None
    is_enabled: bool = Field(default=True)
    requires_proof: bool = Field(default=False)
    sort_order: int = Field(default=0)

    # transfer / QRIS details shown to the customer
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_holder: Optional[str] = None
    qris_image_url: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))
