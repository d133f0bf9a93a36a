from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from pos_api.constants.order_status import OrderStatus, PaymentMethod


class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)


class OrderCreate(BaseModel):
    customer_name: str = Field(min_length=1)
    items: List[OrderItemCreate] = Field(min_length=1)
    payment_method: Optional[PaymentMethod] = None


class OrderProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float
    image_url: Optional[str]


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    quantity: int
    subtotal: float
    product: Optional[OrderProduct] = None


class PaymentProofResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_url: str
    created_at: datetime
    updated_at: datetime


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_name: str
    total_amount: float
    status: OrderStatus
    payment_method: PaymentMethod
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemResponse] = []
    payment_proof: Optional[PaymentProofResponse] = None


class OrderListResponse(BaseModel):
    total_items: int
    total_pages: int
    current_page: int
    limit: int
    has_next: bool
    has_previous: bool
    results: List[OrderResponse]


class PendingCountResponse(BaseModel):
    total: int
    payment_uploaded_count: int
    verified_awaiting_completion_count: int
    pending_count: int
