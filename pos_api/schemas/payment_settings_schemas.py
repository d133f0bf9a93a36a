from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class PaymentMethodSettingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    method: str
    name: str
    description: Optional[str]
    is_enabled: bool
    requires_proof: bool
    sort_order: int
    bank_name: Optional[str]
    account_number: Optional[str]
    account_holder: Optional[str]
    qris_image_url: Optional[str]
    updated_at: datetime


class PaymentMethodSettingUpdate(BaseModel):
    # name and method are not editable
    description: Optional[str] = None
    is_enabled: Optional[bool] = None
    requires_proof: Optional[bool] = None
    sort_order: Optional[int] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_holder: Optional[str] = None
    qris_image_url: Optional[str] = None
