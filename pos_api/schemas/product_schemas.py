from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime

from pos_api.schemas.category_schemas import CategoryResponse


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str]
    price: float
    stock: int
    image_url: Optional[str]
    category_id: int
    category: Optional[CategoryResponse] = None
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    total_items: int
    total_pages: int
    current_page: int
    limit: int
    has_next: bool
    has_previous: bool
    results: List[ProductResponse]
