from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from pos_api.models.admin import AdminRole


class AdminRegister(BaseModel):
    username: str
    password: str


class AdminLogin(BaseModel):
    username: str
    password: str


class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class AdminResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: AdminRole
    created_at: datetime


class LoginResponse(BaseModel):
    admin: AdminResponse
    access_token: str
    token_type: str = "bearer"
