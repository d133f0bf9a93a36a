from enum import Enum
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from sqlalchemy import DateTime


class AdminRole(str, Enum):
    MASTER_ADMIN = "MASTER_ADMIN"
    ADMIN = "ADMIN"


class Admin(SQLModel, table=True):
    __tablename__ = "admins"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    password: str
    role: AdminRole = Field(default=AdminRole.ADMIN)
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime(timezone=False))
