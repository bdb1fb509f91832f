"""User schemas"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    """User role enumeration"""
    USER = "USER"
    ADMIN = "ADMIN"


class UserStatus(str, Enum):
    """Account status enumeration"""
    UNSET = "UNSET"
    ONBOARDED = "ONBOARDED"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"


class UserResponse(BaseModel):
    """User profile response schema"""
    id: int
    phone_number: str
    name: Optional[str]
    email: Optional[str]
    gender: Optional[str]
    age: Optional[int]
    occupation: Optional[str]
    role: str
    status: str
    created_at: Optional[datetime]
    last_active_at: Optional[datetime]

    class Config:
        from_attributes = True
