"""Database models"""

from rudra.models.user import User
from rudra.models.module import Module
from rudra.models.security import RefreshToken

__all__ = ["User", "Module", "RefreshToken"]
