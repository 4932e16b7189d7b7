"""
Database package - SQLite only.
"""

from .models import ShopSession, TagIndex, generate_uuid
from .sqlite import SQLiteDatabase

__all__ = [
    "SQLiteDatabase",
    "ShopSession",
    "TagIndex",
    "generate_uuid",
]
