"""
Pydantic models for database entities.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
import uuid


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


class ShopSession(BaseModel):
    """Access credential left behind by the OAuth install flow."""
    shop: str  # e.g., "mystore.myshopify.com"
    access_token: str  # Admin API token (shpat_...)
    scope: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class TagIndex(BaseModel):
    """Distinct product tags of a shop, replaced wholesale on each re-index."""
    id: str = Field(default_factory=generate_uuid)
    shop: str
    tags: List[str] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
