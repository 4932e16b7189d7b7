"""
Routes package.
"""

from .auth import router as auth_router
from .products import router as products_router
from .bulk_edit import router as bulk_edit_router
from .tags import router as tags_router
from .bulk_status import router as bulk_status_router

__all__ = [
    "auth_router",
    "products_router",
    "bulk_edit_router",
    "tags_router",
    "bulk_status_router",
]
