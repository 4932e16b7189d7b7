"""
Shopify API module.
"""

from bulk_editor.shopify.client import (
    ShopifyClient,
    ShopifyClientError,
    ShopifyAuthError,
    ShopifyRateLimitError,
    normalize_shop_domain,
    user_error_messages,
)
from bulk_editor.shopify.bulk_operations import (
    BulkOperationStatus,
    fetch_current_bulk_operation,
)

__all__ = [
    "ShopifyClient",
    "ShopifyClientError",
    "ShopifyAuthError",
    "ShopifyRateLimitError",
    "normalize_shop_domain",
    "user_error_messages",
    "BulkOperationStatus",
    "fetch_current_bulk_operation",
]
