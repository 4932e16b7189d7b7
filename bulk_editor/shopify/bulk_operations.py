"""
Shopify bulk operation status lookup.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from bulk_editor.shopify.client import ShopifyClient
from bulk_editor.shopify.queries import CURRENT_BULK_OPERATION_QUERY

logger = logging.getLogger(__name__)


@dataclass
class BulkOperationStatus:
    """Snapshot of the shop's current bulk operation."""

    operation_id: str
    status: str
    error_code: Optional[str]
    object_count: int
    url: Optional[str]
    partial_url: Optional[str]

    @property
    def is_finished(self) -> bool:
        return self.status in ("COMPLETED", "FAILED", "CANCELED", "EXPIRED")

    def to_dict(self) -> Dict[str, Any]:
        """Payload using Shopify's field names."""
        return {
            "id": self.operation_id,
            "status": self.status,
            "errorCode": self.error_code,
            "objectCount": self.object_count,
            "url": self.url,
            "partialDataUrl": self.partial_url,
            "isFinished": self.is_finished,
        }


async def fetch_current_bulk_operation(
    client: ShopifyClient,
) -> Optional[BulkOperationStatus]:
    """
    Fetch the most recent bulk operation for the shop.

    Returns:
        BulkOperationStatus, or None if the shop never ran one
    """
    data = await client.execute(CURRENT_BULK_OPERATION_QUERY)
    operation = data.get("currentBulkOperation")

    if not operation:
        logger.debug("No bulk operation on record")
        return None

    return BulkOperationStatus(
        operation_id=operation.get("id", ""),
        status=operation.get("status", "UNKNOWN"),
        error_code=operation.get("errorCode"),
        object_count=int(operation.get("objectCount") or 0),
        url=operation.get("url"),
        partial_url=operation.get("partialDataUrl"),
    )
