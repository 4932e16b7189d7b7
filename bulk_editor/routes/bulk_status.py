"""
Bulk operation status route.
"""

from fastapi import APIRouter, Depends

from ..dependencies import get_shopify_client, require_auth, shopify_http_errors
from ..shopify import ShopifyClient, fetch_current_bulk_operation

router = APIRouter(prefix="/app/bulk-status", dependencies=[Depends(require_auth)])


@router.get("")
async def bulk_status(client: ShopifyClient = Depends(get_shopify_client)):
    """Status of the shop's current bulk operation."""
    with shopify_http_errors():
        operation = await fetch_current_bulk_operation(client)

    return {"currentBulkOperation": operation.to_dict() if operation else None}
