"""
Bulk edit routes: load the edit form, apply the submitted changes.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from ..dependencies import get_shopify_client, require_auth, shopify_http_errors
from ..editor import MissingLocationError, load_editable_products, reconcile_submission
from ..editor.models import EditSession
from ..shopify import ShopifyClient
from .products import LISTING_URL, split_ids

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/app/bulk-edit", dependencies=[Depends(require_auth)])


@router.get("", response_model=EditSession)
async def load_bulk_edit(
    ids: Optional[str] = Query(None),
    fields: Optional[str] = Query(None),
    client: ShopifyClient = Depends(get_shopify_client),
):
    """Current values of the selected products for the chosen fields."""
    product_ids = split_ids(ids)
    if not product_ids:
        raise HTTPException(status_code=400, detail="No product IDs")

    with shopify_http_errors():
        try:
            return await load_editable_products(client, product_ids, split_ids(fields))
        except MissingLocationError:
            raise HTTPException(status_code=400, detail="No location")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))


@router.post("")
async def submit_bulk_edit(
    request: Request,
    client: ShopifyClient = Depends(get_shopify_client),
):
    """Apply submitted edits and return to the listing with a summary."""
    form = await request.form()

    with shopify_http_errors():
        report = await reconcile_submission(client, form.multi_items())

    params = {"success": "1"}
    if report.edited_product_ids:
        params["edited_ids"] = ",".join(report.edited_product_ids)
    failed = report.failed_product_ids
    if failed:
        params["failed_ids"] = ",".join(failed)
        logger.warning(f"Bulk edit finished with errors for {len(failed)} products")

    return RedirectResponse(url=f"{LISTING_URL}?{urlencode(params)}", status_code=303)
