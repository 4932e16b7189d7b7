"""
Product listing and selection routes.
"""

import json
import logging
from typing import List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, HTTPException, Query
from fastapi.responses import RedirectResponse

from ..db import SQLiteDatabase
from ..dependencies import (
    get_current_shop,
    get_db,
    get_shopify_client,
    require_auth,
    shopify_http_errors,
)
from ..editor import (
    ListingFilters,
    fetch_edited_products,
    fetch_filter_facets,
    fetch_product_page,
)
from ..editor.models import ListingResponse
from ..shopify import ShopifyClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/app/bulk-products", dependencies=[Depends(require_auth)])

LISTING_URL = "/app/bulk-products"
EDIT_URL = "/app/bulk-edit"


def split_ids(value: Optional[str]) -> List[str]:
    """Split a comma-joined id list, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _json_list(raw: str, field_name: str) -> List[str]:
    try:
        value = json.loads(raw or "[]")
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail=f"{field_name} must be a JSON array")
    if not isinstance(value, list):
        raise HTTPException(status_code=400, detail=f"{field_name} must be a JSON array")
    return [str(item) for item in value if str(item).strip()]


@router.get("", response_model=ListingResponse)
async def list_products(
    cursor: Optional[str] = Query(None),
    query: Optional[str] = Query(None),
    product_type: Optional[str] = Query(None, alias="productType"),
    vendor: Optional[str] = Query(None),
    collection_id: Optional[str] = Query(None, alias="collectionId"),
    tag: Optional[str] = Query(None),
    success: Optional[str] = Query(None),
    edited_ids: Optional[str] = Query(None),
    failed_ids: Optional[str] = Query(None),
    shop: str = Depends(get_current_shop),
    client: ShopifyClient = Depends(get_shopify_client),
    db: SQLiteDatabase = Depends(get_db),
):
    """One page of products plus filter choices and the last save summary."""
    filters = ListingFilters.from_params(
        query=query,
        product_type=product_type,
        vendor=vendor,
        tag=tag,
        collection_id=collection_id,
    )
    saved = success == "1"
    failed = split_ids(failed_ids) if saved else []

    with shopify_http_errors():
        page = await fetch_product_page(client, filters, cursor=cursor or None)
        facets = await fetch_filter_facets(client, db, shop)

        edited_products = None
        if saved and edited_ids:
            edited_products = await fetch_edited_products(
                client, shop, split_ids(edited_ids), failed_ids=failed
            )

    return ListingResponse(
        products=page.products,
        page_info=page.page_info,
        query=query or "",
        product_type=product_type or "",
        vendor=vendor or "",
        collection_id=collection_id or "",
        tag=tag or "",
        applied_scope=filters.scope,
        filters=facets,
        success=saved,
        edited_products=edited_products,
        failed_ids=failed,
        shop=shop,
    )


@router.post("")
async def select_products(
    selected_product_ids: str = Form("[]", alias="selectedProductIds"),
    fields_to_edit: str = Form("[]", alias="fieldsToEdit"),
):
    """Forward the selected products and fields to the edit page."""
    ids = _json_list(selected_product_ids, "selectedProductIds")
    fields = _json_list(fields_to_edit, "fieldsToEdit")

    if not ids or not fields:
        return RedirectResponse(url=LISTING_URL, status_code=303)

    params = urlencode({"ids": ",".join(ids), "fields": ",".join(fields)})
    return RedirectResponse(url=f"{EDIT_URL}?{params}", status_code=303)
