"""
Loads current product state for a bulk edit session.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..shopify import ShopifyClient
from ..shopify.queries import EDITABLE_PRODUCTS_QUERY, FIRST_LOCATION_QUERY
from .fields import INVENTORY_QUANTITY_NAME, build_form_fields, join_tags, parse_field_selection
from .models import EditableProduct, EditableVariant, EditSession, FeaturedImage

logger = logging.getLogger(__name__)


class MissingLocationError(Exception):
    """The shop has no inventory location to read or adjust stock at."""
    pass


async def resolve_location_id(client: ShopifyClient) -> str:
    """Return the shop's first inventory location."""
    data = await client.execute(FIRST_LOCATION_QUERY)
    edges = (data.get("locations") or {}).get("edges") or []

    if not edges or not edges[0].get("node", {}).get("id"):
        raise MissingLocationError("No inventory location found for shop")

    return edges[0]["node"]["id"]


def _available_quantity(inventory_item: Optional[Dict[str, Any]]) -> int:
    level = (inventory_item or {}).get("inventoryLevel") or {}
    for quantity in level.get("quantities") or []:
        if quantity.get("name") == INVENTORY_QUANTITY_NAME:
            return int(quantity.get("quantity") or 0)
    return 0


def _to_editable_product(node: Dict[str, Any], location_id: str) -> EditableProduct:
    variants = []
    for edge in (node.get("variants") or {}).get("edges") or []:
        variant = edge["node"]
        inventory_item = variant.get("inventoryItem")
        variants.append(EditableVariant(
            id=variant["id"],
            title=variant.get("title") or "",
            price=variant.get("price"),
            compare_at_price=variant.get("compareAtPrice"),
            inventory_item_id=(inventory_item or {}).get("id"),
            inventory_quantity=_available_quantity(inventory_item),
            location_id=location_id,
        ))

    tags = node.get("tags")
    image = node.get("featuredImage")

    return EditableProduct(
        id=node["id"],
        title=node.get("title") or "",
        description_html=node.get("descriptionHtml"),
        vendor=node.get("vendor"),
        product_type=node.get("productType"),
        tags=join_tags(tags) if isinstance(tags, list) else (tags or ""),
        featured_image=FeaturedImage(url=image.get("url"), alt_text=image.get("altText")) if image else None,
        variants=variants,
    )


async def load_editable_products(
    client: ShopifyClient,
    product_ids: List[str],
    fields: Iterable[str],
) -> EditSession:
    """
    Fetch the products to edit and reshape them into flat records.

    Args:
        client: Shopify client
        product_ids: Product GIDs, in the order they should be shown
        fields: Names of the fields the operator chose to edit

    Returns:
        EditSession with products, location and initial form values

    Raises:
        ValueError: If no product ids or no known field names are given
        MissingLocationError: If the shop has no location
    """
    if not product_ids:
        raise ValueError("No product IDs given")

    selection = parse_field_selection(fields)
    if not selection:
        raise ValueError("No fields to edit")

    location_id = await resolve_location_id(client)

    data = await client.execute(
        EDITABLE_PRODUCTS_QUERY,
        variables={"ids": product_ids, "locationId": location_id},
    )

    products = []
    for node in data.get("nodes") or []:
        # Deleted products come back as null, other node types as {}
        if not node or not node.get("id"):
            continue
        products.append(_to_editable_product(node, location_id))

    if len(products) < len(product_ids):
        logger.info(f"Skipped {len(product_ids) - len(products)} products that no longer exist")

    session = EditSession(
        products=products,
        location_id=location_id,
        fields_to_edit=selection,
    )
    session.form_fields = build_form_fields(session)
    return session
