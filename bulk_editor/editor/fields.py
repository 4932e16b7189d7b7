"""
Field rules for bulk editing: tags, prices, inventory deltas and
the round-trip form encoding.
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

from .models import (
    EditableField,
    EditSession,
    PRODUCT_FIELDS,
    VARIANT_PRICE_FIELDS,
)

logger = logging.getLogger(__name__)


# Rule constants
LISTING_PAGE_SIZE = 50
TAG_INDEX_PAGE_SIZE = 250
INVENTORY_REASON = "correction"
INVENTORY_QUANTITY_NAME = "available"
TAG_SEPARATOR = ", "


def parse_field_selection(raw_fields: Iterable[str]) -> List[EditableField]:
    """
    Turn raw field names into a de-duplicated selection.

    Unknown names are dropped with a warning.
    """
    selection: List[EditableField] = []
    for name in raw_fields:
        name = name.strip()
        if not name:
            continue
        try:
            field = EditableField(name)
        except ValueError:
            logger.warning(f"Ignoring unknown edit field: {name!r}")
            continue
        if field not in selection:
            selection.append(field)
    return selection


def join_tags(tags: Iterable[str]) -> str:
    """Render a tag list as the single string shown in the edit form."""
    return TAG_SEPARATOR.join(tags)


def parse_tags(value: Optional[str]) -> List[str]:
    """
    Split a comma-joined tag string back into a list.

    Entries are trimmed and empty ones dropped. Duplicates are kept.
    """
    if not value:
        return []
    return [tag.strip() for tag in value.split(",") if tag.strip()]


def format_price(value: Optional[str]) -> Optional[str]:
    """
    Format a price string to standard format (2 decimal places).

    Args:
        value: Price as string

    Returns:
        Formatted price or None if empty or not a number
    """
    if value is None or not str(value).strip():
        return None

    try:
        decimal_value = Decimal(str(value).strip())
        if not decimal_value.is_finite():
            return None
        return str(decimal_value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return None


def compute_inventory_delta(submitted: str, original: str) -> Optional[int]:
    """
    Signed adjustment between the submitted and the original quantity.

    Returns None when the submitted text matches the original text, so no
    adjustment is emitted. Raises ValueError for non-integer input.
    """
    submitted = (submitted or "").strip()
    original = (original or "").strip()

    if submitted == original:
        return None

    return int(submitted) - int(original or "0")


def original_key(field: str) -> str:
    """Name of the hidden form field carrying a value's pre-edit state."""
    return f"original{field[0].upper()}{field[1:]}"


def form_key(field: str, product_index: int, variant_index: Optional[int] = None) -> str:
    """Form key for a product (``title_0``) or variant (``price_0_1``) value."""
    if variant_index is None:
        return f"{field}_{product_index}"
    return f"{field}_{product_index}_{variant_index}"


def split_form_key(key: str) -> Optional[Tuple[str, str]]:
    """
    Split ``<field>_<group>`` at the first underscore.

    Returns None for keys without a group index.
    """
    field, sep, group = key.partition("_")
    if not sep or not field or not group:
        return None
    return field, group


def _text(value) -> str:
    return "" if value is None else str(value)


def build_form_fields(session: EditSession) -> Dict[str, str]:
    """
    Initial values of the edit form, with hidden originals for diffing.

    Only fields in the session's selection are emitted, plus the
    identifiers the reconciler needs to address each entity.
    """
    selected = set(session.fields_to_edit)
    product_fields = [f for f in PRODUCT_FIELDS if f in selected]
    price_fields = [f for f in VARIANT_PRICE_FIELDS if f in selected]
    edit_inventory = EditableField.INVENTORY_QUANTITY in selected

    values: Dict[str, str] = {}

    for pi, product in enumerate(session.products):
        values[form_key("productId", pi)] = product.id
        current = product.model_dump(by_alias=True)

        for field in product_fields:
            value = _text(current.get(field.value))
            values[form_key(field.value, pi)] = value
            values[form_key(original_key(field.value), pi)] = value

        if not price_fields and not edit_inventory:
            continue

        for vi, variant in enumerate(product.variants):
            values[form_key("productId", pi, vi)] = product.id
            values[form_key("variantId", pi, vi)] = variant.id
            variant_values = variant.model_dump(by_alias=True)

            for field in price_fields:
                value = _text(variant_values.get(field.value))
                values[form_key(field.value, pi, vi)] = value
                values[form_key(original_key(field.value), pi, vi)] = value

            if edit_inventory:
                quantity = str(variant.inventory_quantity)
                values[form_key("inventoryQuantity", pi, vi)] = quantity
                values[form_key("originalInventoryQuantity", pi, vi)] = quantity
                values[form_key("inventoryItemId", pi, vi)] = _text(variant.inventory_item_id)
                values[form_key("locationId", pi, vi)] = variant.location_id

    return values
