"""
Turns a submitted bulk edit form into the minimal set of mutations and
dispatches them.

Calls are independent: a failed call is recorded and the remaining ones
still run. Nothing is rolled back.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..shopify import ShopifyClient, ShopifyClientError, user_error_messages
from ..shopify.mutations import (
    INVENTORY_ADJUST_QUANTITIES,
    PRODUCT_UPDATE,
    PRODUCT_VARIANTS_BULK_UPDATE,
)
from .fields import (
    INVENTORY_QUANTITY_NAME,
    INVENTORY_REASON,
    compute_inventory_delta,
    format_price,
    original_key,
    parse_tags,
    split_form_key,
)
from .models import (
    EditableField,
    InventoryChange,
    MutationOutcome,
    PatchManifest,
    PatchReport,
    ProductEdit,
    PRODUCT_FIELDS,
    VARIANT_PRICE_FIELDS,
    VariantPatch,
)

logger = logging.getLogger(__name__)

FormGroups = Dict[str, Dict[str, str]]


def parse_submission(items: Iterable[Tuple[str, str]]) -> FormGroups:
    """
    Group submitted form values by entity index.

    ``title_0`` lands in group ``"0"`` (product 0), ``price_0_1`` in group
    ``"0_1"`` (variant 1 of product 0). Groups keep submission order.
    """
    groups: FormGroups = {}
    for key, value in items:
        parsed = split_form_key(key)
        if parsed is None:
            continue
        field, group = parsed
        groups.setdefault(group, {})[field] = value if isinstance(value, str) else str(value)
    return groups


def _changed_product_fields(values: Dict[str, str]) -> Dict[str, Any]:
    changed: Dict[str, Any] = {}

    for field in PRODUCT_FIELDS:
        name = field.value
        if name not in values:
            continue
        submitted = values[name]
        original = values.get(original_key(name))

        if field is EditableField.TAGS:
            tags = parse_tags(submitted)
            if original is not None and tags == parse_tags(original):
                continue
            changed[name] = tags
            continue

        if submitted == "":
            continue
        if original is not None and submitted == original:
            continue
        changed[name] = submitted

    return changed


def _changed_price_fields(values: Dict[str, str]) -> Dict[str, str]:
    changed: Dict[str, str] = {}

    for field in VARIANT_PRICE_FIELDS:
        name = field.value
        price = format_price(values.get(name))
        if price is None:
            continue
        original = values.get(original_key(name))
        if original is not None and price == format_price(original):
            continue
        changed[name] = price

    return changed


def _inventory_change(values: Dict[str, str], product_id: str) -> Optional[InventoryChange]:
    inventory_item_id = values.get("inventoryItemId")
    location_id = values.get("locationId")
    submitted = values.get(EditableField.INVENTORY_QUANTITY.value)

    if not inventory_item_id or not location_id or submitted is None:
        return None

    try:
        delta = compute_inventory_delta(
            submitted, values.get(original_key(EditableField.INVENTORY_QUANTITY.value), "")
        )
    except ValueError:
        logger.warning(f"Skipping non-integer inventory quantity {submitted!r} for {inventory_item_id}")
        return None

    if delta is None:
        return None

    return InventoryChange(
        product_id=product_id,
        inventory_item_id=inventory_item_id,
        location_id=location_id,
        delta=delta,
    )


def build_patch_manifest(groups: FormGroups) -> PatchManifest:
    """
    Diff submitted values against their originals.

    A product, variant or inventory patch is only emitted when at least
    one of its fields changed.
    """
    edits: Dict[str, ProductEdit] = {}
    inventory_changes: List[InventoryChange] = []

    def edit_for(product_id: str) -> ProductEdit:
        if product_id not in edits:
            edits[product_id] = ProductEdit(product_id=product_id)
        return edits[product_id]

    for values in groups.values():
        product_id = values.get("productId")
        if not product_id:
            continue

        product_fields = _changed_product_fields(values)
        if product_fields:
            edit_for(product_id).product_fields.update(product_fields)

        variant_id = values.get("variantId")
        if variant_id:
            price_fields = _changed_price_fields(values)
            if price_fields:
                edit_for(product_id).variant_patches.append(
                    VariantPatch(variant_id=variant_id, price_fields=price_fields)
                )

        change = _inventory_change(values, product_id)
        if change is not None:
            inventory_changes.append(change)
            edit_for(product_id)

    return PatchManifest(products=list(edits.values()), inventory_changes=inventory_changes)


async def _adjust_inventory(
    client: ShopifyClient,
    changes: List[InventoryChange],
) -> List[MutationOutcome]:
    """Send every inventory delta in one adjustment call."""
    message: Optional[str] = None
    try:
        data = await client.execute(
            INVENTORY_ADJUST_QUANTITIES,
            variables={
                "input": {
                    "reason": INVENTORY_REASON,
                    "name": INVENTORY_QUANTITY_NAME,
                    "changes": [change.to_input() for change in changes],
                }
            },
        )
        errors = user_error_messages(data.get("inventoryAdjustQuantities"))
        if errors:
            message = "; ".join(errors)
    except ShopifyClientError as e:
        message = str(e)

    if message:
        logger.warning(f"Inventory adjustment of {len(changes)} items failed: {message}")
    else:
        logger.info(f"Adjusted inventory for {len(changes)} items")

    return [
        MutationOutcome(
            product_id=change.product_id,
            entity_id=change.inventory_item_id,
            field_group="inventory",
            ok=message is None,
            message=message,
        )
        for change in changes
    ]


async def _run_mutation(
    client: ShopifyClient,
    mutation: str,
    variables: Dict[str, Any],
    payload_key: str,
    product_id: str,
    entity_id: str,
    field_group: str,
) -> MutationOutcome:
    try:
        data = await client.execute(mutation, variables=variables)
    except ShopifyClientError as e:
        logger.error(f"Error updating {field_group} {entity_id}: {e}")
        return MutationOutcome(
            product_id=product_id, entity_id=entity_id,
            field_group=field_group, ok=False, message=str(e),
        )

    errors = user_error_messages(data.get(payload_key))
    if errors:
        logger.warning(f"Failed to update {field_group} {entity_id}: {errors}")
        return MutationOutcome(
            product_id=product_id, entity_id=entity_id,
            field_group=field_group, ok=False, message="; ".join(errors),
        )

    logger.debug(f"Updated {field_group} {entity_id}")
    return MutationOutcome(
        product_id=product_id, entity_id=entity_id, field_group=field_group, ok=True,
    )


async def apply_patch_manifest(client: ShopifyClient, manifest: PatchManifest) -> PatchReport:
    """
    Dispatch the manifest: inventory batch first, then per product the
    product patch followed by its variant patches.
    """
    outcomes: List[MutationOutcome] = []

    if manifest.inventory_changes:
        outcomes.extend(await _adjust_inventory(client, manifest.inventory_changes))

    for edit in manifest.products:
        if edit.product_fields:
            outcomes.append(await _run_mutation(
                client,
                PRODUCT_UPDATE,
                {"product": edit.to_product_input()},
                "productUpdate",
                product_id=edit.product_id,
                entity_id=edit.product_id,
                field_group="product",
            ))

        for patch in edit.variant_patches:
            outcomes.append(await _run_mutation(
                client,
                PRODUCT_VARIANTS_BULK_UPDATE,
                {"productId": edit.product_id, "variants": [patch.to_input()]},
                "productVariantsBulkUpdate",
                product_id=edit.product_id,
                entity_id=patch.variant_id,
                field_group="variant",
            ))

    report = PatchReport(outcomes=outcomes, edited_product_ids=manifest.touched_product_ids)
    failed = report.failed_product_ids
    logger.info(
        f"Bulk edit complete: {len(outcomes)} mutations, "
        f"{len(report.edited_product_ids)} products touched, {len(failed)} with errors"
    )
    return report


async def reconcile_submission(
    client: ShopifyClient,
    items: Iterable[Tuple[str, str]],
) -> PatchReport:
    """Parse a submitted edit form, diff it and apply the result."""
    manifest = build_patch_manifest(parse_submission(items))
    if manifest.is_empty:
        logger.info("Bulk edit submitted without changes")
        return PatchReport()
    return await apply_patch_manifest(client, manifest)
