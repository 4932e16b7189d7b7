"""
Tests for diffing a submitted edit form and dispatching mutations.
"""

import pytest

from bulk_editor.editor.fields import build_form_fields
from bulk_editor.editor.loader import load_editable_products
from bulk_editor.editor.reconciler import (
    build_patch_manifest,
    parse_submission,
    reconcile_submission,
)
from bulk_editor.shopify import ShopifyClientError

from .helpers import (
    LOCATION_ID,
    FakeShopify,
    editable_node,
    mutation_ok,
    product_id,
    variant_node,
)


def mutation_handler(fail=None):
    """Accept every mutation; ``fail`` maps an operation name to a result."""
    fail = fail or {}

    def handler(query, variables):
        for name in ("inventoryAdjustQuantities", "productVariantsBulkUpdate", "productUpdate"):
            if f"mutation {name}" in query:
                return fail.get(name, mutation_ok(name))
        raise AssertionError(f"unexpected query: {query}")

    return handler


def variant_group(pid, vid, **values):
    group = {"productId": pid, "variantId": vid}
    group.update(values)
    return group


class TestParseSubmission:
    """Tests for parse_submission function."""

    def test_groups_by_product_and_variant_index(self):
        groups = parse_submission([
            ("productId_0", "p0"),
            ("title_0", "New"),
            ("price_0_1", "5.00"),
            ("variantId_0_1", "v01"),
            ("csrf", "ignored"),
        ])

        assert groups == {
            "0": {"productId": "p0", "title": "New"},
            "0_1": {"price": "5.00", "variantId": "v01"},
        }


class TestBuildPatchManifest:
    """Tests for build_patch_manifest function."""

    def test_unchanged_form_gives_empty_manifest(self):
        manifest = build_patch_manifest({
            "0": {"productId": "p0", "title": "Boot", "originalTitle": "Boot"},
            "0_0": variant_group("p0", "v0", price="10.00", originalPrice="10.00"),
        })
        assert manifest.is_empty

    def test_only_changed_product_fields_are_sent(self):
        manifest = build_patch_manifest({
            "0": {
                "productId": "p0",
                "title": "Boot v2", "originalTitle": "Boot",
                "vendor": "Acme", "originalVendor": "Acme",
            },
        })

        edit = manifest.products[0]
        assert edit.to_product_input() == {"id": "p0", "title": "Boot v2"}
        assert edit.variant_patches == []

    def test_empty_text_fields_are_skipped(self):
        manifest = build_patch_manifest({
            "0": {"productId": "p0", "vendor": "", "originalVendor": "Acme"},
        })
        assert manifest.is_empty

    def test_tags_compared_as_lists(self):
        manifest = build_patch_manifest({
            "0": {"productId": "p0", "tags": "red,summer ", "originalTags": "red, summer"},
        })
        assert manifest.is_empty

    def test_clearing_tags_sends_empty_list(self):
        manifest = build_patch_manifest({
            "0": {"productId": "p0", "tags": "", "originalTags": "red"},
        })
        assert manifest.products[0].product_fields == {"tags": []}

    def test_changed_tags_keep_duplicates(self):
        manifest = build_patch_manifest({
            "0": {"productId": "p0", "tags": "red, red, , blue ", "originalTags": "red"},
        })
        assert manifest.products[0].product_fields == {"tags": ["red", "red", "blue"]}

    def test_price_formatting_is_not_a_change(self):
        manifest = build_patch_manifest({
            "0_0": variant_group("p0", "v0", price="10", originalPrice="10.00"),
        })
        assert manifest.is_empty

    def test_price_change_is_normalized(self):
        manifest = build_patch_manifest({
            "0_0": variant_group(
                "p0", "v0",
                price="12.5", originalPrice="10.00",
                compareAtPrice="", originalCompareAtPrice="",
            ),
        })

        patch = manifest.products[0].variant_patches[0]
        assert patch.to_input() == {"id": "v0", "price": "12.50"}

    def test_inventory_delta(self):
        manifest = build_patch_manifest({
            "0_0": variant_group(
                "p0", "v0",
                inventoryQuantity="20", originalInventoryQuantity="15",
                inventoryItemId="item0", locationId=LOCATION_ID,
            ),
        })

        change = manifest.inventory_changes[0]
        assert change.to_input() == {
            "inventoryItemId": "item0", "locationId": LOCATION_ID, "delta": 5,
        }
        assert manifest.touched_product_ids == ["p0"]

    def test_non_integer_inventory_is_skipped(self):
        manifest = build_patch_manifest({
            "0_0": variant_group(
                "p0", "v0",
                inventoryQuantity="lots", originalInventoryQuantity="15",
                inventoryItemId="item0", locationId=LOCATION_ID,
            ),
        })
        assert manifest.inventory_changes == []
        assert manifest.is_empty

    def test_groups_without_product_id_are_ignored(self):
        manifest = build_patch_manifest({"0": {"title": "Orphan"}})
        assert manifest.is_empty


class TestReconcileSubmission:
    """End-to-end tests from loaded products to dispatched mutations."""

    @pytest.mark.asyncio
    async def test_price_only_edit_touches_one_variant(self):
        nodes = [
            editable_node(1, variants=[variant_node(1, 0, price="10.00")]),
            editable_node(2, variants=[variant_node(2, 0, price="30.00")]),
        ]

        def load_handler(query, variables):
            if "firstLocation" in query:
                return {"locations": {"edges": [{"node": {"id": LOCATION_ID}}]}}
            return {"nodes": nodes}

        session = await load_editable_products(
            FakeShopify(load_handler), [product_id(1), product_id(2)], ["price"]
        )
        form = dict(session.form_fields)
        form["price_0_0"] = "12.00"

        client = FakeShopify(mutation_handler())
        report = await reconcile_submission(client, form.items())

        assert len(client.calls) == 1
        variables = client.calls_to("productVariantsBulkUpdate")[0]
        assert variables == {
            "productId": product_id(1),
            "variants": [{"id": "gid://shopify/ProductVariant/10", "price": "12.00"}],
        }
        assert report.edited_product_ids == [product_id(1)]
        assert report.failed_product_ids == []

    @pytest.mark.asyncio
    async def test_inventory_changes_are_batched_in_one_call(self):
        form = {
            "productId_0_0": "p0", "variantId_0_0": "v00",
            "inventoryQuantity_0_0": "20", "originalInventoryQuantity_0_0": "15",
            "inventoryItemId_0_0": "item00", "locationId_0_0": LOCATION_ID,
            "productId_1_0": "p1", "variantId_1_0": "v10",
            "inventoryQuantity_1_0": "0", "originalInventoryQuantity_1_0": "4",
            "inventoryItemId_1_0": "item10", "locationId_1_0": LOCATION_ID,
        }
        client = FakeShopify(mutation_handler())

        report = await reconcile_submission(client, form.items())

        assert len(client.calls) == 1
        adjustment = client.calls_to("inventoryAdjustQuantities")[0]["input"]
        assert adjustment["reason"] == "correction"
        assert adjustment["name"] == "available"
        assert [c["delta"] for c in adjustment["changes"]] == [5, -4]
        assert report.edited_product_ids == ["p0", "p1"]

    @pytest.mark.asyncio
    async def test_inventory_runs_before_product_and_variant_updates(self):
        form = {
            "productId_0": "p0", "title_0": "New", "originalTitle_0": "Old",
            "productId_0_0": "p0", "variantId_0_0": "v00",
            "price_0_0": "9.00", "originalPrice_0_0": "8.00",
            "inventoryQuantity_0_0": "3", "originalInventoryQuantity_0_0": "1",
            "inventoryItemId_0_0": "item00", "locationId_0_0": LOCATION_ID,
        }
        client = FakeShopify(mutation_handler())

        await reconcile_submission(client, form.items())

        order = [query.split("(")[0].split()[-1] for query, _ in client.calls]
        assert order == ["inventoryAdjustQuantities", "productUpdate", "productVariantsBulkUpdate"]

    @pytest.mark.asyncio
    async def test_failed_call_does_not_stop_the_rest(self):
        form = {
            "productId_0": "p0", "title_0": "A2", "originalTitle_0": "A",
            "productId_1": "p1", "title_1": "B2", "originalTitle_1": "B",
        }
        calls = []

        def handler(query, variables):
            calls.append(variables["product"]["id"])
            if variables["product"]["id"] == "p0":
                return {"productUpdate": {"userErrors": [{"field": ["title"], "message": "Title is invalid"}]}}
            return mutation_ok("productUpdate")

        report = await reconcile_submission(FakeShopify(handler), form.items())

        assert calls == ["p0", "p1"]
        assert report.edited_product_ids == ["p0", "p1"]
        assert report.failed_product_ids == ["p0"]
        assert report.outcomes[0].message == "Title is invalid"
        assert report.outcomes[1].ok is True

    @pytest.mark.asyncio
    async def test_transport_error_is_recorded(self):
        form = {
            "productId_0_0": "p0", "variantId_0_0": "v00",
            "price_0_0": "9.00", "originalPrice_0_0": "8.00",
        }
        client = FakeShopify(lambda q, v: ShopifyClientError("Request error: timeout"))

        report = await reconcile_submission(client, form.items())

        assert report.failed_product_ids == ["p0"]
        assert report.outcomes[0].field_group == "variant"

    @pytest.mark.asyncio
    async def test_failed_inventory_batch_marks_every_product(self):
        form = {
            "productId_0_0": "p0", "variantId_0_0": "v00",
            "inventoryQuantity_0_0": "2", "originalInventoryQuantity_0_0": "1",
            "inventoryItemId_0_0": "item00", "locationId_0_0": LOCATION_ID,
            "productId_1_0": "p1", "variantId_1_0": "v10",
            "inventoryQuantity_1_0": "2", "originalInventoryQuantity_1_0": "1",
            "inventoryItemId_1_0": "item10", "locationId_1_0": LOCATION_ID,
        }
        failure = {"inventoryAdjustQuantities": {"userErrors": [{"message": "Location not active"}]}}
        client = FakeShopify(mutation_handler(fail={"inventoryAdjustQuantities": failure}))

        report = await reconcile_submission(client, form.items())

        assert report.failed_product_ids == ["p0", "p1"]

    @pytest.mark.asyncio
    async def test_no_changes_makes_no_calls(self):
        session_form = {
            "productId_0": "p0", "title_0": "Same", "originalTitle_0": "Same",
        }
        client = FakeShopify(mutation_handler())

        report = await reconcile_submission(client, session_form.items())

        assert client.calls == []
        assert report.edited_product_ids == []
