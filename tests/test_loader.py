"""
Tests for loading products into an edit session.
"""

import pytest

from bulk_editor.editor.loader import MissingLocationError, load_editable_products
from bulk_editor.editor.models import EditableField

from .helpers import LOCATION_ID, FakeShopify, editable_node, product_id, variant_node


def shop_handler(nodes, locations=None):
    if locations is None:
        locations = [{"node": {"id": LOCATION_ID}}]

    def handler(query, variables):
        if "firstLocation" in query:
            return {"locations": {"edges": locations}}
        if "editableProducts" in query:
            assert variables["locationId"] == LOCATION_ID
            return {"nodes": nodes}
        raise AssertionError(f"unexpected query: {query}")

    return handler


class TestLoadEditableProducts:
    """Tests for load_editable_products function."""

    @pytest.mark.asyncio
    async def test_flattens_products_and_variants(self):
        node = editable_node(1, variants=[
            variant_node(1, 0, price="10.00", quantity=15),
            variant_node(1, 1, price="12.50", compare_at="20.00", quantity=None),
        ])
        client = FakeShopify(shop_handler([node]))

        session = await load_editable_products(client, [product_id(1)], ["price", "tags"])

        assert session.location_id == LOCATION_ID
        assert session.fields_to_edit == [EditableField.PRICE, EditableField.TAGS]

        product = session.products[0]
        assert product.tags == "red, summer"
        assert product.featured_image.url == "https://cdn.example.com/1.jpg"

        first, second = product.variants
        assert first.inventory_quantity == 15
        assert first.location_id == LOCATION_ID
        assert second.compare_at_price == "20.00"
        # No inventory level at the location reads as zero
        assert second.inventory_quantity == 0

    @pytest.mark.asyncio
    async def test_deleted_products_are_skipped(self):
        client = FakeShopify(shop_handler([editable_node(1), None, {}]))

        session = await load_editable_products(
            client, [product_id(1), product_id(2), product_id(3)], ["title"]
        )

        assert [p.id for p in session.products] == [product_id(1)]

    @pytest.mark.asyncio
    async def test_form_fields_are_prepared(self):
        client = FakeShopify(shop_handler([editable_node(1)]))

        session = await load_editable_products(client, [product_id(1)], ["inventoryQuantity"])

        assert session.form_fields["productId_0"] == product_id(1)
        assert session.form_fields["inventoryQuantity_0_0"] == "15"
        assert session.form_fields["originalInventoryQuantity_0_0"] == "15"
        assert session.form_fields["locationId_0_0"] == LOCATION_ID

    @pytest.mark.asyncio
    async def test_missing_location_raises(self):
        client = FakeShopify(shop_handler([editable_node(1)], locations=[]))

        with pytest.raises(MissingLocationError):
            await load_editable_products(client, [product_id(1)], ["title"])

        assert client.calls_to("editableProducts") == []

    @pytest.mark.asyncio
    async def test_no_ids_raises(self):
        client = FakeShopify(shop_handler([]))

        with pytest.raises(ValueError):
            await load_editable_products(client, [], ["title"])

        assert client.calls == []

    @pytest.mark.asyncio
    async def test_no_known_fields_raises(self):
        client = FakeShopify(shop_handler([editable_node(1)]))

        with pytest.raises(ValueError, match="No fields to edit"):
            await load_editable_products(client, [product_id(1)], ["bogus", ""])

        assert client.calls == []

    @pytest.mark.asyncio
    async def test_serializes_camel_case(self):
        client = FakeShopify(shop_handler([editable_node(1)]))

        session = await load_editable_products(client, [product_id(1)], ["vendor"])
        payload = session.model_dump(by_alias=True)

        assert payload["locationId"] == LOCATION_ID
        assert payload["fieldsToEdit"] == ["vendor"]
        assert payload["products"][0]["productType"] == "Shoes"
        assert payload["products"][0]["variants"][0]["inventoryQuantity"] == 15
