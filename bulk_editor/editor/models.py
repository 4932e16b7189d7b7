"""
Models for listing, editing and patching products.

Field names serialize in camelCase so payloads line up with the
Admin API names the browser already knows (productType, hasNextPage...).
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase, accepting both spellings."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EditableField(str, Enum):
    """Fields an operator can pick for bulk editing."""
    TITLE = "title"
    DESCRIPTION_HTML = "descriptionHtml"
    VENDOR = "vendor"
    PRODUCT_TYPE = "productType"
    TAGS = "tags"
    PRICE = "price"
    COMPARE_AT_PRICE = "compareAtPrice"
    INVENTORY_QUANTITY = "inventoryQuantity"


PRODUCT_FIELDS = (
    EditableField.TITLE,
    EditableField.DESCRIPTION_HTML,
    EditableField.VENDOR,
    EditableField.PRODUCT_TYPE,
    EditableField.TAGS,
)

VARIANT_PRICE_FIELDS = (
    EditableField.PRICE,
    EditableField.COMPARE_AT_PRICE,
)


# ===== Listing =====

class ProductSummary(CamelModel):
    """One row of the product listing."""
    id: str
    title: str
    product_type: Optional[str] = None
    vendor: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    thumbnail_url: Optional[str] = None


class PageInfo(CamelModel):
    has_next_page: bool = False
    end_cursor: Optional[str] = None


class ProductPage(CamelModel):
    products: List[ProductSummary] = Field(default_factory=list)
    page_info: PageInfo = Field(default_factory=PageInfo)


class CollectionOption(CamelModel):
    id: str
    title: str


class FilterFacets(CamelModel):
    """Choice lists for the listing filter bar."""
    product_types: List[str] = Field(default_factory=list)
    vendors: List[str] = Field(default_factory=list)
    collections: List[CollectionOption] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class EditedProduct(CamelModel):
    """Confirmation row shown after a bulk save."""
    id: str
    title: str
    image_url: Optional[str] = None
    image_alt: Optional[str] = None
    admin_url: str
    failed: bool = False


class ListingResponse(CamelModel):
    products: List[ProductSummary]
    page_info: PageInfo
    query: str = ""
    product_type: str = ""
    vendor: str = ""
    collection_id: str = ""
    tag: str = ""
    applied_scope: str = "search"
    filters: FilterFacets
    success: bool = False
    edited_products: Optional[List[EditedProduct]] = None
    failed_ids: List[str] = Field(default_factory=list)
    shop: str


# ===== Editing =====

class FeaturedImage(CamelModel):
    url: Optional[str] = None
    alt_text: Optional[str] = None


class EditableVariant(CamelModel):
    id: str
    title: str
    price: Optional[str] = None
    compare_at_price: Optional[str] = None
    inventory_item_id: Optional[str] = None
    inventory_quantity: int = 0
    location_id: str


class EditableProduct(CamelModel):
    id: str
    title: str
    description_html: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    tags: str = ""  # ", "-joined
    featured_image: Optional[FeaturedImage] = None
    variants: List[EditableVariant] = Field(default_factory=list)


class EditSession(CamelModel):
    """Everything the edit form needs, including round-trip form values."""
    products: List[EditableProduct]
    location_id: str
    fields_to_edit: List[EditableField]
    form_fields: Dict[str, str] = Field(default_factory=dict)


# ===== Patching =====

class InventoryChange(CamelModel):
    product_id: str
    inventory_item_id: str
    location_id: str
    delta: int

    def to_input(self) -> Dict[str, Any]:
        return {
            "inventoryItemId": self.inventory_item_id,
            "locationId": self.location_id,
            "delta": self.delta,
        }


class VariantPatch(CamelModel):
    variant_id: str
    price_fields: Dict[str, str]

    def to_input(self) -> Dict[str, Any]:
        return {"id": self.variant_id, **self.price_fields}


class ProductEdit(CamelModel):
    """All patches derived for one product."""
    product_id: str
    product_fields: Dict[str, Any] = Field(default_factory=dict)
    variant_patches: List[VariantPatch] = Field(default_factory=list)

    def to_product_input(self) -> Dict[str, Any]:
        return {"id": self.product_id, **self.product_fields}


class PatchManifest(CamelModel):
    products: List[ProductEdit] = Field(default_factory=list)
    inventory_changes: List[InventoryChange] = Field(default_factory=list)

    @property
    def touched_product_ids(self) -> List[str]:
        return [edit.product_id for edit in self.products]

    @property
    def is_empty(self) -> bool:
        return not self.products


class MutationOutcome(CamelModel):
    """Result of one attempted mutation target."""
    product_id: str
    entity_id: str
    field_group: str  # "inventory", "product" or "variant"
    ok: bool
    message: Optional[str] = None


class PatchReport(CamelModel):
    outcomes: List[MutationOutcome] = Field(default_factory=list)
    edited_product_ids: List[str] = Field(default_factory=list)

    @property
    def failed_product_ids(self) -> List[str]:
        failed: List[str] = []
        for outcome in self.outcomes:
            if not outcome.ok and outcome.product_id not in failed:
                failed.append(outcome.product_id)
        return failed
