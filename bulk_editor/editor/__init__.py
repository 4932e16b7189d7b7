"""
Editor package: listing, loading, patching and tag indexing.
"""

from .fields import (
    LISTING_PAGE_SIZE,
    TAG_INDEX_PAGE_SIZE,
    build_form_fields,
    compute_inventory_delta,
    format_price,
    join_tags,
    parse_field_selection,
    parse_tags,
)
from .indexer import (
    MissingCredentialError,
    MissingShopError,
    TagIndexError,
    collect_all_tags,
    index_all_tags,
)
from .lister import (
    ListingFilters,
    ProductFeed,
    fetch_edited_products,
    fetch_filter_facets,
    fetch_product_page,
)
from .loader import MissingLocationError, load_editable_products
from .reconciler import (
    apply_patch_manifest,
    build_patch_manifest,
    parse_submission,
    reconcile_submission,
)
from .runner import IndexResult, run_forever, run_once, run_tag_index

__all__ = [
    "LISTING_PAGE_SIZE",
    "TAG_INDEX_PAGE_SIZE",
    "build_form_fields",
    "compute_inventory_delta",
    "format_price",
    "join_tags",
    "parse_field_selection",
    "parse_tags",
    "MissingCredentialError",
    "MissingShopError",
    "TagIndexError",
    "collect_all_tags",
    "index_all_tags",
    "ListingFilters",
    "ProductFeed",
    "fetch_edited_products",
    "fetch_filter_facets",
    "fetch_product_page",
    "MissingLocationError",
    "load_editable_products",
    "apply_patch_manifest",
    "build_patch_manifest",
    "parse_submission",
    "reconcile_submission",
    "IndexResult",
    "run_forever",
    "run_once",
    "run_tag_index",
]
