"""
Filtered, cursor-paginated product listing.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from ..db import SQLiteDatabase
from ..shopify import ShopifyClient
from ..shopify.queries import (
    COLLECTION_PRODUCTS_PAGE_QUERY,
    EDITED_PRODUCTS_QUERY,
    FILTER_FACETS_QUERY,
    PRODUCTS_PAGE_QUERY,
)
from .fields import LISTING_PAGE_SIZE
from .models import (
    CollectionOption,
    EditedProduct,
    FilterFacets,
    PageInfo,
    ProductPage,
    ProductSummary,
)

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _quote(value: str) -> str:
    """Quote an exact-match search value so multi-word values stay one term."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass(frozen=True)
class ListingFilters:
    """
    Filter terms of one listing query.

    A collection scope takes precedence: when ``collection_id`` is set the
    title/type/vendor/tag terms are ignored.
    """

    query: Optional[str] = None
    product_type: Optional[str] = None
    vendor: Optional[str] = None
    tag: Optional[str] = None
    collection_id: Optional[str] = None

    @classmethod
    def from_params(
        cls,
        query: Optional[str] = None,
        product_type: Optional[str] = None,
        vendor: Optional[str] = None,
        tag: Optional[str] = None,
        collection_id: Optional[str] = None,
    ) -> "ListingFilters":
        """Build filters from raw request values, treating blanks as absent."""
        return cls(
            query=_clean(query),
            product_type=_clean(product_type),
            vendor=_clean(vendor),
            tag=_clean(tag),
            collection_id=_clean(collection_id),
        )

    @property
    def scope(self) -> str:
        return "collection" if self.collection_id else "search"

    def search_query(self) -> Optional[str]:
        """
        Conjunctive search expression for the products query.

        Returns None when no term is set.
        """
        parts = []
        if self.query:
            parts.append(f"title:*{self.query}*")
        if self.product_type:
            parts.append(f"product_type:{_quote(self.product_type)}")
        if self.vendor:
            parts.append(f"vendor:{_quote(self.vendor)}")
        if self.tag:
            parts.append(f"tag:{_quote(self.tag)}")
        return " AND ".join(parts) if parts else None


def _to_summary(node: Dict[str, Any]) -> ProductSummary:
    image = node.get("featuredImage") or {}
    return ProductSummary(
        id=node["id"],
        title=node.get("title") or "",
        product_type=node.get("productType"),
        vendor=node.get("vendor"),
        tags=list(node.get("tags") or []),
        thumbnail_url=image.get("url"),
    )


def _to_page(connection: Optional[Dict[str, Any]]) -> ProductPage:
    if not connection:
        return ProductPage()

    page_info = connection.get("pageInfo") or {}
    return ProductPage(
        products=[_to_summary(edge["node"]) for edge in connection.get("edges") or []],
        page_info=PageInfo(
            has_next_page=bool(page_info.get("hasNextPage")),
            end_cursor=page_info.get("endCursor"),
        ),
    )


async def fetch_product_page(
    client: ShopifyClient,
    filters: ListingFilters,
    cursor: Optional[str] = None,
    page_size: int = LISTING_PAGE_SIZE,
) -> ProductPage:
    """
    Fetch one page of products matching the filters.

    Args:
        client: Shopify client
        filters: Filter terms, or a collection scope
        cursor: End cursor of the previous page, None for the first page
        page_size: Rows per page

    Returns:
        ProductPage with continuation state
    """
    if filters.collection_id:
        data = await client.execute(
            COLLECTION_PRODUCTS_PAGE_QUERY,
            variables={
                "collectionId": filters.collection_id,
                "first": page_size,
                "cursor": cursor,
            },
        )
        collection = data.get("collection")
        if collection is None:
            logger.info(f"Collection {filters.collection_id} not found")
        page = _to_page((collection or {}).get("products"))
    else:
        data = await client.execute(
            PRODUCTS_PAGE_QUERY,
            variables={
                "first": page_size,
                "cursor": cursor,
                "searchQuery": filters.search_query(),
            },
        )
        page = _to_page(data.get("products"))

    logger.debug(
        f"Listed {len(page.products)} products ({filters.scope}), "
        f"has next page: {page.page_info.has_next_page}"
    )
    return page


async def fetch_filter_facets(
    client: ShopifyClient,
    db: SQLiteDatabase,
    shop: str,
) -> FilterFacets:
    """
    Load filter choice lists.

    Types, vendors and collections come from the API; tags come from the
    stored tag index instead of a live catalog scan.
    """
    data = await client.execute(FILTER_FACETS_QUERY)

    def nodes(key: str) -> List[Any]:
        return [edge["node"] for edge in (data.get(key) or {}).get("edges") or []]

    return FilterFacets(
        product_types=[t for t in nodes("productTypes") if t],
        vendors=[v for v in nodes("productVendors") if v],
        collections=[
            CollectionOption(id=c["id"], title=c.get("title") or "")
            for c in nodes("collections")
        ],
        tags=await db.get_indexed_tags(shop),
    )


def admin_product_url(shop: str, product_id: str) -> str:
    """Shopify admin URL of a product GID."""
    numeric_id = product_id.rsplit("/", 1)[-1]
    return f"https://{shop}/admin/products/{numeric_id}"


async def fetch_edited_products(
    client: ShopifyClient,
    shop: str,
    product_ids: List[str],
    failed_ids: Optional[List[str]] = None,
) -> List[EditedProduct]:
    """
    Summary rows for products touched by the last bulk save.

    Products that no longer exist are dropped.
    """
    if not product_ids:
        return []

    failed = set(failed_ids or [])
    data = await client.execute(EDITED_PRODUCTS_QUERY, variables={"ids": product_ids})

    edited = []
    for node in data.get("nodes") or []:
        if not node or not node.get("id"):
            continue
        image = node.get("featuredImage") or {}
        edited.append(EditedProduct(
            id=node["id"],
            title=node.get("title") or "",
            image_url=image.get("url"),
            image_alt=image.get("altText"),
            admin_url=admin_product_url(shop, node["id"]),
            failed=node["id"] in failed,
        ))
    return edited


class ProductFeed:
    """
    Caller-side accumulator for infinite scrolling.

    Pages are appended in request order. Changing filters restarts from
    the first page, and a page that arrives for an outdated filter set
    is discarded. At most one load-more runs at a time.
    """

    DEFAULT_MAX_PRODUCTS = 1000

    def __init__(
        self,
        client: ShopifyClient,
        filters: Optional[ListingFilters] = None,
        page_size: int = LISTING_PAGE_SIZE,
        max_products: int = DEFAULT_MAX_PRODUCTS,
    ):
        self.client = client
        self.filters = filters or ListingFilters()
        self.page_size = page_size
        self.max_products = max_products

        self.products: List[ProductSummary] = []
        self.page_info = PageInfo()
        self.pages_loaded = 0
        self.dropped = 0

        self._generation = 0
        self._loading = False

    @property
    def has_more(self) -> bool:
        return self.page_info.has_next_page and self.page_info.end_cursor is not None

    async def set_filters(self, filters: ListingFilters) -> ProductPage:
        """Replace the filters and reload from the first page."""
        self.filters = filters
        self._generation += 1
        self.products = []
        self.page_info = PageInfo()
        self.pages_loaded = 0
        self.dropped = 0
        self._loading = False
        return await self._load(cursor=None)

    async def update_filters(self, **changes) -> ProductPage:
        """Change individual filter terms, e.g. ``update_filters(vendor="Acme")``."""
        return await self.set_filters(replace(self.filters, **changes))

    async def load_first(self) -> ProductPage:
        return await self.set_filters(self.filters)

    async def load_more(self) -> Optional[ProductPage]:
        """
        Append the next page.

        Returns None when there is nothing more to load or a load is
        already running.
        """
        if self._loading or not self.has_more:
            return None
        return await self._load(cursor=self.page_info.end_cursor)

    async def _load(self, cursor: Optional[str]) -> ProductPage:
        generation = self._generation
        self._loading = True
        try:
            page = await fetch_product_page(
                self.client, self.filters, cursor=cursor, page_size=self.page_size
            )
        finally:
            if generation == self._generation:
                self._loading = False

        if generation != self._generation:
            logger.debug("Discarding page loaded for outdated filters")
            return page

        self.products.extend(page.products)
        self.page_info = page.page_info
        self.pages_loaded += 1

        overflow = len(self.products) - self.max_products
        if overflow > 0:
            del self.products[:overflow]
            self.dropped += overflow

        return page
