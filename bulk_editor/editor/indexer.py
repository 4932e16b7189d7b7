"""
Tag indexer: walks the whole catalog and stores its distinct tags.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..db import SQLiteDatabase, TagIndex
from ..shopify import ShopifyClient
from ..shopify.queries import PRODUCT_TAGS_PAGE_QUERY
from .fields import TAG_INDEX_PAGE_SIZE

logger = logging.getLogger(__name__)


class TagIndexError(Exception):
    """Error while indexing tags."""
    pass


class MissingShopError(TagIndexError):
    """No shop to index was configured or given."""
    pass


class MissingCredentialError(TagIndexError):
    """The session store has no access token for the shop."""
    pass


def merge_tags(collected: Dict[str, str], tags: Iterable[str]) -> None:
    """
    Add tags to an ordered, case-insensitive set.

    Tags are trimmed, empty ones skipped, and the first spelling seen wins.
    """
    for tag in tags:
        tag = (tag or "").strip()
        if tag and tag.lower() not in collected:
            collected[tag.lower()] = tag


async def collect_all_tags(
    client: ShopifyClient,
    page_size: int = TAG_INDEX_PAGE_SIZE,
) -> List[str]:
    """
    Page through every product and return the distinct tags.

    Any API error aborts the walk and propagates.
    """
    collected: Dict[str, str] = {}
    cursor: Optional[str] = None
    pages = 0

    while True:
        data = await client.execute(
            PRODUCT_TAGS_PAGE_QUERY,
            variables={"first": page_size, "cursor": cursor},
        )
        products = data.get("products") or {}

        for edge in products.get("edges") or []:
            merge_tags(collected, edge["node"].get("tags") or [])

        pages += 1
        page_info = products.get("pageInfo") or {}
        if not page_info.get("hasNextPage"):
            break
        cursor = page_info.get("endCursor")
        if not cursor:
            raise TagIndexError(f"Product page {pages} has a next page but no end cursor")

    logger.debug(f"Walked {pages} product pages")
    return list(collected.values())


async def index_all_tags(
    db: SQLiteDatabase,
    shop: Optional[str],
    access_token: Optional[str] = None,
    api_version: str = ShopifyClient.DEFAULT_API_VERSION,
    client: Optional[ShopifyClient] = None,
) -> TagIndex:
    """
    Rebuild the tag index of a shop.

    The stored tag list is replaced only after the whole catalog was
    walked successfully; on error nothing is written.

    Args:
        db: Database holding sessions and tag indexes
        shop: Shop domain
        access_token: Admin API token; looked up in the session store if omitted
        api_version: Admin API version for a newly created client
        client: Existing client to use instead of creating one

    Raises:
        MissingShopError: If no shop is given
        MissingCredentialError: If no access token can be found
        ShopifyClientError: If the catalog walk fails
    """
    if not shop:
        raise MissingShopError("Missing shop to index")

    owns_client = client is None
    if client is None:
        if access_token is None:
            session = await db.get_shop_session(shop)
            if session is None or not session.access_token:
                raise MissingCredentialError(f"No access token found for shop {shop}")
            access_token = session.access_token
        client = ShopifyClient(shop, access_token, api_version=api_version)

    try:
        tags = await collect_all_tags(client)
    finally:
        if owns_client:
            await client.close()

    logger.info(f"Collected {len(tags)} unique tags for {shop}")

    index = await db.replace_tag_index(shop, tags)
    logger.info(f"Stored tag index for {shop}")
    return index
