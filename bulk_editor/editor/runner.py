"""
Runner for the tag indexing job, on demand or on a fixed interval.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..db import SQLiteDatabase, TagIndex
from ..shopify import ShopifyClient
from .indexer import MissingCredentialError, MissingShopError, index_all_tags

logger = logging.getLogger(__name__)


# One lock per shop so runs in this process never overlap
_shop_locks: Dict[str, asyncio.Lock] = {}


def _lock_for(shop: str) -> asyncio.Lock:
    if shop not in _shop_locks:
        _shop_locks[shop] = asyncio.Lock()
    return _shop_locks[shop]


@dataclass
class IndexResult:
    """Result of one scheduled indexing run."""
    shop: str
    tag_index: Optional[TagIndex]
    error: Optional[str]

    @property
    def success(self) -> bool:
        return self.error is None


async def run_tag_index(
    db: SQLiteDatabase,
    shop: Optional[str],
    api_version: str = ShopifyClient.DEFAULT_API_VERSION,
    client: Optional[ShopifyClient] = None,
) -> TagIndex:
    """Index a shop's tags, waiting for any run already in progress."""
    if not shop:
        raise MissingShopError("Missing shop to index")

    lock = _lock_for(shop)
    if lock.locked():
        logger.info(f"Tag index for {shop} already running, waiting")

    async with lock:
        return await index_all_tags(db, shop, api_version=api_version, client=client)


async def run_once(
    db: SQLiteDatabase,
    shop: str,
    api_version: str = ShopifyClient.DEFAULT_API_VERSION,
) -> IndexResult:
    """
    Run one scheduled index with error handling.

    Configuration errors (no shop, no credential) propagate; any other
    failure is logged and reported so the schedule keeps going.
    """
    try:
        index = await run_tag_index(db, shop, api_version=api_version)
        return IndexResult(shop=shop, tag_index=index, error=None)
    except (MissingShopError, MissingCredentialError):
        raise
    except Exception as e:
        logger.exception(f"Index job failed for {shop}")
        return IndexResult(shop=shop, tag_index=None, error=str(e))


async def run_forever(
    db: SQLiteDatabase,
    shop: str,
    interval_seconds: float,
    api_version: str = ShopifyClient.DEFAULT_API_VERSION,
    max_runs: Optional[int] = None,
) -> List[IndexResult]:
    """
    Run the index immediately, then every ``interval_seconds``.

    Runs are sequential: a slow run delays the next one instead of
    overlapping it.
    """
    results: List[IndexResult] = []

    while max_runs is None or len(results) < max_runs:
        started = time.monotonic()
        logger.info(f"Starting index job for {shop}...")

        result = await run_once(db, shop, api_version=api_version)
        results.append(result)
        if result.success:
            logger.info(f"Index job done: {len(result.tag_index.tags)} tags")

        if max_runs is not None and len(results) >= max_runs:
            break

        elapsed = time.monotonic() - started
        await asyncio.sleep(max(0.0, interval_seconds - elapsed))

    return results
