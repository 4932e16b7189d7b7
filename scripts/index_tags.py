#!/usr/bin/env python3
"""
Standalone tag indexing job for the configured shop.

Runs immediately, then once per INDEX_INTERVAL_SECONDS (60 by default).
Pass --once to run a single index and exit, e.g. from cron.

Exits with status 1 when SHOP is not set or the session store has no
access token for it.
"""

import argparse
import asyncio
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bulk_editor.config import settings
from bulk_editor.db import SQLiteDatabase
from bulk_editor.editor import MissingCredentialError, MissingShopError, run_forever

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


async def main(once: bool) -> int:
    db = SQLiteDatabase(settings.database_path)
    await db.initialize()

    try:
        if once:
            logger.info(f"Running a single tag index for {settings.shop}")
        else:
            logger.info(
                f"Tag indexing started for {settings.shop}, "
                f"every {settings.index_interval_seconds}s"
            )

        results = await run_forever(
            db,
            settings.shop,
            interval_seconds=settings.index_interval_seconds,
            api_version=settings.shopify_api_version,
            max_runs=1 if once else None,
        )
        return 0 if all(r.success for r in results) else 1

    except MissingShopError:
        logger.error("Missing SHOP in environment")
        return 1
    except MissingCredentialError as e:
        logger.error(str(e))
        return 1
    finally:
        await db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Index product tags for the filter UI")
    parser.add_argument("--once", action="store_true", help="run one index and exit")
    args = parser.parse_args()

    sys.exit(asyncio.run(main(args.once)))
