"""
Tag index API routes.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..config import settings
from ..db import SQLiteDatabase
from ..dependencies import get_db, require_auth, resolve_shop
from ..editor import MissingCredentialError, MissingShopError, run_tag_index

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post("/reindex-tags")
async def reindex_tags(
    session: dict = Depends(require_auth),
    db: SQLiteDatabase = Depends(get_db),
):
    """Rebuild the tag index of the session's shop."""
    shop = resolve_shop(session)

    try:
        index = await run_tag_index(db, shop, api_version=settings.shopify_api_version)
    except MissingShopError as e:
        return JSONResponse({"success": False, "error": str(e)}, status_code=400)
    except MissingCredentialError as e:
        logger.error(f"Failed to index tags: {e}")
        return JSONResponse({"success": False, "error": str(e)}, status_code=401)
    except Exception as e:
        logger.exception(f"Failed to index tags for {shop}")
        return JSONResponse({"success": False, "error": str(e)}, status_code=500)

    return {"success": True, "tagCount": len(index.tags)}
