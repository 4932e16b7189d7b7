"""
FastAPI dependency injection.
Database, operator sessions and per-request Shopify clients.
"""

import logging
from contextlib import contextmanager
from typing import AsyncIterator, Optional

from fastapi import Depends, HTTPException, Request

from .config import settings
from .db import SQLiteDatabase
from .auth import SessionManager
from .shopify import ShopifyAuthError, ShopifyClient, ShopifyClientError

logger = logging.getLogger(__name__)


# Global instances (initialized on startup)
_db: Optional[SQLiteDatabase] = None
_session_manager: Optional[SessionManager] = None


async def init_dependencies():
    """Initialize global dependencies. Called on app startup."""
    global _db, _session_manager

    _db = SQLiteDatabase(settings.database_path)
    await _db.initialize()

    _session_manager = SessionManager(settings.session_secret)


async def close_dependencies():
    """Close global dependencies. Called on app shutdown."""
    global _db
    if _db:
        await _db.close()
        _db = None


def get_db() -> SQLiteDatabase:
    """Get the database instance."""
    if _db is None:
        raise RuntimeError("Database not initialized")
    return _db


def get_session_manager() -> SessionManager:
    """Get the session manager instance."""
    if _session_manager is None:
        raise RuntimeError("Session manager not initialized")
    return _session_manager


async def require_auth(request: Request) -> dict:
    """
    Dependency that requires an operator session.

    Returns the session data; raises 401 without one.
    """
    session = get_session_manager().get_session(request)
    if session is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return session


def resolve_shop(session: dict) -> Optional[str]:
    """Shop bound to the session, falling back to the configured shop."""
    return session.get("shop") or settings.shop


def get_current_shop(session: dict = Depends(require_auth)) -> str:
    """Shop the current request operates on."""
    shop = resolve_shop(session)
    if not shop:
        raise HTTPException(status_code=400, detail="No shop in session")
    return shop


async def get_shopify_client(
    shop: str = Depends(get_current_shop),
    db: SQLiteDatabase = Depends(get_db),
) -> AsyncIterator[ShopifyClient]:
    """Shopify client for the current shop, closed when the request ends."""
    session = await db.get_shop_session(shop)
    if session is None:
        raise HTTPException(status_code=401, detail=f"No access token for {shop}")

    client = ShopifyClient(shop, session.access_token, api_version=settings.shopify_api_version)
    try:
        yield client
    finally:
        await client.close()


@contextmanager
def shopify_http_errors():
    """Translate Shopify client errors raised inside a route into HTTP errors."""
    try:
        yield
    except ShopifyAuthError as e:
        logger.warning(f"Shopify rejected credentials: {e}")
        raise HTTPException(status_code=401, detail="Shopify authentication failed") from e
    except ShopifyClientError as e:
        logger.error(f"Shopify request failed: {e}")
        raise HTTPException(status_code=502, detail="Shopify request failed") from e
