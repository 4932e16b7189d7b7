"""
Shopify Bulk Editor - Main Application
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from . import __version__
from .config import settings
from .dependencies import init_dependencies, close_dependencies
from .routes import (
    auth_router,
    products_router,
    bulk_edit_router,
    tags_router,
    bulk_status_router,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("Starting Shopify Bulk Editor...")
    await init_dependencies()
    logger.info("Application ready")
    yield
    logger.info("Shutting down...")
    await close_dependencies()


# Create app
app = FastAPI(
    title="Shopify Bulk Editor",
    description="Bulk edit product fields, prices and inventory across a Shopify catalog",
    version=__version__,
    lifespan=lifespan
)

# Include routers
app.include_router(auth_router)
app.include_router(products_router)
app.include_router(bulk_edit_router)
app.include_router(tags_router)
app.include_router(bulk_status_router)


@app.get("/")
async def root():
    """Redirect root to the product listing."""
    return RedirectResponse(url="/app/bulk-products", status_code=303)


@app.get("/health")
async def health():
    """Health check endpoint (no auth required)."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "bulk_editor.main:app",
        host=settings.host,
        port=settings.port,
        reload=True
    )
