#!/usr/bin/env python3
"""
Shopify OAuth helper - install the app on the configured shop and store
the Admin API access token in the session store.

Needs SHOP, SHOPIFY_API_KEY and SHOPIFY_API_SECRET in .env. The app's
allowed redirect URLs must include REDIRECT_URI below.
"""

import asyncio
import logging
import secrets
import sys
import os
import threading
import urllib.parse
import webbrowser
from http.server import HTTPServer, BaseHTTPRequestHandler

import httpx

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bulk_editor.config import settings
from bulk_editor.db import SQLiteDatabase, ShopSession
from bulk_editor.shopify import normalize_shop_domain

REDIRECT_PORT = 3456
REDIRECT_URI = f"http://localhost:{REDIRECT_PORT}/callback"
CALLBACK_TIMEOUT = 120  # seconds

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


class OAuthCallbackHandler(BaseHTTPRequestHandler):
    """Captures the authorization code from Shopify's redirect."""

    code = None
    state = None

    def do_GET(self):
        parsed = urllib.parse.urlparse(self.path)
        if parsed.path != "/callback":
            self.send_response(404)
            self.end_headers()
            return

        params = urllib.parse.parse_qs(parsed.query)
        OAuthCallbackHandler.code = params.get("code", [None])[0]
        OAuthCallbackHandler.state = params.get("state", [None])[0]

        ok = OAuthCallbackHandler.code is not None
        self.send_response(200 if ok else 400)
        self.send_header("Content-type", "text/plain")
        self.end_headers()
        self.wfile.write(
            b"Authorization received, you can close this window."
            if ok else b"Authorization failed."
        )

    def log_message(self, format, *args):
        pass  # Suppress request logging


async def exchange_code_for_token(shop: str, code: str) -> dict:
    """Exchange the authorization code for an offline access token."""
    async with httpx.AsyncClient() as client:
        response = await client.post(
            f"https://{shop}/admin/oauth/access_token",
            data={
                "client_id": settings.shopify_api_key,
                "client_secret": settings.shopify_api_secret,
                "code": code,
            },
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        return response.json()


async def store_token(shop: str, result: dict) -> None:
    db = SQLiteDatabase(settings.database_path)
    await db.initialize()
    try:
        await db.save_shop_session(ShopSession(
            shop=shop,
            access_token=result["access_token"],
            scope=result.get("scope"),
        ))
    finally:
        await db.close()


def main() -> int:
    if not settings.shop or not settings.shopify_api_key or not settings.shopify_api_secret:
        logger.error("SHOP, SHOPIFY_API_KEY and SHOPIFY_API_SECRET must be set")
        return 1

    shop = normalize_shop_domain(settings.shop)
    state = secrets.token_urlsafe(16)

    oauth_url = f"https://{shop}/admin/oauth/authorize?" + urllib.parse.urlencode({
        "client_id": settings.shopify_api_key,
        "scope": settings.shopify_scopes,
        "redirect_uri": REDIRECT_URI,
        "state": state,
    })

    server = HTTPServer(("localhost", REDIRECT_PORT), OAuthCallbackHandler)
    server_thread = threading.Thread(target=server.handle_request)
    server_thread.start()

    logger.info(f"Open this URL if the browser does not start:\n{oauth_url}")
    webbrowser.open(oauth_url)

    server_thread.join(timeout=CALLBACK_TIMEOUT)
    server.server_close()

    if not OAuthCallbackHandler.code:
        logger.error("No authorization code received")
        return 1

    if OAuthCallbackHandler.state != state:
        logger.error("OAuth state mismatch, refusing the code")
        return 1

    result = asyncio.run(exchange_code_for_token(shop, OAuthCallbackHandler.code))
    if "access_token" not in result:
        logger.error(f"Token exchange failed: {result}")
        return 1

    asyncio.run(store_token(shop, result))
    logger.info(f"Stored access token for {shop} (scopes: {result.get('scope', 'N/A')})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
