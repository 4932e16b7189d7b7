"""
Authentication routes - operator login/logout.
"""

import asyncio
import time
from collections import defaultdict
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse

from ..auth import SessionManager, verify_password
from ..config import settings
from ..dependencies import get_session_manager
from ..shopify import normalize_shop_domain

router = APIRouter()

# Brute force protection: track failed login attempts by IP
failed_attempts = defaultdict(list)
LOCKOUT_THRESHOLD = 5  # Lock after 5 failed attempts
LOCKOUT_DURATION = 300  # 5 minutes in seconds

LANDING_URL = "/app/bulk-products"


def normalize_shop(shop: str) -> str:
    """Lower-case a shop domain and add .myshopify.com to bare handles."""
    shop = normalize_shop_domain(shop).lower()
    if "." not in shop:
        shop = f"{shop}.myshopify.com"
    return shop


@router.post("/login")
async def login(
    request: Request,
    password: str = Form(...),
    shop: Optional[str] = Form(None),
    session_manager: SessionManager = Depends(get_session_manager),
):
    """Handle login form submission with brute force protection."""
    client_ip = request.client.host if request.client else "unknown"
    current_time = time.time()

    failed_attempts[client_ip] = [
        attempt_time for attempt_time in failed_attempts[client_ip]
        if current_time - attempt_time < LOCKOUT_DURATION
    ]

    if len(failed_attempts[client_ip]) >= LOCKOUT_THRESHOLD:
        remaining = int(LOCKOUT_DURATION - (current_time - failed_attempts[client_ip][0]))
        return JSONResponse(
            {"error": f"Too many failed attempts. Try again in {remaining} seconds."},
            status_code=429,
        )

    if settings.admin_password_hash and verify_password(password, settings.admin_password_hash):
        shop_domain = normalize_shop(shop) if shop and shop.strip() else settings.shop
        if not shop_domain:
            return JSONResponse({"error": "No shop given"}, status_code=400)

        failed_attempts[client_ip] = []
        response = RedirectResponse(url=LANDING_URL, status_code=303)
        session_manager.create_session(response, shop=shop_domain)
        return response

    failed_attempts[client_ip].append(current_time)

    # Slow down brute force, more with each attempt
    await asyncio.sleep(min(len(failed_attempts[client_ip]) * 0.5, 3))

    return JSONResponse({"error": "Invalid password"}, status_code=401)


@router.post("/logout")
async def logout(session_manager: SessionManager = Depends(get_session_manager)):
    """Handle logout."""
    response = JSONResponse({"success": True})
    session_manager.clear_session(response)
    return response


@router.get("/logout")
async def logout_get(session_manager: SessionManager = Depends(get_session_manager)):
    """Handle logout via GET."""
    return await logout(session_manager)
