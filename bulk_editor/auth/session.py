"""
Cookie-based operator sessions.
"""

from datetime import datetime
from typing import Optional

from fastapi import Request, Response
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired


# Session duration: 24 hours
SESSION_MAX_AGE = 24 * 60 * 60  # seconds
SESSION_COOKIE_NAME = "bulk_editor_session"


class SessionManager:
    """Manages signed cookie-based sessions bound to one shop."""

    def __init__(self, secret_key: str, secure: bool = False):
        """
        Initialize session manager.

        Args:
            secret_key: Secret key for signing cookies
            secure: Mark the cookie HTTPS-only
        """
        self._serializer = URLSafeTimedSerializer(secret_key, salt="operator-session")
        self._secure = secure

    def create_session(self, response: Response, shop: str, user_id: str = "admin") -> None:
        """
        Create a new session and set the cookie.

        Args:
            response: FastAPI response object
            shop: Shop domain the operator is editing
            user_id: User identifier to store in session
        """
        session_data = {
            "user_id": user_id,
            "shop": shop,
            "created_at": datetime.utcnow().isoformat(),
        }
        token = self._serializer.dumps(session_data)

        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=token,
            max_age=SESSION_MAX_AGE,
            httponly=True,
            samesite="lax",
            secure=self._secure,
        )

    def get_session(self, request: Request) -> Optional[dict]:
        """
        Get session data from request cookie.

        Returns:
            Session data dict or None if missing, tampered or expired
        """
        token = request.cookies.get(SESSION_COOKIE_NAME)
        if not token:
            return None

        try:
            return self._serializer.loads(token, max_age=SESSION_MAX_AGE)
        except (BadSignature, SignatureExpired):
            return None

    def clear_session(self, response: Response) -> None:
        """Clear the session cookie."""
        response.delete_cookie(
            key=SESSION_COOKIE_NAME,
            httponly=True,
            samesite="lax",
        )
