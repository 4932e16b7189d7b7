"""
Authentication module.
"""

from bulk_editor.auth.password import hash_password, verify_password
from bulk_editor.auth.session import SessionManager, SESSION_COOKIE_NAME

__all__ = [
    "hash_password",
    "verify_password",
    "SessionManager",
    "SESSION_COOKIE_NAME",
]
