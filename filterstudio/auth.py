"""
Shared-password gate for the generation surfaces.

A correct password earns an HTTP-only session cookie valid for seven days.
The cookie value is derived from the password, so changing the password
invalidates every session; there are no accounts and no revocation list.
"""
import hashlib
import hmac
import logging
from typing import Optional
from urllib.parse import quote

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

logger = logging.getLogger(__name__)

AUTH_COOKIE_NAME = "auth-token"
COOKIE_MAX_AGE = 60 * 60 * 24 * 7

# Prefixes that require a session; every other path is public
PROTECTED_PREFIXES = (
    "/generate/",
    "/api/generate",
)

_TOKEN_LABEL = b"filterstudio-session-v1"


def session_token(password: str) -> str:
    return hmac.new(password.encode("utf-8"), _TOKEN_LABEL, hashlib.sha256).hexdigest()


def password_matches(submitted: str, expected: Optional[str]) -> bool:
    if not expected:
        return False
    return hmac.compare_digest(submitted.encode("utf-8"), expected.encode("utf-8"))


def is_authenticated(request: Request, password: Optional[str]) -> bool:
    token = request.cookies.get(AUTH_COOKIE_NAME)
    if not token or not password:
        return False
    return hmac.compare_digest(token, session_token(password))


def is_protected(path: str) -> bool:
    return any(path.startswith(prefix) for prefix in PROTECTED_PREFIXES)


def safe_redirect_target(target: Optional[str]) -> str:
    """Only allow local absolute paths as post-login destinations."""
    if not target or not target.startswith("/") or target.startswith("//"):
        return "/"
    return target


def login_redirect(path: str, error: str) -> RedirectResponse:
    return RedirectResponse(
        url=f"/login?error={error}&redirect={quote(path, safe='')}",
        status_code=303,
    )


def set_session_cookie(response: Response, password: str, secure: bool) -> None:
    response.set_cookie(
        AUTH_COOKIE_NAME,
        session_token(password),
        max_age=COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(AUTH_COOKIE_NAME, path="/")


def unauthorized_response(request: Request) -> Response:
    """401 JSON for API calls, login redirect for pages."""
    path = request.url.path
    if path.startswith("/api/"):
        return JSONResponse(
            status_code=401,
            content={"success": False, "error": "Authentication required"},
        )
    return login_redirect(path, "auth")
