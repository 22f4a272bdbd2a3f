# pokecatch/deps.py
import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from pokecatch.services.auth_service import decode_access_token
from pokecatch.services.errors import TokenError

logger = logging.getLogger("pokecatch.gate")

PROTECTED_PREFIX = "/protected"


def is_protected(path: str) -> bool:
    return path == PROTECTED_PREFIX or path.startswith(PROTECTED_PREFIX + "/")


def extract_bearer_token(authorization: str | None) -> str:
    """
    Expect Authorization: Bearer <token>
    Returns the raw token or raises TokenError.
    """
    if not authorization:
        raise TokenError("Missing authorization header")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise TokenError("Invalid authorization header")
    return parts[1]


def _unauthorized(detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": detail},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def access_gate(request: Request, call_next):
    """
    HTTP middleware guarding everything under /protected.
    The verified user id is stored on request.state.subject; a request without
    one is answered here and never reaches a handler or opens a DB session.
    """
    if request.method == "OPTIONS" or not is_protected(request.url.path):
        return await call_next(request)
    try:
        token = extract_bearer_token(request.headers.get("Authorization"))
        request.state.subject = decode_access_token(token)
    except TokenError as e:
        logger.warning(f"Rejected {request.method} {request.url.path}: {e.message}")
        return _unauthorized(e.message)
    return await call_next(request)


def get_current_subject(request: Request) -> int:
    """Dependency for protected handlers: the user id the access gate verified."""
    subject = getattr(request.state, "subject", None)
    if subject is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return subject
