# pokecatch/services/auth_service.py
import bcrypt
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional

from pokecatch import config
from pokecatch.services.errors import TokenExpired, TokenInvalid

JWT_ALGORITHM = config.JWT_ALGORITHM
TOKEN_TTL = timedelta(minutes=config.JWT_EXPIRE_MINUTES)


# ---------------- PASSWORD HASHING ----------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password hash. checkpw compares in constant time."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # malformed stored hash or over-long input
        return False


# ---------------- JWT TOKENS ----------------

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(user_id: int, now: Optional[datetime] = None) -> str:
    """Generate a signed JWT for a user, valid for TOKEN_TTL from issuance."""
    issued_at = now or _utcnow()
    keys = config.signing_keys()
    key_id = config.active_key_id(keys)
    payload = {
        "sub": str(user_id),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + TOKEN_TTL).timestamp()),
    }
    return jwt.encode(payload, keys[key_id], algorithm=JWT_ALGORITHM, headers={"kid": key_id})


def decode_access_token(token: str, now: Optional[datetime] = None) -> int:
    """
    Verify a token and return its subject (the user id).

    The signature is checked before expiry, so a forged token is reported as
    invalid even when its exp claim is in the past.
    """
    try:
        header = jwt.get_unverified_header(token)
    except jwt.PyJWTError as e:
        raise TokenInvalid("Malformed token") from e

    keys = config.signing_keys()
    secret = keys.get(header.get("kid") or "default")
    if secret is None:
        raise TokenInvalid("Unknown signing key")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"verify_exp": False, "require": ["sub", "exp"]},
        )
    except jwt.PyJWTError as e:
        raise TokenInvalid() from e

    try:
        expires_at = int(payload["exp"])
        subject = int(payload["sub"])
    except (TypeError, ValueError):
        raise TokenInvalid("Invalid token claims")

    current = int((now or _utcnow()).timestamp())
    if expires_at <= current:
        raise TokenExpired()
    return subject
