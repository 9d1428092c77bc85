import hashlib
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

import jwt
from jwt.exceptions import PyJWTError

from justoo.core.config import Settings
from justoo.core.utils import utcnow

CUSTOMER_TOKEN_TYPE = "customer"


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def hash_otp(phone: str, otp: str) -> str:
    # Salted with the phone so equal codes for different phones never collide
    return sha256_hex(f"{phone}:{otp}")


def hash_token(token: str) -> str:
    return sha256_hex(str(token))


def create_customer_token(customer_id: Any, phone: str, settings: Settings) -> str:
    now = utcnow()
    payload = {
        "sub": str(customer_id),
        "phone": phone,
        "jti": str(uuid4()),
        "typ": CUSTOMER_TOKEN_TYPE,
        "iat": now,
        "exp": now + settings.customer_jwt_ttl,
    }
    return jwt.encode(payload, settings.require_jwt_secret(), algorithm=settings.JWT_ALGORITHM)


def token_expiry(token: str) -> Optional[datetime]:
    """Read the exp claim without verifying; returns aware UTC or None."""
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except PyJWTError:
        return None
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)


def decode_customer_token(token: str, settings: Settings) -> Optional[dict]:
    """
    Verify signature and expiry of a customer token.

    Returns the claims, or None when the token is invalid, expired or was minted
    for another principal type.
    """
    secret = settings.require_jwt_secret()
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except PyJWTError:
        return None
    if payload.get("typ") != CUSTOMER_TOKEN_TYPE:
        return None
    return payload


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    header = str(authorization or "")
    parts = header.split(" ")
    if len(parts) < 2 or parts[0] != "Bearer" or not parts[1]:
        return None
    return parts[1]
