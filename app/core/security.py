"""Security utilities for token verification and password hashing."""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token

from app.config import settings

ph = PasswordHasher()

# Token types
ACCESS_TOKEN_TYPE = "access"

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


def hash_password(password: str) -> str:
    """Hash a password using Argon2."""
    return ph.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return ph.verify(hashed_password, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def create_access_token(
    subject: str,
    additional_claims: dict[str, Any] | None = None,
) -> str:
    """Create a locally signed JWT access token."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": subject,
        "exp": expire,
        "iat": datetime.now(UTC),
        "type": ACCESS_TOKEN_TYPE,
    }
    if additional_claims:
        payload.update(additional_claims)

    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
        return payload
    except jwt.ExpiredSignatureError:
        raise ValueError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise ValueError(f"Invalid token: {e}")


def verify_access_token(token: str) -> dict[str, Any]:
    """Verify an access token and return its payload."""
    payload = decode_token(token)
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise ValueError("Invalid token type")
    return payload


def verify_google_token(token: str) -> dict[str, Any]:
    """Verify a Google ID token and return its claims.

    This performs a blocking certificate fetch; call it from a worker thread.
    """
    if not settings.GOOGLE_CLIENT_ID:
        raise ValueError("Google sign-in is not configured")
    try:
        claims = google_id_token.verify_oauth2_token(
            token,
            google_requests.Request(),
            audience=settings.GOOGLE_CLIENT_ID,
        )
    except ValueError as e:
        raise ValueError(f"Invalid Google token: {e}")
    except GoogleAuthError as e:
        # Includes TransportError when the certificate endpoint is unreachable
        raise ValueError(f"Google token verification unavailable: {e}")
    if claims.get("iss") not in GOOGLE_ISSUERS:
        raise ValueError("Invalid Google token issuer")
    return claims
