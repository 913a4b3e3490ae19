"""Verification of identity tokens issued by the portal's auth service."""
from jose import JWTError, jwt

from quiz_api.config import ALGORITHM, SECRET_KEY


def verify_token(token: str) -> dict | None:
    """Verify and decode a JWT token.

    Returns:
        Decoded token payload or None if invalid or expired.
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
