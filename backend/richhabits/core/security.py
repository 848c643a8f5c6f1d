"""JWT helpers used to identify the acting user of a request.

Sessions are issued by the external authentication service; this API only
verifies the bearer token and reads its subject.
"""

from uuid import UUID

import jwt
from jwt import exceptions as jwt_exceptions

from richhabits.core.config import get_settings


def decode_token(token: str) -> dict | None:
    """Decode and verify a JWT token.

    Returns:
        Decoded token payload if valid, None if invalid or expired
    """
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt_exceptions.PyJWTError:
        return None


def subject_user_id(token: str) -> UUID | None:
    """Return the token subject as a user ID, or None if it is not a UUID."""
    payload = decode_token(token)
    if not payload or not payload.get("sub"):
        return None
    try:
        return UUID(str(payload["sub"]))
    except ValueError:
        return None
