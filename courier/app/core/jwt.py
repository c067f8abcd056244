"""
JWT token utilities.

Tokens are issued by the external authentication service; this service only
verifies them to learn who is calling.
"""

from typing import Optional, Dict, Any
from jose import JWTError, jwt
from courier.app.core.config import settings


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode

    Returns:
        Decoded token payload if valid (includes: sub, user_id, exp), None otherwise
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        return payload
    except JWTError:
        return None
