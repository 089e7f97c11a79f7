"""
JWT utilities for the payroll API.

Tokens are issued by an external identity provider; this module only
decodes them into claims. ``create_access_token`` exists for local tooling
and tests that need a token signed with the configured secret.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from fastapi import HTTPException, status

from hr_backend.fastapi.core.init_settings import global_settings


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Token claims, at least ``sub`` and ``role``
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token as string

    Example:
        >>> token = create_access_token({"sub": str(uuid4()), "role": "HR"})
        >>> verify_access_token(token)["role"]
        'HR'
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=global_settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode.update({"exp": expire, "iat": now})

    return jwt.encode(
        to_encode,
        global_settings.JWT_SECRET_KEY,
        algorithm=global_settings.JWT_ALGORITHM
    )


def verify_access_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode a JWT access token.

    Args:
        token: JWT token string to verify

    Returns:
        Dictionary containing decoded token payload

    Raises:
        HTTPException: 401 if the token is invalid, expired or has no subject
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            global_settings.JWT_SECRET_KEY,
            algorithms=[global_settings.JWT_ALGORITHM]
        )
    except JWTError:
        raise credentials_exception

    if payload.get("sub") is None:
        raise credentials_exception

    return payload
