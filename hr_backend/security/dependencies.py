"""
Authorization dependencies for payroll routes.

The caller's identity comes from the bearer token; no user table is
consulted. Payroll operations require one of the payroll roles.
"""

from dataclasses import dataclass
from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from hr_backend.fastapi.core.enums import PAYROLL_ROLES, UserRole
from hr_backend.security.auth import verify_access_token


# HTTP Bearer token scheme
security = HTTPBearer()


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller as asserted by the token."""

    user_id: UUID
    role: UserRole


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> CallerIdentity:
    """
    Decode the bearer token into a caller identity.

    Raises:
        HTTPException: 401 if the token is invalid or its ``sub`` or
            ``role`` claim is missing or malformed
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token_data = verify_access_token(credentials.credentials)

    try:
        user_id = UUID(str(token_data.get("sub")))
        role = UserRole(token_data.get("role"))
    except ValueError:
        raise credentials_exception

    return CallerIdentity(user_id=user_id, role=role)


async def get_payroll_operator(
    identity: CallerIdentity = Depends(get_current_identity)
) -> CallerIdentity:
    """
    Require a role allowed to manage payroll.

    Raises:
        HTTPException: 403 for roles outside SUPERADMIN, ADMIN, HR and FINANCE
    """
    if identity.role not in PAYROLL_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions. Payroll access required."
        )
    return identity


# Convenience dependencies
RequirePayrollRole = Depends(get_payroll_operator)
