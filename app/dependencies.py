"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import decode_access_token
from app.database import get_db
from app.services.auth_service import AuthService

# Security
security = HTTPBearer(auto_error=False)


class AdminPrincipal(BaseModel):
    """Verified company admin making the request."""

    admin_id: int
    company_id: int
    email: str
    name: str


async def get_token_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> tuple[int, int]:
    """
    Extract admin and company IDs from the bearer token.

    Args:
        credentials: Bearer token credentials

    Returns:
        Tuple of (admin_id, company_id)

    Raises:
        HTTPException: If the token is missing, invalid or expired
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    admin_id = payload.get("admin_id")
    company_id = payload.get("company_id")
    if not isinstance(admin_id, int) or not isinstance(company_id, int):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return admin_id, company_id


async def get_current_admin(
    claims: Annotated[tuple[int, int], Depends(get_token_claims)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AdminPrincipal:
    """
    Resolve the token to an active admin of the token's company.

    Raises:
        HTTPException: If the admin is unknown, inactive, or moved company
    """
    admin_id, company_id = claims
    admin = await AuthService.get_active_admin(db, admin_id, company_id)

    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )

    return AdminPrincipal(
        admin_id=admin["id"],
        company_id=admin["company_id"],
        email=admin["email"],
        name=admin["name"],
    )


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentAdmin = Annotated[AdminPrincipal, Depends(get_current_admin)]
