"""Authentication endpoints."""

from fastapi import APIRouter, status

from app.dependencies import CurrentAdmin, DatabaseSession
from app.schemas.auth import LoginRequest, LoginResponse
from app.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    tags=["Authentication"],
    summary="Company admin login",
)
async def login(request: LoginRequest, db: DatabaseSession) -> LoginResponse:
    """
    Verify admin credentials and return an access token.

    Args:
        request: Email and password
        db: Database session

    Returns:
        Access token, admin and company information
    """
    return await AuthService(db).login(str(request.email), request.password)


@router.get(
    "/me",
    tags=["Authentication"],
    summary="Current admin",
)
async def me(admin: CurrentAdmin) -> dict:
    """Return the verified principal behind the bearer token."""
    return admin.model_dump()
