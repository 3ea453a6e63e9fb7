"""Company provisioning endpoints."""

from fastapi import APIRouter, status

from app.dependencies import DatabaseSession
from app.schemas.companies import CompanyProvisionRequest, CompanyProvisionResponse
from app.services.company_service import CompanyService

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.post(
    "/provision",
    response_model=CompanyProvisionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Provision a company portal",
)
async def provision_company(
    data: CompanyProvisionRequest,
    db: DatabaseSession,
) -> CompanyProvisionResponse:
    """
    Create a company with its first admin and return one-time credentials.

    The temporary password is only ever returned here; store it nowhere else.
    """
    return await CompanyService(db).provision_company(data)
