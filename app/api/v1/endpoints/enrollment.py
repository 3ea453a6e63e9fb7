"""Employee enrollment endpoint."""

from fastapi import APIRouter, status

from app.dependencies import DatabaseSession
from app.schemas.enrollment import EnrollmentRequest, EnrollmentResponse
from app.services.enrollment_service import EnrollmentService

router = APIRouter(tags=["Enrollment"])


@router.post(
    "/enroll",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll an employee with a one-time code",
)
async def enroll(data: EnrollmentRequest, db: DatabaseSession) -> EnrollmentResponse:
    """Redeem the code, create the enrolled user and order their lab kit."""
    return await EnrollmentService(db).redeem(data)
