"""Enrollment code endpoints."""

from fastapi import APIRouter, Query, status
from fastapi.responses import Response

from app.dependencies import CurrentAdmin, DatabaseSession
from app.schemas.codes import (
    CodeBatchCreate,
    CodeBatchCreateResponse,
    CodeBatchSummary,
    CodeStatus,
    CodeValidateRequest,
    CodeValidateResponse,
    EnrollmentCodeResponse,
)
from app.services.code_service import CodeService

router = APIRouter(tags=["Enrollment Codes"])


@router.post(
    "/codes/generate",
    response_model=CodeBatchCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Issue a batch of enrollment codes",
)
async def generate_codes(
    data: CodeBatchCreate,
    db: DatabaseSession,
    admin: CurrentAdmin,
) -> CodeBatchCreateResponse:
    """Create a batch of single-use codes for the admin's company."""
    return await CodeService(db).issue_batch(admin.company_id, admin.admin_id, data)


@router.get("/codes", response_model=list[EnrollmentCodeResponse])
async def list_codes(
    db: DatabaseSession,
    admin: CurrentAdmin,
    batch_id: int | None = Query(None, description="Filter by batch"),
    status_filter: CodeStatus | None = Query(None, alias="status", description="Filter by status"),
) -> list[EnrollmentCodeResponse]:
    """List the company's enrollment codes, newest first."""
    return await CodeService(db).list_codes(admin.company_id, batch_id, status_filter)


@router.get("/code-batches", response_model=list[CodeBatchSummary])
async def list_code_batches(
    db: DatabaseSession,
    admin: CurrentAdmin,
) -> list[CodeBatchSummary]:
    """List the company's code batches with per-status counts."""
    return await CodeService(db).list_batches(admin.company_id)


@router.get(
    "/code-batches/{batch_id}/export",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}},
    summary="Download a batch as CSV",
)
async def export_code_batch(
    batch_id: int,
    db: DatabaseSession,
    admin: CurrentAdmin,
) -> Response:
    """Export the batch's codes as a one-column CSV file."""
    content = await CodeService(db).export_batch_csv(admin.company_id, batch_id)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="enrollment-codes-{batch_id}.csv"'},
    )


@router.post(
    "/codes/validate",
    response_model=CodeValidateResponse,
    summary="Check an enrollment code before enrolling",
)
async def validate_code(
    request: CodeValidateRequest,
    db: DatabaseSession,
) -> CodeValidateResponse:
    """
    Public endpoint used by the enrollment form.

    Does not consume the code.
    """
    return await CodeService(db).validate_code(request.code)
