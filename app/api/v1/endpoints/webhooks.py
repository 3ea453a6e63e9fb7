"""Partner webhook endpoints (lab, telehealth, pharmacy)."""

from fastapi import APIRouter, status

from app.dependencies import DatabaseSession
from app.schemas.webhooks import (
    LabResultWebhook,
    LabResultWebhookResponse,
    PharmacyWebhook,
    PharmacyWebhookResponse,
    TelehealthWebhook,
    TelehealthWebhookResponse,
)
from app.services.webhook_service import WebhookService

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post(
    "/lab-results",
    response_model=LabResultWebhookResponse,
    status_code=status.HTTP_201_CREATED,
)
async def lab_results(payload: LabResultWebhook, db: DatabaseSession) -> LabResultWebhookResponse:
    """Called by the lab partner when a kit has been processed."""
    return await WebhookService(db).record_lab_result(payload)


@router.post(
    "/telehealth",
    response_model=TelehealthWebhookResponse,
    status_code=status.HTTP_201_CREATED,
)
async def telehealth(
    payload: TelehealthWebhook, db: DatabaseSession
) -> TelehealthWebhookResponse:
    """Called by the telehealth partner with a clinician decision."""
    return await WebhookService(db).record_telehealth_review(payload)


@router.post("/pharmacy", response_model=PharmacyWebhookResponse)
async def pharmacy(payload: PharmacyWebhook, db: DatabaseSession) -> PharmacyWebhookResponse:
    """Called by the pharmacy when a prescription changes status."""
    return await WebhookService(db).update_prescription(payload)
