"""Partner webhook ingestion: lab results, telehealth reviews, pharmacy updates."""

import structlog
from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundException
from app.core.identifiers import rx_identifier
from app.core.time_utils import now_utc
from app.database import retry_once_on_conflict, transaction
from app.models.enrolled_users import enrolled_users
from app.models.lab_kits import lab_kits, lab_results
from app.models.telehealth import prescriptions, shipments, telehealth_reviews
from app.schemas.webhooks import (
    LabKitStatus,
    LabResultWebhook,
    LabResultWebhookResponse,
    PharmacyWebhook,
    PharmacyWebhookResponse,
    PrescriptionStatus,
    TelehealthDecision,
    TelehealthWebhook,
    TelehealthWebhookResponse,
)

logger = structlog.get_logger(__name__)


class WebhookService:
    """
    Service applying partner status updates.

    Each handler runs as one transaction: either every row it touches is
    written, or none is. Handlers are not idempotent; a replayed delivery
    records another result or review.
    """

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def record_lab_result(self, payload: LabResultWebhook) -> LabResultWebhookResponse:
        """
        Mark a lab kit processed and store the lab's result payload.

        Raises:
            NotFoundException: If no kit has the given identifier
        """
        async with transaction(self.db):
            result = await self.db.execute(
                select(lab_kits.c.id, lab_kits.c.user_id)
                .where(lab_kits.c.kit_identifier == payload.kit_identifier)
                .with_for_update()
            )
            kit = result.mappings().first()
            if kit is None:
                raise NotFoundException("Lab kit not found")

            await self.db.execute(
                update(lab_kits)
                .where(lab_kits.c.id == kit["id"])
                .values(status=LabKitStatus.PROCESSED.value, processed_at=now_utc())
            )

            result = await self.db.execute(
                insert(lab_results)
                .values(user_id=kit["user_id"], kit_id=kit["id"], result_data=payload.result_data)
                .returning(lab_results.c.id)
            )
            result_id = result.scalar_one()

        logger.info("lab_result_recorded", kit_id=kit["id"], result_id=result_id)
        return LabResultWebhookResponse(kit_identifier=payload.kit_identifier, result_id=result_id)

    async def record_telehealth_review(
        self, payload: TelehealthWebhook
    ) -> TelehealthWebhookResponse:
        """
        Store a clinician decision and, when approved, the prescription it authorizes.

        A prescription is only created for ``approved`` decisions that carry
        prescription details.

        Raises:
            NotFoundException: If no enrolled user has the given eMed identifier
            ConflictException: If rx identifier generation collided twice in a row
        """
        return await retry_once_on_conflict(
            lambda: self._record_review_once(payload),
            "Could not allocate a unique prescription identifier, please retry",
            operation="record_telehealth_review",
        )

    async def _record_review_once(self, payload: TelehealthWebhook) -> TelehealthWebhookResponse:
        rx_id = None

        async with transaction(self.db):
            result = await self.db.execute(
                select(enrolled_users.c.id, enrolled_users.c.company_id).where(
                    enrolled_users.c.emed_identifier == payload.emed_identifier
                )
            )
            user = result.mappings().first()
            if user is None:
                raise NotFoundException("Enrolled user not found")

            result = await self.db.execute(
                insert(telehealth_reviews)
                .values(
                    user_id=user["id"],
                    decision=payload.decision.value,
                    reviewer_name=payload.reviewer_name,
                    notes=payload.notes,
                )
                .returning(telehealth_reviews.c.id)
            )
            review_id = result.scalar_one()

            if payload.decision == TelehealthDecision.APPROVED and payload.prescription:
                rx_id = rx_identifier(user["company_id"], user["id"])
                await self.db.execute(
                    insert(prescriptions).values(
                        user_id=user["id"],
                        review_id=review_id,
                        rx_identifier=rx_id,
                        medication=payload.prescription.medication,
                        dosage=payload.prescription.dosage,
                        instructions=payload.prescription.instructions,
                        status=PrescriptionStatus.PENDING.value,
                    )
                )

        logger.info(
            "telehealth_review_recorded",
            user_id=user["id"],
            review_id=review_id,
            decision=payload.decision.value,
            prescription_created=rx_id is not None,
        )
        return TelehealthWebhookResponse(review_id=review_id, rx_identifier=rx_id)

    async def update_prescription(self, payload: PharmacyWebhook) -> PharmacyWebhookResponse:
        """
        Apply a pharmacy status update, recording a shipment when it ships.

        A shipment row is only written for status ``shipped`` with a tracking number.

        Raises:
            NotFoundException: If no prescription has the given rx identifier
        """
        shipment_id = None

        async with transaction(self.db):
            result = await self.db.execute(
                select(prescriptions.c.id)
                .where(prescriptions.c.rx_identifier == payload.rx_identifier)
                .with_for_update()
            )
            prescription_id = result.scalar_one_or_none()
            if prescription_id is None:
                raise NotFoundException("Prescription not found")

            await self.db.execute(
                update(prescriptions)
                .where(prescriptions.c.id == prescription_id)
                .values(status=payload.status.value, updated_at=now_utc())
            )

            if payload.status == PrescriptionStatus.SHIPPED and payload.tracking_number:
                result = await self.db.execute(
                    insert(shipments)
                    .values(
                        prescription_id=prescription_id,
                        tracking_number=payload.tracking_number,
                        carrier=payload.carrier,
                    )
                    .returning(shipments.c.id)
                )
                shipment_id = result.scalar_one()

        logger.info(
            "prescription_updated",
            prescription_id=prescription_id,
            status=payload.status.value,
            shipment_id=shipment_id,
        )
        return PharmacyWebhookResponse(
            rx_identifier=payload.rx_identifier,
            status=payload.status,
            shipment_id=shipment_id,
        )
