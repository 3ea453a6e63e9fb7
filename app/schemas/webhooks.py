"""Partner webhook payload schemas."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class LabKitStatus(str, Enum):
    """Lab kit status enumeration."""

    ORDERED = "ordered"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    PROCESSED = "processed"


class TelehealthDecision(str, Enum):
    """Clinician decision enumeration."""

    APPROVED = "approved"
    DENIED = "denied"
    NEEDS_MORE_INFO = "needs_more_info"


class PrescriptionStatus(str, Enum):
    """Prescription status enumeration."""

    PENDING = "pending"
    FILLED = "filled"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# ============================================================================
# Lab partner
# ============================================================================


class LabResultWebhook(BaseModel):
    kit_identifier: str = Field(..., min_length=1, max_length=64)
    result_data: dict[str, Any]


class LabResultWebhookResponse(BaseModel):
    success: bool = True
    kit_identifier: str
    result_id: int


# ============================================================================
# Telehealth partner
# ============================================================================


class PrescriptionDetails(BaseModel):
    medication: str = Field(..., min_length=1, max_length=200)
    dosage: str = Field(..., min_length=1, max_length=200)
    instructions: str | None = Field(None, max_length=1000)


class TelehealthWebhook(BaseModel):
    """Clinician decision for an enrolled employee."""

    emed_identifier: str = Field(..., min_length=1, max_length=64)
    decision: TelehealthDecision
    reviewer_name: str | None = Field(None, max_length=200)
    notes: str | None = Field(None, max_length=2000)
    prescription: PrescriptionDetails | None = None


class TelehealthWebhookResponse(BaseModel):
    success: bool = True
    review_id: int
    rx_identifier: str | None = None


# ============================================================================
# Pharmacy partner
# ============================================================================


class PharmacyWebhook(BaseModel):
    """Prescription status update from the dispensing pharmacy."""

    rx_identifier: str = Field(..., min_length=1, max_length=64)
    status: PrescriptionStatus
    tracking_number: str | None = Field(None, max_length=100)
    carrier: str | None = Field(None, max_length=100)

    @model_validator(mode="after")
    def strip_blank_tracking(self) -> "PharmacyWebhook":
        """Treat a blank tracking number as absent."""
        if self.tracking_number is not None and not self.tracking_number.strip():
            self.tracking_number = None
        return self


class PharmacyWebhookResponse(BaseModel):
    success: bool = True
    rx_identifier: str
    status: PrescriptionStatus
    shipment_id: int | None = None
