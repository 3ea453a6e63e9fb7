"""Tests for lab, telehealth and pharmacy partner webhooks."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.lab_kits import lab_kits, lab_results
from app.models.telehealth import prescriptions, shipments, telehealth_reviews


@pytest.fixture
def approved_review(enrolled_user: dict) -> dict:
    """Approved telehealth decision with a prescription."""
    return {
        "emed_identifier": enrolled_user["emed_identifier"],
        "decision": "approved",
        "reviewer_name": "Dr. Rivera",
        "notes": "Eligible for GLP-1 therapy",
        "prescription": {
            "medication": "Semaglutide",
            "dosage": "0.25mg weekly",
            "instructions": "Inject subcutaneously once a week",
        },
    }


async def kit_for(db_session: AsyncSession, user_id: int) -> dict:
    db_session.expire_all()
    result = await db_session.execute(select(lab_kits).where(lab_kits.c.user_id == user_id))
    return dict(result.mappings().one())


@pytest.mark.asyncio
async def test_lab_result_marks_kit_processed(
    client: AsyncClient,
    db_session: AsyncSession,
    enrolled_user: dict,
) -> None:
    """Test a lab result processes the kit and stores the payload."""
    kit = await kit_for(db_session, enrolled_user["user_id"])
    result_data = {"a1c": 6.1, "fasting_glucose": 104, "units": {"a1c": "%"}}

    response = await client.post(
        "/api/v1/webhooks/lab-results",
        json={"kit_identifier": kit["kit_identifier"], "result_data": result_data},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["kit_identifier"] == kit["kit_identifier"]

    kit = await kit_for(db_session, enrolled_user["user_id"])
    assert kit["status"] == "processed"
    assert kit["processed_at"] is not None

    result = await db_session.execute(
        select(lab_results).where(lab_results.c.id == data["result_id"])
    )
    stored = result.mappings().one()
    assert stored["user_id"] == enrolled_user["user_id"]
    assert stored["result_data"] == result_data


@pytest.mark.asyncio
async def test_lab_result_unknown_kit(client: AsyncClient, db_session: AsyncSession) -> None:
    """Test a result for an unknown kit is rejected and nothing is stored."""
    response = await client.post(
        "/api/v1/webhooks/lab-results",
        json={"kit_identifier": "KIT-UNKNOWN0", "result_data": {"a1c": 5.0}},
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Lab kit not found"
    assert await db_session.scalar(select(func.count()).select_from(lab_results)) == 0


@pytest.mark.asyncio
async def test_telehealth_approval_creates_prescription(
    client: AsyncClient,
    db_session: AsyncSession,
    provisioned_company: dict,
    enrolled_user: dict,
    approved_review: dict,
) -> None:
    """Test an approval with prescription details creates a pending prescription."""
    response = await client.post("/api/v1/webhooks/telehealth", json=approved_review)
    assert response.status_code == 201
    data = response.json()

    prefix = f"RX-{provisioned_company['company']['id']}-{enrolled_user['user_id']}-"
    assert data["rx_identifier"].startswith(prefix)

    result = await db_session.execute(
        select(prescriptions).where(prescriptions.c.rx_identifier == data["rx_identifier"])
    )
    rx = result.mappings().one()
    assert rx["status"] == "pending"
    assert rx["review_id"] == data["review_id"]
    assert rx["medication"] == "Semaglutide"


@pytest.mark.asyncio
async def test_telehealth_denial_records_review_only(
    client: AsyncClient,
    db_session: AsyncSession,
    approved_review: dict,
) -> None:
    """Test a denial is recorded without a prescription, even if details are sent."""
    approved_review["decision"] = "denied"
    response = await client.post("/api/v1/webhooks/telehealth", json=approved_review)
    assert response.status_code == 201
    assert response.json()["rx_identifier"] is None

    assert await db_session.scalar(select(func.count()).select_from(telehealth_reviews)) == 1
    assert await db_session.scalar(select(func.count()).select_from(prescriptions)) == 0


@pytest.mark.asyncio
async def test_telehealth_unknown_user(client: AsyncClient, approved_review: dict) -> None:
    """Test a review for an unknown eMed identifier is rejected."""
    approved_review["emed_identifier"] = "eMED-999-ZZZZ"
    response = await client.post("/api/v1/webhooks/telehealth", json=approved_review)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_telehealth_invalid_decision(client: AsyncClient, approved_review: dict) -> None:
    """Test unknown decisions fail validation."""
    approved_review["decision"] = "maybe"
    response = await client.post("/api/v1/webhooks/telehealth", json=approved_review)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_pharmacy_shipped_records_shipment(
    client: AsyncClient,
    db_session: AsyncSession,
    approved_review: dict,
) -> None:
    """Test a shipped update with tracking writes a shipment row."""
    response = await client.post("/api/v1/webhooks/telehealth", json=approved_review)
    rx_identifier = response.json()["rx_identifier"]

    response = await client.post(
        "/api/v1/webhooks/pharmacy",
        json={
            "rx_identifier": rx_identifier,
            "status": "shipped",
            "tracking_number": "1Z999AA10123456784",
            "carrier": "UPS",
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "shipped"
    assert data["shipment_id"] is not None

    status = await db_session.scalar(
        select(prescriptions.c.status).where(prescriptions.c.rx_identifier == rx_identifier)
    )
    assert status == "shipped"

    result = await db_session.execute(
        select(shipments).where(shipments.c.id == data["shipment_id"])
    )
    shipment = result.mappings().one()
    assert shipment["tracking_number"] == "1Z999AA10123456784"
    assert shipment["carrier"] == "UPS"


@pytest.mark.asyncio
async def test_pharmacy_update_without_tracking(
    client: AsyncClient,
    db_session: AsyncSession,
    approved_review: dict,
) -> None:
    """Test status updates without a tracking number write no shipment."""
    response = await client.post("/api/v1/webhooks/telehealth", json=approved_review)
    rx_identifier = response.json()["rx_identifier"]

    for status_value in ("filled", "shipped"):
        response = await client.post(
            "/api/v1/webhooks/pharmacy",
            json={"rx_identifier": rx_identifier, "status": status_value, "tracking_number": " "},
        )
        assert response.status_code == 200
        assert response.json()["shipment_id"] is None

    assert await db_session.scalar(select(func.count()).select_from(shipments)) == 0


@pytest.mark.asyncio
async def test_pharmacy_unknown_prescription(client: AsyncClient) -> None:
    """Test an update for an unknown prescription is rejected."""
    response = await client.post(
        "/api/v1/webhooks/pharmacy",
        json={"rx_identifier": "RX-0-0-ZZZZ", "status": "filled"},
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Prescription not found"


@pytest.mark.asyncio
async def test_lab_result_failure_keeps_kit_ordered(
    client: AsyncClient,
    db_session: AsyncSession,
    enrolled_user: dict,
) -> None:
    """Test a failed result insert does not leave the kit processed."""
    kit = await kit_for(db_session, enrolled_user["user_id"])
    await db_session.execute(text("DROP TABLE lab_results"))
    await db_session.commit()

    response = await client.post(
        "/api/v1/webhooks/lab-results",
        json={"kit_identifier": kit["kit_identifier"], "result_data": {"a1c": 6.1}},
    )
    assert response.status_code == 500
    assert response.json()["message"] == "An unexpected error occurred"

    kit = await kit_for(db_session, enrolled_user["user_id"])
    assert kit["status"] == "ordered"
    assert kit["processed_at"] is None
