"""Database models."""

from app.models.admins import admins
from app.models.base import metadata
from app.models.companies import companies
from app.models.enrolled_users import enrolled_users
from app.models.enrollment_codes import code_batches, enrollment_codes
from app.models.lab_kits import lab_kits, lab_results
from app.models.programs import programs
from app.models.telehealth import prescriptions, shipments, telehealth_reviews

__all__ = [
    "admins",
    "code_batches",
    "companies",
    "enrolled_users",
    "enrollment_codes",
    "lab_kits",
    "lab_results",
    "metadata",
    "prescriptions",
    "programs",
    "shipments",
    "telehealth_reviews",
]
