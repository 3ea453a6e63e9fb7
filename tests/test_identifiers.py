"""Unit tests for identifier generators."""

import re

from app.core.identifiers import (
    company_prefix,
    emed_identifier,
    enrollment_code,
    kit_identifier,
    portal_slug,
    rx_identifier,
    suffixed_email,
    temporary_password,
)


def test_company_prefix() -> None:
    assert company_prefix("Acme Corp") == "ACM"
    assert company_prefix("3M") == "3MX"
    assert company_prefix("A.B. & Co") == "ABC"
    assert company_prefix("!!!") == "XXX"


def test_enrollment_code_format() -> None:
    assert re.fullmatch(r"ACM-GLP1-[A-Z0-9]{6}", enrollment_code("ACM", "GLP1"))


def test_identifier_formats() -> None:
    assert re.fullmatch(r"eMED-42-[A-Z0-9]{4}", emed_identifier(42))
    assert re.fullmatch(r"KIT-[A-Z0-9]{8}", kit_identifier())
    assert re.fullmatch(r"RX-3-17-[A-Z0-9]{4}", rx_identifier(3, 17))


def test_temporary_password() -> None:
    password = temporary_password(10)
    assert password.startswith("eMed")
    assert len(password) == 10
    # Never shorter than the minimum random part
    assert len(temporary_password(4)) == 10


def test_generated_codes_differ() -> None:
    codes = {enrollment_code("ACM", "GLP1") for _ in range(200)}
    assert len(codes) == 200


def test_portal_slug() -> None:
    assert portal_slug("Acme Corp, Inc.") == "acmecorpinc"
    assert portal_slug("!!!") == ""


def test_suffixed_email() -> None:
    assert re.fullmatch(r"jane\+\d{13}@acme\.com", suffixed_email("jane@acme.com"))
