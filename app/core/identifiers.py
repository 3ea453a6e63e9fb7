"""Generators for the human-readable tokens handed out by the program.

All tokens are upper-case alphanumeric and prefixed. Uniqueness is enforced by
unique constraints in the database, not here.
"""

import re
import secrets
import string
import time

ALPHABET = string.ascii_uppercase + string.digits


def random_token(length: int) -> str:
    """Return ``length`` random base36 characters, upper-case."""
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def company_prefix(company_name: str) -> str:
    """First three alphanumeric characters of the company name, padded with X."""
    letters = re.sub(r"[^A-Za-z0-9]", "", company_name).upper()
    return letters[:3].ljust(3, "X")


def enrollment_code(prefix: str, program_code: str) -> str:
    """E.g. ``ACM-GLP1-7KQ2ZD``."""
    return f"{prefix}-{program_code}-{random_token(6)}"


def emed_identifier(company_id: int) -> str:
    return f"eMED-{company_id}-{random_token(4)}"


def kit_identifier() -> str:
    return f"KIT-{random_token(8)}"


def rx_identifier(company_id: int, user_id: int) -> str:
    return f"RX-{company_id}-{user_id}-{random_token(4)}"


def temporary_password(length: int) -> str:
    """Temporary admin password, always mixed-case with digits."""
    return f"eMed{random_token(max(length - 4, 6))}"


def portal_slug(company_name: str) -> str:
    """Lower-case alphanumeric slug used in the portal URL."""
    return re.sub(r"[^a-z0-9]", "", company_name.lower())


def suffixed_email(email: str) -> str:
    """Make an email address unique by plus-addressing a millisecond timestamp."""
    local, _, domain = email.partition("@")
    return f"{local}+{int(time.time() * 1000)}@{domain}"
