"""Field validation utilities for registration payloads."""
import re
from typing import Optional, Tuple

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\+]?[(]?[0-9]{2,4}[)]?[-\s\.]?[0-9]{3,4}[-\s\.]?[0-9]{4,6}$")

VALID_YEARS = ["1st", "2nd", "3rd", "4th"]
MAX_NAME_LENGTH = 100


def validate_name(name: Optional[str]) -> Tuple[bool, str]:
    """
    Validate a person's name.

    Args:
        name: Name to validate

    Returns:
        Tuple of (is_valid: bool, error_message: str)
        - (True, "") if valid
        - (False, "Name is required") if empty
        - (False, "Name cannot exceed 100 characters") if too long
    """
    if not name or not str(name).strip():
        return False, "Name is required"
    if len(str(name).strip()) > MAX_NAME_LENGTH:
        return False, f"Name cannot exceed {MAX_NAME_LENGTH} characters"
    return True, ""


def validate_email(email: Optional[str]) -> Tuple[bool, str]:
    """
    Validate an email address.

    Returns:
        (True, "") if valid, (False, "Email is required") if empty,
        (False, "Invalid email format") otherwise
    """
    if not email or not str(email).strip():
        return False, "Email is required"
    if not EMAIL_PATTERN.match(str(email).strip()):
        return False, "Invalid email format"
    return True, ""


def validate_phone(phone: Optional[str]) -> Tuple[bool, str]:
    """
    Validate an optional phone number.

    Spaces are ignored. An empty value is accepted since phone is optional.
    """
    if phone is None or str(phone).strip() == "":
        return True, ""
    compact = re.sub(r"\s", "", str(phone))
    if not PHONE_PATTERN.match(compact):
        return False, "Invalid phone number format"
    return True, ""


def validate_year(year: Optional[str]) -> Tuple[bool, str]:
    """Validate an optional year of study ("1st" through "4th")."""
    if year is None or str(year).strip() == "":
        return True, ""
    if str(year).strip() not in VALID_YEARS:
        return False, f"Year must be one of: {', '.join(VALID_YEARS)}"
    return True, ""


def normalize_email(email: str) -> str:
    """
    Normalize email for identity comparison.

    Behavior:
        - Trims leading/trailing whitespace
        - Converts to lowercase
        - Example: " Asha@Example.COM " -> "asha@example.com"
    """
    return email.strip().lower()


def normalize_event_key(name: str) -> str:
    """
    Normalize an event name into a lookup key.

    Lowercases and drops spaces, hyphens and underscores so that
    "Group-Dance", "group dance" and "GROUPDANCE" share one key.
    """
    return re.sub(r"[\s\-_]+", "", name.strip().lower())


def slugify(value: str) -> str:
    """Generate a safe lowercase slug, used for placeholder emails."""
    sanitized = re.sub(r"[^A-Za-z0-9]+", "-", value.strip().lower())
    return sanitized.strip("-") or "participant"


def normalize_name(name: str) -> str:
    """
    Normalize name for duplicate comparison.

    Behavior:
        - Trims leading/trailing whitespace
        - Converts to lowercase
        - Collapses internal runs of whitespace
        - Example: "  Asha   Rao " -> "asha rao"
    """
    return " ".join(name.split()).lower()
