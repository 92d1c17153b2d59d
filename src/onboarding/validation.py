"""Field validators for the student onboarding wizard.

Every validator is a pure function of its input (and `today` for date checks).
Validators write into a caller-owned `errors` dict via `add_error`, keeping the
first message recorded for a field.

On validation failure at an API boundary, raise `FormValidationError` so the
API can return HTTP 422 with structured `field_errors`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

DEFAULT_MIN_AGE = 5
DEFAULT_MAX_AGE = 25


@dataclass
class FormValidationError(Exception):
    """Exception raised for form validation failures.

    Attributes:
        field_errors: mapping of field name -> human-readable error message.
        message: optional top-level message.
    """

    field_errors: Dict[str, str]
    message: str = "Validation failed"

    def __str__(self) -> str:  # pragma: no cover
        return self.message


def _as_str(v: Any) -> str:
    return "" if v is None else str(v)


def _strip(v: Any) -> str:
    return _as_str(v).strip()


def add_error(errors: Dict[str, str], field: str, message: str) -> None:
    if field not in errors:
        errors[field] = message


def require_text(value: Any, errors: Dict[str, str], field: str, message: str) -> str:
    text = _strip(value)
    if not text:
        add_error(errors, field, message)
    return text


_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(_as_str(value)))


# Optional "+", optional "(area)", then up to three digit groups with one
# separator ("-", ".", or space) allowed between groups.
_PHONE_RE = re.compile(r"^[+]?[(]?[0-9]{1,4}[)]?[-\s.]?[0-9]{1,4}[-\s.]?[0-9]{1,9}$")


def is_valid_phone(value: str) -> bool:
    raw = _as_str(value)
    if not _PHONE_RE.match(raw):
        return False
    digits = sum(ch.isdigit() for ch in raw)
    return 3 <= digits <= 14


def parse_iso_date(value: str) -> Optional[date]:
    s = _strip(value)
    if not s:
        return None
    return date.fromisoformat(s)


def age_on(birth_date: date, today: date) -> int:
    """Whole years between `birth_date` and `today`."""
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def is_valid_date_of_birth(
    value: str,
    *,
    today: Optional[date] = None,
    min_age: int = DEFAULT_MIN_AGE,
    max_age: int = DEFAULT_MAX_AGE,
) -> bool:
    try:
        birth_date = parse_iso_date(value)
    except ValueError:
        return False
    if birth_date is None:
        return False
    age = age_on(birth_date, today or date.today())
    return min_age <= age <= max_age


def validate_email(value: str, errors: Dict[str, str], field: str = "email", *, required_message: str = "Email is required") -> str:
    value = _strip(value)
    if not value:
        add_error(errors, field, required_message)
        return value
    if not is_valid_email(value):
        add_error(errors, field, "Please enter a valid email address")
    return value


def validate_phone(
    value: str,
    errors: Dict[str, str],
    field: str = "phone",
    *,
    required: bool = False,
    required_message: str = "Phone number is required",
) -> str:
    raw = _strip(value)
    if not raw:
        if required:
            add_error(errors, field, required_message)
        return raw
    if not is_valid_phone(raw):
        add_error(errors, field, "Please enter a valid phone number")
    return raw


def validate_date_of_birth(
    value: str,
    errors: Dict[str, str],
    field: str = "date_of_birth",
    *,
    today: Optional[date] = None,
    min_age: int = DEFAULT_MIN_AGE,
    max_age: int = DEFAULT_MAX_AGE,
) -> str:
    raw = _strip(value)
    if not raw:
        add_error(errors, field, "Date of birth is required")
        return raw
    if not is_valid_date_of_birth(raw, today=today, min_age=min_age, max_age=max_age):
        add_error(errors, field, f"Please enter a valid date of birth (age {min_age}-{max_age})")
    return raw


def raise_if_errors(errors: Dict[str, str], message: str = "Please correct the highlighted fields") -> None:
    if errors:
        raise FormValidationError(field_errors=dict(errors), message=message)
