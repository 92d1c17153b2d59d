"""
Wizard steps and the per-step validator
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional, Tuple

from src.onboarding.state import ApplicantRecord
from src.onboarding.validation import (
    DEFAULT_MAX_AGE,
    DEFAULT_MIN_AGE,
    require_text,
    validate_date_of_birth,
    validate_email,
    validate_phone,
)


@dataclass(frozen=True)
class WizardStep:
    index: int
    title: str
    fields: Tuple[str, ...]


STEPS: Tuple[WizardStep, ...] = (
    WizardStep(0, "Personal Info", ("first_name", "last_name", "date_of_birth", "gender")),
    WizardStep(1, "Contact Details", ("email", "phone", "address")),
    WizardStep(2, "Academic Info", ("grade", "previous_school")),
    WizardStep(3, "Parent/Guardian", ("parent_name", "relationship", "parent_email", "parent_phone")),
    WizardStep(4, "Interests & Goals", ("subjects", "hobbies", "goals")),
    WizardStep(5, "Payments", ("course",)),
)

TOTAL_STEPS = len(STEPS)
LAST_STEP = TOTAL_STEPS - 1
CONTACT_STEP = 1


def validate_step(
    step: int,
    record: ApplicantRecord,
    today: Optional[date] = None,
    *,
    min_age: int = DEFAULT_MIN_AGE,
    max_age: int = DEFAULT_MAX_AGE,
) -> Dict[str, str]:
    """Return the field-error map for one step; empty means the step passes."""
    if not 0 <= step < TOTAL_STEPS:
        raise ValueError(f"Step {step} is out of range (0-{LAST_STEP})")

    errors: Dict[str, str] = {}

    if step == 0:
        require_text(record.first_name, errors, "first_name", "First name is required")
        require_text(record.last_name, errors, "last_name", "Last name is required")
        validate_date_of_birth(record.date_of_birth, errors, "date_of_birth", today=today, min_age=min_age, max_age=max_age)
    elif step == 1:
        validate_email(record.email, errors, "email")
        validate_phone(record.phone, errors, "phone")
    elif step == 2:
        require_text(record.grade, errors, "grade", "Grade is required")
    elif step == 3:
        require_text(record.parent_name, errors, "parent_name", "Parent/Guardian name is required")
        validate_email(record.parent_email, errors, "parent_email", required_message="Parent email is required")
        validate_phone(
            record.parent_phone,
            errors,
            "parent_phone",
            required=True,
            required_message="Parent phone number is required",
        )
    # Interests and payment-plan steps have no mandatory fields.

    return errors


def first_invalid_step(
    record: ApplicantRecord,
    today: Optional[date] = None,
    *,
    min_age: int = DEFAULT_MIN_AGE,
    max_age: int = DEFAULT_MAX_AGE,
) -> Optional[Tuple[int, Dict[str, str]]]:
    """Validate every step in order and return the first failing one with its errors."""
    for step in range(TOTAL_STEPS):
        errors = validate_step(step, record, today, min_age=min_age, max_age=max_age)
        if errors:
            return step, errors
    return None
