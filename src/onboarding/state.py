"""
Wizard state for the student onboarding flow.

`ApplicantRecord` and `WizardState` are frozen: every change produces a new
snapshot via `dataclasses.replace`, and only the orchestrator produces them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple


class Phase(str, Enum):
    EDITING = "editing"
    VALIDATING_STEP = "validating_step"
    FINAL_VALIDATING = "final_validating"
    REQUESTING_PAYMENT_KEY = "requesting_payment_key"
    LOADING_WIDGET = "loading_widget"
    CREATING_ORDER = "creating_order"
    AWAITING_USER_PAYMENT = "awaiting_user_payment"
    VERIFYING_PAYMENT = "verifying_payment"
    COMMITTING = "committing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureKind(str, Enum):
    GATEWAY_UNAVAILABLE = "gateway_unavailable"
    TRANSPORT_FAILURE = "transport_failure"


# Phases in which the applicant can edit fields and navigate between steps.
EDITABLE_PHASES = frozenset({Phase.EDITING, Phase.FAILED})

# Backend field names, in the order the account-creation API documents them.
_PAYLOAD_KEYS = {
    "first_name": "firstName",
    "last_name": "lastName",
    "date_of_birth": "dateOfBirth",
    "gender": "gender",
    "email": "email",
    "phone": "phone",
    "address": "address",
    "grade": "grade",
    "previous_school": "previousSchool",
    "parent_name": "parentName",
    "parent_email": "parentEmail",
    "parent_phone": "parentPhone",
    "relationship": "relationship",
    "subjects": "subjects",
    "hobbies": "hobbies",
    "goals": "goals",
    "course": "course",
}


def _as_subjects(value: Any) -> Tuple[str, ...]:
    # A single string is one subject, not a sequence of characters.
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    return tuple(s for s in (str(v).strip() for v in value) if s)


@dataclass(frozen=True)
class ApplicantRecord:
    # Personal info
    first_name: str = ""
    last_name: str = ""
    date_of_birth: str = ""              # ISO format: YYYY-MM-DD
    gender: str = ""
    # Contact details
    email: str = ""
    phone: str = ""
    address: str = ""
    # Academic info
    grade: str = ""
    previous_school: str = ""
    # Parent / guardian
    parent_name: str = ""
    parent_email: str = ""
    parent_phone: str = ""
    relationship: str = ""
    # Interests & goals
    subjects: Tuple[str, ...] = ()
    hobbies: str = ""
    goals: str = ""
    # Payment plan
    course: str = ""

    @classmethod
    def field_names(cls) -> FrozenSet[str]:
        return frozenset(f.name for f in fields(cls))

    def with_value(self, name: str, value: Any) -> "ApplicantRecord":
        if name not in self.field_names():
            raise KeyError(f"Unknown applicant field: {name}")
        if name == "subjects":
            value = _as_subjects(value)
        else:
            value = "" if value is None else str(value)
        return replace(self, **{name: value})

    def with_subject_toggled(self, subject: str) -> "ApplicantRecord":
        if subject in self.subjects:
            subjects = tuple(s for s in self.subjects if s != subject)
        else:
            subjects = self.subjects + (subject,)
        return replace(self, subjects=subjects)

    @property
    def full_name(self) -> str:
        return f"{self.first_name.strip()} {self.last_name.strip()}".strip()

    def to_payload(self, password: str) -> Dict[str, Any]:
        """Shape expected by the account-creation endpoint."""
        payload: Dict[str, Any] = {}
        for name, key in _PAYLOAD_KEYS.items():
            value = getattr(self, name)
            payload[key] = list(value) if name == "subjects" else value
        payload["password"] = password
        return payload


@dataclass(frozen=True)
class WizardState:
    step: int = 0
    phase: Phase = Phase.EDITING
    record: ApplicantRecord = field(default_factory=ApplicantRecord)
    errors: Dict[str, str] = field(default_factory=dict)
    touched: FrozenSet[str] = frozenset()
    payment_completed: bool = False
    busy: bool = False
    failure: Optional[FailureKind] = None
    message: Optional[str] = None
    generated_password: str = ""
    show_success: bool = False

    @property
    def visible_errors(self) -> Dict[str, str]:
        """Errors for fields the applicant has already left at least once."""
        return {name: msg for name, msg in self.errors.items() if name in self.touched}

    def to_dict(self, total_steps: int) -> Dict[str, Any]:
        return {
            "step": self.step,
            "total_steps": total_steps,
            "progress": round((self.step + 1) / total_steps * 100, 2),
            "phase": self.phase.value,
            "record": {name: (list(v) if isinstance(v, tuple) else v) for name, v in vars(self.record).items()},
            "errors": dict(self.errors),
            "visible_errors": self.visible_errors,
            "touched": sorted(self.touched),
            "payment_completed": self.payment_completed,
            "busy": self.busy,
            "failure": self.failure.value if self.failure else None,
            "message": self.message,
            "show_success": self.show_success,
            "generated_password": self.generated_password if self.show_success else None,
        }
