"""Pytest fixtures for onboarding wizard, integration client and API tests."""

from datetime import date

import pytest

from src.onboarding.state import ApplicantRecord
from src.utils.config_loader import load_onboarding_config

TODAY = date(2026, 10, 16)

VALID_APPLICANT = {
    "first_name": "Asha",
    "last_name": "Verma",
    "date_of_birth": "2010-04-12",
    "gender": "female",
    "email": "asha.verma@example.com",
    "phone": "+91 9876543210",
    "address": "12 MG Road, Pune",
    "grade": "9",
    "previous_school": "Sunrise Public School",
    "parent_name": "Rakesh Verma",
    "relationship": "father",
    "parent_email": "rakesh.verma@example.com",
    "parent_phone": "+91 9123456789",
    "hobbies": "Chess",
    "goals": "Crack NEET",
    "course": "neet-jee-foundation",
}


@pytest.fixture
def today():
    """Fixed "current date" so age checks stay deterministic."""
    return TODAY


@pytest.fixture
def config():
    """Configuration from config/onboarding_config.yml."""
    return load_onboarding_config()


@pytest.fixture
def applicant():
    """Field values for an applicant who passes every step."""
    return dict(VALID_APPLICANT)


@pytest.fixture
def valid_record(applicant):
    record = ApplicantRecord()
    for field, value in applicant.items():
        record = record.with_value(field, value)
    return record
