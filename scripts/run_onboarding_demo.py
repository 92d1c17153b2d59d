#!/usr/bin/env python3
"""
Walk one applicant through the onboarding wizard against the mock integrations
and print each stage to the terminal: step validation, checkout, verification,
account commit, then a second applicant hitting the duplicate-email path.

Usage (from repo root):
  python scripts/run_onboarding_demo.py
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.integrations.clients.mocks.accounts import MockAccountsClient
from src.integrations.clients.mocks.checkout import MockCheckoutWidget
from src.integrations.clients.mocks.payments import MockPaymentsClient
from src.integrations.contracts.payments import PaymentReceipt
from src.onboarding.orchestrator import OnboardingOrchestrator
from src.utils.config_loader import load_onboarding_config

APPLICANT = {
    "first_name": "Asha",
    "last_name": "Verma",
    "date_of_birth": "2010-04-12",
    "gender": "female",
    "email": "asha.verma@example.com",
    "phone": "+91 9876543210",
    "grade": "9",
    "parent_name": "Rakesh Verma",
    "relationship": "father",
    "parent_email": "rakesh.verma@example.com",
    "parent_phone": "+91 9123456789",
    "course": "neet-jee-foundation",
}


def setup_logging():
    """Log to terminal at INFO so every stage is visible."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )


def print_stage(title: str, data: dict | list | str):
    """Print a stage header and data to the terminal."""
    print("\n" + "=" * 60)
    print(f"  {title}")
    print("=" * 60)
    if isinstance(data, (dict, list)):
        print(json.dumps(data, indent=2, default=str))
    else:
        print(data)
    print()


def fill_and_advance(wizard: OnboardingOrchestrator) -> None:
    for field, value in APPLICANT.items():
        wizard.update_field(field, value)
    wizard.toggle_subject("Mathematics")
    wizard.toggle_subject("Science")
    while wizard.next():
        print_stage(f"ADVANCED TO STEP {wizard.state.step}", {"progress": f"{wizard.progress:.0f}%"})


async def main():
    setup_logging()
    config = load_onboarding_config()
    gateway = MockPaymentsClient()
    accounts = MockAccountsClient()

    for attempt in (1, 2):
        widget = MockCheckoutWidget(receipt=PaymentReceipt(f"order_{attempt}", f"pay_{attempt}", f"sig_{attempt}"))
        wizard = OnboardingOrchestrator(gateway, widget, accounts, config)
        fill_and_advance(wizard)

        state = await wizard.submit()
        print_stage(f"APPLICANT {attempt}: SUBMISSION RESULT", state.to_dict(wizard.total_steps))
        if widget.opened:
            print_stage(f"APPLICANT {attempt}: CHECKOUT WIDGET CONFIG", widget.opened[-1].to_widget_config())

    print_stage("GATEWAY CALLS", dict(gateway.calls))


if __name__ == "__main__":
    asyncio.run(main())
