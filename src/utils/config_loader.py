"""
Configuration loader for the onboarding service
"""

import os
import yaml
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "onboarding_config.yml"


class GatewayConfig(BaseModel):
    """Payment gateway backend (key, order and verification endpoints)"""

    base_url: str = "http://localhost:4000/payments"
    timeout_seconds: float = Field(default=20.0, gt=0.0, le=300.0)


class AccountsConfig(BaseModel):
    """Account-creation backend"""

    base_url: str = "http://localhost:4001/auth"
    timeout_seconds: float = Field(default=20.0, gt=0.0, le=300.0)


class CheckoutConfig(BaseModel):
    """Hosted checkout widget settings"""

    script_url: str = "https://checkout.razorpay.com/v1/checkout.js"
    merchant_name: str = "B2P TEACHERS"
    theme_color: str = "#3b82f6"


class CredentialsConfig(BaseModel):
    length: int = Field(default=12, ge=4, le=128)
    alphabet: str = Field(
        default="ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789!@#$%^&*",
        min_length=2,
    )


class EligibilityConfig(BaseModel):
    """Applicant age window, inclusive on both ends"""

    min_age: int = Field(default=5, ge=0)
    max_age: int = Field(default=25, ge=0)

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.min_age > self.max_age:
            raise ValueError("min_age must not exceed max_age")
        return self


class PaymentPlan(BaseModel):
    """One course the applicant can pay for"""

    id: str
    label: str
    amount: float = Field(gt=0)
    currency: str = "INR"
    description: str = ""


class OnboardingConfig(BaseModel):
    """Complete onboarding configuration"""

    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    accounts: AccountsConfig = Field(default_factory=AccountsConfig)
    checkout: CheckoutConfig = Field(default_factory=CheckoutConfig)
    credentials: CredentialsConfig = Field(default_factory=CredentialsConfig)
    eligibility: EligibilityConfig = Field(default_factory=EligibilityConfig)
    plans: List[PaymentPlan] = Field(min_length=1)
    default_plan: Optional[str] = None

    @model_validator(mode="after")
    def _check_default_plan(self):
        if self.default_plan and not any(p.id == self.default_plan for p in self.plans):
            raise ValueError(f"default_plan '{self.default_plan}' is not one of the configured plans")
        return self

    def plan_for(self, course: str) -> PaymentPlan:
        """Resolve the applicant's course selection (plan id or label) to a plan.

        An empty or unknown selection falls back to the default plan, then to the first one.
        """
        selected = (course or "").strip()
        for plan in self.plans:
            if selected and selected in (plan.id, plan.label):
                return plan
        if selected:
            logger.warning("Unknown course selection %r; using default plan", selected)
        for plan in self.plans:
            if plan.id == self.default_plan:
                return plan
        return self.plans[0]


def _apply_env_overrides(config_data: dict) -> dict:
    """Environment variables win over the YAML file for deployment-specific URLs"""
    overrides = {
        ("gateway", "base_url"): os.getenv("PAYMENTS_API_URL"),
        ("accounts", "base_url"): os.getenv("AUTH_API_URL"),
        ("checkout", "script_url"): os.getenv("RAZORPAY_CHECKOUT_SCRIPT_URL"),
    }
    for (section, key), value in overrides.items():
        if value:
            config_data.setdefault(section, {})[key] = value.rstrip("/")
    return config_data


def load_onboarding_config(config_path: Optional[Path] = None) -> OnboardingConfig:
    """
    Load and validate onboarding configuration from YAML file

    Args:
        config_path: Path to config file. Defaults to config/onboarding_config.yml

    Returns:
        Validated OnboardingConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    load_dotenv()

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    config_data = _apply_env_overrides(config_data)

    try:
        config = OnboardingConfig(**config_data)
        logger.info("Successfully loaded onboarding config from %s", config_path)
        return config
    except ValidationError as e:
        logger.error("Onboarding config validation failed: %s", e)
        raise
