"""
Utility modules for the onboarding service
"""
from .config_loader import OnboardingConfig, PaymentPlan, load_onboarding_config

__all__ = [
    'OnboardingConfig',
    'PaymentPlan',
    'load_onboarding_config',
]
