"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os
from datetime import datetime

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import src.api.endpoints.onboarding as onboarding_module
from src.api.dependencies import api_key_protection
from src.api.endpoints.onboarding import router as onboarding_router
from src.error_handler import ErrorHandler
from src.integrations.clients.mocks.accounts import MockAccountsClient
from src.integrations.clients.mocks.payments import MockPaymentsClient
from src.integrations.clients.real_http.accounts import RealAccountsClient
from src.integrations.clients.real_http.payments import RealPaymentsClient
from src.onboarding.checkout import DeferredCheckoutWidget
from src.onboarding.orchestrator import OnboardingOrchestrator
from src.onboarding.state_manager import OnboardingSessionManager
from src.utils.config_loader import OnboardingConfig, load_onboarding_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

error_handler = ErrorHandler()

# Initialize FastAPI app
app = FastAPI(
    title="Student Onboarding API",
    description="Multi-step student onboarding with checkout payment and account creation",
    version="1.0.0",
    dependencies=[Depends(api_key_protection)],  # protect everything by default
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================


def _should_use_real_integrations() -> bool:
    mode = os.getenv("INTEGRATIONS_MODE", "").strip().lower()
    if mode in {"real", "live"}:
        return True
    if mode in {"mock", "test"}:
        return False
    return bool(os.getenv("PAYMENTS_API_URL") or os.getenv("AUTH_API_URL"))


def build_session_manager(config: OnboardingConfig) -> OnboardingSessionManager:
    """Choose mock or real integration clients in one place and wire them into new sessions."""
    if _should_use_real_integrations():
        gateway = RealPaymentsClient(
            base_url=config.gateway.base_url,
            checkout_script_url=config.checkout.script_url,
            timeout_seconds=config.gateway.timeout_seconds,
        )
        accounts = RealAccountsClient(base_url=config.accounts.base_url, timeout_seconds=config.accounts.timeout_seconds)
        logger.info("Using real payment and account integrations")
    else:
        gateway = MockPaymentsClient()
        accounts = MockAccountsClient()
        logger.info("Using mock payment and account integrations")

    def _factory(widget: DeferredCheckoutWidget) -> OnboardingOrchestrator:
        return OnboardingOrchestrator(gateway, widget, accounts, config)

    return OnboardingSessionManager(_factory)


# Load onboarding configuration once per process
onboarding_cfg = load_onboarding_config()
session_manager = build_session_manager(onboarding_cfg)

onboarding_module.session_manager = session_manager
onboarding_module.config = onboarding_cfg
app.include_router(onboarding_router, prefix="/api/v1/onboarding", tags=["Onboarding"])


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    payload = error_handler.handle_exception(exc, context={"path": request.url.path, "method": request.method})
    return JSONResponse(status_code=500, content=payload)


@app.get("/", tags=["Health"])
async def root():
    return {"service": "Student Onboarding API", "status": "healthy", "version": "1.0.0", "timestamp": datetime.now().isoformat()}


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "integrations": "real" if _should_use_real_integrations() else "mock",
        "active_sessions": len(session_manager),
        "timestamp": datetime.now().isoformat(),
    }

