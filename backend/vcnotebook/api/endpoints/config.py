"""Provider configuration forwarded to clients."""

from fastapi import APIRouter, Request

from vcnotebook.core.config import settings
from vcnotebook.core.rate_limit import RATE_LIMITS, limiter
from vcnotebook.schemas.config import (
    AnalyticsConfigResponse,
    BackendConfigResponse,
    IdentityConfigResponse,
)

router = APIRouter()


@router.get("/config", response_model=BackendConfigResponse)
@limiter.limit(RATE_LIMITS["config_read"])
async def get_backend_config(request: Request) -> BackendConfigResponse:
    """Backend-as-a-service URL and keys."""
    return BackendConfigResponse(
        supabase_url=settings.SUPABASE_URL,
        supabase_anon_key=settings.SUPABASE_ANON_KEY,
        supabase_service_key=(
            settings.SUPABASE_SERVICE_ROLE_KEY if settings.FORWARD_SERVICE_ROLE_KEY else None
        ),
    )


@router.get("/firebase-config", response_model=IdentityConfigResponse)
@limiter.limit(RATE_LIMITS["config_read"])
async def get_identity_config(request: Request) -> IdentityConfigResponse:
    """Identity provider web configuration."""
    return IdentityConfigResponse(
        api_key=settings.FIREBASE_API_KEY,
        auth_domain=settings.FIREBASE_AUTH_DOMAIN,
        project_id=settings.FIREBASE_PROJECT_ID,
        storage_bucket=settings.FIREBASE_STORAGE_BUCKET,
        messaging_sender_id=settings.FIREBASE_MESSAGING_SENDER_ID,
        app_id=settings.FIREBASE_APP_ID,
    )


@router.get("/ga-config", response_model=AnalyticsConfigResponse)
@limiter.limit(RATE_LIMITS["config_read"])
async def get_analytics_config(request: Request) -> AnalyticsConfigResponse:
    return AnalyticsConfigResponse(
        measurement_id=settings.GA_MEASUREMENT_ID or None,
        enabled=settings.analytics_enabled,
    )
