"""Premium checkout, subscription status and payment webhooks."""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from vcnotebook.core.config import settings
from vcnotebook.core.database import get_db
from vcnotebook.core.errors import ProxyError
from vcnotebook.core.rate_limit import RATE_LIMITS, limiter
from vcnotebook.core.security import WebhookVerificationError, verify_webhook
from vcnotebook.schemas.payments import (
    CheckoutRequest,
    CheckoutResponse,
    ErrorResponse,
    SubscriptionStatusResponse,
)
from vcnotebook.schemas.webhooks import parse_webhook_event
from vcnotebook.services.payment_service import PaymentService, get_payment_service
from vcnotebook.services.subscription_service import subscription_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/checkout/create",
    response_model=CheckoutResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMITS["checkout_create"])
async def create_checkout(
    request: Request,
    checkout_in: CheckoutRequest,
    payment_service: PaymentService = Depends(get_payment_service),
) -> CheckoutResponse:
    """Create a hosted checkout session for the premium upgrade."""
    if not checkout_in.user_email or not checkout_in.user_id:
        logger.warning(
            "Checkout request missing fields",
            extra={
                "has_email": bool(checkout_in.user_email),
                "has_user_id": bool(checkout_in.user_id),
            },
        )
        raise ProxyError(400, "User email and ID are required")

    checkout_url = await payment_service.create_checkout(
        user_email=checkout_in.user_email,
        user_id=checkout_in.user_id,
        site_url=str(request.base_url),
    )
    return CheckoutResponse(checkout_url=checkout_url)


@router.get(
    "/user/subscription-status",
    response_model=SubscriptionStatusResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_subscription_status(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
) -> SubscriptionStatusResponse:
    """Premium flag for a user."""
    if not user_id:
        raise ProxyError(400, "User ID is required")
    return await subscription_service.get_status(db, user_id)


@router.post("/payments/webhook")
@limiter.limit(RATE_LIMITS["webhook"])
async def payment_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Record subscription changes sent by the payment provider.

    Any parsed delivery is acknowledged with 200, recognized or not, so the
    provider does not keep retrying events we have no use for.
    """
    body = await request.body()

    if settings.webhook_verification_enabled:
        signature = request.headers.get("webhook-signature") or request.headers.get(
            "x-webhook-signature"
        )
        msg_id = request.headers.get("webhook-id")
        timestamp = request.headers.get("webhook-timestamp")
        if not (signature and msg_id and timestamp):
            logger.warning("Webhook rejected: missing signature headers")
            raise ProxyError(400, "Missing webhook signature")
        try:
            verify_webhook(body, msg_id, timestamp, signature)
        except WebhookVerificationError as e:
            logger.warning("Webhook rejected: %s", e)
            raise ProxyError(401, "Invalid webhook signature", str(e)) from e
    else:
        logger.debug("No webhook secret configured - skipping signature verification")

    try:
        payload = json.loads(body)
    except ValueError as e:
        raise ProxyError(400, "Invalid JSON payload") from e

    event = parse_webhook_event(payload)
    logger.info(
        "Payment webhook received",
        extra={"event": type(event).__name__, "event_type": event.event_type},
    )
    await subscription_service.apply_event(db, event)

    return {"received": True}
