"""Pydantic schemas."""

from vcnotebook.schemas.config import (
    AnalyticsConfigResponse,
    BackendConfigResponse,
    IdentityConfigResponse,
)
from vcnotebook.schemas.note import Attachment, Note
from vcnotebook.schemas.payments import (
    CheckoutRequest,
    CheckoutResponse,
    ErrorResponse,
    SubscriptionStatusResponse,
)
from vcnotebook.schemas.webhooks import (
    IgnoredEvent,
    SubscriptionActivated,
    SubscriptionDeactivated,
    WebhookEvent,
    parse_webhook_event,
)

__all__ = [
    "AnalyticsConfigResponse",
    "BackendConfigResponse",
    "IdentityConfigResponse",
    "Attachment",
    "Note",
    "CheckoutRequest",
    "CheckoutResponse",
    "ErrorResponse",
    "SubscriptionStatusResponse",
    "IgnoredEvent",
    "SubscriptionActivated",
    "SubscriptionDeactivated",
    "WebhookEvent",
    "parse_webhook_event",
]
