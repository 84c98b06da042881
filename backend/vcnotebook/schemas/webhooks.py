"""Payment webhook events.

Deliveries follow the payment provider's typed envelope:

    {"business_id": ..., "type": "subscription.active", "timestamp": ...,
     "data": {"payload_type": "Subscription", "status": "active",
              "subscription_id": ..., "customer": {"email": ...},
              "metadata": {"user_id": ...}}}

Each delivery is parsed once into one of the event variants below. Older
shapes (a top-level `event` field, or a top-level `payload_type` with no
`type`) are not part of that contract and come out as `IgnoredEvent`.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError


class WebhookCustomer(BaseModel):
    model_config = ConfigDict(extra="allow")

    customer_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None


class WebhookData(BaseModel):
    model_config = ConfigDict(extra="allow")

    payload_type: Optional[str] = None
    status: Optional[str] = None
    subscription_id: Optional[str] = None
    payment_id: Optional[str] = None
    customer: Optional[WebhookCustomer] = None
    metadata: Dict[str, Any] = {}


class WebhookEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    business_id: Optional[str] = None
    timestamp: Optional[str] = None
    data: WebhookData


@dataclass(frozen=True)
class SubscriptionActivated:
    """The user paid or the subscription became active: grant premium."""

    event_type: str
    user_id: str
    user_email: Optional[str] = None
    subscription_id: Optional[str] = None
    payment_id: Optional[str] = None


@dataclass(frozen=True)
class SubscriptionDeactivated:
    """The subscription ended: revoke premium."""

    event_type: str
    user_id: str
    user_email: Optional[str] = None
    subscription_id: Optional[str] = None


@dataclass(frozen=True)
class IgnoredEvent:
    """A delivery that carries no subscription change for us."""

    event_type: Optional[str]
    reason: str


WebhookEvent = Union[SubscriptionActivated, SubscriptionDeactivated, IgnoredEvent]

ACTIVATION_EVENTS = {
    "subscription.active",
    "subscription.renewed",
}
DEACTIVATION_EVENTS = {
    "subscription.cancelled",
    "subscription.expired",
    "subscription.failed",
    "subscription.on_hold",
}
PAYMENT_SUCCEEDED = "payment.succeeded"


def parse_webhook_event(payload: Any) -> WebhookEvent:
    """Map a decoded JSON payload onto exactly one event variant."""
    if not isinstance(payload, dict) or "type" not in payload:
        return IgnoredEvent(event_type=None, reason="unrecognized payload format")

    try:
        envelope = WebhookEnvelope.model_validate(payload)
    except ValidationError:
        return IgnoredEvent(event_type=str(payload.get("type")), reason="malformed event data")

    event_type = envelope.type
    data = envelope.data
    user_id = data.metadata.get("user_id")
    email = data.customer.email if data.customer else None

    is_activation = event_type in ACTIVATION_EVENTS or (
        event_type == PAYMENT_SUCCEEDED and data.status in (None, "succeeded")
    )
    is_deactivation = event_type in DEACTIVATION_EVENTS

    if not (is_activation or is_deactivation):
        return IgnoredEvent(event_type=event_type, reason="event does not change subscription")

    if not user_id:
        return IgnoredEvent(event_type=event_type, reason="metadata.user_id missing")

    if is_activation:
        return SubscriptionActivated(
            event_type=event_type,
            user_id=str(user_id),
            user_email=email,
            subscription_id=data.subscription_id,
            payment_id=data.payment_id,
        )

    return SubscriptionDeactivated(
        event_type=event_type,
        user_id=str(user_id),
        user_email=email,
        subscription_id=data.subscription_id,
    )
