"""Checkout and subscription status schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CheckoutRequest(BaseModel):
    """Body of POST /api/checkout/create.

    Fields are optional at the schema level so a missing one produces the
    `{error: ...}` 400 body rather than a validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_email: Optional[str] = Field(None, alias="userEmail")
    user_id: Optional[str] = Field(None, alias="userId")


class CheckoutResponse(BaseModel):
    checkout_url: Optional[str] = None


class SubscriptionStatusResponse(BaseModel):
    """Premium flag as seen by clients."""

    is_premium: bool = False
    subscription_status: str = "inactive"
    updated_at: Optional[datetime] = None


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
    status: Optional[int] = None
