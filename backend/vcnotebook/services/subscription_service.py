"""Subscription status reads and webhook-driven upserts."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vcnotebook.models.subscription import SubscriptionStatus, UserSubscription
from vcnotebook.schemas.payments import SubscriptionStatusResponse
from vcnotebook.schemas.webhooks import (
    IgnoredEvent,
    SubscriptionActivated,
    SubscriptionDeactivated,
    WebhookEvent,
)

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Reads and writes the `user_subscriptions` table."""

    async def get_subscription(
        self, db: AsyncSession, user_id: str
    ) -> Optional[UserSubscription]:
        result = await db.execute(
            select(UserSubscription).where(UserSubscription.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_status(self, db: AsyncSession, user_id: str) -> SubscriptionStatusResponse:
        """Premium flag for a user; users without a row are not premium."""
        subscription = await self.get_subscription(db, user_id)
        if subscription is None:
            return SubscriptionStatusResponse()
        return SubscriptionStatusResponse(
            is_premium=subscription.is_premium,
            subscription_status=subscription.subscription_status,
            updated_at=subscription.updated_at,
        )

    async def upsert(
        self,
        db: AsyncSession,
        user_id: str,
        user_email: Optional[str],
        is_premium: bool,
        subscription_id: Optional[str] = None,
        payment_id: Optional[str] = None,
    ) -> UserSubscription:
        """Insert or update the row keyed by user id.

        Provider ids are only overwritten when the event carries them.
        """
        status = SubscriptionStatus.ACTIVE if is_premium else SubscriptionStatus.INACTIVE
        now = datetime.now(timezone.utc)

        subscription = await self.get_subscription(db, user_id)
        if subscription is None:
            subscription = UserSubscription(user_id=user_id, created_at=now)
            db.add(subscription)
            action = "created"
        else:
            action = "updated"

        if user_email:
            subscription.user_email = user_email
        subscription.is_premium = is_premium
        subscription.subscription_status = status.value
        subscription.updated_at = now
        if subscription_id:
            subscription.subscription_id = subscription_id
        if payment_id:
            subscription.payment_id = payment_id

        await db.commit()
        await db.refresh(subscription)

        logger.info(
            f"User subscription {action}",
            extra={"user_id": user_id, "is_premium": is_premium, "status": status.value},
        )
        return subscription

    async def apply_event(
        self, db: AsyncSession, event: WebhookEvent
    ) -> Optional[UserSubscription]:
        """Apply a parsed webhook event; ignored events change nothing."""
        if isinstance(event, SubscriptionActivated):
            return await self.upsert(
                db,
                user_id=event.user_id,
                user_email=event.user_email,
                is_premium=True,
                subscription_id=event.subscription_id,
                payment_id=event.payment_id,
            )
        if isinstance(event, SubscriptionDeactivated):
            return await self.upsert(
                db,
                user_id=event.user_id,
                user_email=event.user_email,
                is_premium=False,
                subscription_id=event.subscription_id,
            )
        if isinstance(event, IgnoredEvent):
            logger.info(
                "Webhook event ignored",
                extra={"event_type": event.event_type, "reason": event.reason},
            )
        return None


subscription_service = SubscriptionService()
