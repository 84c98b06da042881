"""Premium tier status and checkout redirect."""

import logging
from datetime import datetime
from typing import Optional

from vcnotebook.client.messages import Notifier
from vcnotebook.client.proxy import ProxyClient, ProxyRequestError

logger = logging.getLogger(__name__)


class PremiumController:
    """Tracks whether the signed-in user has an active subscription."""

    def __init__(self, proxy: ProxyClient, notifier: Optional[Notifier] = None):
        self.proxy = proxy
        self.notifier = notifier or Notifier()
        self.is_premium = False
        self.subscription_status = "inactive"
        self.updated_at: Optional[datetime] = None

    async def refresh(self, user_id: str) -> bool:
        """Re-read the subscription from the proxy. Failures read as not premium."""
        try:
            status = await self.proxy.get_subscription_status(user_id)
        except ProxyRequestError as e:
            logger.error(f"Error checking premium status: {e}")
            self.is_premium = False
            self.notifier.error("Could not check premium status")
            return False

        self.is_premium = status.is_premium
        self.subscription_status = status.subscription_status
        self.updated_at = status.updated_at
        return self.is_premium

    async def start_checkout(self, email: str, user_id: str) -> Optional[str]:
        """Checkout URL to send the user to, or None after posting an error."""
        if not email or not user_id:
            self.notifier.error("Please sign in to upgrade")
            return None
        try:
            url = await self.proxy.create_checkout(email, user_id)
        except ProxyRequestError as e:
            logger.error(f"Error creating checkout: {e}", extra={"status": e.status_code})
            self.notifier.error(f"Could not start checkout: {e}")
            return None
        if not url:
            self.notifier.error("Could not start checkout: no checkout URL returned")
            return None
        return url
