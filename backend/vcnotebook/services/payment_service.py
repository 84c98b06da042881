"""Checkout session creation against the payment provider."""

import logging
from typing import Optional

import httpx

from vcnotebook.core.config import settings
from vcnotebook.core.errors import ProxyError

logger = logging.getLogger(__name__)

# The provider requires a billing block on payment links; the customer
# replaces it on the hosted checkout page.
DEFAULT_BILLING = {
    "city": "New York",
    "country": "US",
    "state": "NY",
    "street": "123 Main St",
    "zipcode": "10001",
}


class PaymentService:
    """Create hosted checkout sessions for the premium upgrade."""

    CHECKOUT_PATH = "/checkouts"

    def __init__(
        self,
        api_key: Optional[str] = None,
        product_id: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key if api_key is not None else settings.DODO_PAYMENTS_API_KEY
        self.product_id = product_id if product_id is not None else settings.PRODUCT_ID
        self.base_url = (base_url or settings.DODO_PAYMENTS_BASE_URL).rstrip("/")
        self.transport = transport
        self.timeout = timeout

    def _get_http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )

    def build_checkout_payload(self, user_email: str, user_id: str, site_url: str) -> dict:
        site_url = site_url.rstrip("/")
        return {
            "payment_link": True,
            "billing": dict(DEFAULT_BILLING),
            "customer": {
                "email": user_email,
                "name": user_email.split("@")[0],
            },
            "product_cart": [{"product_id": self.product_id, "quantity": 1}],
            "return_url": f"{site_url}/",
            "success_url": f"{site_url}/payment-success",
            "cancel_url": f"{site_url}/",
            "metadata": {
                "user_id": user_id,
                "user_email": user_email,
                "product": "premium_upgrade",
            },
        }

    async def create_checkout(self, user_email: str, user_id: str, site_url: str) -> Optional[str]:
        """Create a checkout session and return the URL to redirect the user to."""
        if not self.api_key:
            logger.error("DODO_PAYMENTS_API_KEY environment variable not set")
            raise ProxyError(
                500,
                "Payment system not configured",
                "DODO_PAYMENTS_API_KEY environment variable is missing",
            )
        if not self.product_id:
            logger.error("PRODUCT_ID environment variable not set")
            raise ProxyError(
                500,
                "Product not configured",
                "PRODUCT_ID environment variable is missing",
            )

        payload = self.build_checkout_payload(user_email, user_id, site_url)
        logger.info(
            "Creating checkout session",
            extra={"user_id": user_id, "product_id": self.product_id},
        )

        try:
            async with self._get_http_client() as client:
                response = await client.post(self.CHECKOUT_PATH, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Checkout request failed: {type(e).__name__}: {e}")
            raise ProxyError(500, "Internal server error", str(e)) from e

        if response.is_error:
            logger.error(
                "Payment provider rejected checkout",
                extra={"status": response.status_code, "body": response.text[:500]},
            )
            raise ProxyError(
                500,
                "Failed to create checkout",
                response.text,
                upstream_status=response.status_code,
            )

        data = response.json()
        checkout_url = data.get("payment_url") or data.get("checkout_url") or data.get("url")
        logger.info("Checkout session created", extra={"user_id": user_id})
        return checkout_url


def get_payment_service() -> PaymentService:
    """Dependency returning the payment service."""
    return PaymentService()
