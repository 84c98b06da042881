"""Client for the VCNotebook proxy server."""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from vcnotebook.schemas.config import (
    AnalyticsConfigResponse,
    BackendConfigResponse,
    IdentityConfigResponse,
)
from vcnotebook.schemas.payments import CheckoutResponse, SubscriptionStatusResponse

logger = logging.getLogger(__name__)


class ProxyRequestError(Exception):
    """A proxy endpoint could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProxyClient:
    """Reads configuration and premium state from the proxy server."""

    class Endpoint:
        BACKEND_CONFIG = "/api/config"
        IDENTITY_CONFIG = "/api/firebase-config"
        ANALYTICS_CONFIG = "/api/ga-config"
        CHECKOUT_CREATE = "/api/checkout/create"
        SUBSCRIPTION_STATUS = "/api/user/subscription-status"

    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.http_client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    async def close(self):
        await self.http_client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        try:
            response = await self.http_client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ProxyRequestError(f"{type(e).__name__}: {e}") from e

        if response.is_error:
            raise ProxyRequestError(self._error_message(response), status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ProxyRequestError("Proxy returned a non-JSON body", response.status_code) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if not isinstance(body, dict):
            return str(body)
        return str(body.get("error") or body.get("detail") or response.reason_phrase)

    async def _get_model(self, path, model, **kwargs):
        data = await self._request("GET", path, **kwargs)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ProxyRequestError(f"Unexpected response from {path}") from e

    async def get_backend_config(self) -> BackendConfigResponse:
        return await self._get_model(self.Endpoint.BACKEND_CONFIG, BackendConfigResponse)

    async def get_identity_config(self) -> IdentityConfigResponse:
        return await self._get_model(self.Endpoint.IDENTITY_CONFIG, IdentityConfigResponse)

    async def get_analytics_config(self) -> AnalyticsConfigResponse:
        """Analytics is optional; failures read as disabled."""
        try:
            return await self._get_model(self.Endpoint.ANALYTICS_CONFIG, AnalyticsConfigResponse)
        except ProxyRequestError as e:
            logger.warning(f"Error loading analytics configuration: {e}")
            return AnalyticsConfigResponse()

    async def get_subscription_status(self, user_id: str) -> SubscriptionStatusResponse:
        return await self._get_model(
            self.Endpoint.SUBSCRIPTION_STATUS,
            SubscriptionStatusResponse,
            params={"userId": user_id},
        )

    async def create_checkout(self, user_email: str, user_id: str) -> Optional[str]:
        data = await self._request(
            "POST",
            self.Endpoint.CHECKOUT_CREATE,
            json={"userEmail": user_email, "userId": user_id},
        )
        try:
            return CheckoutResponse.model_validate(data).checkout_url
        except ValidationError as e:
            raise ProxyRequestError(f"Unexpected response from {self.Endpoint.CHECKOUT_CREATE}") from e
