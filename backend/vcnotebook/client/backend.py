"""Hosted backend gateway: REST tables and object storage over httpx."""

import logging
from typing import Any, Dict, List, Optional, Type
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

# HTTP statuses meaning our credentials are not accepted
CREDENTIAL_STATUSES = {401, 403}


class BackendError(Exception):
    """A request to the hosted backend failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    @property
    def is_offline_trigger(self) -> bool:
        """Whether this failure should switch the session to offline mode."""
        return self.status_code in CREDENTIAL_STATUSES


class BackendUnavailableError(BackendError):
    """The backend could not be reached at all."""

    @property
    def is_offline_trigger(self) -> bool:
        return True


def parse_row(model: Type[BaseModel], row: Any) -> Any:
    """Validate one returned row; a malformed row is a backend error."""
    try:
        return model.model_validate(row)
    except ValidationError as e:
        raise BackendError(f"Unexpected {model.__name__} row from backend") from e


def parse_rows(model: Type[BaseModel], rows: Any) -> List[Any]:
    """Validate returned rows, skipping and logging malformed ones."""
    if not isinstance(rows, list):
        raise BackendError(f"Expected a list of {model.__name__} rows")
    parsed = []
    for row in rows:
        try:
            parsed.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {model.__name__} row: {e.error_count()} errors")
    return parsed


class HostedBackend:
    """Thin client for the backend-as-a-service REST and storage APIs."""

    REST_PREFIX = "/rest/v1"
    STORAGE_PREFIX = "/storage/v1"

    def __init__(
        self,
        url: str,
        api_key: str,
        access_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.url = url.rstrip("/")
        self.http_client = httpx.AsyncClient(
            base_url=self.url,
            timeout=timeout,
            transport=transport,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {access_token or api_key}",
            },
        )

    async def close(self):
        """Close HTTP client."""
        await self.http_client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self.http_client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.warning(f"Backend unreachable: {type(e).__name__}: {e}")
            raise BackendUnavailableError(str(e) or type(e).__name__) from e

        if response.is_error:
            message, code = self._error_details(response)
            logger.warning(
                "Backend request failed",
                extra={"method": method, "path": path, "status": response.status_code, "code": code},
            )
            raise BackendError(message, status_code=response.status_code, code=code)
        return response

    @staticmethod
    def _error_details(response: httpx.Response) -> tuple:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase, None
        if not isinstance(body, dict):
            return str(body), None
        message = body.get("message") or body.get("error") or response.reason_phrase
        code = body.get("code") or body.get("statusCode")
        return message, str(code) if code is not None else None

    @staticmethod
    def _eq_filters(filters: Optional[Dict[str, Any]]) -> Dict[str, str]:
        return {column: f"eq.{value}" for column, value in (filters or {}).items()}

    # ========== Tables ==========

    async def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
        descending: bool = True,
    ) -> List[dict]:
        params = {"select": "*", **self._eq_filters(filters)}
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        response = await self._request("GET", f"{self.REST_PREFIX}/{table}", params=params)
        return response.json() or []

    async def text_search(
        self,
        table: str,
        column: str,
        query: str,
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
    ) -> List[dict]:
        """Full-text search on a tsvector column."""
        params = {"select": "*", **self._eq_filters(filters), column: f"fts.{query}"}
        if order:
            params["order"] = f"{order}.desc"
        response = await self._request("GET", f"{self.REST_PREFIX}/{table}", params=params)
        return response.json() or []

    async def insert(self, table: str, rows: List[dict]) -> List[dict]:
        """Insert rows and return them as stored."""
        response = await self._request(
            "POST",
            f"{self.REST_PREFIX}/{table}",
            json=rows,
            headers={"Prefer": "return=representation"},
        )
        return response.json() or []

    async def update(self, table: str, values: dict, filters: Dict[str, Any]) -> List[dict]:
        response = await self._request(
            "PATCH",
            f"{self.REST_PREFIX}/{table}",
            params=self._eq_filters(filters),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return response.json() or []

    async def delete(self, table: str, filters: Dict[str, Any]) -> None:
        await self._request("DELETE", f"{self.REST_PREFIX}/{table}", params=self._eq_filters(filters))

    # ========== Storage ==========

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        await self._request(
            "POST",
            f"{self.STORAGE_PREFIX}/object/{bucket}/{quote(path)}",
            content=data,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )
        return path

    async def remove(self, bucket: str, paths: List[str]) -> None:
        await self._request(
            "DELETE",
            f"{self.STORAGE_PREFIX}/object/{bucket}",
            json={"prefixes": paths},
        )

    async def create_signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        """Time-limited read URL for a private object."""
        response = await self._request(
            "POST",
            f"{self.STORAGE_PREFIX}/object/sign/{bucket}/{quote(path)}",
            json={"expiresIn": expires_in},
        )
        signed = response.json().get("signedURL") or response.json().get("signedUrl")
        if not signed:
            raise BackendError("Signed URL missing from storage response")
        if signed.startswith("http"):
            return signed
        return f"{self.url}{self.STORAGE_PREFIX}{signed}"
