"""Errors rendered as `{error, details}` JSON bodies."""

from typing import Optional


class ProxyError(Exception):
    """An expected failure of a proxy endpoint, with its HTTP status."""

    def __init__(
        self,
        status_code: int,
        error: str,
        details: Optional[str] = None,
        upstream_status: Optional[int] = None,
    ):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details
        self.upstream_status = upstream_status

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        if self.upstream_status is not None:
            body["status"] = self.upstream_status
        return body
