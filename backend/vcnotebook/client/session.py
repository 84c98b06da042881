"""Client session: signed-in user and backend mode."""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from vcnotebook.client.backend import BackendError, HostedBackend
from vcnotebook.client.local_store import LocalNoteStore
from vcnotebook.client.proxy import ProxyClient, ProxyRequestError
from vcnotebook.core.config import ClientSettings

logger = logging.getLogger(__name__)


class BackendMode(str, enum.Enum):
    """Where data operations go.

    UNINITIALIZED -> HOSTED -> OFFLINE, or UNINITIALIZED -> OFFLINE.
    OFFLINE is terminal for the lifetime of the session.
    """

    UNINITIALIZED = "uninitialized"
    HOSTED = "hosted"
    OFFLINE = "offline"


@dataclass(frozen=True)
class AppUser:
    """The user as known to the identity provider."""

    uid: str
    email: str = ""
    display_name: Optional[str] = None

    @property
    def name(self) -> str:
        if self.display_name:
            return self.display_name
        if self.email:
            return self.email.split("@")[0]
        return "User"


class ClientSession:
    """Per-user state shared by the note, attachment and premium controllers."""

    def __init__(
        self,
        user: AppUser,
        proxy: ProxyClient,
        local_store: LocalNoteStore,
        settings: Optional[ClientSettings] = None,
        access_token: Optional[str] = None,
        backend_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.user = user
        self.proxy = proxy
        self.local_store = local_store
        self.settings = settings or ClientSettings()
        self.access_token = access_token
        self.backend_transport = backend_transport
        self.backend: Optional[HostedBackend] = None
        self.mode = BackendMode.UNINITIALIZED
        self.offline_reason: Optional[str] = None

    @classmethod
    def from_settings(
        cls,
        user: AppUser,
        settings: Optional[ClientSettings] = None,
        access_token: Optional[str] = None,
    ) -> "ClientSession":
        settings = settings or ClientSettings()
        return cls(
            user=user,
            proxy=ProxyClient(settings.API_BASE_URL, timeout=settings.HTTP_TIMEOUT),
            local_store=LocalNoteStore(settings.LOCAL_STORE_DIR),
            settings=settings,
            access_token=access_token,
        )

    @property
    def user_id(self) -> str:
        return self.user.uid

    @property
    def is_hosted(self) -> bool:
        return self.mode == BackendMode.HOSTED and self.backend is not None

    @property
    def is_offline(self) -> bool:
        return self.mode == BackendMode.OFFLINE

    async def connect(self) -> BackendMode:
        """Resolve the backend mode from the proxy's backend configuration."""
        if self.mode != BackendMode.UNINITIALIZED:
            return self.mode

        try:
            config = await self.proxy.get_backend_config()
        except ProxyRequestError as e:
            self.go_offline(f"backend configuration unavailable: {e}")
            return self.mode

        if not config.is_complete:
            self.go_offline("backend credentials missing")
            return self.mode

        self.backend = HostedBackend(
            config.supabase_url,
            config.supabase_anon_key,
            access_token=self.access_token,
            transport=self.backend_transport,
            timeout=self.settings.HTTP_TIMEOUT,
        )
        self.mode = BackendMode.HOSTED
        logger.info("Hosted backend configured", extra={"user_id": self.user_id})
        return self.mode

    async def ensure_ready(self) -> BackendMode:
        if self.mode == BackendMode.UNINITIALIZED:
            return await self.connect()
        return self.mode

    def go_offline(self, reason: str) -> None:
        """Switch to local storage for the rest of the session."""
        if self.mode == BackendMode.OFFLINE:
            return
        logger.warning(
            "Switching session to offline mode",
            extra={"user_id": self.user_id, "reason": reason, "previous_mode": self.mode.value},
        )
        self.mode = BackendMode.OFFLINE
        self.offline_reason = reason

    def handle_backend_error(self, error: BackendError) -> None:
        """Go offline on transport or credential failures; other errors keep the mode."""
        if error.is_offline_trigger:
            self.go_offline(f"{type(error).__name__}: {error.message}")

    async def close(self) -> None:
        if self.backend is not None:
            await self.backend.close()
        await self.proxy.close()
