"""Configuration payloads forwarded to clients."""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for payloads whose wire keys are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BackendConfigResponse(CamelModel):
    """Backend-as-a-service URL and keys."""

    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    supabase_service_key: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


class IdentityConfigResponse(CamelModel):
    """Identity provider (Firebase web SDK) configuration."""

    api_key: Optional[str] = None
    auth_domain: Optional[str] = None
    project_id: Optional[str] = None
    storage_bucket: Optional[str] = None
    messaging_sender_id: Optional[str] = None
    app_id: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """Sign-in needs at least the key, auth domain and project."""
        return bool(self.api_key and self.auth_domain and self.project_id)


class AnalyticsConfigResponse(CamelModel):
    measurement_id: Optional[str] = None
    enabled: bool = False
