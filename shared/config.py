"""
Shared configuration management for the ContactsManager server SDK.
"""

from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

SERVER_BASE_URL = "https://api.contactsmanager.io"
DEFAULT_TOKEN_TTL = 86400  # 24 hours
DEFAULT_TIMEOUT = 10.0


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CONTACTSMANAGER_",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class ContactsSettings(BaseConfig):
    """Credentials and remote API settings."""

    api_key: str = Field(default="")
    api_secret: SecretStr = Field(default=SecretStr(""))
    org_id: str = Field(default="")

    # Webhook verification is optional; services that receive webhooks set it
    webhook_secret: Optional[SecretStr] = Field(default=None)

    # Remote API
    base_url: str = Field(default=SERVER_BASE_URL)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    token_ttl: int = Field(default=DEFAULT_TOKEN_TTL, gt=0)


class ServiceConfig(ContactsSettings):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    # Callers of POST /tokens must present this in X-Service-Token;
    # token issuance over HTTP is disabled while it is unset
    service_token: Optional[SecretStr] = Field(default=None)
    max_token_ttl: int = Field(default=7 * DEFAULT_TOKEN_TTL, gt=0)

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_settings(**overrides) -> ContactsSettings:
    """Load SDK settings from the environment and .env file."""
    return ContactsSettings(**overrides)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
