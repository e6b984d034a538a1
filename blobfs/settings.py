"""Centralized blobfs settings powered by Pydantic.

Environment matrix:

| Section | Environment Variable               | Default | Purpose                                        |
|---------|------------------------------------|---------|------------------------------------------------|
| Blob    | `AZURE_STORAGE_CONNECTION_STRING`  | `None`  | Full connection string (takes precedence)      |
| Blob    | `AZURE_STORAGE_ACCOUNT`            | `None`  | Storage account name                           |
| Blob    | `AZURE_STORAGE_ACCOUNT_KEY`        | `None`  | Shared key; omit to use DefaultAzureCredential |
| Blob    | `AZURE_STORAGE_ACCOUNT_URL`        | `None`  | Explicit endpoint (e.g. Azurite)               |
| Blob    | `AZURE_STORAGE_CONTAINER_NAME`     | `""`    | Target container for every blob operation      |
| Blob    | `BLOB_CREATE_CONTAINER`            | `false` | Create the container when the adapter is built |
| Blob    | `BLOB_DETECT_CONTENT_TYPE`         | `true`  | Sniff MIME type of written content             |

The settings objects source environment variables when instantiated and are
intended to be treated as read-only.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class _SettingsBase(BaseSettings):
    """Common configuration for BaseSettings subclasses."""

    model_config = SettingsConfigDict(
        env_prefix="",
        populate_by_name=True,
        extra="ignore",
        case_sensitive=True,
        frozen=True,
    )


class BlobSettings(_SettingsBase):
    """Azure Blob Storage connection and adapter behaviour."""

    connection_string: str | None = Field(
        default=None, alias="AZURE_STORAGE_CONNECTION_STRING"
    )
    account_name: str | None = Field(default=None, alias="AZURE_STORAGE_ACCOUNT")
    account_key: str | None = Field(default=None, alias="AZURE_STORAGE_ACCOUNT_KEY")
    account_url: str | None = Field(default=None, alias="AZURE_STORAGE_ACCOUNT_URL")
    container: str = Field(default="", alias="AZURE_STORAGE_CONTAINER_NAME")
    create_container: bool = Field(default=False, alias="BLOB_CREATE_CONTAINER")
    detect_content_type: bool = Field(default=True, alias="BLOB_DETECT_CONTENT_TYPE")

    @field_validator(
        "connection_string", "account_name", "account_key", "account_url", mode="before"
    )
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("container", mode="before")
    @classmethod
    def _strip_container(cls, value: str | None) -> str:
        return (value or "").strip().strip("/")

    @computed_field
    @property
    def endpoint(self) -> str | None:
        if self.account_url:
            return self.account_url.rstrip("/")
        if self.account_name:
            return f"https://{self.account_name}.blob.core.windows.net"
        return None

    @computed_field
    @property
    def configured(self) -> bool:
        return bool(self.connection_string or self.account_name or self.account_url)


class Settings(BaseModel):
    """Aggregate accessor for domain-specific settings."""

    blob: BlobSettings = Field(default_factory=BlobSettings)

    model_config = {
        "frozen": True,
        "arbitrary_types_allowed": True,
    }


def get_settings() -> Settings:
    """Instantiate settings from the current environment."""
    return Settings()


def reload_settings() -> Settings:
    """Alias for get_settings to maintain a consistent API."""
    return get_settings()


def get_blob_settings() -> BlobSettings:
    return get_settings().blob


__all__ = [
    "Settings",
    "BlobSettings",
    "get_settings",
    "reload_settings",
    "get_blob_settings",
]
