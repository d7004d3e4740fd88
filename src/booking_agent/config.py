from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the booking agent server."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Model provider. "gemini" consumes inline file references, "openai" consumes URLs.
    model_provider: Literal["gemini", "openai"] = Field(default="gemini", alias="MODEL_PROVIDER")
    google_api_key: str | None = Field(default=None, alias="GOOGLE_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-pro", alias="GEMINI_MODEL")
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o", alias="OPENAI_MODEL")
    model_timeout_seconds: int = Field(default=60, alias="MODEL_TIMEOUT_SECONDS")
    model_max_retries: int = Field(default=2, alias="MODEL_MAX_RETRIES")

    # Public app URL for converting relative attachment URLs to absolute
    public_base_url: str = Field(default="http://localhost:3000", alias="PUBLIC_BASE_URL")

    # Optional override of the modular system prompt
    system_prompt: str | None = Field(default=None, alias="SYSTEM_PROMPT")

    store_backend: Literal["firestore", "memory"] = Field(default="firestore", alias="STORE_BACKEND")
    firebase_service_account_key: str | None = Field(
        default=None, alias="FIREBASE_SERVICE_ACCOUNT_KEY"
    )

    # Session provider
    auth_backend: Literal["firebase", "hmac"] = Field(default="firebase", alias="AUTH_BACKEND")
    auth_shared_secret: str = Field(default="", alias="AUTH_SHARED_SECRET")
    auth_max_skew_seconds: int = Field(default=300, alias="AUTH_MAX_SKEW_SECONDS")

    # Uploads
    blob_store_backend: Literal["local", "gemini"] = Field(default="local", alias="BLOB_STORE_BACKEND")
    upload_dir: str = Field(default="public/uploads", alias="UPLOAD_DIR")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    # When off, the booking order is enforced by the system prompt only
    enforce_payment_verification: bool = Field(default=True, alias="ENFORCE_PAYMENT_VERIFICATION")

    # FastAPI configuration
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8080, alias="APP_PORT")
    debug: bool = Field(default=False, alias="DEBUG")

    @property
    def attachment_convention(self) -> Literal["inline", "url"]:
        """Which attachment shape the active model provider accepts."""
        return "inline" if self.model_provider == "gemini" else "url"


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings so multiple imports share a single instance."""

    return Settings()  # type: ignore[call-arg]
