"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class WorkerConfigurationError(RuntimeError):
    """Raised when a request needs configuration material that is not set.

    Surfaces as HTTP 500 through the application exception handler.
    """


class WorkerSettings(BaseSettings):
    """Worker settings for agent identity, Arke access, and API runtime.

    Environment variable names map directly to field names in uppercase.
    Example: `agent_id` reads from `AGENT_ID`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        log_level: Root log level name for the service loggers.
        agent_id: Registered klados id; unset until registration completes.
        agent_version: Agent version reported in health and job logs.
        arke_agent_key: Agent API key used to authenticate Arke calls.
        verification_token: Endpoint ownership token issued during registration.
        arke_verify_agent_id: Klados id used while AGENT_ID is not yet set.
        arke_api_base: Default Arke API base URL.
        arke_request_timeout_seconds: HTTP timeout for Arke API calls.
        shutdown_drain_timeout_seconds: Upper bound for draining detached jobs on shutdown.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    agent_id: str | None = Field(default=None)
    agent_version: str = Field(default="1.0.0", min_length=1)
    arke_agent_key: str | None = Field(default=None)
    verification_token: str | None = Field(default=None)
    arke_verify_agent_id: str | None = Field(default=None)
    arke_api_base: str = Field(default="https://arke-v1.arke.institute", min_length=1)
    arke_request_timeout_seconds: float = Field(default=30.0, gt=0)
    shutdown_drain_timeout_seconds: float = Field(default=60.0, gt=0)

    @field_validator("agent_id", "arke_agent_key", "verification_token", "arke_verify_agent_id")
    @classmethod
    def _normalize_optional_string(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped_value = value.strip()
        if not stripped_value:
            return None
        return stripped_value

    @field_validator("agent_version", "arke_api_base")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"unsupported log_level={value}")
        return normalized_value

    def settings_resolve_verification_agent_id(self) -> str | None:
        """Return the klados id to publish on the verification endpoint.

        Returns:
            str | None: Verification-specific id when set, else the primary agent id.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return self.arke_verify_agent_id or self.agent_id


def config_load_settings() -> WorkerSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        WorkerSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are missing or invalid.
    """

    try:
        return WorkerSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
