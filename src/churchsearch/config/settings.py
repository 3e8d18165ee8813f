"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. Environment variables (CHURCHSEARCH_ prefix)
  2. YAML config file (if specified)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8080, description="Server port")
    workers: int = Field(default=4, description="Number of worker processes")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")


class BackendSettings(BaseModel):
    """Connection settings for the PostgREST (Supabase) data backend.

    The backend exposes the church search remote procedures under
    ``/rest/v1/rpc/<name>`` and the public church view under
    ``/rest/v1/<record_table>``.
    """

    base_url: str = Field(default="http://localhost:54321", description="Backend base URL")
    api_key: str | None = Field(default=None, description="Service or anon key sent as apikey + bearer token")
    db_schema: str | None = Field(
        default=None,
        description="Exposed schema for RPC and table calls (sent as Content-Profile / Accept-Profile)",
    )
    record_table: str = Field(default="v1_churches", description="View serving full single-church records")
    timeout: float = Field(default=15.0, gt=0, description="HTTP request timeout in seconds")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the CHURCHSEARCH_ prefix.
    Nested settings use double underscores: CHURCHSEARCH_SERVER__PORT=9090

    Example:
        CHURCHSEARCH_SERVER__PORT=9090
        CHURCHSEARCH_BACKEND__BASE_URL=https://xyz.supabase.co
        CHURCHSEARCH_BACKEND__API_KEY=eyJ...
    """

    model_config = {
        "env_prefix": "CHURCHSEARCH_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    app_name: str = Field(default="churchsearch", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    server: ServerSettings = Field(default_factory=ServerSettings)
    backend: BackendSettings = Field(default_factory=BackendSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Values from the YAML file are used as defaults; environment variables
        still take precedence.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
