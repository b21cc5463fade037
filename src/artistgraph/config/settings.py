"""Application settings loaded from environment variables and .env files."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SpotifySettings(BaseSettings):
    """Spotify API credentials and HTTP behaviour.

    Environment variables use the ``SPOTIFY_`` prefix, e.g. ``SPOTIFY_CLIENT_ID``.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPOTIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    client_id: str = Field(default="", description="Spotify application client ID")
    client_secret: str = Field(
        default="",
        description="Spotify client secret (only needed for the client-credentials grant)",
    )
    redirect_uri: str = Field(
        default="http://localhost:3000/api/auth/callback/spotify",
        description="OAuth redirect URI registered for the application",
    )
    # Hey future me - "from_token" makes Spotify use the user's country from the
    # access token. Only valid with a user token, not with client credentials!
    market: str = Field(default="from_token", description="Market for album lookups")
    request_timeout: float = Field(default=30.0, gt=0)

    # Token bucket knobs - roughly 2 req/s sustained with a burst of 10
    rate_limit_max_tokens: int = Field(default=10, ge=1)
    rate_limit_refill_rate: float = Field(default=2.0, gt=0)

    @property
    def is_configured(self) -> bool:
        """Check if a client ID is present."""
        return bool(self.client_id and self.client_id.strip())


class GraphSettings(BaseSettings):
    """Tuning knobs for song aggregation, suggestions, search, and export.

    Environment variables use the ``GRAPH_`` prefix, e.g. ``GRAPH_SUGGESTION_LIMIT``.
    """

    model_config = SettingsConfigDict(
        env_prefix="GRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Spotify's /albums endpoint accepts at most 20 ids per request
    album_batch_size: int = Field(default=20, ge=1, le=20)
    albums_page_limit: int = Field(default=50, ge=1, le=50)
    suggestion_limit: int = Field(default=10, ge=1)
    # Spotify's add-items endpoint accepts at most 100 URIs per request
    playlist_batch_size: int = Field(default=100, ge=1, le=100)
    search_min_query_length: int = Field(default=2, ge=1)
    search_limit: int = Field(default=5, ge=1, le=50)
    search_debounce_seconds: float = Field(default=0.5, ge=0)


class Settings(BaseSettings):
    """Top-level settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="artistgraph")
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False, description="Emit JSON logs")

    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    graph: GraphSettings = Field(default_factory=GraphSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize and validate the log level name."""
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
