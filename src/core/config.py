"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="OnlyIfYouKnow API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/onlyifyouknow",
        description="PostgreSQL connection URL with asyncpg driver",
    )
    database_command_timeout: float = Field(
        default=10.0,
        description="Seconds before a single database statement is abandoned",
    )
    database_pool_timeout: float = Field(default=10.0)

    # Supabase
    supabase_url: str = Field(
        default="",
        description="Supabase project URL (e.g. https://xyzabc.supabase.co)",
    )
    supabase_anon_key: str = Field(default="")
    supabase_service_role_key: str = Field(
        default="",
        description="Supabase service role key (server-side only, keep secret)",
    )

    # JWT Authentication
    jwt_secret_key: str = Field(
        default="CHANGE-ME-IN-PRODUCTION",
        description="Secret key for JWT signing (used for HS256 fallback and tests)",
    )
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_minutes: int = Field(default=30)

    # Beds24
    beds24_api_url: str = Field(default="https://api.beds24.com/v2")
    beds24_refresh_token: str = Field(
        default="",
        description="Beds24 API v2 refresh token; empty means no real provider access",
    )
    beds24_demo_mode: bool = Field(
        default=True,
        description="Synthesize placeholder listings when no refresh token is configured",
    )
    beds24_timeout_seconds: float = Field(default=15.0)
    beds24_pricing_horizon_days: int = Field(default=365)
    enlistment_claim_ttl_seconds: int = Field(
        default=300,
        description="Age after which an unfinished enlistment claim may be taken over",
    )

    # SendGrid
    sendgrid_api_key: str = Field(default="")
    sendgrid_api_url: str = Field(default="https://api.sendgrid.com/v3/mail/send")
    sendgrid_from_email: str = Field(default="noreply@onlyifyouknow.com")
    sendgrid_from_name: str = Field(default="OnlyIfYouKnow Team")
    sendgrid_timeout_seconds: float = Field(default=10.0)

    # Invitations
    public_base_url: str = Field(
        default="http://localhost:8080",
        description="Frontend origin used to build invitation response links",
    )
    invitation_expiry_days: int = Field(default=7)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def supabase_jwks_url(self) -> str:
        """JWKS endpoint for ES256 token verification."""
        if self.supabase_url:
            return f"{self.supabase_url.rstrip('/')}/auth/v1/.well-known/jwks.json"
        return ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme.

        Supabase and most hosting providers supply a standard ``postgresql://``
        URL. SQLAlchemy's async engine requires ``postgresql+asyncpg://``.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable/disable rate limiting (disable for tests)",
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:8080,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def beds24_configured(self) -> bool:
        """True when real Beds24 credentials are present."""
        return bool(self.beds24_refresh_token.strip())


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
