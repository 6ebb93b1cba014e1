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
    app_name: str = Field(default="Telegram Gateway")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database (service-role connection, bypasses RLS)
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/postgres",
        description="PostgreSQL connection URL with asyncpg driver",
    )

    # Supabase
    supabase_url: str = Field(
        default="",
        description="Supabase project URL (e.g. https://xyzabc.supabase.co)",
    )
    supabase_anon_key: str = Field(
        default="",
        description="Supabase anonymous/public API key",
    )
    supabase_service_role_key: str = Field(
        default="",
        description="Supabase service role key (server-side only, keep secret)",
    )
    processing_function_name: str = Field(default="natural-db")
    outgoing_function_name: str = Field(default="telegram-outgoing")

    # Telegram
    telegram_bot_token: str = Field(default="")
    telegram_webhook_secret: str = Field(
        default="",
        description="Shared secret expected in X-Telegram-Bot-Api-Secret-Token; "
        "when empty every webhook request is refused with 503",
    )
    telegram_api_base_url: str = Field(default="https://api.telegram.org")
    allowed_usernames: str = Field(
        default="",
        description="Optional comma-separated list of Telegram usernames",
    )

    # Language model (onboarding only)
    openai_api_key: str = Field(default="")
    openai_model: str = Field(default="gpt-4.1-mini")
    onboarding_max_steps: int = Field(default=3, ge=1)

    # Outbound HTTP
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme.

        Supabase and most providers supply a standard ``postgresql://`` URL.
        SQLAlchemy's async engine requires ``postgresql+asyncpg://``.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @computed_field  # type: ignore[prop-decorator]
    @property
    def signup_url(self) -> str:
        """Supabase Auth endpoint used for anonymous sign-ins."""
        return f"{self.supabase_url.rstrip('/')}/auth/v1/signup"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def processing_url(self) -> str:
        """Edge function that handles the conversation once onboarding is done."""
        return f"{self.supabase_url.rstrip('/')}/functions/v1/{self.processing_function_name}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def callback_url(self) -> str:
        """Edge function that delivers finished replies back to Telegram."""
        return f"{self.supabase_url.rstrip('/')}/functions/v1/{self.outgoing_function_name}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def allowed_usernames_list(self) -> list[str]:
        """Parse the allow-list into lower-cased usernames."""
        return [
            name.strip().lower()
            for name in self.allowed_usernames.split(",")
            if name.strip()
        ]

    def missing_required(self) -> list[str]:
        """Return the names of required settings that are not configured."""
        required = {
            "SUPABASE_URL": self.supabase_url,
            "SUPABASE_SERVICE_ROLE_KEY": self.supabase_service_role_key,
            "SUPABASE_ANON_KEY": self.supabase_anon_key,
            "TELEGRAM_BOT_TOKEN": self.telegram_bot_token,
            "OPENAI_API_KEY": self.openai_api_key,
        }
        return [name for name, value in required.items() if not value]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
