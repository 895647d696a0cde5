"""
Settings configuration for SlideCraft.
"""
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings."""

    # App settings
    APP_ENV: str = Field("development")
    DEBUG: bool = Field(True)
    LOG_LEVEL: str = Field("INFO")

    # API settings
    API_ENABLED: bool = Field(True)
    API_HOST: str = Field("0.0.0.0")
    API_PORT: int = Field(8000)
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser"
    )

    # Gemini (Google Generative Language API)
    GEMINI_API_KEY: Optional[str] = Field(None)
    GEMINI_MODEL: str = Field("gemini-2.0-flash")

    # Deck synthesis
    GENERATION_CONTENT_LIMIT: int = Field(
        3000,
        ge=1,
        description="Characters of source content embedded in the generation prompt"
    )
    MAX_USER_IMAGES: int = Field(5, ge=0, le=5)

    # Content fetching
    SCRAPE_CONTENT_LIMIT: int = Field(2000, ge=1)
    SCRAPE_TIMEOUT: float = Field(15.0)
    SCRAPE_USER_AGENT: str = Field(
        "Mozilla/5.0 (compatible; SlideCraft/1.0; +https://slidecraft.app)"
    )

    # Document uploads
    MAX_UPLOAD_BYTES: int = Field(10 * 1024 * 1024)

    # Cosmetic progress indicator shown while the model is working
    PROGRESS_TICK_SECONDS: float = Field(0.8, gt=0)
    PROGRESS_STEP: int = Field(7, ge=1)
    PROGRESS_CAP: int = Field(90, ge=0, le=100)

    # In-memory sessions
    SESSION_IDLE_TTL_MINUTES: int = Field(120, ge=1)

    # Themes
    DEFAULT_THEME: str = Field(
        "minimalist",
        description="Default theme: minimalist, hybrid, maximalist"
    )
    DEFAULT_ACCENT_COLOR: str = Field("#0052CC")

    # Logging
    LOGFIRE_TOKEN: Optional[str] = Field(None)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env

    @property
    def has_ai_service(self) -> bool:
        """Check if a Gemini API key is configured."""
        return bool(self.GEMINI_API_KEY)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.APP_ENV.lower() == "production"

    def validate_settings(self) -> None:
        """
        Validate that essential settings are configured.

        A missing Gemini key is not fatal: generation requests fail with a
        CredentialError instead, and scraping/editing/export keep working.
        """
        if not self.has_ai_service:
            raise ValueError(
                "No AI service configured. Set GEMINI_API_KEY in your .env file "
                "to enable deck generation."
            )

        if self.DEFAULT_THEME not in ("minimalist", "hybrid", "maximalist"):
            raise ValueError(f"Unknown DEFAULT_THEME '{self.DEFAULT_THEME}'")


def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()
