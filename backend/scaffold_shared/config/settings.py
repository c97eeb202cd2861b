"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with defaults for development."""

    # Database
    database_url: str = "sqlite:///./scaffold.db"
    database_echo: bool = False

    # Environment
    environment: str = "development"
    debug: bool = True

    # Upload storage (local filesystem sink)
    upload_dir: str = "./storage/uploads"

    # Process-wide response shape used when a controller leaves
    # returnOn unset: "single-record", "all-records" or "redirect"
    return_on_store: str = "single-record"
    return_on_update: str = "single-record"

    # Listing
    default_page_size: int = 15
    max_page_size: int = 200

    class Config:
        env_prefix = "SCAFFOLD_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def validate_production_settings(self) -> list[str]:
        """
        Validate settings that must not keep development values in production.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        if self.environment == "production":
            if self.debug:
                errors.append("DEBUG must be False in production")

            if self.database_url.startswith("sqlite"):
                errors.append("DATABASE_URL must point to a server database in production")

        if self.default_page_size < 1 or self.default_page_size > self.max_page_size:
            errors.append("DEFAULT_PAGE_SIZE must be between 1 and MAX_PAGE_SIZE")

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()

# Direct access to commonly used settings
DATABASE_URL = settings.database_url
