"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class SyncSettings(BaseSettings):
    """Reconciliation and consistency pass settings."""

    model_config = SettingsConfigDict(env_prefix="CONTACT_SYNC_")

    max_iterations: int = 10
    max_workers: int = 4
    conflict_retries: int = 1
    related_heading: str = "Related"
    heading_level: int = 2
    stamp_revision: bool = True

    @property
    def heading_line(self) -> str:
        """Markdown heading written when a Related section is created."""
        return f"{'#' * self.heading_level} {self.related_heading}"


class LoggingSettings(BaseSettings):
    """Structured logging settings."""

    model_config = SettingsConfigDict(env_prefix="CONTACT_LOG_")

    level: str = "INFO"
    json_output: bool = True


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    sync: SyncSettings = SyncSettings()
    logging: LoggingSettings = LoggingSettings()


settings = Settings()
