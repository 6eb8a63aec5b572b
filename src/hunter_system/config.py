"""Settings loaded from HUNTER_* environment variables or a .env file."""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hunter_system.ranks import DEFAULT_LADDER, RankLadder

DEFAULT_DB_PATH = str(Path.home() / ".hunter_system" / "hunter.db")


class Settings(BaseSettings):
    """Application settings."""

    db_path: str = DEFAULT_DB_PATH
    hunter_id: str = "local"
    hunter_email: str = ""

    # Emails that get the admin capability when their hunter record is created
    admin_emails: list[str] = []

    # Optional JSON/YAML rank ladder replacing the built-in table
    ladder_path: Optional[str] = None

    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="HUNTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("admin_emails")
    @classmethod
    def normalize_emails(cls, value: list[str]) -> list[str]:
        return [v.strip().lower() for v in value if v.strip()]

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.upper()

    def is_admin_email(self, email: str) -> bool:
        return bool(email) and email.strip().lower() in self.admin_emails

    def load_ladder(self) -> RankLadder:
        """The configured ladder, validated; the built-in one when no file is set."""
        if not self.ladder_path:
            return DEFAULT_LADDER
        return RankLadder.from_file(self.ladder_path)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
