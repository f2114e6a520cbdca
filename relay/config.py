"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Relay configuration. All values come from environment variables."""

    # Telegram
    telegram_bot_token: str = Field(default="")
    group_id: int = Field(default=0)
    admin_ids: str = Field(default="")

    # Webhook mode (empty base URL -> long polling)
    app_base_url: str = Field(default="")
    webhook_secret: str = Field(default="")
    webhook_port: int = Field(default=8080)
    webhook_path: str = Field(default="/tg/webhook")

    # Database
    database_path: Path = Field(default=Path("data/relay.db"))

    # Threads
    title_max_length: int = Field(default=128)

    # Delivery retry policy
    retry_base_delay: float = Field(default=2.0)
    retry_multiplier: float = Field(default=1.5)
    max_retries: int = Field(default=3)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def get_admin_ids(self) -> set[int]:
        """Parse ADMIN_IDS into a set of ints."""
        if not self.admin_ids.strip():
            return set()
        return {int(uid.strip()) for uid in self.admin_ids.split(",") if uid.strip()}

    def missing_required(self) -> list[str]:
        """Names of required environment variables that are not set."""
        missing = []
        if not self.telegram_bot_token:
            missing.append("TELEGRAM_BOT_TOKEN")
        if not self.group_id:
            missing.append("GROUP_ID")
        if self.app_base_url and not self.webhook_secret:
            missing.append("WEBHOOK_SECRET")
        return missing

    @property
    def webhook_url(self) -> str:
        """Public URL Telegram should POST updates to."""
        return self.app_base_url.rstrip("/") + self.webhook_path


settings = Settings()
