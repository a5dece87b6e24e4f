"""Congress DAO — Application configuration via environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class CongressSettings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # ── Administration ─────────────────────────────────────────
    administrator_principal: str = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

    # ── Chamber capacities ─────────────────────────────────────
    house_capacity: int = 435
    senate_capacity: int = 100

    # ── National Record journal ────────────────────────────────
    journal_enabled: bool = True
    ledger_database_url: str = ""
    postgres_user: str = "congress_dao"
    postgres_password: str = "change-me-in-production"
    postgres_db: str = "national_record"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    @property
    def database_url_sync(self) -> str:
        if self.ledger_database_url:
            return self.ledger_database_url
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # ── Dashboard ──────────────────────────────────────────────
    dashboard_host: str = "0.0.0.0"
    dashboard_port: int = 8000

    # ── Logging ────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "json"


settings = CongressSettings()
