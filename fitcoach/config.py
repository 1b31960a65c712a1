from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the coaching backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("FITCOACH_DATA_ROOT") or data_root_default
        ).expanduser()
        self.db_path: Path = Path(
            os.environ.get("FITCOACH_DB_PATH") or (self.data_root / "fitcoach.db")
        ).expanduser()
        # Upper bound for a single data-access call (seconds).
        self.db_timeout_s: float = float(os.environ.get("FITCOACH_DB_TIMEOUT_S") or "3")

        # In production you MUST set FITCOACH_JWT_SECRET.
        self.jwt_secret: str = os.environ.get("FITCOACH_JWT_SECRET") or "dev-secret-change-me"
        self.token_ttl_hours: int = int(os.environ.get("FITCOACH_TOKEN_TTL_HOURS") or "24")
        self.bcrypt_rounds: int = int(os.environ.get("FITCOACH_BCRYPT_ROUNDS") or "12")

        self.log_level: str = (os.environ.get("FITCOACH_LOG_LEVEL") or "INFO").upper()

        self.max_page_size: int = int(os.environ.get("FITCOACH_MAX_PAGE_SIZE") or "100")

        self.mailer_url: str | None = os.environ.get("FITCOACH_MAILER_URL") or None
        self.mailer_api_key: str | None = os.environ.get("FITCOACH_MAILER_API_KEY") or None
        self.mailer_sender: str = os.environ.get("FITCOACH_MAILER_SENDER") or "FitCoach <no-reply@fitcoach.local>"
        self.mailer_timeout_s: float = float(os.environ.get("FITCOACH_MAILER_TIMEOUT_S") or "10")
        self.admin_email: str = os.environ.get("FITCOACH_ADMIN_EMAIL") or "admin@fitcoach.local"

        cors = os.environ.get("FITCOACH_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
