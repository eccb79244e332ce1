"""ADPULSE — Central Configuration via Pydantic Settings."""

from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Meta API ──
    fb_access_token: str = ""
    fb_account_id: str = ""
    meta_api_version: str = "v21.0"
    meta_base_url: str = "https://graph.facebook.com"

    # ── Retry Policy ──
    max_retries: int = 3
    backoff_cap_seconds: float = 60.0
    http_timeout_seconds: float = 30.0

    # Meta signals auth and throttling through error codes in the body,
    # not through the HTTP status.
    auth_error_codes: List[int] = [190, 10, 200]
    rate_limit_error_codes: List[int] = [4, 17, 613, 80000, 80003, 80004, 80014]
    default_rate_limit_wait_ms: int = 5 * 60 * 1000

    # ── Async Report Workflow ──
    page_limit: int = 500
    report_poll_interval_seconds: float = 5.0
    report_timeout_seconds: float = 5 * 60.0
    status_batch_size: int = 50
    overall_deadline_seconds: Optional[float] = None

    # ── App ──
    log_level: str = "INFO"
    output_dir: str = "output"
    scheduler_enabled: bool = False
    fetch_hour: int = 3  # Daily fetch at 3 AM UTC

    @property
    def meta_base(self) -> str:
        """Versioned Graph API root, e.g. https://graph.facebook.com/v21.0."""
        return f"{self.meta_base_url}/{self.meta_api_version}"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
