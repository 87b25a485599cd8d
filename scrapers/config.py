from pathlib import Path
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

# .env lives at the project root (one level above this file: scrapers/config.py → root/)
_ENV_FILE = str(Path(__file__).parent.parent / ".env")


class Settings(BaseSettings):
    # Atlas portal
    atlas_username: str = ""
    atlas_password: str = ""
    atlas_base_url: str = "https://atlas.praxispay.com"
    atlas_export_filter_id: str = "1097"

    # S3
    s3_bucket: str = "bbm-snowflake-stage"
    aws_region: str = "ap-southeast-2"

    # Download polling (seconds)
    download_timeout_s: float = 30.0
    download_poll_interval_s: float = 1.0
    download_settle_delay_s: float = 0.5
    download_stable_checks: int = 1

    # Browser
    chromium_executable_path: Optional[str] = None
    screenshot_on_error: bool = True
    raw_data_path: str = "./data/raw"

    # Slack (notifications are skipped when either is empty)
    slack_bot_token: str = ""
    slack_channel_id: str = ""

    log_level: str = "INFO"

    def has_credentials(self) -> bool:
        return bool(self.atlas_username and self.atlas_password)

    model_config = {
        "env_file": _ENV_FILE,
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
