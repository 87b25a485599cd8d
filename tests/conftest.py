import pytest

from scrapers.config import Settings


class FakeUploader:
    bucket = "test-bucket"

    def __init__(self, error: Exception = None):
        self.uploads = []
        self.error = error

    def upload_bytes(self, key: str, body: bytes, content_type: str = "text/csv") -> str:
        if self.error:
            raise self.error
        self.uploads.append((key, body))
        return f"s3://{self.bucket}/{key}"


@pytest.fixture(autouse=True)
def _no_slack(monkeypatch):
    monkeypatch.delenv("SLACK_BOT_TOKEN", raising=False)
    monkeypatch.delenv("SLACK_CHANNEL_ID", raising=False)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        atlas_username="ops@example.com",
        atlas_password="hunter2",
        download_timeout_s=2.0,
        download_poll_interval_s=0.01,
        download_settle_delay_s=0.01,
        screenshot_on_error=False,
        raw_data_path=str(tmp_path / "raw"),
    )


@pytest.fixture
def uploader():
    return FakeUploader()
