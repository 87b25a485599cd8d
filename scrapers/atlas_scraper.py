"""
Atlas (PraxisPay) transactions export scraper.

Login flow:
  1. Navigate to /site/login
  2. Enter username + password → click Login, wait for navigation

Report download flow:
  1. Navigate to /transaction/index
  2. Open the template modal, pick the saved "Export" filter → APPLY
  3. Write last week's range into #transaction_created → APPLY
  4. Redirect browser downloads into a fresh scratch directory (CDP)
  5. Click "Export as CSV", poll the scratch directory until the CSV is complete
  6. Upload the CSV to S3 as atlas_exports/<start>_to_<end>_transactions.csv

The scratch directory is removed and the browser closed on every exit path.
"""

import re
import shutil
import tempfile
from datetime import date
from pathlib import Path

from playwright.sync_api import Error as PlaywrightError

from .base_scraper import BaseScraper, BrowserConfig
from .config import Settings, get_settings
from .date_window import DateWindow, previous_week
from .download_watcher import DownloadWatcher
from .exceptions import (
    ExportTriggerFailed,
    FilterApplicationFailed,
    LoginFailed,
    MissingCredentials,
)
from .s3_upload import S3Uploader

LOGIN_PATH        = "/site/login"
TRANSACTIONS_PATH = "/transaction/index"

USERNAME_INPUT    = 'input[name="LoginForm[username]"]'
PASSWORD_INPUT    = 'input[name="LoginForm[password]"]'
LOGIN_BUTTON      = 'button[name="login-button"]'
TEMPLATE_MODAL    = "#show-template-modal"
TEMPLATE_APPLY    = "#template-apply"
DATE_RANGE_INPUT  = "transaction_created"

CONTROL_TIMEOUT_MS = 10_000
DOWNLOAD_PREFIX    = "atlas-downloads-"

# The date-range picker only re-reads its input on a bubbling change event.
_SET_DATE_RANGE_JS = """
([inputId, range]) => {
    const input = document.getElementById(inputId);
    if (!input) return false;
    input.value = range;
    input.dispatchEvent(new Event("change", { bubbles: true }));
    return true;
}
"""


class AtlasScraper(BaseScraper):
    portal_name = "atlas"

    def __init__(
        self,
        settings: Settings = None,
        uploader: S3Uploader = None,
        browser_config: BrowserConfig = None,
    ):
        settings = settings or get_settings()
        if not settings.has_credentials():
            raise MissingCredentials("ATLAS_USERNAME and ATLAS_PASSWORD must be set")

        super().__init__(
            browser_config=browser_config,
            raw_data_path=settings.raw_data_path,
            screenshot_on_error=settings.screenshot_on_error,
        )
        self.settings = settings
        self.base_url = settings.atlas_base_url.rstrip("/")
        self.uploader = uploader or S3Uploader.from_settings(settings)
        self.download_dir = None

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login(self) -> None:
        login_url = self.base_url + LOGIN_PATH
        self._log.info("[Atlas] Navigating to %s", login_url)
        try:
            self.page.goto(login_url, wait_until="networkidle")
            self.page.fill(USERNAME_INPUT, self.settings.atlas_username, timeout=CONTROL_TIMEOUT_MS)
            self.page.fill(PASSWORD_INPUT, self.settings.atlas_password, timeout=CONTROL_TIMEOUT_MS)
            with self.page.expect_navigation(wait_until="networkidle"):
                self.page.click(LOGIN_BUTTON, timeout=CONTROL_TIMEOUT_MS)
        except PlaywrightError as exc:
            self._screenshot("login")
            raise LoginFailed(f"Atlas login did not complete: {exc}") from exc

        if LOGIN_PATH in self.page.url:
            self._screenshot("login_rejected")
            raise LoginFailed(f"Still on login page after submitting credentials. URL: {self.page.url}")

        self._log.info("[Atlas] Logged in successfully")

    # ------------------------------------------------------------------
    # Filter
    # ------------------------------------------------------------------

    def apply_filter(self, window: DateWindow) -> None:
        """Apply the saved export template, then narrow it to ``window``."""
        filter_id = self.settings.atlas_export_filter_id
        self._log.info("[Atlas] Navigating to transactions page")
        try:
            self.page.goto(self.base_url + TRANSACTIONS_PATH, wait_until="networkidle")
            self.page.wait_for_timeout(3000)

            self.page.locator(TEMPLATE_MODAL).click(timeout=CONTROL_TIMEOUT_MS)
            self.page.wait_for_timeout(3000)

            self._log.info("[Atlas] Selecting 'Export' filter (data-id=%s)", filter_id)
            self.page.locator(f"li[data-id='{filter_id}']").click(timeout=CONTROL_TIMEOUT_MS)
            self.page.wait_for_timeout(1000)

            self._log.info("[Atlas] Applying the saved filter")
            self.page.locator(TEMPLATE_APPLY).click(timeout=CONTROL_TIMEOUT_MS)
            self.page.wait_for_timeout(3000)
        except PlaywrightError as exc:
            self._screenshot("filter_template")
            raise FilterApplicationFailed(f"Failed to apply saved filter {filter_id}: {exc}") from exc

        self._log.info("[Atlas] Setting date range: %s", window.filter_range)
        try:
            found = self.page.evaluate(_SET_DATE_RANGE_JS, [DATE_RANGE_INPUT, window.filter_range])
            if not found:
                self._screenshot("date_range_input")
                raise FilterApplicationFailed(f"Date range input #{DATE_RANGE_INPUT} not found")
            self.page.wait_for_timeout(1000)

            apply_button = self.page.locator("button", has_text=re.compile(r"^\s*APPLY\s*$")).first
            with self.page.expect_navigation(wait_until="networkidle"):
                apply_button.click(timeout=CONTROL_TIMEOUT_MS)
            self.page.wait_for_timeout(3000)
        except PlaywrightError as exc:
            self._screenshot("date_range")
            raise FilterApplicationFailed(f"Failed to apply date range {window.filter_range}: {exc}") from exc

        self._log.info("[Atlas] Date range applied")

    # ------------------------------------------------------------------
    # Export + download
    # ------------------------------------------------------------------

    def _allow_downloads(self, directory: Path) -> None:
        cdp = self.page.context.new_cdp_session(self.page)
        cdp.send("Page.setDownloadBehavior", {
            "behavior": "allow",
            "downloadPath": str(directory),
        })

    def trigger_export(self) -> None:
        self._log.info("[Atlas] Clicking 'Export as CSV'")
        export_link = self.page.locator("a", has_text=re.compile(r"^\s*Export as CSV\s*$"))
        try:
            if export_link.count() == 0:
                self._screenshot("export_missing")
                raise ExportTriggerFailed("Export as CSV button not found")
            export_link.first.click(timeout=CONTROL_TIMEOUT_MS)
        except PlaywrightError as exc:
            self._screenshot("export_trigger")
            raise ExportTriggerFailed(f"Could not click 'Export as CSV': {exc}") from exc

    def download_report(self, window: DateWindow) -> Path:
        """Trigger the CSV export and wait for it to land in a scratch directory."""
        self.download_dir = Path(tempfile.mkdtemp(prefix=DOWNLOAD_PREFIX))
        self._log.info("[Atlas] Created download directory: %s", self.download_dir)
        self._allow_downloads(self.download_dir)

        self.trigger_export()
        self._log.info("[Atlas] CSV export initiated, waiting for download to complete")

        watcher = DownloadWatcher(
            self.download_dir,
            timeout=self.settings.download_timeout_s,
            poll_interval=self.settings.download_poll_interval_s,
            settle_delay=self.settings.download_settle_delay_s,
            stable_checks=self.settings.download_stable_checks,
        )
        file_path = watcher.wait()
        self._log.info("[Atlas] Download complete. File saved at: %s", file_path)
        return file_path

    def upload(self, window: DateWindow, file_path: Path) -> str:
        body = file_path.read_bytes()
        return self.uploader.upload_bytes(window.storage_key, body)

    def _remove_download_dir(self) -> None:
        if self.download_dir is None:
            return
        directory, self.download_dir = self.download_dir, None
        if not directory.exists():
            return
        self._log.info("[Atlas] Cleaning up temporary directory: %s", directory)
        try:
            shutil.rmtree(directory)
        except OSError as exc:
            self._log.error("[Atlas] Error during cleanup of %s: %s", directory, exc)

    # ------------------------------------------------------------------
    # Public run method
    # ------------------------------------------------------------------

    def run(self, today: date = None) -> dict:
        """
        Full export cycle. Returns:
        {"portal", "date", "window", "file", "key", "bucket", "uri", "status", "error"}

        Any failure is re-raised after the scratch directory is removed and the
        browser is closed. Nothing is retried.
        """
        window = previous_week(today)
        self._log.info("[Atlas] Exporting transactions %s → %s", window.start_date, window.end_date)

        try:
            self._init_browser()
            self.login()
            self.apply_filter(window)
            file_path = self.download_report(window)
            uri = self.upload(window, file_path)
        except Exception as exc:
            self._log.error("[Atlas] Run failed: %s", exc)
            raise
        finally:
            self._remove_download_dir()
            self._close_browser()

        return {
            "portal": self.portal_name,
            "date": window.end_date,
            "window": window,
            "file": file_path.name,
            "key": window.storage_key,
            "bucket": self.uploader.bucket,
            "uri": uri,
            "status": "success",
            "error": None,
        }
