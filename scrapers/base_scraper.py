"""
Abstract base class for portal scrapers.
Each portal scraper must implement: login(), download_report().
"""
import abc
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

# Flags needed to run Chromium inside Lambda / containers without a sandbox or GPU.
# Never add --single-process here; downloads hang with it.
HEADLESS_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-gpu",
    "--disable-dev-shm-usage",
    "--no-zygote",
]


@dataclass(frozen=True)
class BrowserConfig:
    headless: bool = True
    executable_path: Optional[str] = None
    slow_mo: int = 200  # visible mode only


def launch_options(config: BrowserConfig) -> dict:
    """Map a BrowserConfig to keyword arguments for ``chromium.launch()``."""
    if config.headless:
        options = {"headless": True, "args": list(HEADLESS_ARGS)}
        if config.executable_path:
            options["executable_path"] = config.executable_path
        return options
    return {
        "headless": False,
        "slow_mo": config.slow_mo,
        "args": ["--start-maximized"],
    }


class BaseScraper(abc.ABC):
    """
    Base scraper using Playwright for browser automation.
    Subclasses implement portal-specific login and download logic.
    """

    portal_name: str = "base"

    def __init__(
        self,
        browser_config: BrowserConfig = None,
        raw_data_path: str = "./data/raw",
        screenshot_on_error: bool = True,
    ):
        self.browser_config = browser_config or BrowserConfig()
        self.raw_data_path = Path(raw_data_path)
        self.portal_data_path = self.raw_data_path / self.portal_name
        self.screenshot_on_error = screenshot_on_error
        self.browser = None
        self.page = None
        self._log = logging.getLogger(f"scrapers.{self.portal_name}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _init_browser(self):
        from playwright.sync_api import sync_playwright
        self._pw = sync_playwright().__enter__()
        self.browser = self._pw.chromium.launch(**launch_options(self.browser_config))
        self._context = self.browser.new_context(user_agent=USER_AGENT)
        self.page = self._context.new_page()
        self.page.set_default_timeout(30_000)
        self._log.info(
            "[%s] Browser launched (%s)",
            self.portal_name, "headless" if self.browser_config.headless else "visible",
        )

    def _close_browser(self):
        try:
            if self.browser:
                self.browser.close()
                self._log.info("[%s] Browser closed", self.portal_name)
            if hasattr(self, "_pw"):
                self._pw.__exit__(None, None, None)
        except Exception as exc:
            self._log.warning("[%s] Error while closing browser: %s", self.portal_name, exc)
        finally:
            self.browser = None
            self.page = None
            self.__dict__.pop("_pw", None)

    def _screenshot(self, label: str):
        if self.screenshot_on_error and self.page:
            path = self.portal_data_path / f"error_{label}_{int(time.time())}.png"
            try:
                self.portal_data_path.mkdir(parents=True, exist_ok=True)
                self.page.screenshot(path=str(path))
                self._log.info("Screenshot saved: %s", path)
            except Exception as exc:
                self._log.warning("Screenshot failed: %s", exc)

    # ------------------------------------------------------------------
    # Abstract interface
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def login(self) -> None:
        """Log in to the portal."""

    @abc.abstractmethod
    def download_report(self, *args, **kwargs) -> Path:
        """Download the report. Returns the local file path."""
