"""
Atlas export orchestrator.
Runs the weekly Atlas transactions export, uploads it to S3 and sends a
Slack notification with the outcome.

Usage:
  python -m scrapers.orchestrator                       # Last full week, visible browser
  python -m scrapers.orchestrator --headless            # Headless (as in Lambda)
  python -m scrapers.orchestrator --date 2026-02-08     # Week ending on/before this date
"""
import argparse
import logging
import sys
from datetime import date, datetime

from dotenv import load_dotenv

from .atlas_scraper import AtlasScraper
from .base_scraper import BrowserConfig
from .config import Settings, get_settings
from .s3_upload import S3Uploader
from .slack_notify import SlackNotifier

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s — %(message)s"

logger = logging.getLogger("orchestrator")


def run(
    headless: bool = True,
    today: date = None,
    settings: Settings = None,
    uploader: S3Uploader = None,
) -> dict:
    """Run one export. Raises on any failure, after notifying Slack."""
    settings = settings or get_settings()
    slack = SlackNotifier.from_settings(settings)

    logger.info("=" * 60)
    logger.info("Atlas export — %s mode", "headless" if headless else "visible")
    logger.info("=" * 60)

    browser_config = BrowserConfig(
        headless=headless,
        executable_path=settings.chromium_executable_path,
    )
    try:
        scraper = AtlasScraper(settings=settings, uploader=uploader, browser_config=browser_config)
        result = scraper.run(today)
    except Exception as exc:
        slack.export_failed(exc)
        raise

    logger.info("Upload complete: %s", result["uri"])
    slack.export_complete(result)
    return result


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


def main(argv: list[str] = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Atlas weekly transactions export")
    parser.add_argument(
        "--headless", action="store_true", default=False,
        help="Run headless (default: headed for debugging)",
    )
    parser.add_argument(
        "--date", type=_parse_date,
        help="Reference date (YYYY-MM-DD). Exports the last full week ending on or before it. Defaults to today.",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        run(headless=args.headless, today=args.date, settings=settings)
    except Exception:
        logger.exception("Atlas export failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
