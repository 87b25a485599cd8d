"""
AWS Lambda entry point for the weekly Atlas export.

Handler: lambda_function.lambda_handler
Always runs headless. Any failure is re-raised so Lambda records the
invocation as an error.
"""
import logging

from scrapers.config import get_settings
from scrapers.orchestrator import run

logger = logging.getLogger()
logger.setLevel(getattr(logging, get_settings().log_level.upper(), logging.INFO))


def lambda_handler(event=None, context=None):
    result = run(headless=True)
    window = result["window"]
    return {
        "status": result["status"],
        "bucket": result["bucket"],
        "key": result["key"],
        "start_date": window.start_date,
        "end_date": window.end_date,
    }
