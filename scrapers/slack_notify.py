"""
Slack notification for Atlas export runs.

Posts a one-line summary of each run to the channel named by
``Settings.slack_channel_id`` using ``Settings.slack_bot_token``. When either
is empty every call is a no-op, so local runs need no Slack access.

Notification failures are logged, never raised.
"""

import logging

import requests

from .config import Settings

logger = logging.getLogger(__name__)

SLACK_API_MESSAGE = "https://slack.com/api/chat.postMessage"


class SlackNotifier:
    def __init__(self, token: str, channel_id: str):
        self.token = token
        self.channel_id = channel_id

    @classmethod
    def from_settings(cls, settings: Settings) -> "SlackNotifier":
        return cls(token=settings.slack_bot_token, channel_id=settings.slack_channel_id)

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.channel_id)

    def post(self, text: str) -> bool:
        if not self.enabled:
            logger.debug("[Slack] Bot token or channel not configured — skipping")
            return False

        try:
            resp = requests.post(
                SLACK_API_MESSAGE,
                headers={"Authorization": f"Bearer {self.token}"},
                json={"channel": self.channel_id, "text": text},
                timeout=10,
            )
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("[Slack] Could not reach Slack: %s", exc)
            return False

        if not payload.get("ok"):
            logger.error("[Slack] chat.postMessage rejected: %s", payload.get("error"))
            return False
        logger.info("[Slack] Posted to %s", self.channel_id)
        return True

    def export_complete(self, result: dict) -> bool:
        window = result["window"]
        return self.post(
            f":white_check_mark: *Atlas export* {window.start_date} → {window.end_date}\n"
            f"Uploaded to `{result['uri']}`"
        )

    def export_failed(self, exc: BaseException) -> bool:
        return self.post(f":x: *Atlas export failed* — {type(exc).__name__}: {exc}")
