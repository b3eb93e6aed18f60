# File: signlink/notifications.py
# DESCRIPTION: Optional chat webhook notifications for document events.

import requests

from signlink.config import Settings
from signlink.log_utils.logging_config import configure_logging

logger = configure_logging("signlink.notifications", "signlink.log")


class WebhookNotifier:
    def __init__(self, settings: Settings):
        self.webhook_url = settings.webhook_url
        self.disabled = settings.disable_webhooks

    def should_send_webhook(self) -> bool:
        return bool(self.webhook_url) and not self.disabled

    def send(self, message: str) -> bool:
        """Post `message`; failures are logged, never raised."""
        if not self.should_send_webhook():
            logger.info(f"Webhook disabled - would have sent: {message}")
            return False

        try:
            response = requests.post(self.webhook_url, json={"text": message}, timeout=5)
            logger.info(f"Webhook sent: {response.status_code}")
            return response.ok
        except requests.RequestException as e:
            logger.error(f"Failed to send webhook: {e}")
            return False
