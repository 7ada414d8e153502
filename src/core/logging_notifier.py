import logging

from abstractions.notifier import Notifier, format_alert_message
from contracts.endpoint import EndpointDescriptor

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):
    """Writes alerts to the log. Used when no alert channel is configured."""

    async def notify(self, endpoint: EndpointDescriptor, is_down_event: bool) -> None:
        message = format_alert_message(endpoint, is_down_event)
        if is_down_event:
            logger.error(f"[Alert] {message}")
        else:
            logger.info(f"[Alert] {message}")
