import logging
from typing import Optional

import httpx

from abstractions.notifier import Notifier
from config.config import Config
from core.logging_notifier import LoggingNotifier
from core.pushover_notifier import PushoverNotifier

logger = logging.getLogger(__name__)


def create_notifier(config: Config, client: Optional[httpx.AsyncClient] = None) -> Notifier:
    """
    Return a Pushover notifier when credentials are configured, else a logging one.
    """
    if config.pushover_token and config.pushover_users:
        logger.info("Alerts will be sent through Pushover")
        return PushoverNotifier(
            token=config.pushover_token,
            user=config.pushover_users,
            client=client,
            api_url=config.pushover_url,
        )
    logger.warning("Pushover credentials not configured; alerts will only be logged")
    return LoggingNotifier()
