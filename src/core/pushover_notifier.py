import logging
from typing import Optional

import httpx

from abstractions.notifier import Notifier, format_alert_message
from contracts.endpoint import EndpointDescriptor

logger = logging.getLogger(__name__)

PUSHOVER_API_URL = "https://api.pushover.net/1/messages.json"

# Emergency priority: Pushover repeats the alert every `retry` seconds until
# acknowledged or `expire` seconds have passed.
DOWN_PRIORITY = "2"
DOWN_RETRY_SECONDS = "120"
DOWN_EXPIRE_SECONDS = "3600"


class PushoverNotifier(Notifier):
    """
    Sends transition alerts through the Pushover messages API. Delivery is
    best-effort: failures are logged and dropped.
    """

    def __init__(
        self,
        token: str,
        user: str,
        client: Optional[httpx.AsyncClient] = None,
        api_url: str = PUSHOVER_API_URL,
        timeout: float = 10.0,
    ):
        self.token = token
        self.user = user
        self.client = client
        self.api_url = api_url
        self.timeout = timeout

    def build_form(self, endpoint: EndpointDescriptor, is_down_event: bool) -> dict:
        form = {
            "token": self.token,
            "user": self.user,
            "message": format_alert_message(endpoint, is_down_event),
        }
        if is_down_event:
            form["priority"] = DOWN_PRIORITY
            form["retry"] = DOWN_RETRY_SECONDS
            form["expire"] = DOWN_EXPIRE_SECONDS
        return form

    async def notify(self, endpoint: EndpointDescriptor, is_down_event: bool) -> None:
        form = self.build_form(endpoint, is_down_event)
        try:
            if self.client is not None:
                resp = await self.client.post(self.api_url, data=form, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await client.post(self.api_url, data=form, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.error(f"Failed to send alert for {endpoint}: {e!r}")
            return

        if resp.status_code >= 300:
            logger.warning(
                f"Pushover rejected alert for {endpoint}: status={resp.status_code} body={resp.text}"
            )
            return
        event = "down" if is_down_event else "recovered"
        logger.info(f"Sent {event} alert for {endpoint}")
