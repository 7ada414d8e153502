from abc import ABC, abstractmethod

from contracts.endpoint import EndpointDescriptor


class Notifier(ABC):
    """
    Abstract base class for alert channels.
    """

    @abstractmethod
    async def notify(self, endpoint: EndpointDescriptor, is_down_event: bool) -> None:
        """
        Send a best-effort alert about an endpoint state transition.

        Args:
            endpoint (EndpointDescriptor): The endpoint whose state changed.
            is_down_event (bool): True for a down alert, False for a recovery.
        """


def format_alert_message(endpoint: EndpointDescriptor, is_down_event: bool) -> str:
    if is_down_event:
        return (
            f"Server {endpoint.identity} is not responding to incoming connections. "
            f"SSL: {str(endpoint.use_secure_transport).lower()}, "
            f"verification skipped: {str(endpoint.skip_certificate_validation).lower()}"
        )
    return f"Server {endpoint.identity} has come back online."
