from abc import ABC, abstractmethod

from contracts.endpoint import EndpointDescriptor
from contracts.outcome import ProbeOutcome


class Prober(ABC):
    """
    Abstract base class for anything that can judge whether an endpoint is alive.
    """

    @abstractmethod
    async def probe(self, endpoint: EndpointDescriptor) -> ProbeOutcome:
        """
        Probe a single endpoint once.

        Args:
            endpoint (EndpointDescriptor): The endpoint to probe.

        Returns:
            ProbeOutcome: The outcome. Implementations report every failure,
            including their own, as a failed outcome instead of raising.
        """
