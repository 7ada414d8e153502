class MonitorError(Exception):
    """Base class for errors raised by the monitor."""


class EndpointSpecError(MonitorError, ValueError):
    """Raised when an endpoint list string cannot be parsed."""


class InvalidProbeJobError(MonitorError, ValueError):
    """Raised when a probe job payload is missing or has malformed fields."""


class ProbeJobError(MonitorError):
    """
    Raised by a probe job whose probe ran and reported failure.

    Attributes:
        infrastructure (bool): True when the target could not be judged at all
            (connection, timeout or check error) rather than judged unhealthy.
    """

    def __init__(self, message: str, infrastructure: bool = False):
        super().__init__(message)
        self.infrastructure = infrastructure


class StateStoreError(MonitorError):
    """Raised when the down-state store cannot be read or written."""


class RunTimeoutError(MonitorError):
    """
    Raised when a run does not collect every probe outcome before its deadline.
    """

    def __init__(self, pending: int, deadline: float):
        super().__init__(
            f"Timeout reached: {pending} probe(s) still pending after {deadline:g}s"
        )
        self.pending = pending
        self.deadline = deadline
