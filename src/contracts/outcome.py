from enum import Enum
from typing import Optional

from pydantic import BaseModel

from contracts.endpoint import EndpointDescriptor


class FailureKind(str, Enum):
    """
    Why a probe failed. Only used for diagnostics; every kind is handled as a plain failure.
    """

    CONNECTION = "connection"
    TIMEOUT = "timeout"
    CHECK_ERROR = "check_error"
    UNHEALTHY = "unhealthy"
    INVOCATION = "invocation"


class ProbeOutcome(BaseModel):
    """
    The result of probing one endpoint once.
    """

    endpoint: EndpointDescriptor
    failed: bool
    failure_kind: Optional[FailureKind] = None
    failure_detail: Optional[str] = None

    @classmethod
    def success(cls, endpoint: EndpointDescriptor) -> "ProbeOutcome":
        return cls(endpoint=endpoint, failed=False)

    @classmethod
    def failure(
        cls, endpoint: EndpointDescriptor, kind: FailureKind, detail: str
    ) -> "ProbeOutcome":
        return cls(endpoint=endpoint, failed=True, failure_kind=kind, failure_detail=detail)

    @property
    def is_infrastructure_failure(self) -> bool:
        """True when the probe could not judge the target, as opposed to judging it unhealthy."""
        return self.failed and self.failure_kind != FailureKind.UNHEALTHY


class RunSummary(BaseModel):
    """
    Terminal output of a completed orchestrator run.
    """

    total: int
    failures: int
