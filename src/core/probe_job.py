"""
Probe jobs: the unit of work a probe worker executes for the reporter.
"""
import logging
from typing import Any

from pydantic import ValidationError

from abstractions.prober import Prober
from contracts.endpoint import EndpointDescriptor
from contracts.errors import InvalidProbeJobError, ProbeJobError

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Connection successful"
UNHEALTHY_MESSAGE = "Failed to connect to server"


def parse_probe_job(payload: Any) -> EndpointDescriptor:
    """
    Validate a probe job payload of the form
    ``{"server": "host:port", "secure": bool, "skip-verification": bool}``.

    ``secure`` and ``skip-verification`` default to False.

    Raises:
        InvalidProbeJobError: If the payload is not an object, ``server`` is
            missing, or any field has the wrong type.
    """
    if not isinstance(payload, dict):
        raise InvalidProbeJobError("probe job payload must be a JSON object")
    if "server" not in payload:
        raise InvalidProbeJobError("'server' not provided")
    try:
        return EndpointDescriptor.model_validate(payload)
    except ValidationError as e:
        raise InvalidProbeJobError(f"invalid probe job: {e}") from e


async def run_probe_job(endpoint: EndpointDescriptor, prober: Prober) -> str:
    """
    Probe an endpoint and turn a failed outcome into an error.

    Returns:
        str: The success message.

    Raises:
        ProbeJobError: If the probe failed. The message tells an unhealthy
            target apart from a probe that could not run.
    """
    outcome = await prober.probe(endpoint)
    if not outcome.failed:
        return SUCCESS_MESSAGE
    if outcome.is_infrastructure_failure:
        raise ProbeJobError(
            f"Probe could not complete against {endpoint} "
            f"({outcome.failure_kind.value}): {outcome.failure_detail}",
            infrastructure=True,
        )
    raise ProbeJobError(UNHEALTHY_MESSAGE)
