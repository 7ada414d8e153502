import logging

import httpx

from abstractions.prober import Prober
from contracts.endpoint import EndpointDescriptor
from contracts.outcome import FailureKind, ProbeOutcome
from core.profiler import Profiler

logger = logging.getLogger(__name__)


class RemoteProbe(Prober):
    """
    Runs probes on a probe worker over HTTP.

    A transport error, a non-200 reply or an unreadable body all count as a
    failed probe; the endpoint is not retried.
    """

    def __init__(
        self,
        worker_url: str,
        client: httpx.AsyncClient,
        probe_path: str = "/probe",
        timeout: float = 15.0,
    ):
        self.worker_url = worker_url.rstrip("/")
        self.client = client
        self.probe_path = probe_path
        self.timeout = timeout

    @Profiler.profile
    async def probe(self, endpoint: EndpointDescriptor) -> ProbeOutcome:
        url = f"{self.worker_url}{self.probe_path}"
        try:
            resp = await self.client.post(
                url, json=endpoint.to_job_payload(), timeout=self.timeout
            )
        except httpx.HTTPError as e:
            logger.error(f"Probe invocation error for {endpoint}: {e!r}")
            return ProbeOutcome.failure(
                endpoint, FailureKind.INVOCATION, f"probe worker unreachable: {e!r}"
            )

        try:
            body = resp.json()
        except ValueError:
            body = None

        if resp.status_code == 200 and isinstance(body, dict) and body.get("status") == "ok":
            logger.info(f"Remote probe success for {endpoint}")
            return ProbeOutcome.success(endpoint)

        detail = None
        kind = FailureKind.INVOCATION
        if isinstance(body, dict):
            detail = body.get("detail")
            # The worker flags a target it reached but judged unhealthy.
            if body.get("infrastructure") is False:
                kind = FailureKind.UNHEALTHY
        detail = detail or f"unexpected probe worker reply (status={resp.status_code})"
        logger.warning(f"Remote probe failed for {endpoint}: {detail}")
        return ProbeOutcome.failure(endpoint, kind, str(detail))
