import asyncio
import logging
import ssl
from typing import Optional

from abstractions.liveness_check import LivenessCheck
from abstractions.prober import Prober
from contracts.endpoint import EndpointDescriptor
from contracts.outcome import FailureKind, ProbeOutcome
from core.profiler import Profiler

logger = logging.getLogger(__name__)


def build_ssl_context(endpoint: EndpointDescriptor) -> Optional[ssl.SSLContext]:
    """
    Return the TLS context for an endpoint, or None for plaintext.
    """
    if not endpoint.use_secure_transport:
        return None
    context = ssl.create_default_context()
    if endpoint.skip_certificate_validation:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


class Probe(Prober):
    """
    Probes an endpoint in-process: connects (optionally over TLS) and runs a
    liveness check over the connection.
    """

    def __init__(self, liveness_check: LivenessCheck, timeout: float = 10.0):
        """
        Args:
            liveness_check (LivenessCheck): Check to run once connected.
            timeout (float): Upper bound in seconds for the whole probe,
                connection and check included.
        """
        self.liveness_check = liveness_check
        self.timeout = timeout

    @Profiler.profile
    async def probe(self, endpoint: EndpointDescriptor) -> ProbeOutcome:
        try:
            outcome = await asyncio.wait_for(self._probe(endpoint), timeout=self.timeout)
        except asyncio.TimeoutError:
            outcome = ProbeOutcome.failure(
                endpoint, FailureKind.TIMEOUT, f"probe timed out after {self.timeout:g}s"
            )
        if outcome.failed:
            logger.warning(
                f"Probe failed for {endpoint}: [{outcome.failure_kind.value}] {outcome.failure_detail}"
            )
        else:
            logger.info(f"Probe success for {endpoint}")
        return outcome

    async def _probe(self, endpoint: EndpointDescriptor) -> ProbeOutcome:
        context = build_ssl_context(endpoint)
        try:
            reader, writer = await asyncio.open_connection(
                endpoint.host,
                endpoint.port,
                ssl=context,
                server_hostname=endpoint.host if context else None,
            )
        except (OSError, ssl.SSLError, UnicodeError) as e:
            # UnicodeError: the host name cannot be IDNA-encoded.
            return ProbeOutcome.failure(endpoint, FailureKind.CONNECTION, str(e) or repr(e))

        try:
            alive = await self.liveness_check.run(reader, writer)
        except Exception as e:
            return ProbeOutcome.failure(
                endpoint, FailureKind.CHECK_ERROR, f"liveness check raised {e!r}"
            )
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except (OSError, ssl.SSLError) as e:
                logger.debug(f"Error while closing connection to {endpoint}: {e}")

        if not alive:
            return ProbeOutcome.failure(
                endpoint, FailureKind.UNHEALTHY, "liveness check reported failure"
            )
        return ProbeOutcome.success(endpoint)
