import asyncio
import logging
from typing import List, Optional, Sequence

from abstractions.notifier import Notifier
from abstractions.prober import Prober
from abstractions.state_store import StateStore
from config.config import ReadFailurePolicy
from contracts.endpoint import EndpointDescriptor
from contracts.errors import RunTimeoutError, StateStoreError
from contracts.outcome import FailureKind, ProbeOutcome, RunSummary
from core import metrics
from core.profiler import Profiler

logger = logging.getLogger(__name__)

DEFAULT_RUN_DEADLINE = 60.0
CANCEL_GRACE_SECONDS = 1.0


def decide_alert(failed: bool, was_down: Optional[bool]) -> Optional[bool]:
    """
    Apply the transition table to one outcome.

    Args:
        failed (bool): Whether the probe failed this run.
        was_down (Optional[bool]): The stored down-state, or None when it is
            unknown and alerting should be skipped.

    Returns:
        Optional[bool]: True for a down alert, False for a recovery alert,
        None when no alert is due.
    """
    if was_down is None:
        return None
    if failed and not was_down:
        return True
    if not failed and was_down:
        return False
    return None


class Orchestrator:
    """
    Runs one probe per endpoint concurrently, collects the outcomes under a
    global deadline and alerts on down/up transitions.

    All state store and notifier calls happen one outcome at a time on the
    collecting coroutine, in arrival order. Concurrent runs against the same
    endpoints are not guarded against; the caller keeps runs sequential.
    """

    def __init__(
        self,
        prober: Prober,
        state_store: StateStore,
        notifier: Notifier,
        run_deadline: float = DEFAULT_RUN_DEADLINE,
        read_failure_policy: ReadFailurePolicy = ReadFailurePolicy.ASSUME_UP,
    ):
        self.prober = prober
        self.state_store = state_store
        self.notifier = notifier
        self.run_deadline = run_deadline
        self.read_failure_policy = read_failure_policy

    @Profiler.profile
    async def run(self, endpoints: Sequence[EndpointDescriptor]) -> RunSummary:
        """
        Probe every endpoint once and process the outcomes.

        Args:
            endpoints (Sequence[EndpointDescriptor]): Endpoints to probe;
                duplicates are probed independently.

        Returns:
            RunSummary: Endpoint and failure counts.

        Raises:
            RunTimeoutError: If not every outcome arrived before the deadline.
                Endpoints that never reported keep their stored state.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.run_deadline
        outcomes: asyncio.Queue = asyncio.Queue()

        tasks: List[asyncio.Task] = [
            asyncio.create_task(self._probe_into(endpoint, outcomes))
            for endpoint in endpoints
        ]
        logger.info(f"Dispatched {len(tasks)} probe(s) with a {self.run_deadline:g}s deadline")

        collected = 0
        failures = 0
        try:
            while collected < len(tasks):
                remaining = deadline - loop.time()
                try:
                    if remaining <= 0:
                        raise asyncio.TimeoutError
                    outcome = await asyncio.wait_for(outcomes.get(), timeout=remaining)
                except asyncio.TimeoutError:
                    metrics.RUN_TIMEOUTS.inc()
                    error = RunTimeoutError(len(tasks) - collected, self.run_deadline)
                    logger.error(str(error))
                    raise error from None

                collected += 1
                if outcome.failed:
                    failures += 1
                await self.process_outcome(outcome)
        finally:
            # Tasks still running after the deadline are cancelled and given a
            # short grace period to close their connections.
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.wait(pending, timeout=CANCEL_GRACE_SECONDS)

        summary = RunSummary(total=len(tasks), failures=failures)
        logger.info(f"Run complete: total={summary.total} failures={summary.failures}")
        return summary

    async def _probe_into(self, endpoint: EndpointDescriptor, outcomes: asyncio.Queue):
        try:
            outcome = await self.prober.probe(endpoint)
        except Exception as e:
            logger.error(f"Probe invocation error for {endpoint}: {e!r}")
            outcome = ProbeOutcome.failure(endpoint, FailureKind.INVOCATION, repr(e))
        outcomes.put_nowait(outcome)

    async def process_outcome(self, outcome: ProbeOutcome) -> Optional[bool]:
        """
        Drive the alert state machine for one outcome: read the stored
        down-state, alert on a transition, then store the new state.

        Returns:
            Optional[bool]: The alert sent (True down, False recovered), or None.
        """
        endpoint = outcome.endpoint
        metrics.record_outcome(outcome.failed)

        was_down = await self._read_was_down(endpoint)
        alert = decide_alert(outcome.failed, was_down)
        if alert is not None:
            await self._notify(endpoint, alert)

        try:
            await self.state_store.set_is_down(endpoint.identity, outcome.failed)
        except StateStoreError as e:
            logger.error(f"Could not store down-state for {endpoint}: {e}")
        return alert

    async def _read_was_down(self, endpoint: EndpointDescriptor) -> Optional[bool]:
        try:
            return await self.state_store.get_is_down(endpoint.identity)
        except StateStoreError as e:
            if self.read_failure_policy == ReadFailurePolicy.SKIP_ALERT:
                logger.warning(f"Could not read down-state for {endpoint}, skipping alert: {e}")
                return None
            logger.warning(f"Could not read down-state for {endpoint}, assuming up: {e}")
            return False

    async def _notify(self, endpoint: EndpointDescriptor, is_down_event: bool):
        metrics.record_alert(is_down_event)
        try:
            await self.notifier.notify(endpoint, is_down_event)
        except Exception as e:
            logger.error(f"Notifier failed for {endpoint}: {e!r}")
