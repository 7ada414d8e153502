import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock

from abstractions.prober import Prober
from config.config import ReadFailurePolicy
from contracts.endpoint import EndpointDescriptor
from contracts.errors import RunTimeoutError, StateStoreError
from contracts.outcome import FailureKind, ProbeOutcome, RunSummary
from core.memory_state_store import MemoryStateStore
from core.orchestrator import Orchestrator, decide_alert

HANG = "hang"
RAISE = "raise"


class FakeProber(Prober):
    """Answers from a table of identity -> failed flag, HANG or RAISE."""

    def __init__(self, results):
        self.results = results
        self.calls = []
        self.cancelled = []

    async def probe(self, endpoint):
        self.calls.append(endpoint.identity)
        result = self.results.get(endpoint.identity, False)
        if result == HANG:
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                self.cancelled.append(endpoint.identity)
                raise
        if result == RAISE:
            raise RuntimeError("worker invocation failed")
        if result:
            return ProbeOutcome.failure(endpoint, FailureKind.UNHEALTHY, "down")
        return ProbeOutcome.success(endpoint)


class BrokenStore(MemoryStateStore):
    def __init__(self, fail_reads=True, fail_writes=False):
        super().__init__()
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.write_attempts = []

    async def get_is_down(self, identity):
        if self.fail_reads:
            raise StateStoreError("store unavailable")
        return await super().get_is_down(identity)

    async def set_is_down(self, identity, is_down):
        self.write_attempts.append((identity, is_down))
        if self.fail_writes:
            raise StateStoreError("store unavailable")
        await super().set_is_down(identity, is_down)


def endpoint(identity, **kwargs):
    return EndpointDescriptor(identity=identity, **kwargs)


class TestDecideAlert(unittest.TestCase):
    def test_transition_table(self):
        self.assertIs(decide_alert(failed=True, was_down=False), True)
        self.assertIsNone(decide_alert(failed=True, was_down=True))
        self.assertIs(decide_alert(failed=False, was_down=True), False)
        self.assertIsNone(decide_alert(failed=False, was_down=False))

    def test_unknown_state_never_alerts(self):
        self.assertIsNone(decide_alert(failed=True, was_down=None))
        self.assertIsNone(decide_alert(failed=False, was_down=None))


class TestOrchestrator(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = MemoryStateStore()
        self.notifier = MagicMock()
        self.notifier.notify = AsyncMock()
        self.a = endpoint("a.com:6667")
        self.b = endpoint("b.com:6697", use_secure_transport=True)
        self.c = endpoint("c.com:6697", use_secure_transport=True, skip_certificate_validation=True)

    def make(self, results, store=None, **kwargs):
        self.prober = FakeProber(results)
        return Orchestrator(self.prober, store or self.store, self.notifier, **kwargs)

    async def test_all_healthy(self):
        summary = await self.make({}).run([self.a, self.b, self.c])
        self.assertEqual(summary, RunSummary(total=3, failures=0))
        self.notifier.notify.assert_not_called()
        self.assertEqual(
            self.store.snapshot(),
            {"a.com:6667": False, "b.com:6697": False, "c.com:6697": False},
        )

    async def test_failures_counted_and_alerted(self):
        summary = await self.make({"b.com:6697": True}).run([self.a, self.b])
        self.assertEqual(summary, RunSummary(total=2, failures=1))
        self.notifier.notify.assert_awaited_once_with(self.b, True)
        self.assertTrue(await self.store.get_is_down("b.com:6697"))

    async def test_two_consecutive_down_runs_alert_once(self):
        orchestrator = self.make({"a.com:6667": True})
        await orchestrator.run([self.a])
        await orchestrator.run([self.a])
        self.notifier.notify.assert_awaited_once_with(self.a, True)

    async def test_down_then_up_alerts_down_and_recovered(self):
        await self.make({"a.com:6667": True}).run([self.a])
        await self.make({"a.com:6667": False}).run([self.a])
        self.assertEqual(
            [call.args for call in self.notifier.notify.await_args_list],
            [(self.a, True), (self.a, False)],
        )
        self.assertFalse(await self.store.get_is_down("a.com:6667"))

    async def test_up_without_prior_state_does_not_alert(self):
        store = BrokenStore(fail_reads=True)
        await self.make({}, store=store).run([self.a])
        self.notifier.notify.assert_not_called()
        self.assertEqual(store.snapshot(), {"a.com:6667": False})

    async def test_read_failure_assumes_up_by_default(self):
        store = BrokenStore(fail_reads=True)
        await store.set_is_down("a.com:6667", True)
        summary = await self.make({"a.com:6667": True}, store=store).run([self.a])
        self.assertEqual(summary.failures, 1)
        self.notifier.notify.assert_awaited_once_with(self.a, True)

    async def test_read_failure_can_skip_alert(self):
        store = BrokenStore(fail_reads=True)
        orchestrator = self.make(
            {"a.com:6667": True},
            store=store,
            read_failure_policy=ReadFailurePolicy.SKIP_ALERT,
        )
        await orchestrator.run([self.a])
        self.notifier.notify.assert_not_called()
        self.assertEqual(store.write_attempts, [("a.com:6667", True)])

    async def test_write_failure_does_not_fail_run(self):
        store = BrokenStore(fail_reads=False, fail_writes=True)
        summary = await self.make({"a.com:6667": True}, store=store).run([self.a, self.b])
        self.assertEqual(summary, RunSummary(total=2, failures=1))
        self.assertEqual(len(store.write_attempts), 2)

    async def test_notifier_error_does_not_fail_run(self):
        self.notifier.notify = AsyncMock(side_effect=RuntimeError("pushover down"))
        summary = await self.make({"a.com:6667": True}).run([self.a])
        self.assertEqual(summary.failures, 1)
        self.assertTrue(await self.store.get_is_down("a.com:6667"))

    async def test_prober_exception_becomes_failure(self):
        summary = await self.make({"a.com:6667": RAISE}).run([self.a, self.b])
        self.assertEqual(summary, RunSummary(total=2, failures=1))
        self.notifier.notify.assert_awaited_once_with(self.a, True)

    async def test_duplicates_probed_independently(self):
        summary = await self.make({"a.com:6667": True}).run([self.a, self.a])
        self.assertEqual(summary, RunSummary(total=2, failures=2))
        self.assertEqual(self.prober.calls, ["a.com:6667", "a.com:6667"])
        # The second outcome sees the first write, so only one alert goes out.
        self.notifier.notify.assert_awaited_once_with(self.a, True)

    async def test_empty_run(self):
        summary = await self.make({}).run([])
        self.assertEqual(summary, RunSummary(total=0, failures=0))

    async def test_hung_probe_times_out_and_leaves_state_untouched(self):
        await self.store.set_is_down("b.com:6697", True)
        orchestrator = self.make({"b.com:6697": HANG, "a.com:6667": True}, run_deadline=0.2)

        with self.assertRaises(RunTimeoutError) as ctx:
            await orchestrator.run([self.a, self.b])

        self.assertEqual(ctx.exception.pending, 1)
        self.assertTrue(await self.store.get_is_down("a.com:6667"))
        self.assertEqual(self.store.snapshot()["b.com:6697"], True)
        self.notifier.notify.assert_awaited_once_with(self.a, True)

    async def test_timed_out_tasks_finish_cancelling_before_run_raises(self):
        orchestrator = self.make({"b.com:6697": HANG}, run_deadline=0.1)
        with self.assertRaises(RunTimeoutError):
            await orchestrator.run([self.a, self.b])
        self.assertEqual(self.prober.cancelled, ["b.com:6697"])

    async def test_slow_probe_does_not_delay_others(self):
        results = {"b.com:6697": HANG}
        orchestrator = self.make(results, run_deadline=0.2)
        with self.assertRaises(RunTimeoutError):
            await orchestrator.run([self.b, self.a, self.c])
        self.assertEqual(
            self.store.snapshot(), {"a.com:6667": False, "c.com:6697": False}
        )

    async def test_replayed_outcome_is_idempotent(self):
        orchestrator = self.make({})
        outcome = ProbeOutcome.failure(self.a, FailureKind.CONNECTION, "refused")
        self.assertTrue(await orchestrator.process_outcome(outcome))
        self.assertIsNone(await orchestrator.process_outcome(outcome))
        self.notifier.notify.assert_awaited_once_with(self.a, True)
        self.assertTrue(await self.store.get_is_down("a.com:6667"))


if __name__ == "__main__":
    unittest.main()
