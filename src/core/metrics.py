from prometheus_client import Counter

# Module level so repeated imports share one registration with the default registry.
PROBE_OUTCOMES = Counter(
    "monitor_probe_outcomes_total",
    "Probe outcomes collected, by result",
    ["result"],
)
ALERTS_SENT = Counter(
    "monitor_alerts_sent_total",
    "Transition alerts handed to the notifier, by event",
    ["event"],
)
RUN_TIMEOUTS = Counter(
    "monitor_run_timeouts_total",
    "Runs that hit the global deadline before collecting every outcome",
)


def record_outcome(failed: bool):
    PROBE_OUTCOMES.labels(result="failure" if failed else "success").inc()


def record_alert(is_down_event: bool):
    ALERTS_SENT.labels(event="down" if is_down_event else "recovered").inc()
