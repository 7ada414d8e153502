import argparse
import asyncio
import logging
import sys
from typing import Optional

import httpx
from prometheus_client import start_http_server

from abstractions.prober import Prober
from config.config import Config
from config.logging_config import setup_logging
from contracts.errors import EndpointSpecError, RunTimeoutError
from core.endpoint_parser import parse_endpoints
from core.irc_check import IrcLivenessCheck
from core.notifier_factory import create_notifier
from core.orchestrator import Orchestrator
from core.probe import Probe
from core.remote_probe import RemoteProbe
from core.state_store_factory import StateStoreFactory

logger = logging.getLogger(__name__)


def build_prober(config: Config, client: httpx.AsyncClient) -> Prober:
    if config.probe_worker_url:
        logger.info(f"Probes will run on worker {config.probe_worker_url}")
        return RemoteProbe(
            config.probe_worker_url, client, timeout=config.probe_timeout_seconds + 5
        )
    return Probe(IrcLivenessCheck(nick=config.irc_nick), timeout=config.probe_timeout_seconds)


async def run_reporter(config: Config, once: bool = True) -> int:
    """
    Run the orchestrator once, or repeatedly every ``run_interval_seconds``.

    Returns:
        int: Process exit code; 1 if the last run timed out.
    """
    endpoints = parse_endpoints(config.servers)
    if not endpoints:
        logger.warning("No servers configured; set REPORTER_SERVERS")

    state_store = StateStoreFactory.create_state_store(config)
    exit_code = 0
    async with httpx.AsyncClient() as client:
        orchestrator = Orchestrator(
            prober=build_prober(config, client),
            state_store=state_store,
            notifier=create_notifier(config, client),
            run_deadline=config.run_deadline_seconds,
            read_failure_policy=config.read_failure_policy,
        )
        try:
            while True:
                try:
                    summary = await orchestrator.run(endpoints)
                    print(summary.model_dump_json(), flush=True)
                    exit_code = 0
                except RunTimeoutError as e:
                    logger.error(f"Run aborted: {e}")
                    exit_code = 1
                if once:
                    break
                await asyncio.sleep(config.run_interval_seconds)
        finally:
            await state_store.close()
    return exit_code


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Probe configured servers and alert on up/down transitions."
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Repeat runs every N seconds (overrides REPORTER_INTERVAL_SECONDS); 0 runs once",
    )
    args = parser.parse_args(argv)

    setup_logging()
    config = Config.from_env()
    if args.interval is not None:
        config = config.model_copy(update={"run_interval_seconds": args.interval})
    if config.metrics_port:
        start_http_server(config.metrics_port)
        logger.info(f"Serving Prometheus metrics on port {config.metrics_port}")
    try:
        return asyncio.run(run_reporter(config, once=config.run_interval_seconds == 0))
    except EndpointSpecError as e:
        logger.error(f"Invalid REPORTER_SERVERS: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
