import os
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, Field


class ReadFailurePolicy(str, Enum):
    """
    What the orchestrator assumes when the down-state of an endpoint cannot be read.
    """

    # Treat the endpoint as previously up: a failing endpoint always alerts.
    ASSUME_UP = "assume_up"
    # Skip alerting for this outcome; the new state is still written.
    SKIP_ALERT = "skip_alert"


class Config(BaseModel):
    """
    Configuration for the monitor, built once at process start and passed down explicitly.
    """

    servers: str = ""
    state_store_type: str = "redis"
    redis_url: str = "redis://localhost:6379"
    redis_db: int = 0
    state_key_prefix: str = "server:"
    pushover_token: Optional[str] = None
    pushover_users: Optional[str] = None
    pushover_url: str = "https://api.pushover.net/1/messages.json"
    # Empty means probes run in-process instead of on a probe worker.
    probe_worker_url: Optional[str] = None
    run_deadline_seconds: float = Field(60.0, gt=0)
    probe_timeout_seconds: float = Field(10.0, gt=0)
    read_failure_policy: ReadFailurePolicy = ReadFailurePolicy.ASSUME_UP
    irc_nick: str = "healthcheck"
    run_interval_seconds: float = Field(0.0, ge=0)
    # Port for the Prometheus endpoint of a periodic reporter; 0 disables it.
    metrics_port: int = Field(0, ge=0, lt=65536)
    worker_host: str = "0.0.0.0"
    worker_port: int = Field(8080, gt=0, lt=65536)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build a Config from environment variables, falling back to the field defaults.

        Args:
            environ (Optional[Mapping[str, str]]): Mapping to read from; defaults to os.environ.

        Returns:
            Config: The validated configuration.
        """
        env = os.environ if environ is None else environ
        mapping = {
            "servers": "REPORTER_SERVERS",
            "state_store_type": "STATE_STORE_TYPE",
            "redis_url": "REDIS_URL",
            "redis_db": "REDIS_DB",
            "state_key_prefix": "REPORTER_STATE_PREFIX",
            "pushover_token": "PUSHOVER_TOKEN",
            "pushover_users": "PUSHOVER_USERS",
            "pushover_url": "PUSHOVER_URL",
            "probe_worker_url": "PROBE_WORKER_URL",
            "run_deadline_seconds": "REPORTER_RUN_DEADLINE_SECONDS",
            "probe_timeout_seconds": "PROBE_TIMEOUT_SECONDS",
            "read_failure_policy": "READ_FAILURE_POLICY",
            "irc_nick": "IRC_NICK",
            "run_interval_seconds": "REPORTER_INTERVAL_SECONDS",
            "metrics_port": "METRICS_PORT",
            "worker_host": "PROBE_WORKER_HOST",
            "worker_port": "PROBE_WORKER_PORT",
        }
        values = {field: env[var] for field, var in mapping.items() if env.get(var)}
        return cls.model_validate(values)
