import logging
import unittest

from pydantic import ValidationError

from config import logging_config
from config.config import Config, ReadFailurePolicy


class TestConfig(unittest.TestCase):
    def test_config_defaults(self):
        config = Config.from_env({})
        self.assertEqual(config.servers, "")
        self.assertEqual(config.state_store_type, "redis")
        self.assertEqual(config.run_deadline_seconds, 60.0)
        self.assertEqual(config.read_failure_policy, ReadFailurePolicy.ASSUME_UP)
        self.assertIsNone(config.probe_worker_url)
        self.assertEqual(config.run_interval_seconds, 0.0)

    def test_config_env_override(self):
        config = Config.from_env(
            {
                "REPORTER_SERVERS": "a.com/6667",
                "STATE_STORE_TYPE": "memory",
                "REDIS_DB": "3",
                "PUSHOVER_TOKEN": "tok",
                "PUSHOVER_USERS": "usr",
                "REPORTER_RUN_DEADLINE_SECONDS": "30",
                "READ_FAILURE_POLICY": "skip_alert",
                "PROBE_WORKER_URL": "http://worker:8080",
            }
        )
        self.assertEqual(config.servers, "a.com/6667")
        self.assertEqual(config.state_store_type, "memory")
        self.assertEqual(config.redis_db, 3)
        self.assertEqual(config.pushover_token, "tok")
        self.assertEqual(config.run_deadline_seconds, 30.0)
        self.assertEqual(config.read_failure_policy, ReadFailurePolicy.SKIP_ALERT)
        self.assertEqual(config.probe_worker_url, "http://worker:8080")

    def test_empty_values_fall_back_to_defaults(self):
        config = Config.from_env({"PROBE_WORKER_URL": "", "REDIS_URL": ""})
        self.assertIsNone(config.probe_worker_url)
        self.assertEqual(config.redis_url, "redis://localhost:6379")

    def test_invalid_values_rejected(self):
        with self.assertRaises(ValidationError):
            Config.from_env({"REPORTER_RUN_DEADLINE_SECONDS": "0"})
        with self.assertRaises(ValidationError):
            Config.from_env({"READ_FAILURE_POLICY": "panic"})


class TestLoggingConfig(unittest.TestCase):
    def test_logging_setup(self):
        try:
            logging_config.setup_logging(level="DEBUG")
        except Exception as e:
            self.fail(f"setup_logging() raised {e}")
        logger = logging.getLogger()
        self.assertTrue(logger.hasHandlers())
        self.assertEqual(logger.level, logging.DEBUG)

    def test_file_handler_is_opt_in(self):
        config = logging_config.build_logging_config(level="INFO", log_file="")
        self.assertEqual(list(config["handlers"]), ["console"])
        config = logging_config.build_logging_config(level="INFO", log_file="monitor.log")
        self.assertEqual(config["root"]["handlers"], ["console", "file"])


if __name__ == "__main__":
    unittest.main()
