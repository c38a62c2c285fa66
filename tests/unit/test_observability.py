"""Unit tests for logging setup and metric registration."""

import json
import logging

import pytest
import structlog
from prometheus_client import Counter as PrometheusCounter

from tokenscope.config import MonitoringConfig
from tokenscope.observability import METRICS, configure_logging
from tokenscope.observability.logging import add_run_id
from tokenscope.observability.metrics import Counter


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if handler not in before:
            handler.close()
            root.removeHandler(handler)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


class TestLogging:
    def test_run_id_processor(self):
        structlog.contextvars.bind_contextvars(run_id="run-42")
        try:
            assert add_run_id(None, "info", {"event": "x"}) == {"event": "x", "run_id": "run-42"}
        finally:
            structlog.contextvars.clear_contextvars()
        assert add_run_id(None, "info", {"event": "x"}) == {"event": "x"}

    def test_json_file_output(self, tmp_path, restore_logging):
        log_file = tmp_path / "tokenscope.log"
        configure_logging(MonitoringConfig(log_level="DEBUG", log_file=str(log_file)))
        structlog.contextvars.bind_contextvars(run_id="run-7")
        structlog.get_logger("tokenscope.test").info("Stage finished", stage="color")
        for handler in logging.getLogger().handlers:
            handler.flush()

        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert records[0]["event"] == "Logging configured"
        assert records[-1]["event"] == "Stage finished"
        assert records[-1]["stage"] == "color"
        assert records[-1]["run_id"] == "run-7"
        assert records[-1]["level"] == "info"


class TestMetrics:
    def test_expected_metrics(self):
        assert set(METRICS) == {
            "pages_processed",
            "samples_rejected",
            "flags_raised",
            "stage_duration_seconds",
            "quality_score",
        }

    def test_duplicate_registration_reuses_collector(self):
        again = Counter("tokenscope_samples_rejected_total", "Raw samples rejected at intake", ["reason"])
        assert again is METRICS["samples_rejected"]
        assert isinstance(again, PrometheusCounter)
