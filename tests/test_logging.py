"""
Structured logging helpers.
"""

import logging

from flowreport.util.logging import StructuredLogger, truncate


class TestStructuredLogger:
    """Test structured log lines and their levels."""

    def test_failed_operations_log_as_errors(self, caplog):
        log = StructuredLogger("flowreport.test.failed")

        with caplog.at_level(logging.INFO, logger="flowreport.test.failed"):
            log.log_operation("report.generate", "failed", {"session_id": "s1"})

        assert caplog.records[-1].levelno == logging.ERROR
        assert "Operation: report.generate, Status: failed" in caplog.text
        assert "'session_id': 's1'" in caplog.text

    def test_flow_validation(self, caplog):
        log = StructuredLogger("flowreport.test.flow")

        with caplog.at_level(logging.INFO, logger="flowreport.test.flow"):
            log.log_flow_validation("flow-1", False, 3, ["x" * 300])

        assert "flow.validated" in caplog.text
        assert "invalid" in caplog.text
        assert "x" * 300 not in caplog.text

    def test_upstream_call(self, caplog):
        log = StructuredLogger("flowreport.test.upstream")

        with caplog.at_level(logging.INFO, logger="flowreport.test.upstream"):
            log.log_upstream_call("storage", "http://storage.test/s1", "success", 200, 12.3456)

        assert "upstream.storage" in caplog.text
        assert "'duration_ms': 12.35" in caplog.text


def test_truncate():
    assert truncate("short") == "short"
    assert truncate("a" * 20, limit=10) == "aaaaaaa..."
