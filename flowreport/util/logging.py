"""
Structured logging for flow validation, dispatch, cache and upstream operations.
"""

import logging
from typing import Any, Dict, List


def truncate(value: Any, limit: int = 100) -> str:
    """Render a value for a log line, truncating long text."""
    text = str(value)
    return text[:limit - 3] + "..." if len(text) > limit else text


class StructuredLogger:
    """Structured logger for report generation operations."""

    def __init__(self, name: str = "flowreport"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status in ("failed", "error"):
            self.logger.error(message)
        else:
            self.logger.info(message)

    def log_flow_validation(self, flow_id: str, valid_sequence: bool, message_count: int, errors: List[str] = None):
        """Log the outcome of validating one flow."""
        details = {
            "flow_id": flow_id,
            "valid_sequence": valid_sequence,
            "message_count": message_count,
        }
        if errors:
            details["errors"] = [truncate(e) for e in errors]

        self.log_operation("flow.validated", "valid" if valid_sequence else "invalid", details)

    def log_dispatch_failure(self, flow_id: str, action: str, index: int, error: Exception):
        """Log a message that could not be dispatched and was skipped."""
        self.log_operation("dispatch.skipped", "failed", {
            "flow_id": flow_id,
            "action": action,
            "index": index,
            "error": truncate(error, 200),
        })

    def log_cache_operation(self, operation: str, key: str, status: str = "success", details: Dict[str, Any] = None):
        """Log a correlation cache read or write."""
        log_details = {"key": key}
        if details:
            log_details.update(details)

        self.log_operation(f"cache.{operation}", status, log_details)

    def log_upstream_call(self, service: str, url: str, status: str = "success", status_code: Any = None, duration_ms: float = None):
        """Log an outbound HTTP call to the storage backend or validation service."""
        log_details = {"url": url}
        if status_code is not None:
            log_details["status_code"] = status_code
        if duration_ms is not None:
            log_details["duration_ms"] = round(duration_ms, 2)

        self.log_operation(f"upstream.{service}", status, log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
