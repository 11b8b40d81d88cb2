"""
Error taxonomy for report generation.
"""

from typing import Any


class FlowReportError(Exception):
    """Base class for report generation errors."""


class ConfigurationError(FlowReportError):
    """A domain has no validator configuration, or the configuration cannot be read."""


class ResolutionError(FlowReportError):
    """A validator locator or plugin could not be resolved to a callable."""


class InvalidRecordError(FlowReportError):
    """A raw record cannot be turned into a MessageRecord."""


class UpstreamError(FlowReportError):
    """An outbound HTTP call failed or returned a non-2xx status."""

    def __init__(self, message: str, status_code: Any = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details
