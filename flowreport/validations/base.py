"""
Helpers shared by leaf validators.
"""

from typing import Any, Optional

from ..core.schema import MessageRecord, ValidationResult
from ..util.logging import logger


def start_result(record: MessageRecord) -> ValidationResult:
    """New result echoing the sync response of the message, if any."""
    results = ValidationResult()
    sync_response = record.sync_response
    if sync_response:
        results.response = sync_response
    return results


def expect(results: ValidationResult, condition: bool, passed: str, failed: str) -> bool:
    """Record one assertion; a failure never stops the remaining checks."""
    if condition:
        results.passed.append(passed)
    else:
        logger.error(failed)
        results.failed.append(failed)
    return bool(condition)


def finish(results: ValidationResult, action: str) -> ValidationResult:
    """Guarantee a passed entry so an empty result reads as validated."""
    logger.info(f"Validated {action}")
    if len(results.passed) < 1:
        results.passed.append(f"Validated {action}")
    return results


def as_count(value: Any) -> Optional[float]:
    """Read a quantity count that may arrive as a number or a numeric string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None
