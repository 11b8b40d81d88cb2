"""
Per-message dispatch.
Runs the sync-response check and the resolved validator for one message and merges
both into a single ValidationResult.
"""

from .correlation import CorrelationStore
from .errors import ConfigurationError, ResolutionError
from .resolver import ValidatorResolver
from .response_schema import check_json_response
from .schema import MessageRecord, ValidationResult
from ..util.logging import logger


def check_message(domain: str, record: MessageRecord, action: str, session_id: str, flow_id: str,
                  resolver: ValidatorResolver, store: CorrelationStore) -> ValidationResult:
    """
    Validate one message end to end.

    Resolution and validator failures become a failed entry on the result
    instead of propagating, so one bad message never stops its flow.
    """
    results = ValidationResult()

    if record.response is not None:
        check_json_response(record.response, results)

    version = record.protocol_version
    try:
        validator = resolver.resolve(domain, version)
        outcome = validator(record, action, session_id, flow_id, store)
    except ConfigurationError as e:
        logger.error(f"Configuration error for {action}: {e}")
        results.failed.append(str(e))
        return results
    except ResolutionError as e:
        logger.error(f"Error resolving validator for {action} (version {version}): {e}")
        results.failed.append(f"Incorrect version for {action}")
        return results
    except Exception as e:
        logger.error(f"Test function error in {action}: {e}")
        results.failed.append(f"Test function error: {e}")
        return results

    return results.merge(outcome)
