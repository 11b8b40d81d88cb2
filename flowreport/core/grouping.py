"""
Grouping of captured records into chronologically ordered flows.
"""

from typing import Dict, Iterable, List

from .schema import MessageRecord


def group_and_sort(records: Iterable[MessageRecord]) -> Dict[str, List[MessageRecord]]:
    """
    Group records by flow id and order each group by creation time.

    Flows keep the order in which they were first seen; records with equal
    timestamps keep their received order.
    """
    grouped: Dict[str, List[MessageRecord]] = {}
    for record in records:
        grouped.setdefault(record.flow_id, []).append(record)

    for flow_records in grouped.values():
        flow_records.sort(key=lambda record: record.created_at)

    return grouped
