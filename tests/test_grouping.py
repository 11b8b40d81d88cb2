"""
Grouping of captured records into ordered flows.
"""

from flowreport.core.grouping import group_and_sort

from conftest import make_record


def test_groups_partition_records_by_flow():
    """Every record lands in exactly one group, keyed by its flow id."""
    records = [
        make_record("search", flow_id="a", offset=0),
        make_record("search", flow_id="b", offset=1),
        make_record("on_search", flow_id="a", offset=2),
    ]

    grouped = group_and_sort(records)

    assert set(grouped) == {"a", "b"}
    assert sum(len(group) for group in grouped.values()) == len(records)
    assert all(r.flow_id == flow_id for flow_id, group in grouped.items() for r in group)


def test_groups_are_sorted_by_creation_time():
    records = [
        make_record("on_search", offset=5),
        make_record("search", offset=1),
        make_record("select", offset=9),
    ]

    grouped = group_and_sort(records)

    assert [r.action for r in grouped["flow-1"]] == ["search", "on_search", "select"]


def test_equal_timestamps_keep_received_order():
    records = [
        make_record("search", offset=0, transaction_id="first"),
        make_record("search", offset=0, transaction_id="second"),
    ]

    grouped = group_and_sort(records)

    assert [r.transaction_id for r in grouped["flow-1"]] == ["first", "second"]


def test_flows_keep_first_seen_order():
    records = [
        make_record("search", flow_id="z", offset=3),
        make_record("search", flow_id="a", offset=1),
    ]

    assert list(group_and_sort(records)) == ["z", "a"]


def test_empty_input():
    assert group_and_sort([]) == {}
