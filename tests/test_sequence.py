"""
Sequence validation and per-flow report assembly.
"""

from unittest.mock import patch

import pytest

from flowreport.core.flows import get_template
from flowreport.core.grouping import group_and_sort
from flowreport.core.records import parse_records
from flowreport.core.schema import FlowReport, ValidationResult
from flowreport.core.sequence import build_report, check_sequence, validate_flow, validate_flows

from conftest import DEFAULT_FLOW, default_flow_raw, make_record


def _records(actions, flow_id="flow-1"):
    return [make_record(action, flow_id=flow_id, offset=i) for i, action in enumerate(actions)]


class TestCheckSequence:
    """Position-by-position comparison against the expected template."""

    def test_exact_match(self):
        assert check_sequence(_records(DEFAULT_FLOW), get_template()) is None

    def test_missing_on_search_is_reported(self):
        actions = ["search", "select", "on_select", "init", "on_init", "confirm", "on_confirm"]
        error = check_sequence(_records(actions), get_template())
        assert error == "Error: Expected 'on_search' after 'search', but found 'select'."

    def test_expected_select_reads_select_or_init(self):
        actions = ["search", "on_search", "search", "on_search", "on_select"]
        error = check_sequence(_records(actions), get_template())
        assert error == "Error: Expected 'select or init' after 'on_search', but found 'on_select'."

    def test_short_flow_reads_undefined(self):
        error = check_sequence(_records(["search"]), get_template())
        assert error == "Error: Expected 'on_search' after 'search', but found 'undefined'."

    def test_empty_flow(self):
        error = check_sequence([], get_template())
        assert error == "Error: Expected 'search' after 'start of flow', but found 'undefined'."

    def test_extra_trailing_messages_are_ignored(self):
        assert check_sequence(_records(DEFAULT_FLOW + ["status"]), get_template()) is None

    def test_named_template(self):
        actions = DEFAULT_FLOW + ["cancel", "on_cancel"]
        assert check_sequence(_records(actions), get_template("CANCEL_FLOW")) is None
        error = check_sequence(_records(DEFAULT_FLOW), get_template("CANCEL_FLOW"))
        assert "Expected 'cancel' after 'on_confirm'" in error

    def test_unknown_template(self):
        with pytest.raises(ValueError):
            get_template("NO_SUCH_FLOW")


class TestValidateFlow:
    """Dispatch of each message and result keys."""

    def test_template_exact_flow_is_valid(self, resolver, store):
        grouped = group_and_sort(parse_records(default_flow_raw()))

        report = validate_flow("flow-1", grouped["flow-1"], "session-1", resolver, store)

        assert report.valid_sequence is True
        assert report.errors == []
        assert list(report.messages) == [
            "search_1", "on_search_1", "search_2", "on_search_2", "select_1",
            "on_select_1", "init_1", "on_init_1", "confirm_1", "on_confirm_1",
        ]
        assert all(result.failed == [] for result in report.messages.values())

    def test_missing_on_search_gives_single_error(self, resolver, store):
        records = _records(["search", "select", "on_select", "init", "on_init", "confirm", "on_confirm"])

        report = validate_flow("flow-1", records, "session-1", resolver, store)

        assert report.valid_sequence is False
        assert len(report.errors) == 1
        assert "on_search" in report.errors[0]
        assert "select_1" in report.messages

    def test_unrecognized_actions_are_skipped(self, resolver, store):
        records = _records(DEFAULT_FLOW + ["heartbeat"])

        report = validate_flow("flow-1", records, "session-1", resolver, store)

        assert report.errors == []
        assert not any(key.startswith("heartbeat") for key in report.messages)

    def test_repeated_search_is_numbered(self, resolver, store):
        records = [
            make_record("search", offset=0, transaction_id="txn-1"),
            make_record("search", offset=1, transaction_id="txn-2"),
        ]

        report = validate_flow("flow-1", records, "session-1", resolver, store)

        assert "search_1" in report.messages
        assert "search_2" in report.messages

    def test_select_before_on_search_passes(self, resolver, store):
        records = _records(["search", "select"])

        report = validate_flow("flow-1", records, "session-1", resolver, store)

        assert report.messages["select_1"].failed == []
        assert report.messages["select_1"].passed == ["Validated select"]

    @patch('flowreport.core.sequence.check_message')
    def test_dispatch_failure_skips_message_without_advancing_counter(self, mock_check, resolver, store):
        mock_check.side_effect = [ValidationResult(), RuntimeError("broken"), ValidationResult()]
        records = _records(["search", "search", "search"])

        report = validate_flow("flow-1", records, "session-1", resolver, store)

        assert list(report.messages) == ["search_1", "search_2"]
        assert mock_check.call_count == 3


class TestValidateFlows:
    """Whole-session validation."""

    def test_rerun_with_cleared_cache_is_idempotent(self, resolver, store):
        grouped = group_and_sort(parse_records(default_flow_raw()))

        first = {k: v.to_dict() for k, v in validate_flows(grouped, "session-1", resolver, store).items()}
        store.clear()
        second = {k: v.to_dict() for k, v in validate_flows(grouped, "session-1", resolver, store).items()}

        assert first == second

    def test_report_keeps_flow_order(self, resolver, store):
        raw = default_flow_raw("z-flow") + default_flow_raw("a-flow")
        grouped = group_and_sort(parse_records(raw))

        report = validate_flows(grouped, "session-1", resolver, store, max_workers=2)

        assert list(report) == ["z-flow", "a-flow"]
        assert all(flow.valid_sequence for flow in report.values())

    def test_failing_flow_does_not_drop_others(self, resolver, store):
        grouped = {
            "good": _records(DEFAULT_FLOW, flow_id="good"),
            "bad": _records(DEFAULT_FLOW, flow_id="bad"),
        }
        real_validate_flow = validate_flow

        def flaky(flow_id, *args, **kwargs):
            if flow_id == "bad":
                raise RuntimeError("store unavailable")
            return real_validate_flow(flow_id, *args, **kwargs)

        with patch('flowreport.core.sequence.validate_flow', side_effect=flaky):
            report = validate_flows(grouped, "session-1", resolver, store)

        assert report["good"].valid_sequence is True
        assert report["bad"].valid_sequence is False
        assert report["bad"].errors == ["Error: Flow validation failed: store unavailable"]

    def test_empty_session(self, resolver, store):
        assert validate_flows({}, "session-1", resolver, store) == {}


def test_build_report_keys_by_flow_id():
    reports = [FlowReport(flow_id="a"), FlowReport(flow_id="b", valid_sequence=False)]

    report = build_report(reports)

    assert list(report) == ["a", "b"]
    assert report["b"].to_dict() == {
        "flowId": "b",
        "validSequence": False,
        "errors": [],
        "messages": {},
    }
