"""
Command-line report generation.
"""

import json
from unittest.mock import patch

from flowreport.cli import main

from conftest import default_flow_raw


def test_report_from_input_file(tmp_path):
    records = tmp_path / "records.json"
    records.write_text(json.dumps(default_flow_raw("flow-1")))
    output = tmp_path / "report.html"

    exit_code = main([
        "session-1",
        "--input", str(records),
        "--output", str(output),
        "--db-path", str(tmp_path / "cli.db"),
    ])

    assert exit_code == 0
    html = output.read_text()
    assert "Flow ID: flow-1" in html
    assert 'class="validity valid"' in html


def test_missing_input_file(tmp_path):
    exit_code = main(["session-1", "--input", str(tmp_path / "missing.json"),
                      "--db-path", str(tmp_path / "cli.db")])
    assert exit_code == 1


@patch('flowreport.cli.fetch_payloads')
def test_report_from_storage(mock_fetch, tmp_path):
    mock_fetch.return_value = default_flow_raw("flow-9")
    output = tmp_path / "report.html"

    exit_code = main(["session-1", "--output", str(output), "--db-path", str(tmp_path / "cli.db")])

    assert exit_code == 0
    mock_fetch.assert_called_once_with("session-1")
    assert "Flow ID: flow-9" in output.read_text()


def test_invalid_records(tmp_path):
    records = tmp_path / "records.json"
    records.write_text(json.dumps([{"payload": {"action": "search"}}]))

    exit_code = main(["session-1", "--input", str(records), "--db-path", str(tmp_path / "cli.db")])

    assert exit_code == 1
