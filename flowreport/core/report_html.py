"""
HTML rendering of flow reports and utility-mode results.
"""

import json
from html import escape
from typing import Any, Dict

from .schema import FlowReport, ValidationResult, dig

_STYLE = """
body { font-family: Arial, sans-serif; margin: 0; padding: 20px; background-color: #f7f7f7; color: #333; }
h1 { text-align: center; color: #0056a6; margin-bottom: 30px; font-size: 26px; }
.flow-card { background: #fff; margin: 15px 0 25px; padding: 15px; border-radius: 8px;
             box-shadow: 0 2px 4px rgba(0, 0, 0, 0.1); border: 1px solid #ddd; }
.flow-header { display: flex; justify-content: space-between; align-items: center; margin-bottom: 10px; }
.flow-id { font-size: 18px; font-weight: bold; color: #0056a6; }
.validity { font-size: 14px; padding: 5px 12px; border-radius: 18px; color: #fff; font-weight: bold; }
.validity.valid { background-color: #28a745; }
.validity.invalid { background-color: #dc3545; }
.section-title { font-size: 15px; font-weight: bold; margin: 15px 0 8px; }
.api-header { font-size: 15px; font-weight: bold; display: flex; justify-content: space-between; margin: 12px 0 10px; }
.ack-status { font-size: 12px; padding: 4px 8px; border-radius: 18px; color: #fff; margin-left: 10px; }
.ack-status.ack { background-color: #4caf50; }
.ack-status.nack { background-color: #d9534f; }
.ack-status.no-response { background-color: #5bc0de; }
.error-details { font-size: 12px; color: #721c24; background-color: #fce8e6; padding: 4px 8px;
                 border-radius: 4px; margin-left: 10px; }
.result-list { list-style: none; padding: 0; margin: 0; }
.result-item { padding: 6px 15px; margin-bottom: 8px; border-radius: 6px; font-size: 14px; border: 1px solid #ddd; }
.result-item.passed { background-color: #e7f9ed; border-color: #28a745; color: #155724; }
.result-item.failed { background-color: #fce8e6; border-color: #dc3545; color: #721c24; }
pre { background: #f4f4f4; padding: 10px; border-radius: 6px; overflow-x: auto; font-size: 12px; }
"""


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        "<html lang=\"en\">\n<head>\n"
        "<meta charset=\"UTF-8\">\n"
        "<meta name=\"viewport\" content=\"width=device-width, initial-scale=1.0\">\n"
        f"<title>{escape(title)}</title>\n<style>{_STYLE}</style>\n"
        "</head>\n<body>\n"
        f"<h1>{escape(title)}</h1>\n{body}\n"
        "</body>\n</html>\n"
    )


def _ack_badge(result: ValidationResult) -> str:
    """Badge for the sync response echoed on a message result."""
    status = dig(result.response, "message", "ack", "status")
    if not status:
        return '<span class="ack-status no-response">No Response</span>'

    badge = f'<span class="ack-status {"nack" if status == "NACK" else "ack"}">{escape(str(status))}</span>'
    error_message = dig(result.response, "error", "message")
    if status == "NACK" and error_message:
        code = dig(result.response, "error", "code", default="")
        badge += f'<span class="error-details">{escape(str(code))} {escape(str(error_message))}</span>'
    return badge


def _result_items(result: ValidationResult) -> str:
    items = [f'<li class="result-item passed">&#10004; {escape(p)}</li>' for p in result.passed]
    items += [f'<li class="result-item failed">&#10008; {escape(f)}</li>' for f in result.failed]
    return f'<ul class="result-list">{"".join(items)}</ul>'


def render_flow_report(report: Dict[str, FlowReport]) -> str:
    """Render the engine report as a standalone HTML page."""
    cards = []
    for flow_id, flow in report.items():
        validity = "valid" if flow.valid_sequence else "invalid"
        parts = [
            '<div class="flow-card">',
            '<div class="flow-header">',
            f'<span class="flow-id">Flow ID: {escape(str(flow_id))}</span>',
            f'<span class="validity {validity}">{"Valid" if flow.valid_sequence else "Invalid"} Sequence</span>',
            '</div>',
        ]

        if flow.errors:
            parts.append('<div class="section-title">Errors</div>')
            parts.append('<ul class="result-list">' + "".join(
                f'<li class="result-item failed">&#10008; {escape(e)}</li>' for e in flow.errors
            ) + '</ul>')

        parts.append('<div class="section-title">Messages</div>')
        for api, result in flow.messages.items():
            parts.append(
                f'<div class="api-header"><span>{escape(api)}</span>'
                f'<span class="right-section">{_ack_badge(result)}</span></div>'
            )
            parts.append(_result_items(result))

        parts.append('</div>')
        cards.append("\n".join(parts))

    return _page("Flow Validation Report", "\n".join(cards))


def render_utility_report(results: Dict[str, Dict[str, Any]]) -> str:
    """Render validation-service results as a standalone HTML page."""
    cards = []
    for flow_id, outcome in results.items():
        success = bool(outcome.get("success"))
        body = outcome.get("response") if success else outcome.get("details")
        parts = [
            '<div class="flow-card">',
            '<div class="flow-header">',
            f'<span class="flow-id">Flow ID: {escape(str(flow_id))}</span>',
            f'<span class="validity {"valid" if success else "invalid"}">{"Success" if success else "Failed"}</span>',
            '</div>',
        ]
        if not success:
            parts.append(f'<div class="section-title">{escape(str(outcome.get("error", "")))}</div>')
        parts.append(f'<pre>{escape(json.dumps(body, indent=2, default=str))}</pre>')
        parts.append('</div>')
        cards.append("\n".join(parts))

    return _page("Flow Validation Report", "\n".join(cards))
