"""Markdown report posted on the pull request."""

import re
import sys
from datetime import datetime
from urllib.parse import quote

from .models import Condition, QualityGateResult

REPORT_TITLE = "SonarQube Quality Gate Result"

STATUS_LABELS = {
    "OK": ":white_check_mark: OK",
    "ERROR": ":exclamation: Error",
    "WARN": ":warning: Warning",
    "WARNING": ":warning: Warning",
    "NONE": ":grey_question: None",
    "IN_PROGRESS": ":hourglass_flowing_sand: In Progress",
    "PENDING": ":clock1: Pending",
}

COMPARATOR_SYMBOLS = {"GT": ">", "LT": "<"}

NO_VALUE = {"", "N/A", "null", "undefined", "None"}

# leading numeric prefix, the way JavaScript's parseFloat reads it
_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


# ---------------------------------------------------------------------------
# Cell formatting
# ---------------------------------------------------------------------------
def get_status_emoji(status: str) -> str:
    """Prefix a gate or condition status with an emoji."""
    label = STATUS_LABELS.get(status)
    if label is None:
        print(f'Unknown status received: "{status}". Defaulting to grey question mark.', file=sys.stderr)
        return ":grey_question:"
    return label


def get_comparator_symbol(comparator: str | None) -> str:
    return COMPARATOR_SYMBOLS.get(comparator or "", "")


def format_metric_key(metric_key: str) -> str:
    """`new_coverage` -> `New coverage`."""
    replaced = metric_key.replace("_", " ")
    return replaced[:1].upper() + replaced[1:]


def trim_trailing_slash(value: str) -> str:
    return value[:-1] if value.endswith("/") else value


def format_string_number(value: str | None) -> str:
    """Print integral values without decimals and everything else with two.

    Empty and placeholder values become N/A; text that does not start with a
    number is returned untouched.
    """
    if value is None or value in NO_VALUE:
        return "N/A"

    match = _FLOAT_PREFIX.match(value)
    if not match:
        print(f'Invalid number format: "{value}", returning as-is', file=sys.stderr)
        return value

    number = float(match.group(0))
    if number % 1 == 0:
        return f"{number:.0f}"
    return f"{number:.2f}"


def get_current_datetime(now: datetime | None = None) -> tuple[str, str]:
    """Local timestamp and its `UTC+N` offset label."""
    now = now or datetime.now()
    if now.tzinfo is None:
        now = now.astimezone()
    hours = now.utcoffset().total_seconds() / 3600
    sign = "+" if hours >= 0 else "-"
    return now.strftime("%m/%d/%Y, %H:%M:%S"), f"UTC{sign}{abs(hours):g}"


def _threshold(condition: Condition) -> str:
    symbol = get_comparator_symbol(condition.comparator)
    if condition.error_threshold:
        return f"{symbol} {condition.error_threshold}"
    if condition.comparator:
        return f"{symbol} (no threshold)"
    return "N/A"


def build_row(condition: Condition) -> str:
    metric_key = condition.metric_key or "Unknown"
    cells = [
        format_metric_key(metric_key),
        get_status_emoji(condition.status),
        format_string_number(condition.actual_value),
        _threshold(condition),
    ]
    return f"|{'|'.join(cells)}|"


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------
def build_project_url(
    host_url: str, project_key: str, branch: str | None = None, pull_request: str | None = None
) -> str:
    url = f"{trim_trailing_slash(host_url)}/dashboard?id={project_key}"
    if pull_request:
        return f"{url}&pullRequest={quote(str(pull_request), safe='')}"
    if branch:
        return f"{url}&branch={quote(branch, safe='')}"
    return url


def build_report(
    result: QualityGateResult,
    host_url: str,
    project_key: str,
    actor: str,
    event_name: str,
    branch: str | None = None,
    pull_request: str | None = None,
    now: datetime | None = None,
) -> str:
    project_url = build_project_url(host_url, project_key, branch, pull_request)

    if result.conditions:
        table = "\n".join(build_row(c) for c in result.conditions)
    else:
        table = "|No metrics available|:grey_question:|N/A|N/A|"

    lines = [
        f"### {REPORT_TITLE}",
        f"- **Result**: {get_status_emoji(result.status)}",
    ]
    if pull_request:
        lines.append(f"- **Pull Request**: #{pull_request}")
    elif branch:
        lines.append(f"- **Branch**: `{branch}`")
    lines.append(f"- Triggered by @{actor} on `{event_name}`")

    updated, offset = get_current_datetime(now)
    lines += [
        "",
        "| Metric | Status | Value | Error Threshold |",
        "|:------:|:------:|:-----:|:---------------:|",
        table,
        "",
        f"[View on SonarQube]({project_url})",
        f"###### _updated: {updated} ({offset})_",
    ]

    print(f"Building report for project {project_key}")
    print(f"Status: {result.status}")
    print(f"Number of conditions: {len(result.conditions)}")
    return "\n".join(lines)
