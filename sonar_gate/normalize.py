"""Turn a raw project_status payload into a QualityGateResult.

The payload is never mutated. Every coercion applied along the way is reported
as a Diagnostic so the caller decides where (and whether) to log it.
"""

from dataclasses import dataclass

from .errors import ValidationError
from .models import Condition, Period, QualityGateResult


@dataclass(frozen=True)
class Diagnostic:
    level: str  # "info" or "warning"
    message: str


@dataclass(frozen=True)
class Normalized:
    result: QualityGateResult
    diagnostics: tuple[Diagnostic, ...] = ()


def _missing(value) -> bool:
    return value is None or value == ""


def _opt_str(value) -> str | None:
    return None if _missing(value) else str(value)


def _opt_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


def _period(raw) -> Period | None:
    if not isinstance(raw, dict):
        return None
    return Period(
        mode=str(raw.get("mode") or ""),
        date=str(raw.get("date") or ""),
        parameter=_opt_str(raw.get("parameter")),
    )


def _condition(index: int, raw, notes: list[Diagnostic]) -> Condition:
    if not isinstance(raw, dict):
        notes.append(Diagnostic("warning", f"Condition {index} is not an object, keeping it with defaults"))
        return Condition(metric_key=None)

    # Entries without a metricKey stay in the list so the count matches SonarQube.
    metric_key = _opt_str(raw.get("metricKey"))
    if metric_key is None:
        notes.append(Diagnostic("warning", f"Condition {index} missing metricKey"))

    status = raw.get("status")
    if _missing(status):
        notes.append(Diagnostic("warning", f"Condition {index} missing status, defaulting to UNKNOWN"))
        status = "UNKNOWN"

    actual_value = raw.get("actualValue")
    if _missing(actual_value):
        notes.append(Diagnostic("warning", f"Condition {index} missing actualValue, defaulting to N/A"))
        actual_value = "N/A"

    comparator = raw.get("comparator")
    if _missing(comparator):
        notes.append(Diagnostic("warning", f"Condition {index} missing comparator, defaulting to empty"))
        comparator = ""

    return Condition(
        metric_key=metric_key,
        status=str(status),
        actual_value=str(actual_value),
        comparator=str(comparator),
        # optional per the SonarQube API; absence means no threshold
        error_threshold=_opt_str(raw.get("errorThreshold")),
        period_index=_opt_int(raw.get("periodIndex")),
    )


def normalize(raw) -> Normalized:
    """Validate `raw` and build the strict model.

    Raises ValidationError when the body is empty, has no `projectStatus`, or
    `projectStatus` has no `status`.
    """
    if not raw:
        raise ValidationError("Empty response from SonarQube API")
    if not isinstance(raw, dict) or not raw.get("projectStatus"):
        raise ValidationError("Missing projectStatus in SonarQube API response")

    project_status = raw["projectStatus"]
    if not isinstance(project_status, dict) or _missing(project_status.get("status")):
        raise ValidationError("Missing status in projectStatus")

    notes: list[Diagnostic] = []

    raw_conditions = project_status.get("conditions")
    if not isinstance(raw_conditions, list):
        notes.append(Diagnostic("warning", "Missing or invalid conditions array, setting to empty array"))
        raw_conditions = []

    periods = project_status.get("periods")
    if isinstance(periods, list):
        notes.append(Diagnostic("info", 'Found "periods" array, converting to single "period" object'))
        period = _period(periods[0]) if periods else None
    else:
        period = _period(project_status.get("period"))

    conditions = tuple(_condition(i, c, notes) for i, c in enumerate(raw_conditions))

    result = QualityGateResult(
        status=str(project_status["status"]),
        conditions=conditions,
        ignored_conditions=_flag(project_status.get("ignoredConditions")),
        cayc_status=_opt_str(project_status.get("caycStatus")),
        period=period,
    )
    notes.append(
        Diagnostic(
            "info",
            f"Validated response: status={result.status}, conditions={len(conditions)}, "
            f"caycStatus={result.cayc_status or 'N/A'}",
        )
    )
    return Normalized(result=result, diagnostics=tuple(notes))
