"""Typed view of `api/qualitygates/project_status` responses."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Period:
    mode: str
    date: str
    parameter: str | None = None

    def to_dict(self) -> dict:
        out = {"mode": self.mode, "date": self.date}
        if self.parameter is not None:
            out["parameter"] = self.parameter
        return out


@dataclass(frozen=True)
class Condition:
    """One evaluated metric. `metric_key` is None when SonarQube omitted it."""

    metric_key: str | None
    status: str = "UNKNOWN"
    actual_value: str = "N/A"
    comparator: str = ""
    error_threshold: str | None = None
    period_index: int | None = None

    def to_dict(self) -> dict:
        out = {
            "status": self.status,
            "metricKey": self.metric_key,
            "comparator": self.comparator,
            "actualValue": self.actual_value,
        }
        if self.metric_key is None:
            del out["metricKey"]
        if self.error_threshold is not None:
            out["errorThreshold"] = self.error_threshold
        if self.period_index is not None:
            out["periodIndex"] = self.period_index
        return out


@dataclass(frozen=True)
class QualityGateResult:
    status: str
    conditions: tuple[Condition, ...] = field(default_factory=tuple)
    ignored_conditions: bool = False
    cayc_status: str | None = None
    period: Period | None = None

    def to_dict(self) -> dict:
        """Wire shape, used for the `quality-gate-result` step output."""
        project_status = {
            "status": self.status,
            "conditions": [c.to_dict() for c in self.conditions],
            "ignoredConditions": self.ignored_conditions,
        }
        if self.cayc_status is not None:
            project_status["caycStatus"] = self.cayc_status
        if self.period is not None:
            project_status["period"] = self.period.to_dict()
        return {"projectStatus": project_status}
