"""Tell a finished quality gate apart from SonarQube's placeholder record."""

from .models import QualityGateResult


def is_incomplete(result: QualityGateResult) -> bool:
    """True while SonarQube is still computing the gate.

    NONE means no gate result yet. A project with zero conditions is a valid
    final state. Otherwise the gate counts as pending only when every condition
    is still UNKNOWN with an N/A value.
    """
    if not result.status:
        return True
    if result.status == "NONE":
        return True

    conditions = result.conditions
    if not conditions:
        return False

    if any(c.status and c.status != "UNKNOWN" for c in conditions):
        return False

    return all(c.status == "UNKNOWN" and c.actual_value == "N/A" for c in conditions)
