"""Tests for the incomplete-analysis check."""

from sonar_gate.completeness import is_incomplete
from sonar_gate.models import Condition, QualityGateResult


def _result(status: str, *conditions: Condition) -> QualityGateResult:
    return QualityGateResult(status=status, conditions=conditions)


def test_none_status_is_incomplete_regardless_of_conditions() -> None:
    assert is_incomplete(_result("NONE"))
    assert is_incomplete(_result("NONE", Condition("coverage", status="OK", actual_value="90")))


def test_empty_status_is_incomplete() -> None:
    assert is_incomplete(_result(""))


def test_no_conditions_with_real_status_is_complete() -> None:
    assert not is_incomplete(_result("OK"))
    assert not is_incomplete(_result("ERROR"))


def test_all_unknown_and_na_is_incomplete() -> None:
    result = _result("OK", Condition("coverage"), Condition("bugs"))
    assert is_incomplete(result)


def test_one_real_condition_status_is_complete() -> None:
    result = _result("OK", Condition("coverage"), Condition("bugs", status="OK", actual_value="0"))
    assert not is_incomplete(result)


def test_unknown_with_real_value_is_complete() -> None:
    result = _result("OK", Condition("coverage"), Condition("bugs", actual_value="3"))
    assert not is_incomplete(result)
