"""SonarQube quality gate reporter for GitHub Actions."""

from .client import fetch_quality_gate
from .completeness import is_incomplete
from .errors import AuthError, NetworkError, QualityGateError, ValidationError
from .models import Condition, Period, QualityGateResult
from .normalize import normalize

__all__ = [
    "AuthError",
    "Condition",
    "NetworkError",
    "Period",
    "QualityGateError",
    "QualityGateResult",
    "ValidationError",
    "fetch_quality_gate",
    "is_incomplete",
    "normalize",
]
