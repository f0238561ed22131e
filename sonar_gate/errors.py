"""Failures raised while fetching a quality gate result.

An incomplete analysis is not an error: the retry loop handles it and, once
the attempt budget is spent, hands back the last partial result.
"""


class QualityGateError(Exception):
    """Base class for every failure the action reports."""


class ValidationError(QualityGateError):
    """The SonarQube response did not have the expected shape. Never retried."""


class AuthError(QualityGateError):
    """Both bearer and basic auth were rejected."""

    def __init__(self, bearer_status: int | None, basic_status: int | None):
        self.bearer_status = bearer_status
        self.basic_status = basic_status
        super().__init__(
            f"Failed to fetch quality gate status. Bearer auth: {bearer_status}, "
            f"Basic auth: {basic_status}. Check your token and project key."
        )


class NetworkError(QualityGateError):
    """Transport failure with no HTTP status (DNS, refused connection, timeout)."""

    def __init__(self, url: str, cause: BaseException):
        self.url = url
        self.cause = cause
        super().__init__(f"Request to {url} failed: {cause}")
