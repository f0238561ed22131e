"""SonarQube quality gate client.

Fetches `api/qualitygates/project_status`, falling back from bearer to basic
auth, and polls with exponential backoff until SonarQube has finished
computing the gate or the attempt budget is spent.
"""

import json
import sys
import time
from dataclasses import dataclass

import httpx

from .completeness import is_incomplete
from .errors import AuthError, NetworkError, QualityGateError, ValidationError
from .models import QualityGateResult
from .normalize import Diagnostic, normalize

API_PATH = "/api/qualitygates/project_status"
MAX_RETRIES = 5
INITIAL_BACKOFF = 2  # seconds, doubled after every attempt
REQUEST_TIMEOUT = 30
AUTH_FAILURE_STATUSES = {401, 403, 404}


@dataclass(frozen=True)
class AuthFailure:
    """Both schemes answered with an HTTP error status."""

    bearer_status: int | None
    basic_status: int | None


@dataclass(frozen=True)
class Attempt:
    kind: str  # "complete", "incomplete" or "failed"
    result: QualityGateResult | None = None
    failure: AuthFailure | None = None


# ---------------------------------------------------------------------------
# Single request
# ---------------------------------------------------------------------------
def make_client(transport: httpx.BaseTransport | None = None) -> httpx.Client:
    """HTTP client for SonarQube. Follows redirects (http to https, proxy paths).

    httpx strips the Authorization header when a redirect leaves the origin.
    """
    return httpx.Client(follow_redirects=True, transport=transport)


def build_params(project_key: str, branch: str | None = None, pull_request: str | None = None) -> dict:
    """Query parameters. pullRequest wins over branch; never both."""
    params = {"projectKey": project_key}
    if pull_request:
        params["pullRequest"] = pull_request
        print(f"Using Pull Request parameter: {pull_request}")
    elif branch:
        params["branch"] = branch
        print(f"Using branch parameter: {branch}")
    return params


def _get(client: httpx.Client, url: str, params: dict, **kw) -> httpx.Response:
    try:
        resp = client.get(url, params=params, timeout=REQUEST_TIMEOUT, **kw)
    except httpx.TransportError as e:
        raise NetworkError(url, e) from e
    resp.raise_for_status()
    return resp


def _decode(resp: httpx.Response):
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError as e:
        raise ValidationError(f"SonarQube API returned invalid JSON: {e}") from e


def fetch_once(client: httpx.Client, url: str, params: dict, token: str, attempt: int = 1):
    """GET the gate once. Returns the decoded body or an AuthFailure.

    Credentials go on each request, never on the client, so the basic-auth
    retry carries no trace of the bearer header.
    """
    try:
        resp = _get(client, url, params, headers={"Authorization": f"Bearer {token}"})
        print(f"API Response Status (attempt {attempt}): {resp.status_code}")
        return _decode(resp)
    except httpx.HTTPStatusError as e:
        bearer = e.response
        print(f"Bearer token failed with status {bearer.status_code}, trying basic auth...")

    try:
        resp = _get(client, url, params, auth=(token, ""))
        print(f"API Response Status (basic auth, attempt {attempt}): {resp.status_code}")
        return _decode(resp)
    except httpx.HTTPStatusError as e:
        basic = e.response
        print(f"Attempt {attempt}: Both authentication methods failed.", file=sys.stderr)
        print(f"Bearer token error: {bearer.status_code} - {bearer.reason_phrase}", file=sys.stderr)
        print(f"Basic auth error: {basic.status_code} - {basic.reason_phrase}", file=sys.stderr)
        return AuthFailure(bearer.status_code, basic.status_code)


# ---------------------------------------------------------------------------
# Polling loop
# ---------------------------------------------------------------------------
def _log_diagnostics(diagnostics: tuple[Diagnostic, ...]):
    for d in diagnostics:
        if d.level == "warning":
            print(d.message, file=sys.stderr)
        else:
            print(d.message)


def _attempt(client: httpx.Client, url: str, params: dict, token: str, attempt: int) -> Attempt:
    outcome = fetch_once(client, url, params, token, attempt)
    if isinstance(outcome, AuthFailure):
        if outcome.bearer_status in AUTH_FAILURE_STATUSES:
            raise AuthError(outcome.bearer_status, outcome.basic_status)
        return Attempt("failed", failure=outcome)

    print(f"API Response Data: {json.dumps(outcome, indent=2)}")
    normalized = normalize(outcome)
    _log_diagnostics(normalized.diagnostics)
    if is_incomplete(normalized.result):
        return Attempt("incomplete", result=normalized.result)
    return Attempt("complete", result=normalized.result)


def poll_quality_gate(
    client: httpx.Client,
    url: str,
    params: dict,
    token: str,
    max_attempts: int = MAX_RETRIES,
    initial_delay: float = INITIAL_BACKOFF,
    sleep=time.sleep,
) -> QualityGateResult:
    last_result: QualityGateResult | None = None
    last_failure: AuthFailure | None = None

    for attempt in range(1, max_attempts + 1):
        step = _attempt(client, url, params, token, attempt)

        if step.kind == "complete":
            print(f"Analysis is complete on attempt {attempt}, returning results")
            return step.result
        if step.kind == "incomplete":
            last_result = step.result
            reason = "Analysis appears incomplete (all values are N/A)"
        else:
            last_failure = step.failure
            reason = f"Request failed (bearer {last_failure.bearer_status}, basic {last_failure.basic_status})"

        if attempt < max_attempts:
            delay = initial_delay * 2 ** (attempt - 1)
            print(f"{reason}, retrying in {delay}s (attempt {attempt}/{max_attempts})...", file=sys.stderr)
            sleep(delay)

    if last_result is not None:
        print(
            "::warning::Max retries reached. Returning incomplete analysis. Status may show N/A values."
        )
        return last_result

    if last_failure is not None:
        raise QualityGateError(
            f"Failed to fetch quality gate status after {max_attempts} attempts. "
            f"Bearer auth: {last_failure.bearer_status}, Basic auth: {last_failure.basic_status}."
        )

    raise QualityGateError("Failed to fetch quality gate status after maximum retries.")


def fetch_quality_gate(
    host_url: str,
    project_key: str,
    token: str,
    branch: str | None = None,
    pull_request: str | None = None,
    *,
    max_attempts: int = MAX_RETRIES,
    initial_delay: float = INITIAL_BACKOFF,
    sleep=time.sleep,
    client: httpx.Client | None = None,
) -> QualityGateResult:
    """Fetch the quality gate for one project, branch or pull request.

    Returns the complete result, or the last incomplete one once
    `max_attempts` is exhausted. Raises AuthError when both auth schemes are
    rejected with 401/403/404, and NetworkError or ValidationError straight
    away without retrying.
    """
    params = build_params(project_key, branch, pull_request)
    url = f"{host_url}{API_PATH}"

    print(f"Fetching quality gate status from: {url}")
    print(f"Parameters: {json.dumps(params, indent=2)}")

    if client is not None:
        return poll_quality_gate(client, url, params, token, max_attempts, initial_delay, sleep)
    with make_client() as own:
        return poll_quality_gate(own, url, params, token, max_attempts, initial_delay, sleep)
