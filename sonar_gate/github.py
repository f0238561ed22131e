"""GitHub side of the action: PR comments, step outputs and the event payload."""

import json
import os
import sys
import uuid
from pathlib import Path

import httpx

GITHUB_API = "https://api.github.com"
PER_PAGE = 100


# ---------------------------------------------------------------------------
# Issue comments
# ---------------------------------------------------------------------------
class GitHub:
    """Minimal REST client for issue comments. Errors are raised, not swallowed."""

    def __init__(self, token: str, client: httpx.Client | None = None, base_url: str = GITHUB_API):
        self.base_url = base_url
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self.client = client or httpx.Client()

    def _api(self, method: str, endpoint: str, body: dict | None = None, params: dict | None = None):
        kw = {"headers": self.headers, "timeout": 15}
        if body is not None:
            kw["json"] = body
        if params:
            kw["params"] = params
        resp = self.client.request(method, f"{self.base_url}/{endpoint}", **kw)
        resp.raise_for_status()
        return resp.json()

    def iter_comment_pages(self, repository: str, issue_number: int):
        """Yield pages of issue comments, oldest first."""
        page = 1
        while True:
            batch = self._api(
                "GET",
                f"repos/{repository}/issues/{issue_number}/comments",
                params={"per_page": PER_PAGE, "page": page},
            )
            if not batch:
                return
            yield batch
            if len(batch) < PER_PAGE:
                return
            page += 1

    def create_comment(self, repository: str, issue_number: int, body: str) -> dict:
        return self._api("POST", f"repos/{repository}/issues/{issue_number}/comments", {"body": body})

    def update_comment(self, repository: str, comment_id: int, body: str) -> dict:
        return self._api("PATCH", f"repos/{repository}/issues/comments/{comment_id}", {"body": body})

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def _matches(comment: dict, comment_author: str, body_includes: str) -> bool:
    user = comment.get("user")
    body = comment.get("body")
    if comment_author and user and user.get("login") != comment_author:
        return False
    if body_includes and body and body_includes not in body:
        return False
    return True


def find_comment(
    gh: GitHub,
    repository: str,
    issue_number: int,
    comment_author: str = "",
    body_includes: str = "",
    direction: str = "first",
) -> dict | None:
    """First (or last) comment by `comment_author` whose body has `body_includes`.

    A filter only applies when the comment carries the field it checks, so a
    comment from a deleted user still matches on body alone.
    """
    if direction == "first":
        for batch in gh.iter_comment_pages(repository, issue_number):
            for comment in batch:
                if _matches(comment, comment_author, body_includes):
                    return comment
        return None

    comments = [c for batch in gh.iter_comment_pages(repository, issue_number) for c in batch]
    for comment in reversed(comments):
        if _matches(comment, comment_author, body_includes):
            return comment
    return None


# ---------------------------------------------------------------------------
# Actions runtime
# ---------------------------------------------------------------------------
def get_input(name: str, default: str = "") -> str:
    """Read an action input the way the runner exposes it (`INPUT_SONAR-TOKEN`)."""
    value = os.environ.get(f"INPUT_{name.replace(' ', '_').upper()}", default)
    return value.strip()


def set_output(name: str, value: str):
    output_path = os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        return
    with open(output_path, "a", encoding="utf-8") as f:
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            f.write(f"{name}={value}\n")


def set_failed(message: str):
    print(f"::error::{message}", file=sys.stderr)


def load_event() -> dict:
    event_path = os.environ.get("GITHUB_EVENT_PATH")
    if not event_path:
        return {}
    try:
        return json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError):
        return {}
