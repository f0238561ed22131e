#!/usr/bin/env python3
"""
SonarQube Quality Gate action

Fetches the quality gate of a SonarQube project, exposes it as step outputs and
keeps a single report comment on the pull request up to date.

Inputs (GitHub Actions `with:` block):
  sonar-host-url, sonar-project-key, sonar-token   SonarQube connection
  branch                                           defaults to the PR head ref
  pull-request                                     query a PR analysis instead
  disable-pr-comment                               "true" to skip the comment
  fail-on-quality-gate-error                       "true" to fail on ERROR
  github-token                                     used for the PR comment
"""

import json
import os
import sys
from dataclasses import dataclass

from .client import fetch_quality_gate
from .github import GitHub, find_comment, get_input, load_event, set_failed, set_output
from .report import REPORT_TITLE, build_report, trim_trailing_slash

COMMENT_AUTHOR = "github-actions[bot]"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
@dataclass
class ActionInputs:
    host_url: str
    project_key: str
    token: str
    branch: str = ""
    pull_request: str = ""
    comment_disabled: bool = False
    fail_on_quality_gate_error: bool = False
    github_token: str = ""

    @classmethod
    def from_env(cls) -> "ActionInputs":
        return cls(
            host_url=trim_trailing_slash(get_input("sonar-host-url")),
            project_key=get_input("sonar-project-key"),
            token=get_input("sonar-token"),
            branch=get_input("branch"),
            pull_request=get_input("pull-request"),
            comment_disabled=get_input("disable-pr-comment") == "true",
            fail_on_quality_gate_error=get_input("fail-on-quality-gate-error") == "true",
            github_token=get_input("github-token"),
        )


@dataclass
class Context:
    """The slice of the workflow run context the action looks at."""

    event_name: str = ""
    actor: str = ""
    repository: str = ""
    issue_number: int | None = None
    head_ref: str = ""

    @classmethod
    def from_env(cls) -> "Context":
        event = load_event()
        pr = event.get("pull_request") or {}
        issue = event.get("issue") or {}
        number = pr.get("number") or issue.get("number") or event.get("number")
        return cls(
            event_name=os.environ.get("GITHUB_EVENT_NAME", ""),
            actor=os.environ.get("GITHUB_ACTOR", ""),
            repository=os.environ.get("GITHUB_REPOSITORY", ""),
            issue_number=int(number) if number else None,
            head_ref=(pr.get("head") or {}).get("ref", ""),
        )


# ---------------------------------------------------------------------------
# PR comment
# ---------------------------------------------------------------------------
def upsert_report(gh: GitHub, repository: str, issue_number: int, body: str):
    print("Finding comment associated with the report...")
    existing = find_comment(
        gh,
        repository,
        issue_number,
        comment_author=COMMENT_AUTHOR,
        body_includes=REPORT_TITLE,
        direction="first",
    )
    if existing:
        print("Found existing comment, updating with the latest report.")
        gh.update_comment(repository, existing["id"], body)
    else:
        print("Report comment does not exist, creating a new one.")
        gh.create_comment(repository, issue_number, body)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def run(inputs: ActionInputs, context: Context, gh: GitHub | None = None) -> int:
    """Run the action once. Returns the process exit code."""
    try:
        if inputs.pull_request and not inputs.pull_request.isdigit():
            raise ValueError(
                f"`inputs.pull-request` must be a pull request number, got '{inputs.pull_request}'."
            )
        branch = inputs.branch or context.head_ref
        pull_request = inputs.pull_request or None

        result = fetch_quality_gate(
            inputs.host_url,
            inputs.project_key,
            inputs.token,
            branch or None,
            pull_request,
        )

        print("Quality gate fetch completed successfully")
        print(f"Project status: {result.status}")
        print(f"Number of conditions: {len(result.conditions)}")

        set_output("project-status", result.status)
        set_output("quality-gate-result", json.dumps(result.to_dict()))

        if context.event_name == "pull_request" and not inputs.comment_disabled:
            if not inputs.github_token:
                raise ValueError("`inputs.github-token` is required for result comment creation.")

            issue_number = int(inputs.pull_request) if inputs.pull_request else context.issue_number
            if issue_number is None:
                raise ValueError("Could not determine the pull request number for the report comment.")

            body = build_report(
                result,
                inputs.host_url,
                inputs.project_key,
                context.actor,
                context.event_name,
                branch or None,
                pull_request,
            )
            if gh is not None:
                upsert_report(gh, context.repository, issue_number, body)
            else:
                with GitHub(inputs.github_token) as own:
                    upsert_report(own, context.repository, issue_number, body)

        message = f"Quality gate status for `{inputs.project_key}` returned `{result.status}`"
        if inputs.fail_on_quality_gate_error and result.status == "ERROR":
            print(message, file=sys.stderr)
            set_failed(message)
            return 1
        print(message)
        return 0
    except Exception as e:
        message = str(e) or "Unexpected error"
        print(message, file=sys.stderr)
        set_failed(message)
        return 1


def main():
    sys.exit(run(ActionInputs.from_env(), Context.from_env()))


if __name__ == "__main__":
    main()
