"""Tests for the GitHub comment helpers and Actions runtime plumbing."""

import json

import httpx

from sonar_gate.github import GitHub, find_comment, get_input, load_event, set_failed, set_output

REPO = "octo/repo"


def _gh(pages: list[list[dict]], calls: list | None = None) -> GitHub:
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        page = int(request.url.params.get("page", "1"))
        batch = pages[page - 1] if page <= len(pages) else []
        return httpx.Response(200, json=batch)

    return GitHub("gh-token", client=httpx.Client(transport=httpx.MockTransport(handler)))


def _comment(id_: int, login: str | None, body: str | None) -> dict:
    return {"id": id_, "user": {"login": login} if login else None, "body": body}


def test_find_first_by_author_and_body() -> None:
    gh = _gh([[
        _comment(1, "someone", "SonarQube Quality Gate Result"),
        _comment(2, "github-actions[bot]", "other bot output"),
        _comment(3, "github-actions[bot]", "### SonarQube Quality Gate Result"),
        _comment(4, "github-actions[bot]", "### SonarQube Quality Gate Result again"),
    ]])
    found = find_comment(gh, REPO, 7, "github-actions[bot]", "SonarQube Quality Gate Result")
    assert found["id"] == 3


def test_find_last_scans_in_reverse() -> None:
    gh = _gh([[
        _comment(3, "github-actions[bot]", "SonarQube Quality Gate Result"),
        _comment(4, "github-actions[bot]", "SonarQube Quality Gate Result"),
    ]])
    found = find_comment(gh, REPO, 7, "github-actions[bot]", "SonarQube", direction="last")
    assert found["id"] == 4


def test_comments_without_user_or_body_match_on_remaining_filters() -> None:
    gh = _gh([[_comment(9, None, "SonarQube Quality Gate Result")]])
    assert find_comment(gh, REPO, 7, "github-actions[bot]", "SonarQube")["id"] == 9

    gh = _gh([[_comment(10, "github-actions[bot]", None)]])
    assert find_comment(gh, REPO, 7, "github-actions[bot]", "SonarQube")["id"] == 10


def test_find_walks_multiple_pages() -> None:
    calls: list = []
    first_page = [_comment(i, "someone", "hello") for i in range(100)]
    gh = _gh([first_page, [_comment(200, "github-actions[bot]", "SonarQube Quality Gate Result")]], calls)

    found = find_comment(gh, REPO, 7, "github-actions[bot]", "SonarQube")
    assert found["id"] == 200
    assert [r.url.params["page"] for r in calls] == ["1", "2"]
    assert calls[0].url.path == "/repos/octo/repo/issues/7/comments"
    assert calls[0].headers["Authorization"] == "Bearer gh-token"


def test_no_match_returns_none() -> None:
    assert find_comment(_gh([]), REPO, 7, "github-actions[bot]", "SonarQube") is None
    assert find_comment(_gh([]), REPO, 7, "github-actions[bot]", "SonarQube", direction="last") is None
    gh = _gh([[_comment(1, "someone", "hello")]])
    assert find_comment(gh, REPO, 7, "github-actions[bot]", "SonarQube") is None


def test_create_and_update_comment() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(201, json={"id": 5})

    gh = GitHub("gh-token", client=httpx.Client(transport=httpx.MockTransport(handler)))
    gh.create_comment(REPO, 7, "body one")
    gh.update_comment(REPO, 5, "body two")

    assert (calls[0].method, calls[0].url.path) == ("POST", "/repos/octo/repo/issues/7/comments")
    assert json.loads(calls[0].content) == {"body": "body one"}
    assert (calls[1].method, calls[1].url.path) == ("PATCH", "/repos/octo/repo/issues/comments/5")


def test_get_input_reads_runner_variables(monkeypatch) -> None:
    monkeypatch.setenv("INPUT_SONAR-HOST-URL", " https://sonar.example.com/ ")
    assert get_input("sonar-host-url") == "https://sonar.example.com/"
    assert get_input("branch") == ""


def test_set_output_appends_to_output_file(monkeypatch, tmp_path) -> None:
    out = tmp_path / "output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(out))
    set_output("project-status", "OK")
    set_output("multi", "a\nb")

    text = out.read_text()
    assert text.startswith("project-status=OK\n")
    assert "multi<<ghadelimiter_" in text
    assert "\na\nb\n" in text


def test_set_output_without_runner_is_noop(monkeypatch) -> None:
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
    set_output("project-status", "OK")


def test_set_failed_emits_error_command(capsys) -> None:
    set_failed("boom")
    assert "::error::boom" in capsys.readouterr().err


def test_load_event(monkeypatch, tmp_path) -> None:
    event = tmp_path / "event.json"
    event.write_text(json.dumps({"pull_request": {"number": 3}}))
    monkeypatch.setenv("GITHUB_EVENT_PATH", str(event))
    assert load_event() == {"pull_request": {"number": 3}}

    event.write_text("not json")
    assert load_event() == {}

    monkeypatch.delenv("GITHUB_EVENT_PATH")
    assert load_event() == {}


def test_context_manager_closes_http_client() -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[])))
    with GitHub("gh-token", client=client) as gh:
        assert find_comment(gh, REPO, 7, "github-actions[bot]", "SonarQube") is None
    assert client.is_closed
