import json

from papertrail.utils.actions import RunContext, error_annotation, in_actions, load_context, set_output


def test_load_context(tmp_path):
    event = tmp_path / "event.json"
    event.write_text(json.dumps({
        "before": "fed987",
        "head_commit": {"id": "abc123", "timestamp": "2024-05-01T12:34:56+02:00"},
    }))
    context = load_context({
        "GITHUB_REPOSITORY": "octo/repo",
        "GITHUB_SHA": "abc123",
        "GITHUB_REF": "refs/heads/feature/x",
        "GITHUB_EVENT_NAME": "push",
        "GITHUB_EVENT_PATH": str(event),
    })

    assert context.repository == "octo/repo"
    assert context.sha == "abc123"
    assert context.before == "fed987"
    assert context.head_timestamp == "2024-05-01T12:34:56+02:00"
    assert context.event_name == "push"
    assert context.branch == "feature/x"


def test_load_context_outside_actions():
    context = load_context({})
    assert context == RunContext()
    assert context.sha == "HEAD"
    assert context.branch is None


def test_load_context_unreadable_event(tmp_path):
    event = tmp_path / "event.json"
    event.write_text("{not json")
    context = load_context({"GITHUB_SHA": "abc123", "GITHUB_EVENT_PATH": str(event)})
    assert context.sha == "abc123"
    assert context.before is None


def test_in_actions(monkeypatch):
    monkeypatch.setenv("GITHUB_ACTIONS", "true")
    assert in_actions()
    monkeypatch.delenv("GITHUB_ACTIONS")
    assert not in_actions()


def test_set_output(monkeypatch, tmp_path):
    output = tmp_path / "output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(output))

    assert set_output("summary", "Adds a handler.\nSecond line")

    lines = output.read_text().splitlines()
    assert lines[0].startswith("summary<<ghadelimiter_")
    delimiter = lines[0].split("<<", 1)[1]
    assert lines[1:] == ["Adds a handler.", "Second line", delimiter]


def test_set_output_without_file(monkeypatch):
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
    assert set_output("summary", "x") is False


def test_error_annotation(capsys):
    error_annotation("50% done\nthen failed")
    assert capsys.readouterr().out == "::error::50%25 done%0Athen failed\n"
