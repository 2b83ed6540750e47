"""Tests for ActionExecutor."""

from infrakit.action_executor import ActionExecutor


def test_runs_actions_in_order():
    calls = []
    actions = [
        {"desc": "first", "func": calls.append, "args": ("first",)},
        {"desc": "second", "func": lambda item: calls.append(item), "kwargs": {"item": "second"}},
    ]
    assert ActionExecutor().execute_actions(actions)
    assert calls == ["first", "second"]


def test_stops_at_first_failure(capsys):
    calls = []

    def fail():
        raise RuntimeError("boom")

    actions = [
        {"desc": "fails", "func": fail},
        {"desc": "never", "func": calls.append, "args": ("never",)},
    ]
    assert not ActionExecutor().execute_actions(actions)
    assert calls == []
    assert "Failed to execute: fails → boom" in capsys.readouterr().out


def test_dry_run_executes_nothing(capsys):
    calls = []
    actions = [{"desc": "planned", "func": calls.append, "args": ("x",)}]
    assert ActionExecutor().execute_actions(actions, dry_run=True)
    assert calls == []
    assert "planned" in capsys.readouterr().out


def test_nothing_to_do():
    assert ActionExecutor().execute_actions([])
