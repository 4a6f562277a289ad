"""Tests for the event hook manager."""

import subprocess

from cinelog.cli.core.hooks import HookManager


class StubConfig:
    def __init__(self, data):
        self.data = data

    def get(self, key, default=None):
        return self.data.get(key, default)


def test_trigger_calls_registered_callbacks():
    manager = HookManager()
    calls = []
    manager.register("import_complete", lambda event, **payload: calls.append((event, payload)))

    manager.trigger("import_complete", new_movie_watches=3)
    manager.trigger("sync_complete", new_movie_watches=1)

    assert calls == [("import_complete", {"new_movie_watches": 3})]


def test_unknown_event_is_ignored():
    manager = HookManager()
    calls = []
    manager.register("on_everything", lambda event, **payload: calls.append(event))

    manager.trigger("on_everything")

    assert calls == []


def test_failing_hook_does_not_interrupt_others():
    manager = HookManager()
    calls = []

    def broken(event, **payload):
        raise RuntimeError("boom")

    manager.register("sync_error", broken)
    manager.register("sync_error", lambda event, **payload: calls.append(payload["error"]))

    manager.trigger("sync_error", error="Trakt API rate limited")

    assert calls == ["Trakt API rate limited"]


def test_load_from_config(monkeypatch):
    manager = HookManager()
    commands = []

    def fake_run(command, **kwargs):
        commands.append((command, kwargs["env"]))
        return subprocess.CompletedProcess(command, 0)

    monkeypatch.setattr("cinelog.cli.core.hooks.subprocess.run", fake_run)
    config = StubConfig({"hooks": {
        "sync_complete": [
            {"type": "command", "command": "echo synced"},
            {"type": "bogus"},
        ],
        "import_complete": "not a list",
    }})

    manager.load_from_config(config)
    manager.trigger("sync_complete", new_episode_watches=7)
    manager.trigger("import_complete")

    assert len(commands) == 1
    command, env = commands[0]
    assert command == "echo synced"
    assert env["CINELOG_EVENT"] == "sync_complete"
    assert env["CINELOG_NEW_EPISODE_WATCHES"] == "7"
