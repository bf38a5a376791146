"""Tests for screenshot_agent.hooks."""
from screenshot_agent import hooks
from screenshot_agent.config import Config
from screenshot_agent.hooks import find_hooks, notify_resolved, run_hooks
from screenshot_agent.resolver import Result


def _script(path, executable=True):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755 if executable else 0o644)
    return path


class TestFindHooks:
    def test_sorted_executables_only(self, tmp_path):
        event_dir = tmp_path / "on_resolve.d"
        _script(event_dir / "20-second.sh")
        _script(event_dir / "10-first.sh")
        _script(event_dir / "30-disabled.sh", executable=False)
        _script(event_dir / ".hidden.sh")
        (event_dir / "subdir").mkdir()

        names = [p.name for p in find_hooks(tmp_path, "on_resolve")]
        assert names == ["10-first.sh", "20-second.sh"]

    def test_no_hooks_dir(self, tmp_path):
        assert find_hooks(None, "on_resolve") == []
        assert find_hooks(tmp_path / "missing", "on_resolve") == []


class TestRunHooks:
    def test_passes_arguments(self, tmp_path, monkeypatch):
        script = _script(tmp_path / "on_resolve.d" / "10-log.sh")
        calls = []
        monkeypatch.setattr(hooks.subprocess, "Popen", lambda argv, **kw: calls.append(argv))

        started = run_hooks(tmp_path, "on_resolve", "clipboard", "/tmp/clipboard-1.png")

        assert started == 1
        assert calls == [[str(script), "clipboard", "/tmp/clipboard-1.png"]]

    def test_launch_failure_is_logged(self, tmp_path, monkeypatch):
        _script(tmp_path / "on_resolve.d" / "10-bad.sh")

        def fail(argv, **kw):
            raise OSError("Exec format error")

        monkeypatch.setattr(hooks.subprocess, "Popen", fail)

        assert run_hooks(tmp_path, "on_resolve") == 0

    def test_notify_resolved(self, tmp_path, monkeypatch):
        _script(tmp_path / "on_resolve.d" / "10-log.sh")
        calls = []
        monkeypatch.setattr(hooks.subprocess, "Popen", lambda argv, **kw: calls.append(argv))

        result = Result(source="/home/u/Desktop/a.png", temp_path="/tmp/image-1.png")
        notify_resolved(result, Config(hooks_dir=tmp_path))

        assert calls[0][1:] == ["/home/u/Desktop/a.png", "/tmp/image-1.png"]
