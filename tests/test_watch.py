"""
watch 子命令：ChangeHandler 只對目標設計檔觸發、trailing debounce、失敗寫 log，以及 cmd_watch 的初次轉換
"""
import json
import threading
from unittest.mock import MagicMock, patch

import pytest

from figma2react.cli import _WATCHED_EXTENSIONS, ChangeHandler, build_parser, cmd_watch


# ─── helpers ─────────────────────────────────────────────────────────────────

def fs_event(path, directory=False):
    event = MagicMock()
    event.src_path = str(path)
    event.is_directory = directory
    return event


@pytest.fixture
def timers():
    """以 MagicMock 取代 threading.Timer，測試自己決定何時觸發."""
    with patch("figma2react.cli.threading.Timer") as timer_cls:
        timer_cls.side_effect = lambda *a, **kw: MagicMock(name="timer")
        yield timer_cls


# ─── 過濾 ────────────────────────────────────────────────────────────────────

class TestFilter:
    @pytest.mark.parametrize("path", ["/d/design.png", "/d/Button.tsx", "/d/notes.md"])
    def test_non_json_ignored(self, timers, path):
        ChangeHandler(MagicMock(), debounce=0.0).on_modified(fs_event(path))
        timers.assert_not_called()

    def test_directory_ignored(self, timers):
        ChangeHandler(MagicMock(), debounce=0.0).on_modified(fs_event("/d/exports.json", directory=True))
        timers.assert_not_called()

    def test_any_json_without_target(self, timers):
        handler = ChangeHandler(MagicMock(), debounce=0.5)
        handler.on_modified(fs_event("/d/anything.json"))
        assert timers.call_count == 1
        assert timers.call_args[0][0] == 0.5
        assert timers.call_args[1]["args"] == ("/d/anything.json",)
        handler._timer.start.assert_called_once()

    def test_only_target_with_target(self, timers, tmp_path):
        design = tmp_path / "design.json"
        handler = ChangeHandler(MagicMock(), debounce=0.0, target=str(design))
        handler.on_modified(fs_event(tmp_path / "figma2react.config.json"))
        assert timers.call_count == 0
        handler.on_modified(fs_event(tmp_path / "." / "design.json"))
        assert timers.call_count == 1


def test_only_json_is_watched():
    assert _WATCHED_EXTENSIONS == (".json",)


# ─── debounce / 執行 ─────────────────────────────────────────────────────────

class TestDebounce:
    def make_recorder(self):
        created = []

        def make_timer(*args, **kwargs):
            timer = MagicMock()
            created.append(timer)
            return timer

        return created, make_timer

    def test_burst_cancels_earlier_timers(self):
        created, make_timer = self.make_recorder()
        handler = ChangeHandler(MagicMock(), debounce=1.0)
        with patch("figma2react.cli.threading.Timer", side_effect=make_timer):
            for _ in range(3):
                handler.on_modified(fs_event("/d/design.json"))
        assert [t.cancel.call_count for t in created] == [1, 1, 0]
        assert all(t.start.call_count == 1 and t.daemon for t in created)
        assert handler._timer is created[-1]

    def test_cancel_stops_pending_run(self):
        created, make_timer = self.make_recorder()
        handler = ChangeHandler(MagicMock(), debounce=1.0)
        with patch("figma2react.cli.threading.Timer", side_effect=make_timer):
            handler.on_modified(fs_event("/d/design.json"))
        handler.cancel()
        created[0].cancel.assert_called_once()
        assert handler._timer is None

    def test_fire_runs_callback(self, capsys):
        callback = MagicMock()
        ChangeHandler(callback)._fire("/d/design.json")
        callback.assert_called_once_with()
        assert "🔄 File changed: /d/design.json" in capsys.readouterr().out

    def test_fire_logs_failures(self):
        callback = MagicMock(side_effect=RuntimeError("boom"))
        with patch("figma2react.cli.logger") as log:
            ChangeHandler(callback)._fire("/d/design.json")
        log.exception.assert_called_once()

    def test_real_timer_fires_once(self):
        done = threading.Event()
        calls = []

        def callback():
            calls.append(1)
            done.set()

        handler = ChangeHandler(callback, debounce=0.05)
        for _ in range(3):
            handler.on_modified(fs_event("/d/design.json"))
        assert done.wait(2.0)
        handler._timer.join(2.0)
        assert calls == [1]


# ─── cmd_watch ───────────────────────────────────────────────────────────────

def test_watch_missing_file(tmp_path, capsys):
    args = build_parser().parse_args(["watch", str(tmp_path / "missing.json")])
    assert cmd_watch(args, {}) == 1
    assert "❌" in capsys.readouterr().out


def test_watch_converts_once_then_stops(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    design = tmp_path / "design.json"
    design.write_text(json.dumps({"document": {"id": "0:0", "type": "DOCUMENT", "children": [
        {"id": "0:1", "name": "Page", "type": "CANVAS", "children": [
            {"id": "1:2", "name": "Badge", "type": "COMPONENT", "children": [],
             "absoluteBoundingBox": {"x": 0, "y": 0, "width": 40, "height": 20}},
        ]},
    ]}}), encoding="utf-8")
    out = tmp_path / "components"
    args = build_parser().parse_args(["watch", str(design), "--out", str(out), "--debounce", "0.2"])

    with patch("figma2react.cli.Observer") as observer_cls, \
            patch("figma2react.cli.time.sleep", side_effect=KeyboardInterrupt):
        assert cmd_watch(args, {}) == 0

    assert (out / "Badge" / "Badge.tsx").exists()
    observer = observer_cls.return_value
    handler = observer.schedule.call_args[0][0]
    assert handler.target == str(design.resolve())
    assert handler.debounce_seconds == 0.2
    assert observer.schedule.call_args[1]["path"] == str(design.resolve().parent)
    observer.stop.assert_called_once()
    assert "👋 Stopping watch" in capsys.readouterr().out
