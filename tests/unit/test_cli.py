"""
Unit tests for backend/cli.py.

The async entry points are patched out; these tests cover argument handling
and the headless renderer the watch command drives.
"""

from unittest.mock import patch

import pytest

pytestmark = pytest.mark.unit

from backend import cli
from backend.dashboard import (
    HeadlessMountProvider,
    HeadlessRendererFactory,
    ReconstructionManager,
)


class TestMain:
    def test_serve_runs_uvicorn(self):
        with patch("backend.cli.uvicorn.run") as mock_run:
            assert cli.main(["serve", "--port", "4000"]) == 0

        args, kwargs = mock_run.call_args
        assert args == ("backend.main:app",)
        assert kwargs["port"] == 4000

    def test_agent_missing_file(self, tmp_path, capsys):
        assert cli.main(["agent", str(tmp_path / "missing.jsonl")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_agent_runs_with_file(self, tmp_path):
        events = tmp_path / "events.jsonl"
        events.write_text('{"type": 2}\n')

        with patch("backend.cli._agent") as mock_agent, patch("backend.cli.asyncio.run") as mock_run:
            assert cli.main(["agent", str(events), "--url", "ws://relay:1/ws"]) == 0

        mock_run.assert_called_once()
        parsed = mock_agent.call_args.args[0]
        assert parsed.url == "ws://relay:1/ws"
        assert parsed.events == str(events)

    def test_watch_parses_options(self):
        with patch("backend.cli._watch") as mock_watch, patch("backend.cli.asyncio.run"):
            assert cli.main(["watch", "--backfill", "--interval", "2"]) == 0

        parsed = mock_watch.call_args.args[0]
        assert parsed.backfill is True
        assert parsed.interval == 2.0
        assert parsed.url.endswith("/ws")

    def test_requires_command(self):
        with pytest.raises(SystemExit):
            cli.main([])

    def test_errors_return_nonzero(self):
        with patch("backend.cli.uvicorn.run", side_effect=RuntimeError("port in use")):
            assert cli.main(["serve"]) == 1


class TestHeadlessRenderer:
    def test_watch_view_tracks_events(self):
        mounts = HeadlessMountProvider()
        manager = ReconstructionManager(HeadlessRendererFactory(), mounts, clock=lambda: 10.0)

        manager.on_event("session_abc", {"type": 2})
        manager.on_display_mode_toggle("session_abc")
        manager.on_event("session_abc", {"type": 3})

        handle = manager.get("session_abc").handle
        assert handle.events == [{"type": 2}, {"type": 3}]
        assert handle.root is mounts.mount_for("session_abc", expanded=True)
        assert handle.base_time_ms == 10.0 * 1000 - 300

    def test_paused_handle_ignores_events(self):
        manager = ReconstructionManager(HeadlessRendererFactory(), HeadlessMountProvider())
        manager.on_event("session_abc", 1)
        old = manager.get("session_abc").handle

        manager.on_display_mode_toggle("session_abc")
        old.add_event(2)

        assert old.paused is True
        assert old.events == [1]

    def test_print_labels(self, capsys):
        manager = ReconstructionManager(
            HeadlessRendererFactory(), HeadlessMountProvider(), clock=lambda: 0.0
        )
        manager.on_event("session_abc12345", 1)

        cli._print_labels(manager)(manager.tick(), manager.active_count_label())

        assert capsys.readouterr().out.strip() == "1 ACTIVE  ABC12345:NOW(1)"
