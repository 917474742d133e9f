"""Tests for the channel_sync command line interface."""

import json
from unittest.mock import patch

import pytest

from channel_sync.__main__ import build_parser, main
from channel_sync.config import SyncStoreConfig
from channel_sync.sync.store import SyncStore


@pytest.fixture
def store_path(tmp_path):
    """A file-backed store directory with two channels persisted."""
    path = tmp_path / "state"
    config = SyncStoreConfig(backend="file", store_path=path, debounce_seconds=60)
    with SyncStore(config) as store:
        store.record_event("north_fire", "evt-3", 300, 3)
        store.record_event("north_fire", "evt-4", 400, 4)
        store.record_event("gate_crowd", "evt-1", 100, 1)
    return path


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("channel_sync.__main__.setup_logging"):
        yield


def run(*argv):
    return main(list(argv))


class TestParser:
    """Test argument parsing."""

    def test_commands(self):
        parser = build_parser()
        args = parser.parse_args(["--store-path", "/tmp/x", "show", "north_fire", "--json"])
        assert args.command == "show"
        assert args.channel == "north_fire"
        assert args.json is True

    def test_no_command_prints_help(self, capsys):
        assert run() == 0
        assert "usage" in capsys.readouterr().out

    def test_store_path_required(self, capsys):
        assert run("stats") == 1
        assert "--store-path" in capsys.readouterr().err


class TestCommands:
    """Test each subcommand against a real file store."""

    def test_stats_text(self, store_path, capsys):
        assert run("--store-path", str(store_path), "stats") == 0
        out = capsys.readouterr().out
        assert "Channels: 2" in out
        assert "Total events: 3" in out
        assert "[north_fire]" in out

    def test_stats_json(self, store_path, capsys):
        assert run("--store-path", str(store_path), "stats", "--json") == 0
        stats = json.loads(capsys.readouterr().out)
        assert stats["channel_count"] == 2
        assert stats["total_events"] == 3

    def test_stats_empty(self, tmp_path, capsys):
        assert run("--store-path", str(tmp_path / "empty"), "stats") == 0
        assert "No channels recorded" in capsys.readouterr().out

    def test_show(self, store_path, capsys):
        assert run("--store-path", str(store_path), "show", "north_fire", "--json") == 0
        record = json.loads(capsys.readouterr().out)
        assert record["highest_sequence"] == 4
        assert record["total_received"] == 2

    def test_show_unknown(self, store_path, capsys):
        assert run("--store-path", str(store_path), "show", "nope") == 1
        assert "No sync state" in capsys.readouterr().err

    def test_resume_state(self, store_path, capsys):
        assert run("--store-path", str(store_path), "resume-state", "north_fire") == 0
        cursors = json.loads(capsys.readouterr().out)
        assert cursors == {
            "north_fire": {"last_event_id": "evt-4", "last_timestamp": 400, "last_seq": 4},
        }

    def test_resume_state_all(self, store_path, capsys):
        assert run("--store-path", str(store_path), "resume-state") == 0
        assert set(json.loads(capsys.readouterr().out)) == {"gate_crowd", "north_fire"}

    def test_clear_channel(self, store_path, capsys):
        assert run("--store-path", str(store_path), "clear", "--channel", "north_fire") == 0
        assert "Cleared sync state for 'north_fire'" in capsys.readouterr().out

        reloaded = SyncStore(SyncStoreConfig(backend="file", store_path=store_path))
        assert reloaded.get_record("north_fire") is None
        assert reloaded.get_record("gate_crowd") is not None

    def test_clear_unknown_channel(self, store_path, capsys):
        assert run("--store-path", str(store_path), "clear", "--channel", "nope") == 0
        assert "has no sync state" in capsys.readouterr().out

    def test_clear_all(self, store_path, capsys):
        assert run("--store-path", str(store_path), "clear") == 0
        assert not (store_path / "channel_sync_states.json").exists()
