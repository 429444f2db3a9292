# ==============================================================================
# Tests for the kvcache CLI
# ==============================================================================
"""
Tests for the kvcache command tree.

Verifies that:
- Every command exits with code 0 when invoked with --help and shows its
  description
- get/set/drop round-trip entries through a backend (fakeredis)
- status and config show report the configured backend

These tests use the real app from kvcache.app so the full command tree is
wired up as installed.
"""

import importlib
import json

import pytest
from typer.testing import CliRunner

from conftest import TrackingFakeRedis
from kvcache.app import app
from kvcache.cli import entries
from kvcache.core.errors import ConnectionFailedError
from kvcache.infrastructure.cache import RedisConnection

# kvcache.cli re-exports the `status` command, shadowing the submodule attribute.
status_module = importlib.import_module("kvcache.cli.status")

runner = CliRunner()


@pytest.fixture()
def cli_backend(monkeypatch, fake_server):
    """Route CLI commands to an adopted fakeredis client on one shared server."""

    def _get_connection():
        return RedisConnection(client=TrackingFakeRedis(server=fake_server, decode_responses=True))

    monkeypatch.setattr(entries, "get_connection", _get_connection)
    monkeypatch.setattr(status_module, "get_connection", _get_connection)
    return fake_server


# ==============================================================================
# Help
# ==============================================================================


class TestRootHelp:
    """Tests for the root `kvcache --help` output."""

    def test_exit_code(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0

    def test_description(self):
        result = runner.invoke(app, ["--help"])
        assert "Redis envelope cache backend CLI" in result.output

    def test_lists_all_subcommands(self):
        """Root --help lists every top-level command."""
        result = runner.invoke(app, ["--help"])
        for cmd in ["config", "drop", "get", "set", "status"]:
            assert cmd in result.output, f"Missing command: {cmd}"

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("kvcache ")


class TestCommandHelp:
    """Tests for each command's --help output."""

    @pytest.mark.parametrize(
        "args, description",
        [
            (["get", "--help"], "Read a cached entry"),
            (["set", "--help"], "Store a value"),
            (["drop", "--help"], "Delete the entry"),
            (["status", "--help"], "Check connectivity"),
            (["config", "--help"], "Configuration management"),
            (["config", "show", "--help"], "Display current configuration"),
        ],
    )
    def test_description(self, args, description):
        result = runner.invoke(app, args)
        assert result.exit_code == 0
        assert description in result.output

    def test_set_lists_options(self):
        result = runner.invoke(app, ["set", "--help"])
        assert "--ttl" in result.output
        assert "--string" in result.output


# ==============================================================================
# Entries
# ==============================================================================


class TestEntries:
    """Tests for get/set/drop against a fake backend."""

    def test_set_then_get(self, cli_backend):
        result = runner.invoke(app, ["set", "users", "42", '{"name": "Ada"}', "--ttl", "30000"])
        assert result.exit_code == 0
        assert "Stored users:42 (ttl 30000 ms)" in result.output

        result = runner.invoke(app, ["get", "users", "42", "--json"])
        assert result.exit_code == 0
        envelope = json.loads(result.output)
        assert envelope["item"] == {"name": "Ada"}
        assert envelope["ttl"] == 30000
        assert envelope["stored"] > 0

    def test_set_as_string(self, cli_backend):
        runner.invoke(app, ["set", "users", "42", "123", "--string"])
        result = runner.invoke(app, ["get", "users", "42", "--json"])
        assert json.loads(result.output)["item"] == "123"

    def test_set_json_number(self, cli_backend):
        runner.invoke(app, ["set", "users", "42", "123"])
        result = runner.invoke(app, ["get", "users", "42", "--json"])
        assert json.loads(result.output)["item"] == 123

    def test_get_table(self, cli_backend):
        runner.invoke(app, ["set", "users", "7", "true"])
        result = runner.invoke(app, ["get", "users", "7"])
        assert result.exit_code == 0
        assert "users/7" in result.output
        assert "60000 ms" in result.output

    def test_get_missing(self, cli_backend):
        result = runner.invoke(app, ["get", "users", "404"])
        assert result.exit_code == 1
        assert "Not found: users/404" in result.output

    def test_get_missing_json(self, cli_backend):
        result = runner.invoke(app, ["get", "users", "404", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.output) == {"error": "Not found", "segment": "users", "id": "404"}

    def test_drop(self, cli_backend):
        runner.invoke(app, ["set", "users", "42", "1"])
        result = runner.invoke(app, ["drop", "users", "42"])
        assert result.exit_code == 0
        assert "Dropped users:42" in result.output

        result = runner.invoke(app, ["get", "users", "42"])
        assert result.exit_code == 1

    def test_drop_missing(self, cli_backend):
        result = runner.invoke(app, ["drop", "users", "404"])
        assert result.exit_code == 0

    def test_invalid_segment(self, cli_backend):
        result = runner.invoke(app, ["get", "", "42"])
        assert result.exit_code == 1
        assert "Empty string" in result.output


# ==============================================================================
# Status
# ==============================================================================


class TestStatus:
    """Tests for `kvcache status`."""

    def test_ready(self, cli_backend):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "ready" in result.output

    def test_ready_json(self, cli_backend):
        result = runner.invoke(app, ["status", "--json"])
        data = json.loads(result.output)
        assert result.exit_code == 0
        assert data["ready"] is True
        assert data["topology"] == "external"
        assert data["error"] is None
        assert "kvcache" in data["versions"]

    def test_unreachable(self, monkeypatch):
        async def _refuse(connection):
            raise ConnectionFailedError("Failed to connect to Redis at 127.0.0.1:6379: refused")

        monkeypatch.setattr(status_module, "_start_with_retry", _refuse)
        result = runner.invoke(app, ["status", "--json"])
        data = json.loads(result.output)
        assert result.exit_code == 1
        assert data["ready"] is False
        assert "refused" in data["error"]

    def test_invalid_configuration(self, monkeypatch):
        monkeypatch.setenv("KVCACHE_REDIS_URL", "redis://localhost")
        monkeypatch.setenv("KVCACHE_REDIS_SOCKET", "/tmp/redis.sock")
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 1
        assert "conflicting topology options" in result.output


# ==============================================================================
# Config
# ==============================================================================


class TestConfigShow:
    """Tests for `kvcache config show`."""

    def test_json(self, monkeypatch):
        monkeypatch.setenv("KVCACHE_REDIS_URL", "redis://cache.internal:6380")
        monkeypatch.setenv("KVCACHE_REDIS_PARTITION", "app")
        result = runner.invoke(app, ["config", "show", "--json"])
        data = json.loads(result.output)
        assert result.exit_code == 0
        assert data["topology"] == "url"
        assert data["redis"]["url"] == "redis://cache.internal:6380"
        assert data["redis"]["partition"] == "app"
        assert "client" not in data["redis"]

    def test_masks_password(self, monkeypatch):
        monkeypatch.setenv("KVCACHE_REDIS_PASSWORD", "hunter2")
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "hunter2" not in result.output
        assert "********" in result.output

    def test_invalid(self, monkeypatch):
        monkeypatch.setenv("KVCACHE_REDIS_URL", "redis://localhost")
        monkeypatch.setenv("KVCACHE_REDIS_SOCKET", "/tmp/redis.sock")
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 1
