"""Tests for the VibeProxy CLI."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from conftest import FakeCollection, StubBackend
from vibeproxy.backend.models import BackendStatus, Health, ModelInfo
from vibeproxy.cli.main import app
from vibeproxy.core.constants import CONFIG_DIR_ENV
from vibeproxy.core.exceptions import (
    BackendRequestError,
    BackendUnavailableError,
    SecretServiceConnectionError,
)
from vibeproxy.credentials.store import SecretStore

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(config_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the CLI at a temporary config directory."""
    config_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv(CONFIG_DIR_ENV, str(config_dir))
    return config_dir


class TestMainCLI:
    """Tests for top-level options."""

    def test_help(self) -> None:
        """Help should list the command groups."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for group in ("config", "server", "secret"):
            assert group in result.stdout

    def test_invalid_log_level(self) -> None:
        """Unknown log level should fail."""
        result = runner.invoke(app, ["--log-level", "LOUD", "config", "path"])
        assert result.exit_code == 1


class TestConfigCLI:
    """Tests for config commands."""

    def test_path(self, config_dir: Path) -> None:
        """Should print the config file path."""
        result = runner.invoke(app, ["config", "path"])
        assert result.exit_code == 0
        assert "config.json" in result.stdout

    def test_show_defaults_json(self) -> None:
        """Should show defaults when no file exists."""
        result = runner.invoke(app, ["config", "show", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["backend"]["port"] == 8317

    def test_init_then_show(self, config_dir: Path) -> None:
        """init should write the default file once."""
        first = runner.invoke(app, ["config", "init"])
        second = runner.invoke(app, ["config", "init"])

        assert first.exit_code == 0
        assert (config_dir / "config.json").exists()
        assert "already exists" in second.stdout

    def test_show_masks_api_key(self, config_dir: Path) -> None:
        """The API key should not be printed."""
        (config_dir / "config.json").write_text(
            json.dumps({"backend": {"api_key": "sk-very-secret"}}), encoding="utf-8"
        )

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "sk-very-secret" not in result.stdout

    def test_show_corrupt_file_fails(self, config_dir: Path) -> None:
        """Corrupt config should exit with an error."""
        (config_dir / "config.json").write_text("{", encoding="utf-8")

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 1


class TestServerCLI:
    """Tests for server commands."""

    def test_status_json(self) -> None:
        """status --json should print the probe result."""
        stub = StubBackend(Health(healthy=True, latency_ms=5, message="ok"))
        with patch("vibeproxy.cli.server.BackendClient", stub.factory):
            result = runner.invoke(app, ["server", "status", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"running": True, "latency_ms": 5, "message": "ok"}

    def test_status_error(self) -> None:
        """Client errors should exit 1."""
        stub = StubBackend(BackendRequestError("bad", status_code=500))
        with patch("vibeproxy.cli.server.BackendClient", stub.factory):
            result = runner.invoke(app, ["server", "status"])

        assert result.exit_code == 1

    def test_status_shows_backend_details(self) -> None:
        """A healthy backend's version, uptime and model count are shown."""
        report = BackendStatus(
            version="1.4.2",
            uptime_secs=3600,
            models=[
                ModelInfo(id="gpt-4o", name="GPT-4o", provider="openai"),
                ModelInfo(id="claude", name="Claude", provider="anthropic"),
            ],
        )
        stub = StubBackend(Health(healthy=True, latency_ms=5, message="ok"), status=report)
        with patch("vibeproxy.cli.server.BackendClient", stub.factory):
            result = runner.invoke(app, ["server", "status"])

        assert result.exit_code == 0
        assert "Version: 1.4.2" in result.stdout
        assert "Uptime: 3600 s" in result.stdout
        assert "Models: 2" in result.stdout

    def test_status_without_report_still_succeeds(self) -> None:
        """A missing status report does not fail the health check."""
        stub = StubBackend(Health(healthy=True, latency_ms=5, message="ok"))
        with patch("vibeproxy.cli.server.BackendClient", stub.factory):
            result = runner.invoke(app, ["server", "status"])

        assert result.exit_code == 0
        assert "Server running" in result.stdout
        assert "Version" not in result.stdout

    def test_status_unavailable_skips_details(self) -> None:
        """No status report is requested from an unreachable backend."""
        report = BackendStatus(version="1.4.2")
        stub = StubBackend(BackendUnavailableError("Connection refused"), status=report)
        with patch("vibeproxy.cli.server.BackendClient", stub.factory):
            result = runner.invoke(app, ["server", "status"])

        assert result.exit_code == 0
        assert "Server not running" in result.stdout
        assert "Version" not in result.stdout

    def test_status_mistyped_config_fails_cleanly(self, config_dir: Path) -> None:
        """A mistyped port exits 1 with an error instead of a traceback."""
        (config_dir / "config.json").write_text(
            json.dumps({"backend": {"port": "abc"}}), encoding="utf-8"
        )

        result = runner.invoke(app, ["server", "status"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)

    def test_start_help_explains_scope(self) -> None:
        """start help says the flag only lasts for this process."""
        result = runner.invoke(app, ["server", "start", "--help"])

        assert result.exit_code == 0
        assert "this process" in result.stdout

    def test_start(self, healthy_backend: StubBackend) -> None:
        """start should report success."""
        with patch("vibeproxy.cli.server.BackendClient", healthy_backend.factory):
            result = runner.invoke(app, ["server", "start"])

        assert result.exit_code == 0
        assert "Server started" in result.stdout


class TestSecretCLI:
    """Tests for secret commands."""

    @pytest.fixture
    def connected(self, collection: FakeCollection):
        with patch.object(SecretStore, "connect", return_value=SecretStore(collection)):
            yield collection

    def test_set_get_list_delete(self, connected: FakeCollection) -> None:
        """Secrets should round-trip through the commands."""
        assert runner.invoke(app, ["secret", "set", "openai", "--value", "sk-1"]).exit_code == 0

        got = runner.invoke(app, ["secret", "get", "openai"])
        assert got.exit_code == 0
        assert got.stdout.strip() == "sk-1"

        listed = runner.invoke(app, ["secret", "list"])
        assert "openai" in listed.stdout

        assert runner.invoke(app, ["secret", "delete", "openai"]).exit_code == 0
        assert connected.items == []

    def test_set_prompts_for_value(self, connected: FakeCollection) -> None:
        """Value should be prompted when omitted."""
        result = runner.invoke(app, ["secret", "set", "anthropic"], input="sk-2\n")

        assert result.exit_code == 0
        assert connected.items[0].secret == b"sk-2"

    def test_get_missing(self, connected: FakeCollection) -> None:
        """Missing secret should exit 1."""
        result = runner.invoke(app, ["secret", "get", "nope"])
        assert result.exit_code == 1

    def test_list_empty(self, connected: FakeCollection) -> None:
        """Empty store should say so."""
        result = runner.invoke(app, ["secret", "list"])
        assert result.exit_code == 0
        assert "No secrets stored" in result.stdout

    def test_connect_failure(self) -> None:
        """Unreachable secret service should exit 1."""
        with patch.object(
            SecretStore, "connect", side_effect=SecretServiceConnectionError("no bus")
        ):
            result = runner.invoke(app, ["secret", "list"])

        assert result.exit_code == 1
