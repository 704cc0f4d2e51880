"""Unit tests for the fcimport CLI."""

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from pyfcimport.cli import main
from pyfcimport.exceptions import ResourceReadError


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_client_class():
    """Patch RepositoryClient in the CLI and yield the class mock."""
    with patch("pyfcimport.cli.RepositoryClient") as mock_class:
        client = MagicMock()
        client.create.return_value = True
        client.patch.return_value = True
        mock_class.return_value.__enter__.return_value = client
        yield mock_class


@pytest.fixture
def resources(tmp_path):
    root = tmp_path / "resources"
    root.mkdir()
    (root / "data.ttl").write_text("<> a <urn:x> .\n")
    (root / "23").mkdir()
    (root / "23" / "_.ttl").write_text("<> a <urn:c> .\n")
    (root / "23" / "update.ru").write_text("INSERT DATA {}\n")
    return root


def _client(mock_class):
    return mock_class.return_value.__enter__.return_value


class TestMain:
    """Tests for the main command."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "--url" in result.output
        assert "--dry-run" in result.output

    def test_runs_both_passes(self, runner, mock_client_class, resources):
        """Test create then update pass against the configured URL."""
        result = runner.invoke(
            main,
            ["--root", str(resources), "--url", "http://repo/rest/", "--no-progress"],
        )

        assert result.exit_code == 0, result.output
        mock_client_class.assert_called_once_with(
            "http://repo/rest/", auth_header=None, timeout=30.0
        )
        client = _client(mock_client_class)
        created = [c.args[0] for c in client.create.call_args_list]
        patched = [c.args[0] for c in client.patch.call_args_list]
        assert created == ["", "23", "data"]
        assert patched == ["23/update"]

    def test_create_mode_only(self, runner, mock_client_class, resources):
        result = runner.invoke(
            main, ["--root", str(resources), "--mode", "create", "--no-progress"]
        )
        assert result.exit_code == 0, result.output
        _client(mock_client_class).patch.assert_not_called()

    def test_update_mode_only(self, runner, mock_client_class, resources):
        result = runner.invoke(
            main, ["--root", str(resources), "--mode", "update", "--no-progress"]
        )
        assert result.exit_code == 0, result.output
        _client(mock_client_class).create.assert_not_called()
        _client(mock_client_class).patch.assert_called_once()

    def test_with_progress_display(self, runner, mock_client_class, resources):
        result = runner.invoke(main, ["--root", str(resources)])
        assert result.exit_code == 0, result.output
        assert _client(mock_client_class).create.call_count == 3

    def test_env_vars_and_auth(self, runner, mock_client_class, resources):
        """Test settings from the environment, URL gets a trailing slash."""
        result = runner.invoke(
            main,
            ["--no-progress"],
            env={
                "FCREPO_URL": "http://repo/rest",
                "FCREPO_RESOURCES_DIR": str(resources),
                "FCREPO_AUTH_USER": "user",
                "FCREPO_AUTH_PASSWORD": "pass",
            },
        )

        assert result.exit_code == 0, result.output
        mock_client_class.assert_called_once_with(
            "http://repo/rest/", auth_header="Basic dXNlcjpwYXNz", timeout=30.0
        )

    def test_upload_failures_keep_exit_code_zero(
        self, runner, mock_client_class, resources
    ):
        client = _client(mock_client_class)
        client.create.return_value = False
        client.patch.return_value = False

        result = runner.invoke(main, ["--root", str(resources), "--no-progress"])

        assert result.exit_code == 0

    def test_dry_run(self, runner, mock_client_class, resources):
        result = runner.invoke(
            main, ["--root", str(resources), "--dry-run", "--no-progress"]
        )
        assert result.exit_code == 0, result.output
        _client(mock_client_class).create.assert_not_called()
        _client(mock_client_class).patch.assert_not_called()

    def test_missing_prefix_file_is_fatal(
        self, runner, mock_client_class, resources, tmp_path
    ):
        result = runner.invoke(
            main,
            [
                "--root",
                str(resources),
                "--prefix-file",
                str(tmp_path / "missing.ttl"),
                "--no-progress",
            ],
        )
        assert result.exit_code == 1
        assert "Could not read prefix file" in result.output
        mock_client_class.assert_not_called()

    def test_read_error_exits_non_zero(self, runner, mock_client_class, resources):
        with patch(
            "pyfcimport.cli.run_passes", side_effect=ResourceReadError("data.ttl")
        ):
            result = runner.invoke(main, ["--root", str(resources), "--no-progress"])
        assert result.exit_code == 1

    def test_unlistable_directory_aborts(
        self, runner, mock_client_class, resources, caplog
    ):
        """Test a directory that cannot be listed is logged and exits 1."""
        locked = resources / "locked"
        locked.mkdir()
        real_scandir = os.scandir

        def scandir(path):
            if Path(path) == locked:
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        with patch("pyfcimport.walker.os.scandir", side_effect=scandir):
            result = runner.invoke(main, ["--root", str(resources), "--no-progress"])

        assert result.exit_code == 1
        assert not isinstance(result.exception, PermissionError)
        assert "Aborting: Could not list" in caplog.text
        assert str(locked) in caplog.text

    def test_missing_root(self, runner, mock_client_class, tmp_path):
        result = runner.invoke(main, ["--root", str(tmp_path / "nope")])
        assert result.exit_code == 2
