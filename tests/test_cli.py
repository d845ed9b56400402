"""Tests for the command-line interface."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from notion_mirror import cli
from notion_mirror import config as config_module
from notion_mirror.errors import NotionAPIError
from notion_mirror.sync.service import BackupResult

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in config_module.ENV_KEYS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATHS", (tmp_path / "missing.toml",))


def result_with(errors):
    return BackupResult(root_page_id="root", output_dir=Path("out"), pages_processed=4, errors=errors, elapsed=0.5)


class TestBackupCommand:
    def test_missing_configuration_exits_before_traversal(self):
        with patch.object(cli, "run_backup", new=AsyncMock()) as run_backup:
            result = runner.invoke(cli.app, ["backup"])

        assert result.exit_code == 1
        assert "NOTION_TOKEN" in result.output
        run_backup.assert_not_called()

    def test_successful_backup_exits_zero(self, tmp_path):
        with patch.object(cli, "run_backup", new=AsyncMock(return_value=result_with(0))) as run_backup:
            result = runner.invoke(
                cli.app,
                ["backup", "--token", "secret", "--root-id", "root", "--output", str(tmp_path), "--sequential", "--delay", "0"],
            )

        assert result.exit_code == 0
        config = run_backup.await_args.args[0]
        assert config.parallel_processing is False
        assert config.api_delay_ms == 0
        assert config.output_dir == tmp_path
        assert "Processed pages" in result.output

    def test_errors_give_non_zero_exit(self):
        with patch.object(cli, "run_backup", new=AsyncMock(return_value=result_with(2))):
            result = runner.invoke(cli.app, ["backup", "--token", "secret", "--root-id", "root"])

        assert result.exit_code == 1


class FailingSearchClient:
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None

    async def search_pages(self, *, query=None):
        raise NotionAPIError(401, "API token is invalid.", code="unauthorized")
        yield  # pragma: no cover


class TestSearchCommand:
    def test_requires_token(self):
        result = runner.invoke(cli.app, ["search"])
        assert result.exit_code == 1

    def test_missing_config_file_is_reported(self, tmp_path):
        result = runner.invoke(cli.app, ["--config", str(tmp_path / "nope.toml"), "search", "--token", "secret"])

        assert result.exit_code == 1
        assert "Fatal error" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_api_error_is_reported(self):
        with patch.object(cli, "create_client", return_value=FailingSearchClient()):
            result = runner.invoke(cli.app, ["search", "--token", "secret"])

        assert result.exit_code == 1
        assert "Search failed" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)
