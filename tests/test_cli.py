"""
Unit tests for the CLI and command implementations.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from ig_migrate import __version__
from ig_migrate.cli import main
from ig_migrate.commands import run_migration
from ig_migrate.config import ConfigLoader, MigratorConfig
from ig_migrate.migrator import MigrationStats


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated(monkeypatch):
    """Clear loader variables, keep logging untouched and never run ffprobe."""
    for env_var in ConfigLoader.ENV_VAR_MAPPING:
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setattr("ig_migrate.commands.setup_logging", lambda **kwargs: None)
    monkeypatch.setattr("ig_migrate.video.FFPROBE_COMMAND", "/nonexistent/ffprobe")


class TestMain:
    """Tests for the command group."""

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert f"ig-migrate, version {__version__}" in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "migrate" in result.output
        assert "config" in result.output


class TestMigrateCommand:
    """Tests for the migrate command."""

    def test_simulated_migration(self, runner, archive_folder):
        result = runner.invoke(main, ["migrate", "--archive-folder", str(archive_folder)])

        assert result.exit_code == 0, result.output
        assert "SIMULATE MODE" in result.output
        assert "Migration Summary" in result.output
        assert "Posted:         2" in result.output
        assert "Media:          3" in result.output
        assert "Estimated time for real import" in result.output

    def test_archive_folder_from_env(self, runner, archive_folder, monkeypatch):
        monkeypatch.setenv("ARCHIVE_FOLDER", str(archive_folder))

        result = runner.invoke(main, ["migrate"])

        assert result.exit_code == 0, result.output

    def test_plan_file(self, runner, archive_folder, tmp_path):
        plan_file = tmp_path / "plan.json"

        result = runner.invoke(main, [
            "migrate", "--archive-folder", str(archive_folder), "--plan-file", str(plan_file),
        ])

        assert result.exit_code == 0, result.output
        assert json.loads(plan_file.read_text(encoding="utf-8"))["total_posts"] == 2

    def test_date_window(self, runner, archive_folder, tmp_path):
        plan_file = tmp_path / "plan.json"

        result = runner.invoke(main, [
            "migrate", "--archive-folder", str(archive_folder),
            "--min-date", "2024-01-15", "--max-date", "2024-02-01",
            "--plan-file", str(plan_file),
        ])

        assert result.exit_code == 0, result.output
        assert "Out of range:   1" in result.output
        assert json.loads(plan_file.read_text(encoding="utf-8"))["total_posts"] == 1

    def test_missing_archive_folder(self, runner):
        result = runner.invoke(main, ["migrate"])

        assert result.exit_code == 1
        assert "No archive folder provided" in result.output

    def test_invalid_date(self, runner, archive_folder):
        result = runner.invoke(main, ["migrate", "--archive-folder", str(archive_folder), "--min-date", "soon"])

        assert result.exit_code == 1
        assert "Invalid date" in result.output

    def test_simulate_flag_removed(self, runner, archive_folder):
        result = runner.invoke(main, ["migrate", "--archive-folder", str(archive_folder), "--no-simulate"])

        assert result.exit_code == 2
        assert "No such option" in result.output

    def test_publishing_from_config_file_rejected(self, runner, archive_folder, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(f"archive_folder: {archive_folder}\nsimulate: false\n")

        result = runner.invoke(main, ["migrate", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "publishing is not available from the command line" in result.output
        assert "Migration Summary" not in result.output

    def test_config_file(self, runner, archive_folder, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"archive_folder": str(archive_folder), "concurrency": 1}))

        result = runner.invoke(main, ["migrate", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "Concurrency:    1 posts" in result.output


class TestConfigCommand:
    """Tests for the config command."""

    def test_shows_defaults(self, runner):
        result = runner.invoke(main, ["config"])

        assert result.exit_code == 0
        assert "concurrency: 4 (default)" in result.output
        assert "archive_folder: None (default)" in result.output

    def test_verbose_lists_environment(self, runner, monkeypatch):
        monkeypatch.setenv("IG_MIGRATE_CONCURRENCY", "6")

        result = runner.invoke(main, ["config", "--verbose"])

        assert result.exit_code == 0
        assert "concurrency: 6 (from environment)" in result.output
        assert "IG_MIGRATE_CONCURRENCY: 6" in result.output
        assert "ARCHIVE_FOLDER: (not set)" in result.output


class TestRunMigration:
    """Tests for run_migration."""

    @pytest.mark.asyncio
    async def test_missing_export(self, tmp_path, capsys):
        exit_code = await run_migration(MigratorConfig(archive_folder=tmp_path))

        assert exit_code == 1
        assert "Cannot read export" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_interrupted(self, archive_folder, capsys):
        with patch("ig_migrate.commands.Migrator.run", AsyncMock(side_effect=KeyboardInterrupt)):
            exit_code = await run_migration(MigratorConfig(archive_folder=archive_folder))

        assert exit_code == 130
        assert "interrupted" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_all_uploads_failed(self, archive_folder):
        stats = MigrationStats(target_posts=2, failed_uploads=2, simulated=False)
        uploader = AsyncMock()
        config = MigratorConfig(archive_folder=archive_folder, simulate=False)

        with patch("ig_migrate.commands.Migrator.run", AsyncMock(return_value=stats)):
            assert await run_migration(config, uploader=uploader) == 1

    @pytest.mark.asyncio
    async def test_unexpected_error(self, archive_folder, capsys):
        with patch("ig_migrate.commands.Migrator.run", AsyncMock(side_effect=RuntimeError("boom"))):
            exit_code = await run_migration(MigratorConfig(archive_folder=archive_folder))

        assert exit_code == 1
        assert "Migration failed: boom" in capsys.readouterr().err
