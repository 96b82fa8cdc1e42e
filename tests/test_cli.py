"""Tests for the ``tenantkv`` CLI (typer CliRunner, in-memory Redis)."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from tenantkv.cli import app

runner = CliRunner()


@pytest.fixture
def cli_redis(monkeypatch, fake_redis):
    monkeypatch.setattr("tenantkv.client.raw_connection", lambda config: fake_redis)
    # Logging is configured per test by the CLI callback; keep structlog defaults.
    monkeypatch.setattr("tenantkv.cli.configure_logging", lambda **kwargs: None)
    fake_redis.data.update(
        {
            "site_a:user_1": "1",
            "site_a:user_2": "2",
            "site_a:order_1": "3",
            "site_b:user_1": "4",
        }
    )
    return fake_redis


class TestKeys:
    def test_lists_tenant_keys(self, cli_redis):
        result = runner.invoke(app, ["keys", "--tenant", "site_a"])
        assert result.exit_code == 0
        assert "user_1" in result.output
        assert "order_1" in result.output
        assert "site_a:" not in result.output

    def test_pattern(self, cli_redis):
        result = runner.invoke(app, ["keys", "order_*", "-t", "site_a"])
        assert "order_1" in result.output
        assert "user_1" not in result.output

    def test_empty_namespace(self, cli_redis):
        result = runner.invoke(app, ["keys", "-t", "site_c"])
        assert result.exit_code == 0
        assert "No keys" in result.output

    def test_invalid_tenant(self, cli_redis):
        result = runner.invoke(app, ["keys", "-t", "bad:tenant"])
        assert result.exit_code == 1


class TestDeletePrefix:
    def test_deletes(self, cli_redis):
        result = runner.invoke(app, ["delete-prefix", "user_", "-t", "site_a"])
        assert result.exit_code == 0
        assert "Deleted 2 keys" in result.output
        assert sorted(cli_redis.data) == ["site_a:order_1", "site_b:user_1"]


class TestFlush:
    def test_requires_confirmation(self, cli_redis):
        result = runner.invoke(app, ["flush", "-t", "site_a"], input="n\n")
        assert result.exit_code != 0
        assert len(cli_redis.data) == 4

    def test_flush_with_yes(self, cli_redis):
        result = runner.invoke(app, ["flush", "-t", "site_a", "--yes"])
        assert result.exit_code == 0
        assert list(cli_redis.data) == ["site_b:user_1"]


class TestUrlAndConfig:
    def test_url_from_env(self, cli_redis, monkeypatch):
        monkeypatch.setenv("TENANTKV_REDIS_HOST", "cache")
        result = runner.invoke(app, ["url"])
        assert result.exit_code == 0
        assert "redis://cache:6379/0" in result.output

    def test_url_from_config_file(self, cli_redis, tmp_path):
        path = tmp_path / "redis.yml"
        path.write_text("staging:\n  host: stage\n  port: 6381\n  db: 1\n", encoding="utf-8")
        result = runner.invoke(app, ["--config", str(path), "--env", "staging", "url"])
        assert "redis://stage:6381/1" in result.output

    def test_url_missing_environment(self, cli_redis, tmp_path):
        path = tmp_path / "redis.yml"
        path.write_text("staging:\n  host: stage\n", encoding="utf-8")
        result = runner.invoke(app, ["--config", str(path), "--env", "prod", "url"])
        assert result.exit_code == 1

    def test_config_show_masks_password(self, cli_redis, monkeypatch):
        monkeypatch.setenv("TENANTKV_REDIS_PASSWORD", "s3cret")
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "s3cret" not in result.output
        assert "****" in result.output
