"""Tests for puregate.cli.commands.rules_cmd module."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from puregate.cli.main import app
from puregate.kernel.linting.style_rules import STYLE_RULE_REGISTRY


@pytest.fixture
def runner():
    """Fixture providing a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every command away from the project's own pyproject.toml."""
    monkeypatch.delenv("PUREGATE_CONFIG_PATH", raising=False)
    monkeypatch.chdir(tmp_path)


def _rows(result) -> dict[str, dict]:
    return {row["rule_id"]: row for row in json.loads(result.stdout)}


class TestRulesCommand:
    """Tests for the rules command."""

    def test_json_lists_every_rule(self, runner):
        result = runner.invoke(app, ["rules", "--format", "json"])
        assert result.exit_code == 0

        rows = _rows(result)
        assert set(rows) == set(STYLE_RULE_REGISTRY)
        assert list(rows) == sorted(rows)
        assert rows["no-var"]["severity"] == "error"
        assert rows["no-debugger"]["severity"] == "off"
        assert rows["eqeqeq"]["options"] == ["always"]
        assert rows["no-var"]["description"]

    def test_config_overrides(self, runner, tmp_path):
        config = tmp_path / "puregate.yaml"
        config.write_text(
            "kind: Config\nspec:\n  style_rules:\n"
            "    no-console: 'off'\n    no-debugger: warn\n"
        )
        result = runner.invoke(app, ["rules", "-f", "json", "-c", str(config)])
        assert result.exit_code == 0

        rows = _rows(result)
        assert rows["no-console"]["severity"] == "off"
        assert rows["no-debugger"]["severity"] == "warn"

    def test_invalid_rule_setting(self, runner, tmp_path):
        config = tmp_path / "puregate.yaml"
        config.write_text("kind: Config\nspec:\n  style_rules:\n    no-var: fatal\n")
        result = runner.invoke(app, ["rules", "-c", str(config)])
        assert result.exit_code == 1
        assert "Configuration Error" in result.stdout

    def test_table_output(self, runner):
        result = runner.invoke(app, ["rules"])
        assert result.exit_code == 0
        assert "Severity" in result.stdout
