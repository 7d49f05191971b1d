"""Tests for puregate.kernel.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from puregate.kernel.config.loader import (
    CONFIG_PATH_ENV,
    ConfigLoader,
    _parse_bool_env,
    get_default_config,
    load_config,
)
from puregate.kernel.config.models import LoggingConfig, PureGateConfig
from puregate.kernel.exceptions import ConfigurationError, ValidationError
from puregate.kernel.js.parser import MAX_SYNTAX_ERRORS, ModuleFormat
from puregate.kernel.orchestration.options import ValidateOptions

YAML_CONFIG = """\
kind: Config
metadata:
  name: generated-code
spec:
  max_errors: 5
  module_format: esm
  allowed_members:
    - console.debug
  style_rules:
    no-console: "off"
    eqeqeq: [error, smart]
  logging:
    level: DEBUG
"""

PYPROJECT_CONFIG = """\
[project]
name = "demo"

[tool.puregate]
skip_style = true
allowed_identifiers = ["Date"]

[tool.puregate.style_rules]
no-var = "warn"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep config env vars from the host out of the tests."""
    for name in (
        CONFIG_PATH_ENV,
        "PUREGATE_LOG_LEVEL",
        "PUREGATE_LOG_FORMAT",
        "PUREGATE_LOG_FILE",
        "PUREGATE_LOG_COLOR",
        "PUREGATE_LOG_TIMESTAMP",
    ):
        monkeypatch.delenv(name, raising=False)


class TestYamlConfig:
    """Tests for kind: Config manifests."""

    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "puregate.yaml"
        path.write_text(YAML_CONFIG)

        config = load_config(path)

        assert config.max_errors == 5
        assert config.module_format == ModuleFormat.DECLARATIVE_EXPORT
        assert config.allowed_members == ("console.debug",)
        assert config.style_rules == {"no-console": "off", "eqeqeq": ["error", "smart"]}
        assert config.logging.level == "DEBUG"

    def test_wrong_kind(self, tmp_path: Path) -> None:
        path = tmp_path / "pipeline.yaml"
        path.write_text("kind: Pipeline\nspec: {}\n")
        with pytest.raises(ConfigurationError, match="kind: Config"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="expected a mapping"):
            load_config(path)

    def test_env_substitution(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PG_FORMAT", "cjs")
        path = tmp_path / "puregate.yaml"
        path.write_text(
            "kind: Config\nspec:\n  module_format: ${PG_FORMAT}\n"
            "  allowed_members: ['${PG_UNSET_VARIABLE}']\n"
        )

        config = load_config(path)

        assert config.module_format == ModuleFormat.PROPERTY_EXPORT
        assert config.allowed_members == ("${PG_UNSET_VARIABLE}",)

    def test_env_var_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text(YAML_CONFIG)
        monkeypatch.setenv(CONFIG_PATH_ENV, str(path))
        monkeypatch.chdir(tmp_path)

        assert load_config().max_errors == 5


class TestPyprojectConfig:
    """Tests for [tool.puregate] discovery."""

    def test_load_section(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "pyproject.toml").write_text(PYPROJECT_CONFIG)
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert config.skip_style is True
        assert config.allowed_identifiers == ("Date",)
        assert config.style_rules == {"no-var": "warn"}
        assert config.max_errors == MAX_SYNTAX_ERRORS

    def test_missing_section_uses_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n')
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert config.style_rules == {}
        assert config.module_format == ModuleFormat.INFER

    def test_parent_directory_discovery(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "pyproject.toml").write_text(PYPROJECT_CONFIG)
        nested = tmp_path / "src" / "gen"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert load_config().skip_style is True


class TestLoadConfig:
    """Tests for load_config fallbacks and value checks."""

    def test_explicit_missing_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_defaults_without_any_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def not_found(self: ConfigLoader, path: object) -> Path:
            raise FileNotFoundError("no config")

        monkeypatch.setattr(ConfigLoader, "_find_config_file", not_found)

        config = load_config()

        assert config == get_default_config()

    def test_log_level_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PUREGATE_LOG_LEVEL", "debug")
        monkeypatch.setenv("PUREGATE_LOG_COLOR", "off")

        logging_config = ConfigLoader()._parse_logging_config({"level": "ERROR"})

        assert logging_config.level == "DEBUG"
        assert logging_config.use_color is False

    def test_invalid_module_format(self, tmp_path: Path) -> None:
        path = tmp_path / "puregate.yaml"
        path.write_text("kind: Config\nspec:\n  module_format: amd\n")
        with pytest.raises(ConfigurationError, match="module_format"):
            load_config(path)

    def test_style_rules_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "puregate.yaml"
        path.write_text("kind: Config\nspec:\n  style_rules: [no-var]\n")
        with pytest.raises(ConfigurationError, match="style_rules"):
            load_config(path)

    def test_string_list_required(self, tmp_path: Path) -> None:
        path = tmp_path / "puregate.yaml"
        path.write_text("kind: Config\nspec:\n  allowed_members: [1, 2]\n")
        with pytest.raises(ConfigurationError, match="allowed_members"):
            load_config(path)

    def test_skip_style_from_string(self, tmp_path: Path) -> None:
        path = tmp_path / "puregate.yaml"
        path.write_text("kind: Config\nspec:\n  skip_style: 'yes'\n")
        assert load_config(path).skip_style is True

    def test_invalid_max_errors(self, tmp_path: Path) -> None:
        path = tmp_path / "puregate.yaml"
        path.write_text("kind: Config\nspec:\n  max_errors: 0\n")
        with pytest.raises(ValidationError):
            load_config(path)


class TestParseBoolEnv:
    """Tests for _parse_bool_env."""

    @pytest.mark.parametrize("value", ["true", "1", "YES", " on ", "enabled"])
    def test_truthy(self, value: str) -> None:
        assert _parse_bool_env(value) is True

    @pytest.mark.parametrize("value", ["false", "0", "No", "off", "disabled"])
    def test_falsy(self, value: str) -> None:
        assert _parse_bool_env(value) is False

    def test_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid boolean value"):
            _parse_bool_env("maybe")


class TestPureGateConfig:
    """Tests for the config model."""

    def test_defaults(self) -> None:
        config = PureGateConfig()
        assert config.max_errors == MAX_SYNTAX_ERRORS
        assert config.logging == LoggingConfig()

    def test_max_errors_validated(self) -> None:
        with pytest.raises(ValidationError, match="max_errors"):
            PureGateConfig(max_errors=0)

    def test_to_options(self) -> None:
        config = PureGateConfig(
            max_errors=3,
            allowed_identifiers=("Date",),
            style_rules={"no-var": "warn"},
        )

        options = config.to_options(filename="a.js")

        assert isinstance(options, ValidateOptions)
        assert options.max_errors == 3
        assert options.allowed_identifiers == frozenset({"Date"})
        assert options.style_rules == {"no-var": "warn"}
        assert options.filename == "a.js"

    def test_to_options_overrides(self) -> None:
        options = PureGateConfig(skip_style=True).to_options(skip_style=False)
        assert options.skip_style is False
