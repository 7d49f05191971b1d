"""Configuration loader for puregate.

Supports two config sources:

1. **kind: Config YAML**, loaded via explicit path or the
   ``PUREGATE_CONFIG_PATH`` env var.
2. **pyproject.toml [tool.puregate]**, the auto-discovery fallback.
"""

from __future__ import annotations

import os
import re
import tomllib
from pathlib import Path
from typing import Any, Literal, cast

import yaml

from puregate.kernel.config.models import LoggingConfig, PureGateConfig
from puregate.kernel.exceptions import ConfigurationError
from puregate.kernel.js.parser import MAX_SYNTAX_ERRORS, ModuleFormat
from puregate.kernel.logging import get_logger

# Constants for boolean environment variable parsing
_TRUTHY_VALUES = frozenset({"true", "1", "yes", "on", "enabled"})
_FALSY_VALUES = frozenset({"false", "0", "no", "off", "disabled"})

CONFIG_PATH_ENV = "PUREGATE_CONFIG_PATH"

logger = get_logger(__name__)


def _parse_bool_env(value: str) -> bool:
    """Parse boolean from environment variable value.

    Raises
    ------
    ValueError
        If value is not a recognized boolean string
    """
    normalized = value.lower().strip()
    if normalized in _TRUTHY_VALUES:
        return True
    if normalized in _FALSY_VALUES:
        return False
    expected = sorted(_TRUTHY_VALUES | _FALSY_VALUES)
    raise ValueError(f"Invalid boolean value: {value!r}. Expected one of: {expected}")


def _string_list(data: dict[str, Any], key: str) -> tuple[str, ...]:
    value = data.get(key, [])
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigurationError(key, "expected a list of strings")
    return tuple(value)


class ConfigLoader:
    """Loads and processes puregate configuration files.

    Supports two config sources:

    1. ``kind: Config`` YAML manifests (explicit path or env var)
    2. ``pyproject.toml [tool.puregate]`` (auto-discovery)
    """

    ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

    def load_config_file(self, path: str | Path | None = None) -> PureGateConfig:
        """Load configuration from YAML or pyproject.toml.

        Parameters
        ----------
        path : str | Path | None
            Path to config file. If None, searches using discovery order.

        Returns
        -------
        PureGateConfig
            Parsed configuration with environment variables substituted

        Raises
        ------
        FileNotFoundError
            If no configuration file is found
        """
        config_path = self._find_config_file(path)
        logger.info("Loading configuration from {path}", path=config_path)
        if config_path.suffix in (".yaml", ".yml"):
            return self._load_yaml_config(config_path)
        return self._load_toml_config(config_path)

    def _load_yaml_config(self, config_path: Path) -> PureGateConfig:
        """Load and parse a kind: Config YAML file.

        Raises
        ------
        ConfigurationError
            If the YAML file is not a valid kind: Config manifest
        """
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ConfigurationError(
                config_path.name, f"expected a mapping, got {type(data).__name__}"
            )

        kind = data.get("kind")
        if kind != "Config":
            raise ConfigurationError(
                config_path.name, f"must use 'kind: Config' manifest format, got 'kind: {kind}'"
            )

        spec = data.get("spec", {})
        if not isinstance(spec, dict):
            raise ConfigurationError(config_path.name, "'spec' must be a mapping")

        return self._parse_config(self._substitute_env_vars(spec))

    def _load_toml_config(self, config_path: Path) -> PureGateConfig:
        """Load and parse a TOML config file (pyproject.toml or a flat file)."""
        with config_path.open("rb") as f:
            data = tomllib.load(f)

        if config_path.name == "pyproject.toml":
            section = data.get("tool", {}).get("puregate", {})
            if not section:
                logger.warning(
                    "No [tool.puregate] section found in pyproject.toml, using defaults"
                )
                return PureGateConfig(logging=self._parse_logging_config({}))
        elif "tool" in data and "puregate" in data.get("tool", {}):
            section = data["tool"]["puregate"]
        else:
            section = data

        return self._parse_config(self._substitute_env_vars(section))

    def _find_config_file(self, path: str | Path | None) -> Path:
        """Find configuration file.

        Discovery order:
        1. Explicit path argument
        2. ``PUREGATE_CONFIG_PATH`` env var
        3. ``pyproject.toml`` in CWD
        4. ``pyproject.toml`` in parent directories (with ``[tool.puregate]``)

        Raises
        ------
        FileNotFoundError
            If no configuration file is found
        """
        if path:
            config_path = Path(path)
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return config_path

        if env_path := os.getenv(CONFIG_PATH_ENV):
            config_path = Path(env_path)
            if config_path.exists():
                logger.debug("Using config from {env}: {path}", env=CONFIG_PATH_ENV, path=config_path)
                return config_path
            logger.warning(
                "{env} set but file not found: {path}", env=CONFIG_PATH_ENV, path=config_path
            )

        if Path("pyproject.toml").exists():
            return Path("pyproject.toml")

        current = Path.cwd()
        while current != current.parent:
            pyproject = current / "pyproject.toml"
            if pyproject.exists():
                with pyproject.open("rb") as f:
                    data = tomllib.load(f)
                if "puregate" in data.get("tool", {}):
                    return pyproject
            current = current.parent

        raise FileNotFoundError(
            "No configuration file found. Provide a kind: Config YAML path, "
            f"set {CONFIG_PATH_ENV}, or add [tool.puregate] to pyproject.toml"
        )

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively replace ``${VAR}`` with environment values.

        Unknown variables keep their placeholder.
        """
        if isinstance(data, str):

            def replacer(match: re.Match[str]) -> str:
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    logger.debug(
                        "Environment variable ${{{var_name}}} not found, keeping placeholder",
                        var_name=var_name,
                    )
                    return match.group(0)
                return value

            return self.ENV_VAR_PATTERN.sub(replacer, data)

        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}

        if isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]

        return data

    def _parse_config(self, data: dict[str, Any]) -> PureGateConfig:
        """Parse format-agnostic configuration data into PureGateConfig.

        Raises
        ------
        ConfigurationError
            If a value has the wrong type or an unknown module format
        """
        module_format = data.get("module_format", ModuleFormat.INFER)
        try:
            module_format = ModuleFormat(module_format)
        except ValueError as e:
            raise ConfigurationError(
                "module_format", f"unknown value {module_format!r}; expected cjs, esm or infer"
            ) from e

        style_rules = data.get("style_rules", {})
        if not isinstance(style_rules, dict):
            raise ConfigurationError("style_rules", "expected a mapping of rule id to setting")

        skip_style = data.get("skip_style", False)
        if isinstance(skip_style, str):
            skip_style = _parse_bool_env(skip_style)

        config = PureGateConfig(
            max_errors=int(data.get("max_errors", MAX_SYNTAX_ERRORS)),
            module_format=module_format,
            skip_style=bool(skip_style),
            allowed_identifiers=_string_list(data, "allowed_identifiers"),
            allowed_members=_string_list(data, "allowed_members"),
            style_rules=dict(style_rules),
            logging=self._parse_logging_config(data.get("logging", {})),
        )
        logger.debug(
            "Loaded config with {count} style rule override(s)", count=len(config.style_rules)
        )
        return config

    def _parse_logging_config(self, logging_data: dict[str, Any]) -> LoggingConfig:
        """Parse logging configuration with environment variable overrides.

        Environment variables take precedence over config file values:
        - PUREGATE_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        - PUREGATE_LOG_FORMAT: Output format (console, json, structured, rich)
        - PUREGATE_LOG_FILE: Optional file path for log output
        - PUREGATE_LOG_COLOR: Use color output (true/false)
        - PUREGATE_LOG_TIMESTAMP: Include timestamp (true/false)
        """
        level = logging_data.get("level", "WARNING")
        format_type = logging_data.get("format", "structured")
        output_file = logging_data.get("output_file")
        use_color = logging_data.get("use_color", True)
        include_timestamp = logging_data.get("include_timestamp", True)
        backtrace = logging_data.get("backtrace", True)
        diagnose = logging_data.get("diagnose", False)

        if env_level := os.getenv("PUREGATE_LOG_LEVEL"):
            level = env_level.upper()
            logger.debug("Overriding log level from env: {}", level)

        if env_format := os.getenv("PUREGATE_LOG_FORMAT"):
            format_type = env_format.lower()
            logger.debug("Overriding log format from env: {}", format_type)

        if env_file := os.getenv("PUREGATE_LOG_FILE"):
            output_file = env_file
            logger.debug("Overriding log file from env: {}", output_file)

        if env_color := os.getenv("PUREGATE_LOG_COLOR"):
            try:
                use_color = _parse_bool_env(env_color)
            except ValueError as e:
                logger.warning("Invalid PUREGATE_LOG_COLOR value: {}", e)

        if env_timestamp := os.getenv("PUREGATE_LOG_TIMESTAMP"):
            try:
                include_timestamp = _parse_bool_env(env_timestamp)
            except ValueError as e:
                logger.warning("Invalid PUREGATE_LOG_TIMESTAMP value: {}", e)

        return LoggingConfig(
            level=cast("Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']", level),
            format=cast("Literal['console', 'json', 'structured', 'rich']", format_type),
            output_file=output_file,
            use_color=use_color,
            include_timestamp=include_timestamp,
            backtrace=backtrace,
            diagnose=diagnose,
        )


def load_config(path: str | Path | None = None) -> PureGateConfig:
    """Load configuration from file or return defaults.

    Parameters
    ----------
    path : str | Path | None
        Path to configuration file or None to search

    Returns
    -------
    PureGateConfig
        Loaded configuration, or defaults if no file was found
    """
    try:
        return ConfigLoader().load_config_file(path)
    except FileNotFoundError:
        if path:
            raise
        logger.info("No configuration file found, using defaults")
        return get_default_config()


def get_default_config() -> PureGateConfig:
    """Default configuration, with logging env overrides applied."""
    return PureGateConfig(logging=ConfigLoader()._parse_logging_config({}))
