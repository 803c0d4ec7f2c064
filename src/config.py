"""Configuration Management with Pydantic.

This module implements configuration models using Pydantic for parsing and
validation of YAML configuration files with environment variable overrides.
"""

import os
import threading
from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field, field_validator

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_NAMES = ("depgraph.yaml", "depgraph.yml")
TRUTHY_VALUES = ("true", "1", "yes")


class ConsoleConfig(BaseModel):
    """Command console settings.

    Attributes:
        echo_commands: Write each command line before running it
        trace_declarations: Write a line for every accepted dependency edge
        expect_count_header: Input starts with the number of commands
    """

    echo_commands: bool = Field(
        default=True,
        description="Echo each command line to the transcript",
    )
    trace_declarations: bool = Field(
        default=False,
        description="Report accepted dependency edges",
    )
    expect_count_header: bool = Field(
        default=True,
        description="First input line holds the command count",
    )


class DepGraphConfig(BaseModel):
    """Main configuration combining all settings.

    Attributes:
        console: Command console configuration
        logging_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render log records as JSON instead of console text
    """

    console: ConsoleConfig = Field(default_factory=ConsoleConfig)
    logging_level: str = Field(
        default="WARNING",
        description="Logging level",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    json_logs: bool = Field(
        default=True,
        description="Render logs as JSON",
    )

    @field_validator("logging_level", mode="before")
    @classmethod
    def normalize_logging_level(cls, v: object) -> object:
        """Accept logging levels in any case.

        Args:
            v: The raw logging level value

        Returns:
            The upper-cased level when given a string, otherwise the value unchanged
        """
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> "DepGraphConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Parsed and validated DepGraphConfig instance

        Raises:
            FileNotFoundError: If configuration file doesn't exist
            ValueError: If configuration is invalid or not valid YAML
        """
        config_path = Path(path)

        if not config_path.exists():
            msg = f"Configuration file not found: {config_path}"
            raise FileNotFoundError(msg)

        logger.info("loading_configuration", path=str(config_path))

        try:
            with config_path.open() as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.exception("yaml_parse_error", error=str(e), path=str(config_path))
            msg = f"Invalid YAML in configuration file: {e}"
            raise ValueError(msg) from e

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            msg = "Configuration file must contain a mapping"
            raise ValueError(msg)

        config = cls(**cls._apply_env_overrides(config_data))

        logger.info(
            "configuration_loaded",
            logging_level=config.logging_level,
            expect_count_header=config.console.expect_count_header,
        )

        return config

    @classmethod
    def from_env(cls) -> "DepGraphConfig":
        """Build a configuration from defaults and environment overrides only."""
        return cls(**cls._apply_env_overrides({}))

    @classmethod
    def _apply_env_overrides(cls, config_data: dict) -> dict:
        """Apply environment variable overrides to configuration.

        Environment variables follow the pattern: DEPGRAPH_<SECTION>_<KEY>
        Example: DEPGRAPH_CONSOLE_ECHO_COMMANDS, DEPGRAPH_LOGGING_LEVEL

        Args:
            config_data: Base configuration dictionary from file

        Returns:
            Configuration dictionary with environment overrides applied
        """
        env_overrides = {
            # Console configuration
            ("console", "echo_commands"): "DEPGRAPH_CONSOLE_ECHO_COMMANDS",
            ("console", "trace_declarations"): "DEPGRAPH_CONSOLE_TRACE_DECLARATIONS",
            ("console", "expect_count_header"): "DEPGRAPH_CONSOLE_EXPECT_COUNT_HEADER",
            # Logging
            ("logging_level",): "DEPGRAPH_LOGGING_LEVEL",
            ("json_logs",): "DEPGRAPH_JSON_LOGS",
        }
        bool_vars = {
            "DEPGRAPH_CONSOLE_ECHO_COMMANDS",
            "DEPGRAPH_CONSOLE_TRACE_DECLARATIONS",
            "DEPGRAPH_CONSOLE_EXPECT_COUNT_HEADER",
            "DEPGRAPH_JSON_LOGS",
        }

        for path, env_var in env_overrides.items():
            value = os.environ.get(env_var)
            if value is None:
                continue

            current = config_data
            for key in path[:-1]:
                if current.get(key) is None:
                    current[key] = {}
                current = current[key]

            if env_var in bool_vars:
                current[path[-1]] = value.lower() in TRUTHY_VALUES
            else:
                current[path[-1]] = value

            logger.debug(
                "env_override_applied",
                env_var=env_var,
                config_path=".".join(path),
            )

        return config_data


class ConfigManager:
    """Configuration manager using singleton pattern."""

    _instance: DepGraphConfig | None = None
    _init_lock: threading.Lock = threading.Lock()

    @classmethod
    def load_config(cls, config_path: str | Path | None = None) -> DepGraphConfig:
        """Load configuration from file.

        Args:
            config_path: Path to configuration file. If None, looks for
                depgraph.yaml or depgraph.yml in the current directory and
                falls back to defaults when neither exists.

        Returns:
            Loaded DepGraphConfig instance

        Raises:
            FileNotFoundError: If an explicitly given config file is not found
            ValueError: If the config file is invalid
        """
        if config_path is None:
            for default_name in DEFAULT_CONFIG_NAMES:
                default_path = Path(default_name)
                if default_path.exists():
                    config_path = default_path
                    break
            else:
                logger.debug("no_configuration_file", defaults=list(DEFAULT_CONFIG_NAMES))
                return DepGraphConfig.from_env()

        return DepGraphConfig.from_yaml(config_path)

    @classmethod
    def get_config(
        cls,
        config_path: str | Path | None = None,
        reload: bool = False,
    ) -> DepGraphConfig:
        """Get configuration instance (singleton pattern).

        Args:
            config_path: Path to configuration file. Only used on first call or when reload=True.
            reload: If True, force reload configuration from file.

        Returns:
            DepGraphConfig instance
        """
        if cls._instance is not None and not reload:
            return cls._instance

        with cls._init_lock:
            if cls._instance is None or reload:
                cls._instance = cls.load_config(config_path)

            return cls._instance

    @classmethod
    def reset_config(cls) -> None:
        """Reset the configuration instance."""
        cls._instance = None


def load_config(config_path: str | Path | None = None) -> DepGraphConfig:
    """Load configuration from file."""
    return ConfigManager.load_config(config_path)


def get_config(config_path: str | Path | None = None, reload: bool = False) -> DepGraphConfig:
    """Get configuration instance (singleton pattern)."""
    return ConfigManager.get_config(config_path, reload)


def reset_config() -> None:
    """Reset the configuration instance."""
    ConfigManager.reset_config()


__all__ = [
    "ConfigManager",
    "ConsoleConfig",
    "DepGraphConfig",
    "get_config",
    "load_config",
    "reset_config",
]
