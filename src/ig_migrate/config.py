"""
Configuration management for the Instagram migrator.

This module handles loading, validation, and merging of configuration from
multiple sources (CLI args, environment variables, config files).
"""

import json
import os
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from .constants import DEFAULT_CONCURRENCY, DEFAULT_UPLOAD_DELAY
from .exceptions import ConfigurationError

DateLike = Union[str, date, datetime, None]


def parse_date(value: DateLike) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or datetime into an aware UTC datetime.

    Naive values are taken to be UTC; a bare date means midnight.

    Args:
        value: ISO string, date, datetime or None

    Returns:
        Aware datetime, or None for empty input

    Raises:
        ConfigurationError: If the string is not ISO-8601
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ConfigurationError(f"Invalid date: {value}", details="expected ISO-8601, e.g. 2023-01-31")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class MigratorConfig:
    """
    Configuration settings for a migration run.

    Attributes:
        archive_folder: Root of the extracted Instagram export
        min_date: Skip posts created before this date (inclusive bound)
        max_date: Skip posts created on or after this date (exclusive bound)
        simulate: Process everything without publishing
        concurrency: Number of posts split at the same time
        upload_delay: Seconds to wait between uploads
        plan_file: Optional JSON file receiving the list of target posts
        verbose: Enable verbose logging output
        log_file: Path to log file for persistent logging
    """

    archive_folder: Path

    # Filtering
    min_date: Optional[datetime] = None
    max_date: Optional[datetime] = None

    # Behavior
    simulate: bool = True
    concurrency: int = DEFAULT_CONCURRENCY
    upload_delay: float = DEFAULT_UPLOAD_DELAY
    plan_file: Optional[Path] = None

    # Logging
    verbose: bool = False
    log_file: Optional[Path] = None

    def __post_init__(self):
        """Normalize paths and dates."""
        if isinstance(self.archive_folder, str):
            self.archive_folder = Path(self.archive_folder)
        if self.plan_file and isinstance(self.plan_file, str):
            self.plan_file = Path(self.plan_file)
        if self.log_file and isinstance(self.log_file, str):
            self.log_file = Path(self.log_file)
        self.min_date = parse_date(self.min_date)
        self.max_date = parse_date(self.max_date)


class ConfigLoader:
    """
    Utility class for loading and merging configuration from multiple sources.

    Configuration precedence (highest to lowest):
    1. CLI arguments
    2. Environment variables
    3. Configuration file
    4. Default values
    """

    ENV_VAR_MAPPING = {
        'ARCHIVE_FOLDER': 'archive_folder',
        'MIN_DATE': 'min_date',
        'MAX_DATE': 'max_date',
        'IG_MIGRATE_CONCURRENCY': 'concurrency',
        'IG_MIGRATE_UPLOAD_DELAY': 'upload_delay',
        'IG_MIGRATE_PLAN_FILE': 'plan_file',
        'IG_MIGRATE_VERBOSE': 'verbose',
        'IG_MIGRATE_LOG_FILE': 'log_file',
    }

    BOOL_KEYS = ('simulate', 'verbose')
    INT_KEYS = ('concurrency',)
    FLOAT_KEYS = ('upload_delay',)
    PATH_KEYS = ('archive_folder', 'plan_file', 'log_file')

    @staticmethod
    def _convert(key: str, value: Any, source: str) -> Any:
        if key in ConfigLoader.BOOL_KEYS:
            if isinstance(value, bool):
                return value
            return str(value).strip().lower() in ('true', '1', 'yes', 'on')
        if key in ConfigLoader.INT_KEYS:
            try:
                return int(value)
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid integer value for {source}: {value}")
        if key in ConfigLoader.FLOAT_KEYS:
            try:
                return float(value)
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid float value for {source}: {value}")
        if key in ConfigLoader.PATH_KEYS:
            return Path(value)
        return value

    @staticmethod
    def load_from_env(load_dotenv_file: bool = True) -> Dict[str, Any]:
        """
        Load configuration from environment variables.

        Args:
            load_dotenv_file: Whether to load .env file before reading environment

        Returns:
            Dictionary of configuration values found in environment
        """
        if load_dotenv_file:
            load_dotenv()

        config = {}
        for env_var, config_key in ConfigLoader.ENV_VAR_MAPPING.items():
            value = os.getenv(env_var)
            if value is not None and value != "":
                config[config_key] = ConfigLoader._convert(config_key, value, env_var)

        return config

    @staticmethod
    def load_from_file(path: Path) -> Dict[str, Any]:
        """
        Load configuration from a JSON or YAML file.

        Args:
            path: Path to configuration file

        Returns:
            Dictionary of configuration values from file

        Raises:
            ConfigurationError: If file doesn't exist or is invalid format
        """
        path = Path(path)

        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        if path.suffix not in ('.json', '.yaml', '.yml'):
            raise ConfigurationError(
                f"Unsupported config file format: {path.suffix}. "
                "Use .json or .yaml/.yml"
            )

        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.suffix == '.json':
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in config file: {e}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error reading config file: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {path}")

        return {
            key: ConfigLoader._convert(key, value, f"'{key}' in {path.name}")
            for key, value in data.items()
            if value is not None
        }

    @staticmethod
    def load_from_cli_args(args: Dict[str, Any]) -> Dict[str, Any]:
        """
        Parse configuration from CLI arguments.

        Args:
            args: Dictionary of CLI arguments (typically from click)

        Returns:
            Dictionary of configuration values from CLI
        """
        config = {}

        for key, value in args.items():
            if value is not None:
                config_key = key.replace('-', '_')
                if config_key in ConfigLoader.PATH_KEYS:
                    config[config_key] = Path(value)
                else:
                    config[config_key] = value

        return config

    @staticmethod
    def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configuration dictionaries.

        Later configurations override earlier ones; None never overrides.

        Args:
            *configs: Variable number of configuration dictionaries to merge

        Returns:
            Merged configuration dictionary
        """
        merged = {}

        for config in configs:
            for key, value in config.items():
                if value is not None:
                    merged[key] = value

        return merged

    @staticmethod
    def validate(config: MigratorConfig) -> None:
        """
        Validate configuration values.

        Args:
            config: Configuration object to validate

        Raises:
            ConfigurationError: If any validation rule fails
        """
        errors = []

        if not str(config.archive_folder):
            errors.append("archive_folder is required")
        elif not config.archive_folder.is_dir():
            errors.append(f"archive_folder does not exist: {config.archive_folder}")

        if config.concurrency < 1:
            errors.append(f"concurrency must be >= 1, got: {config.concurrency}")

        if config.upload_delay < 0:
            errors.append(f"upload_delay must be >= 0, got: {config.upload_delay}")

        if config.min_date and config.max_date and config.min_date >= config.max_date:
            errors.append(
                f"min_date ({config.min_date.isoformat()}) must be before "
                f"max_date ({config.max_date.isoformat()})"
            )

        if errors:
            error_msg = "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            raise ConfigurationError(error_msg)


def load_config(
    cli_args: Optional[Dict[str, Any]] = None,
    config_file: Optional[Path] = None,
    load_env: bool = True,
) -> MigratorConfig:
    """
    Load and validate configuration from all sources.

    Args:
        cli_args: Dictionary of CLI arguments (highest precedence)
        config_file: Path to configuration file (lowest precedence)
        load_env: Whether to load from environment variables

    Returns:
        Validated MigratorConfig object

    Raises:
        ConfigurationError: If configuration is invalid

    Example:
        >>> config = load_config(
        ...     cli_args={'archive_folder': './instagram-export'},
        ...     load_env=True
        ... )
    """
    configs_to_merge = []

    if config_file:
        configs_to_merge.append(ConfigLoader.load_from_file(config_file))

    if load_env:
        configs_to_merge.append(ConfigLoader.load_from_env())

    if cli_args:
        configs_to_merge.append(ConfigLoader.load_from_cli_args(cli_args))

    merged_config = ConfigLoader.merge_configs(*configs_to_merge)

    if 'archive_folder' not in merged_config:
        raise ConfigurationError(
            "No archive folder provided. Pass --archive-folder, set ARCHIVE_FOLDER, "
            "or add archive_folder to a config file."
        )

    try:
        config = MigratorConfig(**merged_config)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration parameters: {e}")

    ConfigLoader.validate(config)

    return config
