"""
Configuration management for copyops.
Loads and validates configuration settings.
"""

import json
import logging
import os
from pathlib import Path
from typing import List, Dict, Any, Optional, Tuple


class Config:
    """Manages application configuration."""

    # Default configuration values
    DEFAULT_CONFIG = {
        'base_path': None,
        'working_directory': None,
        'instructions_suffix': '.copies',
        'event_log': None,
        'wait_timeout_seconds': 60,
        'max_log_files': 5,
        'log_folder': 'logs'
    }

    def __init__(self, config_path: Path = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to config.json file. If None, uses defaults.
        """
        self.config = self.DEFAULT_CONFIG.copy()

        if config_path and config_path.exists():
            self.load_config(config_path)

    def load_config(self, config_path: Path):
        """Load configuration from JSON file."""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                user_config = json.load(f)

            if not isinstance(user_config, dict):
                print(f"\nERROR: Config file must contain a JSON object")
                print(f"  Config file: {config_path.absolute()}")
                print("Using default configuration.")
                return

            # Validate loaded config before applying
            is_valid, errors = self._validate_config(user_config)
            if not is_valid:
                print(f"\nConfiguration validation failed:")
                print(f"  Config file: {config_path.absolute()}")
                print()
                for error in errors:
                    print(error)
                    print()
                print("Using default configuration instead.")
                logging.warning(f"Invalid config {config_path}: {len(errors)} error(s)")
                return

            self.config.update(user_config)
        except json.JSONDecodeError as e:
            print(f"\nERROR: Invalid JSON in config file")
            print(f"  Config file: {config_path.absolute()}")
            print(f"  Problem: {e}")
            print(f"  Line: {e.lineno}, Column: {e.colno}")
            print()
            print("Fix the JSON syntax and try again.")
            print("Using default configuration.")
        except OSError as e:
            print(f"\nERROR: Could not load config file")
            print(f"  Config file: {config_path.absolute()}")
            print(f"  Problem: {e}")
            print()
            print("Using default configuration.")

    def set(self, key: str, value: Any):
        """Set configuration value."""
        self.config[key] = value

    def _validate_config(self, config: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """
        Validate configuration dictionary.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        numeric_fields = {
            'max_log_files': (1, 100, "Maximum log files", 5),
            'wait_timeout_seconds': (0, 3600, "Host process wait timeout", 60),
        }

        for field, (min_val, max_val, display_name, example) in numeric_fields.items():
            if field in config:
                value = config[field]
                if not isinstance(value, int) or isinstance(value, bool):
                    errors.append(
                        f"ERROR: Invalid config value\n"
                        f"  Field: {field}\n"
                        f"  Value: {repr(value)} ({type(value).__name__})\n"
                        f"  Expected: number (integer)\n"
                        f"  Example: {example}\n"
                        f"  Valid range: {min_val} to {max_val}"
                    )
                elif value < min_val or value > max_val:
                    errors.append(
                        f"ERROR: Invalid config value\n"
                        f"  Field: {field}\n"
                        f"  Value: {value}\n"
                        f"  Expected: number between {min_val} and {max_val}\n"
                        f"  Example: {example}"
                    )

        # Path-like fields may be null
        optional_path_fields = {
            'base_path': 'C:\\Services\\myservice',
            'working_directory': 'C:\\Services',
            'event_log': 'logs/events.jsonl',
        }

        for field, example in optional_path_fields.items():
            if field in config and config[field] is not None:
                if not isinstance(config[field], str) or not config[field].strip():
                    errors.append(
                        f"ERROR: Invalid config value\n"
                        f"  Field: {field}\n"
                        f"  Value: {repr(config[field])}\n"
                        f"  Expected: non-empty path string or null\n"
                        f"  Example: {example!r}"
                    )

        if 'instructions_suffix' in config:
            suffix = config['instructions_suffix']
            if not isinstance(suffix, str) or not suffix.startswith('.') or len(suffix) < 2:
                errors.append(
                    f"ERROR: Invalid config value\n"
                    f"  Field: instructions_suffix\n"
                    f"  Value: {repr(suffix)}\n"
                    f"  Problem: Suffix must start with '.'\n"
                    f"  Example: '.copies'"
                )

        if 'log_folder' in config:
            if not isinstance(config['log_folder'], str):
                errors.append(f"log_folder must be a string, got {type(config['log_folder']).__name__}")

        return (len(errors) == 0, errors)

    @property
    def base_path(self) -> Optional[str]:
        """Get the host base path the instruction file is derived from."""
        return self.config['base_path']

    @property
    def working_directory(self) -> Path:
        """Get directory relative instruction paths are resolved against."""
        return Path(self.config['working_directory'] or os.getcwd())

    @property
    def instructions_suffix(self) -> str:
        """Get the instruction file suffix."""
        return self.config['instructions_suffix']

    @property
    def instructions_file(self) -> Optional[Path]:
        """Get the instruction file path (<base_path><suffix>), or None if unset."""
        if not self.base_path:
            return None
        return Path(self.base_path + self.instructions_suffix)

    @property
    def event_log(self) -> Optional[Path]:
        """Get the JSON lines event log path, if any."""
        value = self.config.get('event_log')
        return Path(value) if value else None

    @property
    def wait_timeout_seconds(self) -> int:
        """Get how long to wait for the host process to exit."""
        return self.config.get('wait_timeout_seconds', 60)

    @property
    def max_log_files(self) -> int:
        """Get maximum number of log files to keep."""
        return self.config['max_log_files']

    @property
    def log_folder(self) -> str:
        """Get log folder path."""
        return self.config['log_folder']
