#!/usr/bin/env python3
"""
Settings loader for Tomato static website generator.
Supports build settings from tomato.yml, tomato.yaml, or tomato.json files.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional


class TomatoSettings:
    """Load and manage Tomato build settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'input': None,
        'output': None,
        'log_dir': 'logs',
        'excerpt_length': 280,
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['tomato.yml', 'tomato.yaml', 'tomato.json']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = self.DEFAULT_SETTINGS.copy()
        self.config_file_path = None

    def load_settings(self) -> Dict[str, Any]:
        """
        Load settings from configuration file if it exists.

        Returns:
            Dictionary of configuration settings
        """
        config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            loaded_settings = self._load_config_file(config_file)
            if not isinstance(loaded_settings, dict):
                raise ValueError(f"Configuration file {config_file} must contain a mapping")
            unknown = set(loaded_settings) - set(self.DEFAULT_SETTINGS)
            if unknown:
                raise ValueError(f"Unknown settings in {config_file}: {', '.join(sorted(unknown))}")
            self.settings.update(loaded_settings)
            print(f"Loaded configuration from: {os.path.relpath(config_file)}")

        return self.settings.copy()

    def _find_config_file(self) -> Optional[str]:
        """
        Find the first available configuration file.

        Returns:
            Path to config file or None if not found
        """
        for filename in self.CONFIG_FILES:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Dictionary of configuration settings
        """
        file_ext = os.path.splitext(config_path)[1].lower()
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext in ['.yml', '.yaml']:
                    return yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    return json.load(f) or {}
                else:
                    raise ValueError(f"Unsupported config file format: {file_ext}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file {config_path}: {e}")
        except PermissionError:
            raise PermissionError(f"Permission denied reading configuration file: {config_path}")
        except (IOError, OSError) as e:
            raise IOError(f"Error reading configuration file {config_path}: {e}")

    def create_sample_config(self, file_format: str = 'yml') -> Optional[str]:
        """
        Create a sample configuration file, unless one already exists.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file, or None if it already existed
        """
        filename = f'tomato.{file_format}'
        config_path = os.path.join(self.config_dir, filename)
        if os.path.exists(config_path):
            return None

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    f.write("# Tomato Configuration File\n\n")
                    f.write("# Directories (the output defaults to <input>_html)\n")
                    f.write("input: .\n")
                    f.write("# output: ../site_html\n\n")
                    f.write("# Log files, one per build\n")
                    f.write("log_dir: logs\n\n")
                    f.write("# Maximum length of page excerpts\n")
                    f.write("excerpt_length: 280\n")
                elif file_format == 'json':
                    json.dump({'input': '.', 'log_dir': 'logs', 'excerpt_length': 280}, f, indent=2)
                else:
                    raise ValueError(f"Unsupported config file format: {file_format}")
        except PermissionError:
            raise PermissionError(f"Permission denied creating configuration file: {config_path}")
        except (IOError, OSError) as e:
            raise IOError(f"Error writing configuration file {config_path}: {e}")

        return config_path

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.

        Args:
            args_dict: Dictionary of command-line arguments

        Returns:
            Merged configuration dictionary
        """
        merged = self.settings.copy()

        for key, value in args_dict.items():
            if value is not None and key in merged:
                merged[key] = value

        return merged
