#!/usr/bin/env python3
"""
Settings loader for Pagewright.
Supports configuration from pagewright.yml, pagewright.yaml, or pagewright.json files.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional


class PagewrightSettings:
    """Load and manage Pagewright configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'content': 'content',
        'output': 'dist',
        'templates': 'templates',
        'syntaxes': None,
        'content_index_template': None,
        'domain': 'https://example.com',
        'base_path': '',
        'theme': 'monokai',
        'omit_languages': ['mermaid'],
        'no_syntax_highlighting': False,
        'generate_digest_by_default': True,
        'digest_title': None,
        'digest_description': None,
        'workers': None,
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['pagewright.yml', 'pagewright.yaml', 'pagewright.json']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = self.DEFAULT_SETTINGS.copy()
        self.config_file_path = None

    def load_settings(self, config_file: Optional[str] = None) -> Dict[str, Any]:
        """
        Load settings from configuration file if it exists.

        Args:
            config_file: Explicit config file path. When given it must exist.

        Returns:
            Dictionary of configuration settings
        """
        if config_file is None:
            config_file = self._find_config_file()
        elif not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file not found: {config_file}")

        if config_file:
            self.config_file_path = config_file
            loaded_settings = self._load_config_file(config_file)
            if loaded_settings:
                if not isinstance(loaded_settings, dict):
                    raise ValueError(f"Configuration file {config_file} must contain a mapping")
                # Merge with defaults, giving preference to loaded settings
                self.settings.update(loaded_settings)

        self.settings['omit_languages'] = self.parse_languages(self.settings.get('omit_languages'))
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
        except PermissionError:
            raise PermissionError(f"Permission denied reading configuration file: {config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file {config_path}: {e}")
        except (IOError, OSError) as e:
            raise IOError(f"Error reading configuration file {config_path}: {e}")

    @staticmethod
    def parse_languages(value):
        """Accept a list or a comma-separated string; drop empty entries."""
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(',')
        return [str(lang).strip().lower() for lang in value if str(lang).strip()]

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        filename = f'pagewright.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    f.write("# Pagewright Configuration File\n\n")
                    f.write("# Site information\n")
                    f.write("domain: https://example.com\n")
                    f.write("base_path: ''\n\n")
                    f.write("# Build settings\n")
                    f.write("content: content\n")
                    f.write("output: dist\n")
                    f.write("templates: templates\n")
                    f.write("# syntaxes: syntaxes  # directory of custom Pygments lexers\n\n")
                    f.write("# Highlighting\n")
                    f.write("theme: monokai\n")
                    f.write("omit_languages:\n")
                    f.write("  - mermaid\n")
                    f.write("no_syntax_highlighting: false\n\n")
                    f.write("# llms.txt\n")
                    f.write("generate_digest_by_default: true\n")
                    f.write("digest_title: My Site\n")
                    f.write("digest_description: Pages of this site in markdown form.\n")
                elif file_format == 'json':
                    sample_config = dict(self.DEFAULT_SETTINGS)
                    sample_config.update(digest_title='My Site',
                                         digest_description='Pages of this site in markdown form.')
                    json.dump(sample_config, f, indent=2)
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
            if value is None:
                continue
            if key == 'omit_languages':
                merged[key] = self.parse_languages(value)
            elif key == 'no_syntax_highlighting':
                # A flag can only switch highlighting off, never back on
                merged[key] = bool(merged.get(key)) or bool(value)
            else:
                merged[key] = value

        if merged.get('domain'):
            merged['domain'] = merged['domain'].rstrip('/')
        return merged
