"""
Translation tables for templates, loaded from templates/locales/*.yml.

Each file maps a locale code to nested keys::

    en:
      categories:
        page_list_name: "All pages in {0}"
"""

import glob
import logging
import os
from typing import Any, Dict

import yaml

from .errors import ConfigurationError

logger = logging.getLogger('Tomato.i18n')


class Translations:
    """Locale-keyed string lookup with positional interpolation."""

    def __init__(self, tables: Dict[str, Dict[str, Any]] = None):
        self.tables: Dict[str, Dict[str, Any]] = {}
        for locale, table in (tables or {}).items():
            self.merge(locale, table)

    @classmethod
    def load(cls, locales_dir: str) -> 'Translations':
        """Load and merge every *.yml file of a directory. A missing directory yields an empty table."""
        translations = cls()
        for path in sorted(glob.glob(os.path.join(locales_dir, '*.yml'))):
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f'Invalid YAML in locale file {path}: {e}') from e
            except (IOError, OSError) as e:
                raise ConfigurationError(f'Failed to read locale file {path}: {e}') from e
            if not isinstance(data, dict):
                raise ConfigurationError(f'Locale file {path} must map locale codes to keys')
            for locale, table in data.items():
                translations.merge(str(locale), table)
            logger.debug(f"Loaded translations from {path}")
        return translations

    def merge(self, locale: str, table) -> None:
        if not isinstance(table, dict):
            raise ConfigurationError(f'Translations for "{locale}" must be a mapping')
        _deep_merge(self.tables.setdefault(locale, {}), table)

    def lookup(self, locale: str, key: str):
        """Return the raw value for a dotted key, or None."""
        node = self.tables.get(locale)
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, str) else None

    def t(self, locale: str, key: str, *args) -> str:
        """Translate key for locale; a missing key is returned unchanged."""
        value = self.lookup(locale, key)
        if value is None:
            return key
        if args:
            try:
                return value.format(*args)
            except (IndexError, KeyError, ValueError):
                logger.warning(f"Bad interpolation for '{key}' in locale '{locale}'")
                return value
        return value

    __call__ = t


def _deep_merge(target: dict, source: dict) -> None:
    for key, value in source.items():
        key = str(key)
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        elif isinstance(value, dict):
            target[key] = {}
            _deep_merge(target[key], value)
        else:
            target[key] = value
