"""
Site-wide configuration loaded from siteinfo.json: per-locale metadata and the
author registry.
"""

import json
import os
from typing import Dict, List, Optional

from . import markup
from .authors import Author, AuthorRegistry
from .errors import ConfigurationError

SITEINFO_FILE = 'siteinfo.json'


def normalize_locale_path(path: str) -> str:
    """Return the path with exactly one leading and one trailing slash."""
    path = path.strip().strip('/')
    return '/' if not path else f'/{path}/'


class LocaleInfo:
    """Metadata of one locale. Subtitle, description and copyright are markdown."""

    def __init__(self, code, path='/', title='', subtitle='', description='', copyright=''):
        self.code = code
        self.path = normalize_locale_path(path)
        self.title = title
        self.subtitle = subtitle
        self.description = description
        self.copyright = copyright

    @classmethod
    def from_dict(cls, code, data):
        if not isinstance(data, dict):
            raise ConfigurationError(f'Locale "{code}" must be an object')
        values = {}
        for key in ('path', 'title', 'subtitle', 'description', 'copyright'):
            value = data.get(key, '')
            if not isinstance(value, str):
                raise ConfigurationError(f'Locale "{code}": "{key}" must be a string')
            values[key] = value
        return cls(code, **values)

    @property
    def is_root(self) -> bool:
        return self.path == '/'

    def __repr__(self):
        return f"LocaleInfo({self.code!r}, path={self.path!r})"


class SiteInfo:
    """Site-wide meta. There should be only one of them per build."""

    def __init__(self, locales: List[LocaleInfo], authors: Optional[AuthorRegistry] = None):
        if not locales:
            raise ConfigurationError('siteinfo must declare at least one locale')
        self.locales: Dict[str, LocaleInfo] = {}
        for info in locales:
            if info.code in self.locales:
                raise ConfigurationError(f'Duplicate locale: {info.code}')
            self.locales[info.code] = info
        roots = [info.code for info in locales if info.is_root]
        if len(roots) != 1:
            raise ConfigurationError(
                f'Exactly one locale must have path "/", found {len(roots)}: {", ".join(roots) or "none"}'
            )
        self.root_locale = roots[0]
        self.authors = authors if authors is not None else AuthorRegistry()

    @classmethod
    def from_dict(cls, data) -> 'SiteInfo':
        if not isinstance(data, dict):
            raise ConfigurationError('siteinfo must be a JSON object')
        locales = data.get('locales')
        if not isinstance(locales, dict) or not locales:
            raise ConfigurationError('siteinfo must contain a non-empty "locales" object')
        return cls(
            [LocaleInfo.from_dict(code, entry) for code, entry in locales.items()],
            AuthorRegistry.from_list(data.get('authors')),
        )

    @classmethod
    def load(cls, input_dir: str) -> 'SiteInfo':
        """
        Load and validate <input_dir>/siteinfo.json.

        Raises:
            ConfigurationError: the file is missing, unreadable or invalid
        """
        path = os.path.join(input_dir, SITEINFO_FILE)
        if not os.path.isfile(path):
            raise ConfigurationError(f'No {SITEINFO_FILE} found in {input_dir}')
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f'Invalid JSON in {path}: {e}') from e
        except (IOError, OSError) as e:
            raise ConfigurationError(f'Could not open {path}: {e}') from e
        try:
            return cls.from_dict(data)
        except ConfigurationError as e:
            raise ConfigurationError(f'{path}: {e}') from e

    @property
    def locale_codes(self) -> List[str]:
        return list(self.locales)

    def locale_path(self, locale: str) -> str:
        return self.locales[locale].path

    def find_author(self, name: str) -> Author:
        return self.authors.find(name)

    def locale_for_filename(self, filename: str) -> str:
        """Pick the locale of a content file from its ``.<locale>.md`` suffix."""
        for code in self.locales:
            if filename.endswith(f'.{code}.md'):
                return code
        return self.root_locale

    # Template helpers

    def main_author_html(self) -> str:
        author = self.authors.main
        return author.html() if author else ''

    def title(self, locale: str) -> str:
        return self.locales[locale].title

    def _markdown_html(self, text, page, locale):
        prefix = page.path_to_root(self.locale_path(locale)) if page is not None else ''
        return markup.render(text, prefix)

    def subtitle_html(self, page, locale: str) -> str:
        return self._markdown_html(self.locales[locale].subtitle, page, locale)

    def description_html(self, page, locale: str) -> str:
        return self._markdown_html(self.locales[locale].description, page, locale)

    def copyright_html(self, page, locale: str) -> str:
        return self._markdown_html(self.locales[locale].copyright, page, locale)
