"""
Pages: single content units of the site, and their recency ordering.
"""

import html
import posixpath
import re
from datetime import date, datetime
from typing import List, Optional

from . import markup

INDEX_BASENAME = 'index'
DATE_FORMAT = '%Y-%m-%d'
DEFAULT_EXCERPT_LENGTH = 280
ELLIPSIS = '…'
DIRECTIVE_RE = re.compile(r'\{\{.*?\}\}|\{%.*?%\}', re.DOTALL)
WHITESPACE_RE = re.compile(r'\s+')


def join_path(*paths: str) -> str:
    """Join slash-separated paths and clean the result (no trailing slash)."""
    joined = '/'.join(p for p in paths if p)
    if not joined:
        return '.'
    cleaned = posixpath.normpath(joined)
    # normpath keeps a leading "//"
    if cleaned.startswith('//'):
        cleaned = '/' + cleaned.lstrip('/')
    return cleaned


def parse_date(date_str) -> Optional[date]:
    """Parse a YYYY-MM-DD date; anything else gives None."""
    if isinstance(date_str, datetime):
        return date_str.date()
    if isinstance(date_str, date):
        return date_str
    if isinstance(date_str, str):
        try:
            return datetime.strptime(date_str.strip(), DATE_FORMAT).date()
        except ValueError:
            return None
    return None


def recency_key(page: 'Page'):
    """
    Sort key, most recent first: index pages, then dated pages by descending
    date, then pages without a valid date.
    """
    if page.is_index:
        return (0, 0)
    parsed = parse_date(page.date)
    if parsed is None:
        return (2, 0)
    return (1, -parsed.toordinal())


def sort_by_recency(pages: List['Page']) -> List['Page']:
    # sorted() is stable: equal keys keep their input order
    return sorted(pages, key=recency_key)


class Page:
    """
    A single page of the site, in one locale.

    Pages that represent the same content in different locales share an id.
    ``category`` is the category owning the page; tag categories only alias it.
    """

    def __init__(self, id, url_basename, locale, title='', authors=None, date=None,
                 tags=None, draft=False, unlisted=False, content='',
                 featured_image_path=None, category=None, synthetic=False):
        self.id = id
        self.url_basename = url_basename
        self.locale = locale
        self.title = title
        self.authors = list(authors or [])
        self.date = date
        self.tags = _unique(tags or [])
        self.draft = draft
        self.unlisted = unlisted
        self.content = content
        self.featured_image_path = featured_image_path
        self.category = category
        self.synthetic = synthetic

    def __repr__(self):
        return f"Page({self.id!r}, {self.url_basename!r}, locale={self.locale!r})"

    @property
    def is_index(self) -> bool:
        return self.url_basename == INDEX_BASENAME

    @property
    def parsed_date(self) -> Optional[date]:
        return parse_date(self.date)

    def path(self) -> str:
        """Slash-separated path of the page from the site root, without locale prefix."""
        category_path = self.category.path(self.locale) if self.category is not None else '/'
        return category_path + self.url_basename + '.html'

    def path_to_root(self, locale_path: str = '/') -> str:
        """Relative path from this page to the root of the output, e.g. "./../.."."""
        depth = len(join_path(locale_path, self.path()).split('/')) - 2
        return '.' + '/..' * max(depth, 0)

    def url_from(self, current_page: 'Page', locale_path: str = '/') -> str:
        """Relative url of this page as seen from current_page."""
        return current_page.path_to_root(locale_path) + join_path(locale_path, self.path())

    def path_in_locale(self, locale: str) -> Optional[str]:
        """
        Return the path of the same content in another locale, without the locale
        prefix, or None when there is no equivalent.
        """
        if locale == self.locale:
            return self.path()
        if self.category is None or locale not in self.category.locales:
            return None
        for page in self.category.locales[locale].pages:
            if page.id == self.id:
                return page.path()
        return None

    def content_html(self, locale_path: str = '/') -> str:
        """Page content rendered to html, links relative to this page."""
        rendered = markup.render(self.content, self.path_to_root(locale_path))
        # keep quotes usable by template directives embedded in the content
        return rendered.replace('&quot;', '"')

    def excerpt(self, max_len: int = DEFAULT_EXCERPT_LENGTH) -> str:
        """Plain-text beginning of the page, at most max_len characters plus an ellipsis."""
        text = DIRECTIVE_RE.sub('', markup.strip(self.content))
        text = WHITESPACE_RE.sub(' ', text).strip()
        if len(text) <= max_len:
            return text
        cut = text[:max_len]
        boundary = cut.rfind(' ')
        if boundary > 0:
            cut = cut[:boundary]
        return cut.rstrip() + ELLIPSIS

    def breadcrumb_html(self, current_page: 'Page', locale: str, locale_path: str = '/') -> str:
        """Html links from the root category down to this page, relative to current_page."""
        root = current_page.path_to_root(locale_path)
        links = []
        category = self.category
        while category is not None:
            href = root + join_path(locale_path, category.path(locale), 'index.html')
            links.append(f'<a href="{href}">{html.escape(category.name(locale))}</a>')
            category = category.parent
        links.reverse()
        if not self.is_index:
            href = root + join_path(locale_path, self.path())
            links.append(f'<a href="{href}">{html.escape(self.title)}</a>')
        return ' &gt; '.join(links)

    def sibling_navigation_html(self, current_page: 'Page', category_path: str, locale: str,
                                locale_path: str = '/', previous_label: str = 'Previous',
                                next_label: str = 'Next') -> str:
        """
        Links to the pages before and after this one in the recency order of the
        category found at category_path. "Previous" is the older neighbour.
        """
        if self.category is None:
            return ''
        category = self.category.root().find_by_path(category_path, locale)
        if category is None:
            return ''
        pages = category.recent_pages(-1, locale)
        position = next((i for i, page in enumerate(pages) if page is self), None)
        if position is None:
            return ''

        links = []
        if position + 1 < len(pages):
            older = pages[position + 1]
            links.append('<a class="previous" href="{}">{}: {}</a>'.format(
                older.url_from(current_page, locale_path), html.escape(previous_label), html.escape(older.title)))
        if position > 0:
            newer = pages[position - 1]
            links.append('<a class="next" href="{}">{}: {}</a>'.format(
                newer.url_from(current_page, locale_path), html.escape(next_label), html.escape(newer.title)))
        return '\n'.join(links)


def _unique(items):
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
