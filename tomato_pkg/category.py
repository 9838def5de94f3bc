"""
The category tree: one node per content directory, holding per-locale metadata
and pages, plus the aggregated views computed over a subtree.
"""

import posixpath
from typing import Dict, Iterable, Iterator, List, Optional

from . import markup
from .errors import IngestionError
from .page import Page, join_path, sort_by_recency

ROOT_SENTINEL = ':root:'


class LocaleView:
    """Metadata and pages of a category in one locale."""

    __slots__ = ('url_basename', 'name', 'description', 'unlisted', 'pages')

    def __init__(self, url_basename='', name='', description='', unlisted=False):
        self.url_basename = url_basename
        self.name = name
        self.description = description
        self.unlisted = unlisted
        self.pages: List[Page] = []

    def __repr__(self):
        return f"LocaleView({self.url_basename!r}, {self.name!r}, pages={len(self.pages)})"


def category_path(category: Optional['Category'], locale: str) -> str:
    """Path of a category, "/" for no category at all."""
    return '/' if category is None else category.path(locale)


class Category:
    """
    A directory of the site.

    ``real_name`` is the directory basename, the locale-independent identity
    used to place files. Children are owned by their parent; ``parent`` is a
    back-reference that is set once, when the child is attached.
    """

    def __init__(self, real_name: str, locales: Iterable[str], synthetic: bool = False):
        self.real_name = real_name
        self.parent: Optional[Category] = None
        self.children: List[Category] = []
        self.synthetic = synthetic
        self.locales: Dict[str, LocaleView] = {
            code: LocaleView(url_basename=real_name, name=real_name) for code in locales
        }
        if not self.locales:
            raise ValueError('a category needs at least one locale')

    def __repr__(self):
        return f"Category({self.real_name!r}, children={len(self.children)})"

    # Per-locale accessors

    def view(self, locale: str) -> LocaleView:
        try:
            return self.locales[locale]
        except KeyError:
            raise KeyError(f'locale "{locale}" is not configured for category "{self.real_name}"') from None

    def url_basename(self, locale: str) -> str:
        return self.view(locale).url_basename

    def name(self, locale: str) -> str:
        return self.view(locale).name

    def description(self, locale: str) -> str:
        return self.view(locale).description

    def unlisted(self, locale: str) -> bool:
        return self.view(locale).unlisted

    def pages(self, locale: str) -> List[Page]:
        return self.view(locale).pages

    def set_meta(self, locale: str, url_basename=None, name=None, description=None, unlisted=None) -> None:
        view = self.view(locale)
        if url_basename is not None:
            view.url_basename = url_basename
        if name is not None:
            view.name = name
        if description is not None:
            view.description = description
        if unlisted is not None:
            view.unlisted = unlisted

    # Structure

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def root(self) -> 'Category':
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def child(self, real_name: str) -> Optional['Category']:
        for child in self.children:
            if child.real_name == real_name:
                return child
        return None

    def add_child(self, child: 'Category') -> 'Category':
        """Attach child under this category. Real names are unique among siblings."""
        if child.parent is not None:
            raise ValueError(f'category "{child.real_name}" already has a parent')
        if child is self or child is self.root():
            raise ValueError('a category cannot be its own descendant')
        if self.child(child.real_name) is not None:
            raise IngestionError(f'duplicate category "{child.real_name}" in "{self.path(self._any_locale())}"')
        if set(child.locales) != set(self.locales):
            raise ValueError(f'category "{child.real_name}" does not have the same locales as its parent')
        child.parent = self
        self.children.append(child)
        return child

    def attach_page(self, page: Page) -> Page:
        """Make this category the owner of page and append it to its locale's list."""
        if page.locale not in self.locales:
            raise IngestionError(f'locale "{page.locale}" is not configured')
        page.category = self
        self.locales[page.locale].pages.append(page)
        return page

    def alias_page(self, page: Page, locale: str) -> None:
        """List a page owned by another category, as tag categories do."""
        self.view(locale).pages.append(page)

    def has_index(self, locale: str) -> bool:
        """Whether this category owns an index page in the locale."""
        return any(page.is_index and page.category is self for page in self.pages(locale))

    def walk(self) -> Iterator['Category']:
        """Breadth-first iteration over this category and its descendants."""
        queue = [self]
        while queue:
            category = queue.pop(0)
            yield category
            queue.extend(category.children)

    def _any_locale(self) -> str:
        return next(iter(self.locales))

    # Paths

    def path(self, locale: str) -> str:
        """Slash-separated path from the root, always ending with "/"."""
        basename = self.url_basename(locale)
        if self.parent is None or basename == '/':
            return '/'
        return self.parent.path(locale) + basename + '/'

    def find_ancestor_containing(self, path: str) -> Optional['Category']:
        """
        Return the category a file at the given slash-separated path (relative to
        the content root) belongs in, or None when path is the root sentinel.

        Directory names are matched greedily against real names, left to right.

        Raises:
            IngestionError: a directory of the path has no category
        """
        if path == ROOT_SENTINEL:
            return None
        directory = posixpath.dirname(path)
        node = self
        for segment in (s for s in directory.split('/') if s):
            match = node.child(segment)
            if match is None:
                raise IngestionError(f'unable to find a category for directory "{segment}"', path)
            node = match
        return node

    def find_by_path(self, url_path: str, locale: str) -> Optional['Category']:
        """Resolve a category from its url path in a locale, or None."""
        node = self
        for segment in (s for s in url_path.split('/') if s):
            node = next((c for c in node.children if c.url_basename(locale) == segment), None)
            if node is None:
                return None
        return node

    # Aggregated views

    def _own_pages(self, locale: str) -> Iterator[Page]:
        """Listed pages owned by this category (aliases excluded)."""
        for page in self.pages(locale):
            if not page.unlisted and page.category is self:
                yield page

    def has_content(self, locale: str) -> bool:
        """Whether any non-synthetic page is owned by this category or a descendant."""
        if any(page.category is self and not page.synthetic for page in self.pages(locale)):
            return True
        return any(child.has_content(locale) for child in self.children)

    def is_empty(self, locale: str) -> bool:
        return not self.pages(locale) and not self.children and self.page_count(locale) == 0

    def page_count(self, locale: str) -> int:
        """Number of listed pages in this category and its subcategories."""
        count = sum(1 for _ in self._own_pages(locale))
        return count + sum(child.page_count(locale) for child in self.children)

    def category_count(self, locale: str) -> int:
        """Number of listed subcategories, recursively."""
        return sum(1 + child.category_count(locale)
                   for child in self.children if not child.unlisted(locale))

    def _collect_tags(self, locale: str, tags: set) -> None:
        for page in self._own_pages(locale):
            tags.update(page.tags)
        for child in self.children:
            if not child.unlisted(locale):
                child._collect_tags(locale, tags)

    def tags(self, locale: str) -> List[str]:
        """Sorted distinct tags of the listed pages in this subtree."""
        tags = set()
        self._collect_tags(locale, tags)
        return sorted(tags)

    def filter_by_tags(self, tags: Iterable[str], locale: str) -> List[Page]:
        """Listed pages of this subtree having at least one of the given tags, depth first."""
        wanted = set(tags)
        if not wanted:
            return []
        pages = [page for page in self._own_pages(locale) if wanted.intersection(page.tags)]
        for child in self.children:
            if not child.unlisted(locale):
                pages.extend(child.filter_by_tags(wanted, locale))
        return pages

    def filter_by_tag(self, tag: str, locale: str) -> List[Page]:
        return self.filter_by_tags([tag], locale)

    def recent_pages(self, n: int, locale: str) -> List[Page]:
        """
        Listed pages of this subtree, most recent first, at most n of them
        (n < 0 means no limit). Unlisted subcategories are skipped; this
        category is always scanned.
        """
        pages = []
        seen = set()
        queue = [self]
        while queue:
            category = queue.pop(0)
            for page in category.pages(locale):
                if page.unlisted or id(page) in seen:
                    continue
                seen.add(id(page))
                pages.append(page)
            queue.extend(child for child in category.children if not child.unlisted(locale))
        pages = sort_by_recency(pages)
        if n >= 0:
            return pages[:n]
        return pages

    # Navigation

    def navigation_markdown(self, prefix: str, include_pages: bool, locale: str,
                            locale_path: str = '/') -> str:
        """Nested markdown list of the listed, non-empty subcategories (and pages)."""
        href = join_path(locale_path, self.path(locale), 'index.html')
        lines = [f'{prefix}* [{self.name(locale)} >]({href})\n']
        for child in self.children:
            if child.unlisted(locale) or child.is_empty(locale):
                continue
            lines.append(child.navigation_markdown('\t' + prefix, include_pages, locale, locale_path))
        if include_pages:
            for page in sort_by_recency(list(self._own_pages(locale))):
                if page.is_index:
                    continue
                page_href = join_path(locale_path, page.path())
                lines.append(f'{prefix}\t* [{page.title}]({page_href})\n')
        return ''.join(lines)

    def navigation_html(self, page: Optional[Page], include_pages: bool, locale: str,
                        locale_path: str = '/') -> str:
        """navigation_markdown rendered to html, links relative to page."""
        prefix = page.path_to_root(locale_path) if page is not None else ''
        return markup.render(self.navigation_markdown('', include_pages, locale, locale_path), prefix)
