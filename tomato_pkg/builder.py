"""
Builds the category tree from a content directory.

Two passes over the walked filesystem: catinfo.json files create the
categories, then markdown files create the pages. A final synthesis pass adds
the tag categories and the index pages of categories lacking one.
"""

import json
import logging
import os
import posixpath
import re
from typing import Dict, List, Optional, Tuple

from .category import ROOT_SENTINEL, Category
from .errors import IngestionError, UnknownAuthorError
from .filesystem import iter_files, read_file
from .i18n import Translations
from .page import INDEX_BASENAME, Page
from .siteinfo import SiteInfo

CATEGORY_FILE = 'catinfo.json'
CONTENT_SUFFIX = '.md'
TAG_CATEGORY_NAME = 'tag'
PAGE_LIST_DIRECTIVE = '{{ page_list() }}'

TITLE_RE = re.compile(r'^# +(.+?)[ \t]*$', re.MULTILINE)
AUTHOR_RE = re.compile(r'^#!author:[ \t]*(.*?)[ \t]*$\n?', re.MULTILINE)
DATE_RE = re.compile(r'^#!date:[ \t]*(.*?)[ \t]*$\n?', re.MULTILINE)
TAGS_RE = re.compile(r'^#!tags:[ \t]*(.*?)[ \t]*$\n?', re.MULTILINE)
DRAFT_RE = re.compile(r'^#!draft[ \t]*$\n?', re.MULTILINE)
UNLISTED_RE = re.compile(r'^#!unlisted[ \t]*$\n?', re.MULTILINE)
FEATURED_IMAGE_RE = re.compile(r'!!\[(.+?)\]\((.+?)\)')


def parse_markdown_with_metadata(text: str) -> Tuple[dict, str]:
    """
    Extract the front-matter lines embedded in a markdown document.

    Returns the metadata and the content with the meta lines removed. The title
    heading stays in the content; a featured image link ``!![alt](url)`` is
    turned back into a normal image.
    """
    metadata = {
        'title': '',
        'authors': [],
        'date': None,
        'tags': [],
        'draft': False,
        'unlisted': False,
        'featured_image': None,
    }

    match = TITLE_RE.search(text)
    if match:
        metadata['title'] = match.group(1)

    match = AUTHOR_RE.search(text)
    if match:
        metadata['authors'] = [name.strip() for name in match.group(1).split(',') if name.strip()]

    match = DATE_RE.search(text)
    if match and match.group(1):
        metadata['date'] = match.group(1)

    match = TAGS_RE.search(text)
    if match:
        metadata['tags'] = [tag.strip() for tag in match.group(1).split(',') if tag.strip()]

    metadata['draft'] = DRAFT_RE.search(text) is not None
    metadata['unlisted'] = UNLISTED_RE.search(text) is not None

    match = FEATURED_IMAGE_RE.search(text)
    if match:
        metadata['featured_image'] = match.group(2)

    for regex in (AUTHOR_RE, DATE_RE, TAGS_RE, DRAFT_RE, UNLISTED_RE):
        text = regex.sub('', text)
    text = FEATURED_IMAGE_RE.sub(r'![\1](\2)', text)
    return metadata, text


def split_page_filename(filename: str, locale: str) -> Tuple[str, str]:
    """
    Return (id, url_basename) for a content file name of the form
    ``[<id>.]<basename>[.<locale>].md``.
    """
    stem = filename[:-len(CONTENT_SUFFIX)]
    if stem.endswith('.' + locale):
        stem = stem[:-len(locale) - 1]
    if '.' in stem:
        page_id, basename = stem.split('.', 1)
    else:
        page_id = basename = stem
    return page_id, basename


class TreeBuilder:
    """Sole mutator of a category tree while it is being built."""

    def __init__(self, siteinfo: SiteInfo, translations: Optional[Translations] = None):
        self.siteinfo = siteinfo
        self.translations = translations or Translations()
        self.logger = logging.getLogger('Tomato.TreeBuilder')
        self.tree = self.new_category('/')
        for code in self.siteinfo.locale_codes:
            self.tree.set_meta(code, name=self.siteinfo.title(code) or '/')
        self.tag_category: Optional[Category] = None
        self.drafts: List[str] = []

    def new_category(self, real_name: str, synthetic: bool = False) -> Category:
        return Category(real_name, self.siteinfo.locale_codes, synthetic=synthetic)

    def build(self, content_dir: str) -> Category:
        """Run both ingestion passes and the synthesis pass; return the tree."""
        self.load_categories(content_dir)
        self.load_pages(content_dir)
        self.synthesize()
        return self.tree

    @staticmethod
    def relative_url_path(path: str, content_dir: str) -> str:
        rel = os.path.relpath(path, content_dir)
        return '/' + rel.replace(os.sep, '/')

    def _iter_content_files(self, content_dir):
        try:
            yield from iter_files(content_dir)
        except OSError as e:
            raise IngestionError(f'cannot walk directory: {e}', getattr(e, 'filename', None) or content_dir) from e

    # Categories

    def load_categories(self, content_dir: str) -> None:
        for path in self._iter_content_files(content_dir):
            if os.path.basename(path) == CATEGORY_FILE:
                self.add_category_file(path, content_dir)

    def add_category_file(self, path: str, content_dir: str) -> Category:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise IngestionError(f'invalid JSON: {e}', path) from e
        except (IOError, OSError, UnicodeDecodeError) as e:
            raise IngestionError(f'cannot read file: {e}', path) from e

        directory = posixpath.dirname(self.relative_url_path(path, content_dir))
        if directory == '/':
            parent = self.tree.find_ancestor_containing(ROOT_SENTINEL)
        else:
            parent = self.tree.find_ancestor_containing(directory)
        if parent is None:
            records = self.decode_category_info(data, '/', path)
            self.apply_category_info(self.tree, records, is_root=True)
            self.logger.debug(f"Root category described by {path}")
            return self.tree

        real_name = posixpath.basename(directory)
        category = self.new_category(real_name)
        self.apply_category_info(category, self.decode_category_info(data, real_name, path))
        parent.add_child(category)
        self.logger.debug(f"Category {directory} described by {path}")
        return category

    @staticmethod
    def _decode_record(data) -> Optional[dict]:
        """Decode one locale's category record, or None if data is not one."""
        if not isinstance(data, dict):
            return None
        record = {}
        for key in ('name', 'description', 'basename'):
            value = data.get(key, '')
            if value is None:
                value = ''
            if not isinstance(value, str):
                return None
            record[key] = value.strip() if key == 'basename' else value
        unlisted = data.get('unlisted', False)
        if not isinstance(unlisted, bool):
            return None
        record['unlisted'] = unlisted
        if '/' in record['basename'].strip('/'):
            return None
        return record

    def decode_category_info(self, data, real_name: str, path: str) -> Dict[str, dict]:
        """
        Return one record per configured locale.

        A catinfo.json is either a single record applied to every locale
        (detected by a non-empty name) or an object keyed by locale code.
        Locales missing from the latter fall back to the root locale's record.
        """
        flat = self._decode_record(data)
        if flat is not None and flat['name']:
            return {code: dict(flat) for code in self.siteinfo.locale_codes}

        if not isinstance(data, dict):
            raise IngestionError('category info must be a JSON object', path)
        records = {}
        for code, entry in data.items():
            if code not in self.siteinfo.locales:
                raise IngestionError(f'unknown locale "{code}" in category info', path)
            record = self._decode_record(entry)
            if record is None:
                raise IngestionError(f'invalid category info for locale "{code}"', path)
            records[code] = record

        default = records.get(self.siteinfo.root_locale)
        for code in self.siteinfo.locale_codes:
            if code not in records:
                records[code] = dict(default) if default else {
                    'name': '', 'description': '', 'basename': '', 'unlisted': False,
                }
        return records

    @staticmethod
    def apply_category_info(category: Category, records: Dict[str, dict], is_root: bool = False) -> None:
        for code, record in records.items():
            if is_root:
                # the root path is always "/"; an empty name keeps the site title
                url_basename = None
                name = record['name'] or None
            else:
                url_basename = record['basename'].strip('/') or category.real_name
                name = record['name'] or category.real_name
            category.set_meta(
                code,
                url_basename=url_basename,
                name=name,
                description=record['description'],
                unlisted=record['unlisted'],
            )

    # Pages

    def load_pages(self, content_dir: str) -> None:
        for path in self._iter_content_files(content_dir):
            if path.endswith(CONTENT_SUFFIX):
                self.add_page_file(path, content_dir)

    def add_page_file(self, path: str, content_dir: str) -> Optional[Page]:
        filename = os.path.basename(path)
        locale = self.siteinfo.locale_for_filename(filename)
        if locale not in self.siteinfo.locales:
            raise IngestionError('unable to detect locale', path)
        page_id, basename = split_page_filename(filename, locale)
        if not page_id or not basename:
            raise IngestionError('cannot derive a page name from the file name', path)

        try:
            text = read_file(path)
        except (IOError, OSError, UnicodeDecodeError) as e:
            raise IngestionError(f'cannot read file: {e}', path) from e
        metadata, content = parse_markdown_with_metadata(text)

        authors = []
        for name in metadata['authors']:
            try:
                authors.append(self.siteinfo.find_author(name))
            except UnknownAuthorError as e:
                raise UnknownAuthorError(str(e), path) from None

        for tag in metadata['tags']:
            if tag in ('.', '..') or '/' in tag:
                raise IngestionError(f'invalid tag "{tag}": tags are used as directory names', path)

        page = Page(
            id=page_id,
            url_basename=basename,
            locale=locale,
            title=metadata['title'],
            authors=authors,
            date=metadata['date'],
            tags=metadata['tags'],
            draft=metadata['draft'],
            unlisted=metadata['unlisted'],
            content=content,
            featured_image_path=metadata['featured_image'],
        )

        if page.draft:
            self.drafts.append(path)
            self.logger.info(f"Skipping draft: '{page.title}' ({path})")
            return None

        url_path = self.relative_url_path(path, content_dir)
        category = self.tree.find_ancestor_containing(url_path) or self.tree
        if any(other.url_basename == basename for other in category.pages(locale)):
            raise IngestionError(f'duplicate page "{basename}" for locale "{locale}"', path)
        category.attach_page(page)
        self.logger.debug(f"{locale}: {path} -> {page.path()}")
        return page

    # Synthesis

    def synthesize(self) -> None:
        """
        Add the unlisted tag subtree and the missing index pages.

        Everything that decides what to synthesize is computed from the content
        tree before any synthetic node is attached.
        """
        if self.tree.child(TAG_CATEGORY_NAME) is not None:
            raise IngestionError(f'the category name "{TAG_CATEGORY_NAME}" is reserved for tag pages',
                                 f'/{TAG_CATEGORY_NAME}')
        locales = self.siteinfo.locale_codes
        with_content = {id(category) for category in self.tree.walk()
                        if any(category.has_content(code) for code in locales)}
        tagged = {code: [(tag, self.tree.filter_by_tag(tag, code)) for tag in self.tree.tags(code)]
                  for code in locales}

        self.tag_category = self.build_tag_category(tagged)
        self.tree.add_child(self.tag_category)

        for code in locales:
            for category in list(self.tree.walk()):
                if category.has_index(code):
                    continue
                if category.synthetic:
                    needed = any(c.pages(code) for c in category.children) or bool(category.pages(code))
                else:
                    needed = id(category) in with_content
                if needed:
                    category.attach_page(self.new_index_page(category, code))

    def build_tag_category(self, tagged: Dict[str, List[Tuple[str, List[Page]]]]) -> Category:
        tag_category = self.new_category(TAG_CATEGORY_NAME, synthetic=True)
        for code in self.siteinfo.locale_codes:
            tag_category.set_meta(code, name=self.translations.t(code, 'tags.category_name'), unlisted=True)

        for code, tags in tagged.items():
            for tag, pages in tags:
                tag_child = tag_category.child(tag)
                if tag_child is None:
                    tag_child = self.new_category(tag, synthetic=True)
                    for other in self.siteinfo.locale_codes:
                        tag_child.set_meta(other, name=tag, unlisted=True)
                    tag_category.add_child(tag_child)
                for page in pages:
                    tag_child.alias_page(page, code)
        return tag_category

    def is_tag(self, category: Category) -> bool:
        return category.synthetic and category.parent is self.tag_category and category is not self.tag_category

    def new_index_page(self, category: Category, locale: str) -> Page:
        """Create the unlisted index page listing the pages of a category."""
        if self.is_tag(category):
            title = self.translations.t(locale, 'tags.page_list_name', category.real_name)
            tags = [category.real_name]
        else:
            title = self.translations.t(locale, 'categories.page_list_name', category.name(locale))
            tags = category.tags(locale)
        main_author = self.siteinfo.authors.main
        return Page(
            id=INDEX_BASENAME,
            url_basename=INDEX_BASENAME,
            locale=locale,
            title=title,
            authors=[main_author] if main_author else [],
            tags=tags,
            unlisted=True,
            content=PAGE_LIST_DIRECTIVE,
            synthetic=True,
        )
