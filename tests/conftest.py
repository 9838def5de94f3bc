"""Test configuration and fixtures for Tomato tests."""

import json
import logging
import os
import shutil
import sys
import tempfile
from pathlib import Path

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tomato_pkg.authors import Author, AuthorRegistry
from tomato_pkg.category import Category
from tomato_pkg.page import Page
from tomato_pkg.siteinfo import LocaleInfo, SiteInfo

LOCALES = ['en', 'fr']

SITEINFO = {
    'locales': {
        'en': {
            'path': '/',
            'title': 'Test Site',
            'subtitle': 'A *test* site',
            'description': 'Testing [home](/index.html)',
            'copyright': '© Tester',
        },
        'fr': {
            'path': '/fr/',
            'title': 'Site de test',
            'subtitle': 'Un site de *test*',
            'description': 'Des tests',
            'copyright': '© Testeur',
        },
    },
    'authors': [
        {'name': 'John Doe', 'email': 'john@example.com'},
        {'name': 'Jane Smith', 'email': 'jane@example.com'},
    ],
}

HEADER = """<html lang="{{ locale }}"><head><title>{{ page.title }} | {{ siteinfo.title(locale) }}</title></head>
<body><nav>{{ page.breadcrumb_html(page, locale, locale_path) }}</nav>
"""

FOOTER = """<aside>{{ tree.navigation_html(page, false, locale, locale_path) }}</aside>
<nav class="siblings">{{ page.sibling_navigation_html(page, page.category.path(locale), locale, locale_path, t(locale, 'navigation.previous'), t(locale, 'navigation.next')) }}</nav>
<footer>{{ siteinfo.copyright_html(page, locale) }}</footer></body></html>
"""

PAGE_LIST = """<ul class="pages">
{%- for item in page.category.recent_pages(-1, locale) %}
<li><a href="{{ item.url_from(page, locale_path) }}">{{ item.title }}</a> {{ item.excerpt(excerpt_length) }}</li>
{%- endfor %}
</ul>
"""

LOCALE_FILES = {
    'en.yml': """en:
  categories:
    page_list_name: "All pages in {0}"
  tags:
    page_list_name: "Pages tagged {0}"
    category_name: "Tags"
  navigation:
    previous: "Previous"
    next: "Next"
""",
    'fr.yml': """fr:
  categories:
    page_list_name: "Toutes les pages de {0}"
  tags:
    page_list_name: "Pages avec le mot-clé {0}"
    category_name: "Mots-clés"
  navigation:
    previous: "Précédent"
    next: "Suivant"
""",
}


def write_file(root, relative_path, content):
    """Write content below root, creating directories as needed."""
    path = Path(root, *relative_path.split('/'))
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, (dict, list)):
        content = json.dumps(content, ensure_ascii=False)
    path.write_text(content, encoding='utf-8')
    return str(path)


def make_page(id, basename=None, locale='en', date=None, tags=None, unlisted=False, title=None, content=''):
    """Create a detached page."""
    return Page(
        id=id,
        url_basename=basename or id,
        locale=locale,
        title=title or id,
        date=date,
        tags=tags,
        unlisted=unlisted,
        content=content,
    )


def make_category(real_name, parent=None, locales=LOCALES, unlisted=False):
    """Create a category, attached under parent when one is given."""
    category = Category(real_name, locales)
    if unlisted:
        for code in locales:
            category.set_meta(code, unlisted=True)
    if parent is not None:
        parent.add_child(category)
    return category


@pytest.fixture(autouse=True)
def reset_tomato_logger():
    """Let every test attach its own handlers to the Tomato logger."""
    yield
    logger = logging.getLogger('Tomato')
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def siteinfo():
    """Site info with an English root locale and a French locale."""
    return SiteInfo(
        [
            LocaleInfo('en', '/', title='Test Site', copyright='© Tester'),
            LocaleInfo('fr', '/fr/', title='Site de test'),
        ],
        AuthorRegistry([Author('John Doe', 'john@example.com'), Author('Jane Smith', 'jane@example.com')]),
    )


@pytest.fixture
def tree():
    """A small tree: root -> cat1 -> cat2, and root -> cat3."""
    root = Category('/', LOCALES)
    cat1 = make_category('cat1', root)
    make_category('cat2', cat1)
    make_category('cat3', root)
    return root


@pytest.fixture
def site_dir(temp_dir):
    """
    Create an input directory with siteinfo.json, templates and a content
    tree: a root category with an about page in two locales, and a blog
    category with English posts only.
    """
    site = os.path.join(temp_dir, 'site')
    write_file(site, 'siteinfo.json', SITEINFO)
    write_file(site, 'templates/header.html', HEADER)
    write_file(site, 'templates/footer.html', FOOTER)
    write_file(site, 'templates/page_list.html', PAGE_LIST)
    for name, content in LOCALE_FILES.items():
        write_file(site, f'templates/locales/{name}', content)

    write_file(site, 'pages/catinfo.json', {'en': {'name': 'Home'}, 'fr': {'name': 'Accueil'}})
    write_file(site, 'pages/about.md', """# About

#!author: John Doe
#!date: 2019-03-01

About this [site](/blog/index.html).
""")
    write_file(site, 'pages/about.fr.md', """# À propos

#!author: John Doe

À propos de ce site.
""")
    write_file(site, 'pages/blog/catinfo.json', {'name': 'Blog', 'description': 'News'})
    write_file(site, 'pages/blog/first.md', """# First post

#!author: Jane Smith
#!date: 2020-01-01
#!tags: news, python

!![Cover](/media/cover.png)

The first post.
""")
    write_file(site, 'pages/blog/second.md', """# Second post

#!author: John Doe, Jane Smith
#!date: 2021-06-15
#!tags: news

The "second" post with a {{ t(locale, 'navigation.next') }} directive.
""")
    write_file(site, 'pages/blog/secret.md', """# Secret

#!draft

Not published.
""")
    write_file(site, 'media/cover.png', 'not really a png')
    write_file(site, 'assets/style.css', 'body { color: tomato; }')
    return site
