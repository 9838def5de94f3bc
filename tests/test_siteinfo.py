"""Tests for site info and authors."""

import copy
import json

import pytest

from conftest import SITEINFO, make_page, write_file
from tomato_pkg.authors import Author, AuthorRegistry
from tomato_pkg.category import Category
from tomato_pkg.errors import ConfigurationError, UnknownAuthorError
from tomato_pkg.siteinfo import LocaleInfo, SiteInfo, normalize_locale_path


class TestAuthors:
    """Test cases for the author registry."""

    def test_author_html(self):
        author = Author('Jane <3', 'jane@example.com')
        assert author.html() == '<address><a href="mailto:jane@example.com">Jane &lt;3</a></address>'

    def test_find(self):
        registry = AuthorRegistry([Author('A', 'a@x'), Author('B', 'b@x')])
        assert registry.find('B').email == 'b@x'
        assert 'A' in registry
        assert len(registry) == 2
        assert [author.name for author in registry] == ['A', 'B']
        assert registry.main.name == 'A'

    def test_find_unknown(self):
        """Unknown names raise a KeyError naming the author."""
        with pytest.raises(KeyError, match='Nobody'):
            AuthorRegistry().find('Nobody')
        with pytest.raises(UnknownAuthorError):
            AuthorRegistry().find('Nobody')

    def test_empty_registry(self):
        assert AuthorRegistry().main is None
        assert len(AuthorRegistry.from_list(None)) == 0

    def test_duplicate_name(self):
        with pytest.raises(ConfigurationError, match='Duplicate author'):
            AuthorRegistry.from_list([{'name': 'A'}, {'name': 'A', 'email': 'other@x'}])

    @pytest.mark.parametrize('entries', [
        {'name': 'A'},
        [{'email': 'a@x'}],
        ['A'],
    ])
    def test_invalid_entries(self, entries):
        with pytest.raises(ConfigurationError):
            AuthorRegistry.from_list(entries)


class TestSiteInfo:
    """Test cases for siteinfo.json handling."""

    @pytest.mark.parametrize('path, expected', [
        ('/', '/'),
        ('', '/'),
        ('fr', '/fr/'),
        ('/fr', '/fr/'),
        ('fr/', '/fr/'),
        ('/en/us/', '/en/us/'),
    ])
    def test_normalize_locale_path(self, path, expected):
        assert normalize_locale_path(path) == expected

    def test_from_dict(self):
        siteinfo = SiteInfo.from_dict(SITEINFO)
        assert siteinfo.locale_codes == ['en', 'fr']
        assert siteinfo.root_locale == 'en'
        assert siteinfo.locale_path('fr') == '/fr/'
        assert siteinfo.title('fr') == 'Site de test'
        assert siteinfo.find_author('Jane Smith').email == 'jane@example.com'

    def test_locale_order_follows_file(self):
        data = copy.deepcopy(SITEINFO)
        data['locales'] = {'fr': data['locales']['fr'], 'en': data['locales']['en']}
        siteinfo = SiteInfo.from_dict(data)
        assert siteinfo.locale_codes == ['fr', 'en']
        assert siteinfo.root_locale == 'en'

    def test_exactly_one_root_locale(self):
        """Zero or two locales at "/" are both configuration errors."""
        with pytest.raises(ConfigurationError, match='found 0'):
            SiteInfo([LocaleInfo('en', '/en/'), LocaleInfo('fr', '/fr/')])
        with pytest.raises(ConfigurationError, match='found 2'):
            SiteInfo([LocaleInfo('en', '/'), LocaleInfo('fr', '')])

    def test_no_locales(self):
        with pytest.raises(ConfigurationError):
            SiteInfo([])
        with pytest.raises(ConfigurationError, match='locales'):
            SiteInfo.from_dict({'locales': {}})

    def test_duplicate_locale(self):
        with pytest.raises(ConfigurationError, match='Duplicate locale'):
            SiteInfo([LocaleInfo('en', '/'), LocaleInfo('en', '/en/')])

    def test_invalid_locale_entry(self):
        with pytest.raises(ConfigurationError, match='title'):
            SiteInfo.from_dict({'locales': {'en': {'path': '/', 'title': 42}}})

    def test_load(self, temp_dir):
        write_file(temp_dir, 'siteinfo.json', SITEINFO)
        siteinfo = SiteInfo.load(temp_dir)
        assert len(siteinfo.authors) == 2

    def test_load_missing(self, temp_dir):
        with pytest.raises(ConfigurationError, match='No siteinfo.json'):
            SiteInfo.load(temp_dir)

    def test_load_invalid_json(self, temp_dir):
        write_file(temp_dir, 'siteinfo.json', '{"locales": ')
        with pytest.raises(ConfigurationError, match='Invalid JSON'):
            SiteInfo.load(temp_dir)

    def test_load_reports_path(self, temp_dir):
        path = write_file(temp_dir, 'siteinfo.json', json.dumps({'locales': {'en': {'path': '/en/'}}}))
        with pytest.raises(ConfigurationError) as excinfo:
            SiteInfo.load(temp_dir)
        assert path in str(excinfo.value)

    def test_locale_for_filename(self, siteinfo):
        """The locale suffix picks the locale, anything else is the root locale."""
        assert siteinfo.locale_for_filename('post.fr.md') == 'fr'
        assert siteinfo.locale_for_filename('post.en.md') == 'en'
        assert siteinfo.locale_for_filename('post.md') == 'en'
        assert siteinfo.locale_for_filename('post.de.md') == 'en'

    def test_main_author_html(self, siteinfo):
        assert siteinfo.main_author_html() == (
            '<address><a href="mailto:john@example.com">John Doe</a></address>'
        )
        assert SiteInfo([LocaleInfo('en', '/')]).main_author_html() == ''

    def test_markdown_helpers(self):
        """Subtitle, description and copyright are rendered, links relative to the page."""
        siteinfo = SiteInfo.from_dict(SITEINFO)
        root = Category('/', siteinfo.locale_codes)
        page = root.attach_page(make_page('a'))
        assert '<em>test</em>' in siteinfo.subtitle_html(page, 'en')
        assert 'href="./index.html"' in siteinfo.description_html(page, 'en')
        assert '© Testeur' in siteinfo.copyright_html(page, 'fr')
        assert siteinfo.description_html(None, 'fr').startswith('<p>Des tests')
