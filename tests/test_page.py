"""Tests for pages, paths and recency ordering."""

from datetime import date, datetime

import pytest

from conftest import LOCALES, make_category, make_page
from tomato_pkg.category import Category
from tomato_pkg.page import Page, join_path, parse_date, recency_key, sort_by_recency


class TestJoinPath:
    """Test cases for slash-separated path joining."""

    @pytest.mark.parametrize('parts, expected', [
        (('/fr/', '/blog/', 'index.html'), '/fr/blog/index.html'),
        (('/', '/', 'index.html'), '/index.html'),
        (('/', '/'), '/'),
        (('a/', '/b'), 'a/b'),
        (('/fr/', '../x.html'), '/x.html'),
        (('', '/'), '/'),
        ((), '.'),
    ])
    def test_join_path(self, parts, expected):
        """Joined paths are cleaned and never end with a slash."""
        assert join_path(*parts) == expected


class TestPageDates:
    """Test cases for date parsing and recency."""

    def test_parse_date(self):
        """Only YYYY-MM-DD dates are understood."""
        assert parse_date('2021-06-15') == date(2021, 6, 15)
        assert parse_date(' 2021-06-15 ') == date(2021, 6, 15)
        assert parse_date(datetime(2021, 6, 15, 12, 0)) == date(2021, 6, 15)
        assert parse_date('15/06/2021') is None
        assert parse_date('') is None
        assert parse_date(None) is None

    def test_recency_key_buckets(self):
        """Index pages, then dated pages, then everything else."""
        assert recency_key(make_page('index')) < recency_key(make_page('a', date='2999-12-31'))
        assert recency_key(make_page('a', date='2020-01-01')) < recency_key(make_page('b', date='2019-01-01'))
        assert recency_key(make_page('a', date='1900-01-01')) < recency_key(make_page('b'))

    def test_sort_is_stable(self):
        """Pages with the same key keep their order."""
        pages = [make_page('a', date='2020-01-01'), make_page('b'), make_page('c', date='2020-01-01'), make_page('d')]
        assert [page.id for page in sort_by_recency(pages)] == ['a', 'c', 'b', 'd']


class TestPage:
    """Test cases for the Page entity."""

    def test_tags_are_unique(self):
        """Duplicate tags are dropped, order is kept."""
        page = make_page('a', tags=['b', 'a', 'b'])
        assert page.tags == ['b', 'a']

    def test_is_index(self):
        assert make_page('index').is_index
        assert not make_page('indexes').is_index

    def test_path_without_category(self):
        """A detached page lives at the root."""
        assert make_page('hello').path() == '/hello.html'

    def test_path_in_category(self, tree):
        page = tree.child('cat1').child('cat2').attach_page(make_page('hello'))
        assert page.path() == '/cat1/cat2/hello.html'

    def test_path_to_root(self, tree):
        """path_to_root climbs one level per directory, locale prefix included."""
        root_page = tree.attach_page(make_page('a'))
        deep_page = tree.child('cat1').child('cat2').attach_page(make_page('b'))
        assert root_page.path_to_root() == '.'
        assert root_page.path_to_root('/fr/') == './..'
        assert deep_page.path_to_root() == './../..'
        assert deep_page.path_to_root('/fr/') == './../../..'

    def test_url_from(self, tree):
        """Urls are relative to the page they appear in."""
        target = tree.child('cat1').attach_page(make_page('a'))
        current = tree.child('cat1').child('cat2').attach_page(make_page('b'))
        assert target.url_from(current) == './../../cat1/a.html'
        assert target.url_from(current, '/fr/') == './../../../fr/cat1/a.html'

    def test_path_in_locale(self, tree):
        """Translations are found by id in the same category."""
        cat1 = tree.child('cat1')
        cat1.set_meta('fr', url_basename='chat1')
        english = cat1.attach_page(make_page('post'))
        french = cat1.attach_page(make_page('post', basename='billet', locale='fr'))
        lonely = cat1.attach_page(make_page('lonely'))

        assert english.path_in_locale('en') == '/cat1/post.html'
        assert english.path_in_locale('fr') == '/chat1/billet.html'
        assert french.path_in_locale('en') == '/cat1/post.html'
        assert lonely.path_in_locale('fr') is None
        assert english.path_in_locale('de') is None

    def test_content_html(self):
        """Quotes survive rendering and absolute links are made relative."""
        page = make_page('a', content='Say "hi" ![img](/media/x.png) {{ page_list() }}')
        html = page.content_html()
        assert 'Say "hi"' in html
        assert 'src="./media/x.png"' in html
        assert '{{ page_list() }}' in html

    def test_excerpt(self):
        """Excerpts are plain text cut on a word boundary."""
        page = make_page('a', content='# Title\n\nHello **world**, this is [text](/x.html).')
        assert page.excerpt() == 'Hello world, this is text.'
        assert page.excerpt(14) == 'Hello world,…'

    def test_excerpt_drops_directives(self):
        """Template directives never show in excerpts."""
        page = make_page('index', content='{{ page_list() }}')
        assert page.excerpt() == ''

    def test_breadcrumb(self):
        """Breadcrumbs link every ancestor down to the page."""
        root = Category('/', LOCALES)
        root.set_meta('en', name='Home')
        cat1 = make_category('cat1', root)
        cat1.set_meta('en', name='Cat & 1')
        page = cat1.attach_page(make_page('p', title='Post'))
        assert page.breadcrumb_html(page, 'en') == (
            '<a href="./../index.html">Home</a> &gt; '
            '<a href="./../cat1/index.html">Cat &amp; 1</a> &gt; '
            '<a href="./../cat1/p.html">Post</a>'
        )

    def test_breadcrumb_of_index(self, tree):
        """An index page is represented by its category."""
        index = tree.child('cat3').attach_page(make_page('index', title='Index'))
        breadcrumb = index.breadcrumb_html(index, 'en', '/fr/')
        assert breadcrumb.endswith('<a href="./../../fr/cat3/index.html">cat3</a>')
        assert 'Index' not in breadcrumb

    def test_sibling_navigation(self, tree):
        """Previous links to the older page, next to the newer one."""
        cat1 = tree.child('cat1')
        cat1.attach_page(make_page('a', date='2020-01-01'))
        b = cat1.attach_page(make_page('b', date='2021-01-01'))
        cat1.attach_page(make_page('c', date='2022-01-01'))
        assert b.sibling_navigation_html(b, '/cat1/', 'en') == (
            '<a class="previous" href="./../cat1/a.html">Previous: a</a>\n'
            '<a class="next" href="./../cat1/c.html">Next: c</a>'
        )

    def test_sibling_navigation_edges(self, tree):
        """The newest page has no next link, the oldest no previous link."""
        cat1 = tree.child('cat1')
        old = cat1.attach_page(make_page('old', date='2020-01-01'))
        new = cat1.attach_page(make_page('new', date='2021-01-01'))
        assert new.sibling_navigation_html(new, '/cat1/', 'en', previous_label='Précédent') == (
            '<a class="previous" href="./../cat1/old.html">Précédent: old</a>'
        )
        assert old.sibling_navigation_html(old, '/cat1/', 'en') == (
            '<a class="next" href="./../cat1/new.html">Next: new</a>'
        )

    def test_sibling_navigation_unlisted(self, tree):
        """Pages outside the listed order have no siblings."""
        cat1 = tree.child('cat1')
        cat1.attach_page(make_page('a', date='2020-01-01'))
        hidden = cat1.attach_page(make_page('h', date='2021-01-01', unlisted=True))
        assert hidden.sibling_navigation_html(hidden, '/cat1/', 'en') == ''
        assert hidden.sibling_navigation_html(hidden, '/nowhere/', 'en') == ''
        assert Page('x', 'x', 'en').sibling_navigation_html(hidden, '/', 'en') == ''
