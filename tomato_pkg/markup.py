"""
Markdown conversion for Tomato, built on mistune.

``render`` produces html with tables, fenced code, footnotes and autolinks;
links and images whose url starts with "/" are prefixed so that the
generated files stay portable. ``strip`` produces plain text for excerpts.
"""

import html
import re

import mistune

PLUGINS = ['table', 'footnotes', 'url', 'strikethrough', 'task_lists']
TAG_RE = re.compile(r'<[^>]+>')
WHITESPACE_RE = re.compile(r'\s+')


class TomatoRenderer(mistune.HTMLRenderer):
    """Html renderer that prefixes site-absolute urls."""

    def __init__(self, absolute_prefix=''):
        super().__init__(escape=False)
        self.absolute_prefix = absolute_prefix

    def _prefixed(self, url):
        if self.absolute_prefix and url.startswith('/') and not url.startswith('//'):
            return self.absolute_prefix + url
        return url

    def link(self, text, url, title=None):
        return super().link(text, self._prefixed(url), title)

    def image(self, text, url, title=None):
        return super().image(text, self._prefixed(url), title)

    def block_code(self, code, info=None):
        escaped_code = mistune.escape(code)
        if info:
            lang = mistune.escape(info.split(None, 1)[0])
            return '<pre><code class="language-{}">{}</code></pre>\n'.format(lang, escaped_code)
        return '<pre><code>{}</code></pre>\n'.format(escaped_code)


class PlainTextRenderer(mistune.HTMLRenderer):
    """Renders only the literal text of a document; headings are dropped."""

    def __init__(self):
        super().__init__(escape=False)

    def text(self, text):
        return text

    def emphasis(self, text):
        return text

    def strong(self, text):
        return text

    def link(self, text, url, title=None):
        return text

    def image(self, text, url, title=None):
        return ''

    def codespan(self, text):
        return text

    def linebreak(self):
        return ' '

    def softbreak(self):
        return ' '

    def inline_html(self, html):
        return ''

    def paragraph(self, text):
        return text + ' '

    def heading(self, text, level, **attrs):
        return ''

    def blank_line(self):
        return ''

    def thematic_break(self):
        return ''

    def block_text(self, text):
        return text + ' '

    def block_code(self, code, info=None):
        return code + ' '

    def block_quote(self, text):
        return text

    def block_html(self, html):
        return ''

    def block_error(self, text):
        return text

    def list(self, text, ordered, **attrs):
        return text

    def list_item(self, text):
        return text + ' '


def create_markdown_parser(renderer):
    """Create a mistune parser with the extensions used across the site."""
    return mistune.create_markdown(renderer=renderer, plugins=PLUGINS)


def render(markdown_text, absolute_prefix=''):
    """Convert markdown to html."""
    if not markdown_text:
        return ''
    return create_markdown_parser(TomatoRenderer(absolute_prefix))(markdown_text)


def strip(markdown_text):
    """Convert markdown to plain text, paragraph breaks collapsed to spaces."""
    if not markdown_text:
        return ''
    text = create_markdown_parser(PlainTextRenderer())(markdown_text)
    # plugin renderers (tables, footnotes) still emit tags
    text = html.unescape(TAG_RE.sub(' ', text))
    return WHITESPACE_RE.sub(' ', text).strip()
