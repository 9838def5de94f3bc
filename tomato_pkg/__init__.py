"""
Tomato - a multilingual static website generator.

Tomato reads a tree of Markdown pages and catinfo.json category descriptors,
builds an in-memory category tree per locale, adds tag and index pages, and
renders everything with Jinja2 templates into a mirrored tree of HTML files.
"""

__version__ = "1.0.0"
__author__ = "Tomato contributors"
__email__ = "tomato@example.com"

from .category import Category
from .core import Tomato
from .builder import TreeBuilder
from .page import Page
from .siteinfo import SiteInfo

__all__ = ['Tomato', 'TreeBuilder', 'Category', 'Page', 'SiteInfo']
