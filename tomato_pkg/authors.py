"""
Authors of the website, as declared in siteinfo.json.
"""

import html
from typing import Dict, Iterator, List

from .errors import ConfigurationError, UnknownAuthorError


class Author:
    """An author of the website. Identity is the name."""

    __slots__ = ('name', 'email')

    def __init__(self, name: str, email: str = ''):
        self.name = name
        self.email = email

    def html(self) -> str:
        """Return an html link to the author."""
        return '<address><a href="mailto:{}">{}</a></address>'.format(
            html.escape(self.email), html.escape(self.name)
        )

    def __eq__(self, other):
        if not isinstance(other, Author):
            return NotImplemented
        return self.name == other.name and self.email == other.email

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return f"Author({self.name!r}, {self.email!r})"


class AuthorRegistry:
    """Flat, ordered list of authors with lookup by name."""

    def __init__(self, authors: List[Author] = None):
        self._authors: List[Author] = []
        self._by_name: Dict[str, Author] = {}
        for author in authors or []:
            self.add(author)

    @classmethod
    def from_list(cls, entries) -> 'AuthorRegistry':
        """Build a registry from the decoded "authors" array of siteinfo.json."""
        if entries is None:
            return cls()
        if not isinstance(entries, list):
            raise ConfigurationError('"authors" must be a list')
        authors = []
        for entry in entries:
            if not isinstance(entry, dict) or not isinstance(entry.get('name'), str):
                raise ConfigurationError(f'Invalid author entry: {entry!r}')
            authors.append(Author(entry['name'], str(entry.get('email', ''))))
        return cls(authors)

    def add(self, author: Author) -> None:
        if author.name in self._by_name:
            raise ConfigurationError(f'Duplicate author name: {author.name}')
        self._authors.append(author)
        self._by_name[author.name] = author

    def find(self, name: str) -> Author:
        """
        Return the author with the given name.

        Raises:
            UnknownAuthorError: no author has this name
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownAuthorError(f'unable to find author "{name}"') from None

    @property
    def main(self):
        """First registered author, or None for an empty registry."""
        return self._authors[0] if self._authors else None

    def __contains__(self, name):
        return name in self._by_name

    def __iter__(self) -> Iterator[Author]:
        return iter(self._authors)

    def __len__(self):
        return len(self._authors)
