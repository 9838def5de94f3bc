#!/usr/bin/env python3
"""
Command-line interface for Tomato - static website generator.
"""

import json
import os
import sys
import argparse
from importlib import resources
from typing import List, Optional

from . import __version__
from .core import Tomato
from .settings import TomatoSettings

SAMPLE_SITEINFO = {
    'locales': {
        'en': {
            'path': '/',
            'title': 'My Tomato Site',
            'subtitle': 'Built with *Tomato*',
            'description': 'A small multilingual website.',
            'copyright': '© Site Author',
        },
        'fr': {
            'path': '/fr/',
            'title': 'Mon site Tomato',
            'subtitle': 'Construit avec *Tomato*',
            'description': 'Un petit site multilingue.',
            'copyright': '© Site Author',
        },
    },
    'authors': [
        {'name': 'Site Author', 'email': 'author@example.com'},
    ],
}

SAMPLE_FILES = {
    'pages/catinfo.json': json.dumps({
        'en': {'name': 'Home', 'description': 'Everything on this site.'},
        'fr': {'name': 'Accueil', 'description': 'Tout le site.'},
    }, indent=2, ensure_ascii=False) + '\n',
    'pages/blog/catinfo.json': json.dumps({
        'name': 'Blog',
        'description': 'News and articles.',
    }, indent=2) + '\n',
    'pages/about.md': """# About

#!author: Site Author
#!date: 2024-01-01

This site is generated by **Tomato** from a tree of markdown files.
Every directory with a `catinfo.json` file becomes a category.
""",
    'pages/about.fr.md': """# À propos

#!author: Site Author
#!date: 2024-01-01

Ce site est généré par **Tomato** à partir de fichiers markdown.
""",
    'pages/blog/hello.md': """# Hello world

#!author: Site Author
#!date: 2024-06-15
#!tags: news, tomato

!![A tomato](/media/tomato.svg)

The first article of the blog. Add a line `#!draft` to hide an article
while writing it, or `#!unlisted` to keep it out of the lists.
""",
    'pages/blog/hello.bonjour.fr.md': """# Bonjour le monde

#!author: Site Author
#!date: 2024-06-15
#!tags: news, tomato

Le premier article du blog.
""",
    'media/tomato.svg': """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10"><circle cx="5" cy="5" r="4" fill="tomato"/></svg>
""",
    'assets/style.css': """body { font-family: sans-serif; max-width: 48em; margin: auto; }
nav.breadcrumb { font-size: small; }
""",
}

TEMPLATE_FILES = [
    'header.html',
    'footer.html',
    'page_list.html',
    'locales/en.yml',
    'locales/fr.yml',
]


def write_if_missing(root: str, relative_path: str, content: str) -> bool:
    """Write a starter file unless it exists. Return whether it was written."""
    path = os.path.join(root, *relative_path.split('/'))
    if os.path.exists(path):
        print(f"File already exists: {relative_path}")
        return False
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content)
    print(f"Created: {relative_path}")
    return True


def create_starter_structure(root: str) -> None:
    """Create a complete starter site with content, templates and locales."""
    os.makedirs(root, exist_ok=True)

    write_if_missing(root, 'siteinfo.json', json.dumps(SAMPLE_SITEINFO, indent=2, ensure_ascii=False) + '\n')
    for relative_path, content in SAMPLE_FILES.items():
        write_if_missing(root, relative_path, content)

    # Copy default templates from package
    templates = resources.files('tomato_pkg').joinpath('templates')
    for relative_path in TEMPLATE_FILES:
        source = templates.joinpath(*relative_path.split('/'))
        write_if_missing(root, f'templates/{relative_path}', source.read_text(encoding='utf-8'))

    print("\n✅ Starter site created successfully!")
    print("\nNext steps:")
    print("1. Edit siteinfo.json (locales and authors)")
    print("2. Customize templates in the 'templates/' directory")
    print("3. Add categories and markdown pages to 'pages/'")
    print(f"4. Run 'tomato {root}' to build your site")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Tomato - Static Website Generator')
    parser.add_argument('input', nargs='?',
                        help='Input directory containing siteinfo.json, pages/ and templates/')
    parser.add_argument('output', nargs='?',
                        help='Output directory (defaults to INPUT_html)')
    parser.add_argument('--log-dir', dest='log_dir', type=str,
                        help='Directory for build log files')
    parser.add_argument('--excerpt-length', dest='excerpt_length', type=int,
                        help='Maximum length of page excerpts')
    parser.add_argument('--init', nargs='?', const='.', metavar='DIR',
                        help='Create a starter site in DIR (default: current directory)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Handle init command
    if args.init:
        create_starter_structure(args.init)
        config_path = TomatoSettings(args.init).create_sample_config('yml')
        if config_path:
            print(f"Created sample configuration file: {config_path}")
        return

    try:
        # Load settings from configuration file
        settings_loader = TomatoSettings()
        settings_loader.load_settings()

        # Command line arguments take precedence
        args_dict = {k: v for k, v in vars(args).items() if v is not None}
        final_settings = settings_loader.merge_with_args(args_dict)

        if not final_settings['input']:
            parser.error('please specify an input directory.')

        excerpt_length = final_settings['excerpt_length']
        if not isinstance(excerpt_length, int) or excerpt_length <= 0:
            raise ValueError(f"excerpt_length must be a positive integer, got {excerpt_length!r}")

        generator = Tomato(
            input_dir=os.path.expanduser(final_settings['input']),
            output_dir=os.path.expanduser(final_settings['output']) if final_settings['output'] else None,
            log_dir=final_settings['log_dir'],
            excerpt_length=excerpt_length,
        )
        generator.build()
        generator.logger.info(f"Total html files generated: {generator.total_generated}")

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
