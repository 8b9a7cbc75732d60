"""Quire static blog generator.

Quire turns a directory of Markdown posts into a static blog: pages rendered
through Jinja2 layouts, paginated indexes, tag and calendar archives, an Atom
feed and a sitemap listing every dated article.

The main entry point is the CLI module, which provides commands for building
the site and creating new articles.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
