"""Typed contact relationships kept in sync across frontmatter and markdown lists."""

__version__ = "0.1.0"
