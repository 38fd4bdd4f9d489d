"""Extract links from Markdown files as JSON or delimited text."""

__version__ = "0.1.0"
