"""Markdown parsing and serialization."""

from .parser import create_parser, parse_markdown
from .render import MarkdownRenderer, render_markdown, serialize

__all__ = ["MarkdownRenderer", "create_parser", "parse_markdown", "render_markdown", "serialize"]
