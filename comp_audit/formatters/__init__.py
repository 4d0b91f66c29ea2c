"""Output formatters for comp-audit."""

from .markdown import generate_markdown
