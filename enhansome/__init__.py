"""Enrich curated markdown lists with live GitHub repository metadata."""

__version__ = "1.6.1"
