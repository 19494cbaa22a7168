"""Build the provider best-practices book from Markdown content.

This package exposes the CLI entry points used by ``uv run book`` and the CI
publish workflow to render the content tree into a static site.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from provider_book import main
>>> main()  # doctest: +SKIP
>>> from provider_book import app
>>> app.name[0]
'book'
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
