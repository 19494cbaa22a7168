"""Cyclopts CLI entrypoint for building and previewing the book.

The ``book`` console script defined here renders the Markdown content tree
into a static site (``book build``) or serves a live-rebuilding preview
(``book serve``). CI runs ``book build --minify`` on every push to the main
branch and uploads the output directory to the static host.

Examples
--------
Build the production site with the default configuration:

>>> from provider_book.cli import main
>>> main()  # doctest: +SKIP

Build into a custom directory with minified output:

>>> from provider_book.cli import app
>>> app(["build", "--minify", "--output-dir", "dist"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter
from jinja2 import TemplateError

from .config import SiteConfigError, load_site_config
from .content import ContentError
from .generator import SiteBuilder
from .serve import DevServer

DEFAULT_CONFIG = Path("book.yaml")
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = App(name="book", config=cyclopts.config.Env("BOOK_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def configure_logging(*, verbose: bool = False) -> None:
    """Send log records to stderr; ``verbose`` enables debug output."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger("MARKDOWN").setLevel(logging.WARNING)


def _fail(message: str, code: int) -> typ.NoReturn:
    print(f"error: {message}", file=sys.stderr)
    raise SystemExit(code)


@app.command(help="Render the content tree into a static site.")
def build(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="BOOK_CONFIG")
    ] = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="BOOK_OUTPUT_DIR"),
    ] = None,
    base_url: typ.Annotated[
        str | None,
        Parameter(help="Override the configured base URL", env_var="BOOK_BASE_URL"),
    ] = None,
    minify: typ.Annotated[
        bool, Parameter(help="Minify HTML, CSS, and the search index")
    ] = False,
    build_drafts: typ.Annotated[
        bool, Parameter(help="Include pages marked as drafts")
    ] = False,
    verbose: typ.Annotated[bool, Parameter(help="Enable debug logging")] = False,
) -> None:
    """Build the book into its output directory.

    Parameters
    ----------
    config : Path, optional
        Path to the ``book.yaml`` configuration file (overridable via
        ``BOOK_CONFIG``).
    output_dir : Path or None, optional
        Write the site here instead of the configured ``output_dir``.
    base_url : str or None, optional
        Serve the site from this URL instead of the configured ``base_url``.
    minify : bool, optional
        Minify the generated HTML, CSS, and search index.
    build_drafts : bool, optional
        Render pages whose header sets ``draft: true``.
    verbose : bool, optional
        Log debug messages to stderr.

    Returns
    -------
    None
        Writes the site and prints the rendered page paths.

    Raises
    ------
    SystemExit
        Exit status 1 for invalid content or configuration (the offending
        file is reported on stderr) and 2 for theme template failures.
    """
    configure_logging(verbose=verbose)
    try:
        site = load_site_config(config)
        if base_url:
            site = site.with_base_url(base_url)
        if output_dir is not None:
            site = site.with_output_dir(output_dir)
        result = SiteBuilder(site, minify=minify, include_drafts=build_drafts).run()
    except ContentError as exc:
        _fail(f"{site.content_dir / exc.path}: {exc.message}", 1)
    except (SiteConfigError, FileNotFoundError) as exc:
        _fail(f"{_format_path(config)}: {exc}", 1)
    except TemplateError as exc:
        _fail(f"theme template failed: {exc}", 2)

    for path in result.pages:
        print(f"wrote {_format_path(path)}")
    if result.warnings:
        print(f"{len(result.warnings)} unresolved references", file=sys.stderr)


@app.command(help="Serve the book locally and rebuild when files change.")
def serve(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="BOOK_CONFIG")
    ] = DEFAULT_CONFIG,
    host: typ.Annotated[
        str, Parameter(help="Interface to listen on", env_var="BOOK_HOST")
    ] = "127.0.0.1",
    port: typ.Annotated[
        int, Parameter(help="Port to listen on", env_var="BOOK_PORT")
    ] = 1313,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Build into this folder instead of a temporary one"),
    ] = None,
    build_drafts: typ.Annotated[
        bool, Parameter(help="Include pages marked as drafts")
    ] = False,
    poll_interval: typ.Annotated[
        float, Parameter(help="Seconds between change checks")
    ] = 1.0,
    verbose: typ.Annotated[bool, Parameter(help="Enable debug logging")] = False,
) -> None:
    """Serve a live preview of the book until interrupted."""
    configure_logging(verbose=verbose)
    server = DevServer(
        config_path=config,
        host=host,
        port=port,
        output_dir=output_dir,
        include_drafts=build_drafts,
        poll_interval=poll_interval,
    )
    server.serve_forever()


def main() -> None:
    """Invoke the Cyclopts application that powers the `book` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
