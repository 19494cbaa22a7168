"""Local preview server that rebuilds the book when sources change.

``book serve`` builds into a scratch directory with the base URL pointed at
the local listener, serves it over HTTP on a background thread, and polls the
configuration file, content, static, layout, and theme directories for
changes. A failed rebuild is reported and the server keeps polling, so the
next fix triggers another build. Content and configuration errors are raised
before the output directory is cleaned and leave the previous output in
place; a theme template error can leave it partly written.
"""

from __future__ import annotations

import dataclasses as dc
import functools
import logging
import shutil
import sys
import tempfile
import threading
import time
import typing as typ
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

from jinja2 import TemplateError

from provider_book.config import SiteConfigError, load_site_config
from provider_book.content import ContentError
from provider_book.generator import SiteBuilder

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from provider_book.config import SiteConfig
    from provider_book.generator import BuildResult

logger = logging.getLogger(__name__)

Snapshot = dict[str, tuple[int, int]]
BUILD_ERRORS = (ContentError, SiteConfigError, TemplateError, FileNotFoundError)


def snapshot_paths(paths: cabc.Iterable[Path]) -> Snapshot:
    """Return ``(mtime_ns, size)`` for every file under ``paths``.

    Missing paths are skipped so a directory that appears later is picked up
    as a change on the next poll.
    """
    snapshot: Snapshot = {}
    for base in paths:
        if base.is_file():
            candidates: cabc.Iterable[Path] = [base]
        elif base.is_dir():
            candidates = base.rglob("*")
        else:
            continue
        for path in candidates:
            try:
                stat = path.stat()
            except FileNotFoundError:
                continue
            if path.is_file():
                snapshot[str(path)] = (stat.st_mtime_ns, stat.st_size)
    return snapshot


class _QuietHandler(SimpleHTTPRequestHandler):
    """Static file handler that logs requests at debug level."""

    def log_message(self, format: str, *args: typ.Any) -> None:  # noqa: A002
        logger.debug("%s - %s", self.address_string(), format % args)


@dc.dataclass(slots=True)
class DevServer:
    """Serve a freshly built copy of the book and rebuild on change."""

    config_path: Path
    host: str = "127.0.0.1"
    port: int = 1313
    output_dir: Path | None = None
    include_drafts: bool = False
    poll_interval: float = 1.0
    _snapshot: Snapshot = dc.field(default_factory=dict, init=False)
    _scratch_dir: Path | None = dc.field(default=None, init=False)

    @property
    def base_url(self) -> str:
        """URL the preview is served from."""
        return f"http://{self.host}:{self.port}/"

    def load_site(self) -> SiteConfig:
        """Load the configuration, rewritten for local serving."""
        site = load_site_config(self.config_path).with_base_url(self.base_url)
        return site.with_output_dir(self._resolve_output_dir())

    def watched_paths(self, site: SiteConfig) -> list[Path]:
        """Return the files and directories whose changes trigger a rebuild."""
        return [
            self.config_path,
            site.content_dir,
            site.static_dir,
            site.layouts_dir,
            site.theme.path,
        ]

    def build(self) -> BuildResult | None:
        """Rebuild the site, reporting failures instead of raising them."""
        try:
            site = self.load_site()
        except BUILD_ERRORS as exc:
            print(f"error: {exc}", file=sys.stderr)
            self._snapshot = snapshot_paths([self.config_path])
            return None
        self._snapshot = snapshot_paths(self.watched_paths(site))
        try:
            result = SiteBuilder(site, include_drafts=self.include_drafts).run()
        except BUILD_ERRORS as exc:
            print(f"error: {exc}", file=sys.stderr)
            return None
        print(f"built {len(result.pages)} pages, serving {self.base_url}")
        return result

    def rebuild_if_changed(self) -> BuildResult | None:
        """Rebuild when any watched file changed since the last build."""
        try:
            site = self.load_site()
        except BUILD_ERRORS:
            paths = [self.config_path]
        else:
            paths = self.watched_paths(site)
        current = snapshot_paths(paths)
        if current == self._snapshot:
            return None
        logger.info("change detected, rebuilding")
        return self.build()

    def serve_forever(self) -> None:
        """Build, start the HTTP listener, and poll until interrupted."""
        self.build()
        directory = self._resolve_output_dir()
        directory.mkdir(parents=True, exist_ok=True)
        handler = functools.partial(_QuietHandler, directory=str(directory))
        server = ThreadingHTTPServer((self.host, self.port), handler)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        print(f"serving {self.base_url} (Ctrl-C to stop)")
        try:
            while True:
                time.sleep(self.poll_interval)
                self.rebuild_if_changed()
        except KeyboardInterrupt:
            print("stopping")
        finally:
            server.shutdown()
            server.server_close()
            self.cleanup()

    def cleanup(self) -> None:
        """Remove the scratch output directory, if one was created."""
        if self._scratch_dir is not None:
            shutil.rmtree(self._scratch_dir, ignore_errors=True)
            self._scratch_dir = None

    def _resolve_output_dir(self) -> Path:
        if self.output_dir is not None:
            return self.output_dir
        if self._scratch_dir is None:
            self._scratch_dir = Path(tempfile.mkdtemp(prefix="book-serve-"))
        return self._scratch_dir


__all__ = ["DevServer", "snapshot_paths"]
