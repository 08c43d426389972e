"""Print a finished HTML document through a transient output surface.

A surface is anything that can show a document and trigger the platform
print dialog: the default implementation writes the document to a
temporary file and opens it in a browser, where an embedded script
prints on load and then calls ``window.close()``. Browsers may ignore
that call for a tab they consider user-opened, so the tab can outlive
the job.

Lifecycle of one job::

    IDLE -> SURFACE_REQUESTED -> SURFACE_OPENED -> CONTENT_WRITTEN
         -> PRINT_INVOKED -> CLOSED

If the surface cannot be created the job returns to ``IDLE`` and reports
``False``. If the surface is created but refuses to show the document,
it is still closed and the job reports ``False``. There is no retry.
"""

from __future__ import annotations

import logging
import tempfile
import time
import webbrowser
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

__all__ = [
    "FILE_PREFIX",
    "FILE_RETENTION_SECONDS",
    "BrowserPrintSurface",
    "DirectPrinter",
    "PrintState",
    "PrintSurface",
    "SurfaceUnavailableError",
    "purge_stale_files",
]

FILE_PREFIX = "etiquetas_"
FILE_SUFFIX = ".html"

# The browser loads the file asynchronously after open() returns, so a
# print file is kept this long before a later job deletes it.
FILE_RETENTION_SECONDS = 600.0


class SurfaceUnavailableError(RuntimeError):
    """Raised by a surface that cannot be created or cannot show content."""


class PrintState(str, Enum):
    IDLE = "idle"
    SURFACE_REQUESTED = "surface_requested"
    SURFACE_OPENED = "surface_opened"
    CONTENT_WRITTEN = "content_written"
    PRINT_INVOKED = "print_invoked"
    CLOSED = "closed"


class PrintSurface(ABC):
    """Output surface able to display and print one document."""

    @abstractmethod
    def open(self) -> None:
        """Create the surface or raise :class:`SurfaceUnavailableError`."""

    @abstractmethod
    def write(self, document: str) -> None:
        """Load ``document`` into the surface."""

    @abstractmethod
    def print(self) -> None:
        """Ask the surface to print its content once loaded.

        Raises :class:`SurfaceUnavailableError` if the content cannot be
        shown.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the surface."""


def purge_stale_files(
    directory: Path,
    max_age: float = FILE_RETENTION_SECONDS,
    now: Optional[float] = None,
) -> int:
    """Delete print files in ``directory`` older than ``max_age`` seconds."""

    cutoff = (time.time() if now is None else now) - max_age
    removed = 0
    for path in directory.glob(f"{FILE_PREFIX}*{FILE_SUFFIX}"):
        try:
            if path.stat().st_mtime < cutoff:
                path.unlink()
                removed += 1
        except FileNotFoundError:
            continue
        except OSError as exc:
            logger.debug("Could not remove stale print file %s: %s", path, exc)
    if removed:
        logger.debug("Removed %d stale print file(s) from %s", removed, directory)
    return removed


class BrowserPrintSurface(PrintSurface):
    """Temporary HTML file shown in a web browser.

    ``close`` only forgets the file: the browser may still be reading it
    when the job ends. Files older than ``retention`` seconds are purged
    from ``directory`` each time a new surface is opened.
    """

    def __init__(
        self,
        browser: Optional[str] = None,
        directory: Optional[Path] = None,
        retention: float = FILE_RETENTION_SECONDS,
    ) -> None:
        self.browser = browser
        self.directory = Path(directory or tempfile.gettempdir())
        self.retention = retention
        self.path: Optional[Path] = None
        self._controller: Optional[webbrowser.BaseBrowser] = None

    def open(self) -> None:
        try:
            self._controller = webbrowser.get(self.browser)
        except webbrowser.Error as exc:
            raise SurfaceUnavailableError(f"No usable browser: {exc}") from exc
        purge_stale_files(self.directory, self.retention)
        handle = NamedTemporaryFile(
            delete=False, prefix=FILE_PREFIX, suffix=FILE_SUFFIX, dir=self.directory)
        handle.close()
        self.path = Path(handle.name)

    def write(self, document: str) -> None:
        if self.path is None:
            raise RuntimeError("surface not opened")
        self.path.write_text(document, encoding="utf-8")

    def print(self) -> None:
        if self._controller is None or self.path is None:
            raise RuntimeError("surface not opened")
        # the document prints itself from its load handler
        if not self._controller.open(self.path.as_uri(), new=1):
            raise SurfaceUnavailableError(f"Browser could not open {self.path}")

    def close(self) -> None:
        if self.path is not None:
            logger.debug("Keeping print file %s for %.0fs", self.path, self.retention)
        self.path = None
        self._controller = None


class DirectPrinter:
    """Drive one document through a :class:`PrintSurface`.

    ``close_delay`` is how long the surface stays alive after print is
    requested, so the native print dialog can capture the content. It is
    a heuristic, not a synchronisation point.
    """

    def __init__(
        self,
        surface: PrintSurface,
        close_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.surface = surface
        self.close_delay = close_delay
        self._sleep = sleep
        self.state = PrintState.IDLE
        self.history: List[PrintState] = [PrintState.IDLE]

    def _advance(self, state: PrintState) -> None:
        self.state = state
        self.history.append(state)

    def print_document(self, document: str) -> bool:
        """Print ``document``; return ``False`` if the surface failed."""

        self._advance(PrintState.SURFACE_REQUESTED)
        try:
            self.surface.open()
        except SurfaceUnavailableError as exc:
            logger.warning("Print surface unavailable: %s", exc)
            self._advance(PrintState.IDLE)
            return False
        self._advance(PrintState.SURFACE_OPENED)

        try:
            self.surface.write(document)
            self._advance(PrintState.CONTENT_WRITTEN)
            self.surface.print()
            self._advance(PrintState.PRINT_INVOKED)
            if self.close_delay > 0:
                self._sleep(self.close_delay)
        except SurfaceUnavailableError as exc:
            logger.warning("Print surface could not show the document: %s", exc)
            return False
        finally:
            self.surface.close()
            self._advance(PrintState.CLOSED)
        return True
