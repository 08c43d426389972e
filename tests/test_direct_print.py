import os
import tempfile
import time
import unittest
import webbrowser
from pathlib import Path
from unittest.mock import MagicMock, patch

from direct_print import (
    BrowserPrintSurface,
    DirectPrinter,
    PrintState,
    PrintSurface,
    SurfaceUnavailableError,
    purge_stale_files,
)
from label_generation import print_batch_directly


class _FailingWriteSurface(PrintSurface):
    def __init__(self) -> None:
        self.closed = False

    def open(self) -> None:
        pass

    def write(self, document: str) -> None:
        raise OSError("disk full")

    def print(self) -> None:
        raise AssertionError("print must not run after a failed write")

    def close(self) -> None:
        self.closed = True


class DirectPrinterTests(unittest.TestCase):
    def test_close_delay_waits_before_close(self) -> None:
        events: list[str] = []
        surface = MagicMock(spec=PrintSurface)
        surface.close.side_effect = lambda: events.append("close")

        printer = DirectPrinter(
            surface, close_delay=2.0, sleep=lambda s: events.append(f"sleep {s}"))
        self.assertTrue(printer.print_document("doc"))

        surface.write.assert_called_once_with("doc")
        surface.print.assert_called_once_with()
        self.assertEqual(events, ["sleep 2.0", "close"])
        self.assertEqual(printer.state, PrintState.CLOSED)

    def test_zero_delay_skips_sleep(self) -> None:
        sleep = MagicMock()
        printer = DirectPrinter(MagicMock(spec=PrintSurface), close_delay=0, sleep=sleep)
        printer.print_document("doc")
        sleep.assert_not_called()

    def test_unavailable_surface_returns_to_idle(self) -> None:
        surface = MagicMock(spec=PrintSurface)
        surface.open.side_effect = SurfaceUnavailableError("popup blocked")

        printer = DirectPrinter(surface, sleep=lambda _: None)
        self.assertFalse(printer.print_document("doc"))

        self.assertEqual(printer.state, PrintState.IDLE)
        self.assertEqual(
            printer.history,
            [PrintState.IDLE, PrintState.SURFACE_REQUESTED, PrintState.IDLE],
        )
        surface.write.assert_not_called()
        surface.close.assert_not_called()

    def test_surface_closed_when_write_fails(self) -> None:
        surface = _FailingWriteSurface()
        printer = DirectPrinter(surface, sleep=lambda _: None)
        with self.assertRaises(OSError):
            printer.print_document("doc")
        self.assertTrue(surface.closed)
        self.assertEqual(printer.state, PrintState.CLOSED)

    def test_surface_refusing_to_print_is_closed_and_fails(self) -> None:
        surface = MagicMock(spec=PrintSurface)
        surface.print.side_effect = SurfaceUnavailableError("window blocked")

        printer = DirectPrinter(surface, sleep=lambda _: None)
        self.assertFalse(printer.print_document("doc"))

        surface.close.assert_called_once_with()
        self.assertEqual(printer.state, PrintState.CLOSED)
        self.assertNotIn(PrintState.PRINT_INVOKED, printer.history)


class BrowserPrintSurfaceTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.directory = Path(tmp.name)

    @patch("direct_print.webbrowser.get")
    def test_lifecycle_keeps_file_for_the_browser(self, mock_get: MagicMock) -> None:
        controller = mock_get.return_value
        controller.open.return_value = True

        surface = BrowserPrintSurface(directory=self.directory)
        surface.open()
        path = surface.path
        assert path is not None
        self.assertEqual(path.parent, self.directory)
        surface.write("<p>Olá</p>")
        self.assertEqual(Path(path).read_text(encoding="utf-8"), "<p>Olá</p>")

        surface.print()
        controller.open.assert_called_once_with(Path(path).as_uri(), new=1)

        surface.close()
        self.assertTrue(Path(path).exists())
        self.assertIsNone(surface.path)

    @patch("direct_print.webbrowser.get", side_effect=webbrowser.Error("no browser"))
    def test_missing_browser_is_unavailable(self, _mock_get: MagicMock) -> None:
        surface = BrowserPrintSurface("nonexistent", directory=self.directory)
        with self.assertRaises(SurfaceUnavailableError):
            surface.open()
        self.assertIsNone(surface.path)

    @patch("direct_print.webbrowser.get")
    def test_browser_refusing_to_open_is_unavailable(self, mock_get: MagicMock) -> None:
        mock_get.return_value.open.return_value = False
        surface = BrowserPrintSurface(directory=self.directory)
        surface.open()
        surface.write("<p>x</p>")
        with self.assertRaises(SurfaceUnavailableError):
            surface.print()

    @patch("direct_print.webbrowser.get")
    def test_print_batch_directly_fails_when_browser_refuses(
        self, mock_get: MagicMock
    ) -> None:
        mock_get.return_value.open.return_value = False
        result = print_batch_directly(
            "ACME", 2, "NF-1", date="01/01/2025",
            surface=BrowserPrintSurface(directory=self.directory), close_delay=0)
        self.assertFalse(result)

    def test_write_before_open_raises(self) -> None:
        surface = BrowserPrintSurface(directory=self.directory)
        with self.assertRaisesRegex(RuntimeError, "surface not opened"):
            surface.write("<p>x</p>")
        with self.assertRaisesRegex(RuntimeError, "surface not opened"):
            surface.print()

    @patch("direct_print.webbrowser.get")
    def test_open_purges_expired_print_files(self, _mock_get: MagicMock) -> None:
        stale = self.directory / "etiquetas_old.html"
        fresh = self.directory / "etiquetas_new.html"
        other = self.directory / "notes_old.html"
        for path in (stale, fresh, other):
            path.write_text("x", encoding="utf-8")
        old = time.time() - 3600
        os.utime(stale, (old, old))
        os.utime(other, (old, old))

        surface = BrowserPrintSurface(directory=self.directory, retention=600)
        surface.open()

        self.assertFalse(stale.exists())
        self.assertTrue(fresh.exists())
        self.assertTrue(other.exists())
        self.assertTrue(surface.path is not None and surface.path.exists())

    def test_purge_counts_removed_files(self) -> None:
        path = self.directory / "etiquetas_a.html"
        path.write_text("x", encoding="utf-8")
        self.assertEqual(purge_stale_files(self.directory, 600), 0)
        self.assertEqual(
            purge_stale_files(self.directory, 600, now=time.time() + 601), 1)
        self.assertFalse(path.exists())

    def test_close_without_open_is_noop(self) -> None:
        BrowserPrintSurface(directory=self.directory).close()


if __name__ == "__main__":
    unittest.main()
