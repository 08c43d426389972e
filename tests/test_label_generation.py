import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from direct_print import (
    DirectPrinter,
    PrintState,
    PrintSurface,
    SurfaceUnavailableError,
)
from label_generation import (
    build_download_name,
    download_batch,
    generate_batch,
    print_batch_directly,
    render_png_preview,
    send_batch,
)
from label_templates.dpl import STX, batch_preamble
from label_types import LabelRequest

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class RecordingSurface(PrintSurface):
    """Surface that remembers every call instead of opening a window."""

    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.calls: list[str] = []
        self.document = ""

    def open(self) -> None:
        self.calls.append("open")
        if not self.available:
            raise SurfaceUnavailableError("blocked")

    def write(self, document: str) -> None:
        self.calls.append("write")
        self.document = document

    def print(self) -> None:
        self.calls.append("print")

    def close(self) -> None:
        self.calls.append("close")


class GenerateBatchTests(unittest.TestCase):
    def test_scenario_two_volumes(self) -> None:
        batch = generate_batch("ACME TEXTIL", 2, "NF-12345", "01/01/2025")
        text = batch.decode("latin-1")
        self.assertTrue(text.startswith(batch_preamble()))
        self.assertEqual(text.count(f"{STX}L\rD11\r"), 2)
        self.assertIn("1/2\r", text)
        self.assertIn("2/2\r", text)
        self.assertEqual(text.count("NF-12345"), 2)

    def test_rejects_zero_volumes(self) -> None:
        with self.assertRaises(ValueError):
            generate_batch("ACME", 0)

    def test_default_date_is_today(self) -> None:
        with patch("label_types.format_date", return_value="09/09/2029"):
            batch = generate_batch("ACME", 1)
        self.assertIn(b"09/09/2029", batch)


class DownloadNameTests(unittest.TestCase):
    def test_strips_non_alphanumerics(self) -> None:
        self.assertEqual(
            build_download_name("João & Cia. Ltda", 3),
            "etiquetas_JooCiaLtda_3vol.prn",
        )

    def test_caps_client_part_at_20(self) -> None:
        name = build_download_name("A" * 40, 1, "pdf")
        self.assertEqual(name, "etiquetas_" + "A" * 20 + "_1vol.pdf")

    def test_empty_client_part(self) -> None:
        self.assertEqual(build_download_name("!!!", 2, "html"), "etiquetas__2vol.html")


class DownloadBatchTests(unittest.TestCase):
    def test_writes_dpl_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = download_batch("ACME", 2, "7", output_dir=tmp, date="01/01/2025")
            self.assertEqual(path, Path(tmp) / "etiquetas_ACME_2vol.prn")
            self.assertEqual(
                path.read_bytes(),
                generate_batch("ACME", 2, "7", "01/01/2025"),
            )

    def test_writes_other_formats(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            pdf_path = download_batch(
                "ACME", 1, output_dir=tmp, template_name="pdf", date="01/01/2025")
            html_path = download_batch(
                "ACME", 1, output_dir=tmp, template_name="html", date="01/01/2025")
            self.assertTrue(pdf_path.read_bytes().startswith(b"%PDF"))
            self.assertEqual(html_path.suffix, ".html")
            self.assertIn("ACME", html_path.read_text(encoding="utf-8"))

    def test_creates_output_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "out" / "labels"
            path = download_batch("ACME", 1, output_dir=target, date="01/01/2025")
            self.assertTrue(path.exists())

    def test_invalid_volumes_write_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ValueError):
                download_batch("ACME", 0, output_dir=tmp)
            self.assertEqual(list(Path(tmp).iterdir()), [])


class PrintBatchDirectlyTests(unittest.TestCase):
    def test_prints_all_labels_in_one_job(self) -> None:
        surface = RecordingSurface()
        printed = print_batch_directly(
            "ACME", 3, "NF-1", surface=surface, close_delay=0)
        self.assertTrue(printed)
        self.assertEqual(surface.calls, ["open", "write", "print", "close"])
        self.assertEqual(surface.document.count('class="label"'), 3)
        self.assertIn("window.print()", surface.document)
        self.assertIn("window.close()", surface.document)

    def test_returns_false_when_surface_blocked(self) -> None:
        surface = RecordingSurface(available=False)
        self.assertFalse(print_batch_directly("ACME", 2, surface=surface))
        self.assertEqual(surface.calls, ["open"])

    def test_rejects_zero_volumes_before_opening(self) -> None:
        surface = RecordingSurface()
        with self.assertRaises(ValueError):
            print_batch_directly("ACME", 0, surface=surface)
        self.assertEqual(surface.calls, [])

    def test_state_history(self) -> None:
        printer = DirectPrinter(RecordingSurface(), close_delay=1.0, sleep=lambda _: None)
        self.assertTrue(printer.print_document("<html></html>"))
        self.assertEqual(
            printer.history,
            [
                PrintState.IDLE,
                PrintState.SURFACE_REQUESTED,
                PrintState.SURFACE_OPENED,
                PrintState.CONTENT_WRITTEN,
                PrintState.PRINT_INVOKED,
                PrintState.CLOSED,
            ],
        )


class SendBatchTests(unittest.TestCase):
    @patch("label_generation.RawPrinterClient")
    def test_sends_generated_batch(self, mock_client_cls: MagicMock) -> None:
        client = mock_client_cls.return_value.__enter__.return_value
        request = LabelRequest("ACME", 2, "9", "01/01/2025")

        sent = send_batch(request, "10.0.0.5", 9100)

        mock_client_cls.assert_called_once_with("10.0.0.5", 9100, timeout=5.0)
        payload = generate_batch("ACME", 2, "9", "01/01/2025")
        client.send.assert_called_once_with(payload)
        self.assertEqual(sent, len(payload))


class PreviewTests(unittest.TestCase):
    def test_png_preview(self) -> None:
        png = render_png_preview(LabelRequest("ACME", 2, "1", "01/01/2025"))
        self.assertTrue(png.startswith(PNG_SIGNATURE))


if __name__ == "__main__":
    unittest.main()
