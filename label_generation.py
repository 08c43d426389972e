"""Batch rendering and delivery for shipment volume labels."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import fitz

from direct_print import BrowserPrintSurface, DirectPrinter, PrintSurface
from label_templates import get_template
from label_templates.browser import Template as BrowserTemplate
from label_types import LabelRequest
from printer_client import RawPrinterClient

logger = logging.getLogger(__name__)

DOWNLOAD_NAME_MAX_CHARS = 20


def generate_batch(
    client_name: str,
    total_volumes: int,
    invoice_number: str = "",
    date: str | None = None,
) -> bytes:
    """Return the printer command stream for volumes 1..``total_volumes``."""

    request = LabelRequest(client_name, total_volumes, invoice_number, date)
    payload = get_template("dpl").render_batch(request)
    logger.debug(
        "Generated %d labels (%d bytes) for %r",
        total_volumes, len(payload), client_name,
    )
    return payload


def build_download_name(
    client_name: str,
    total_volumes: int,
    extension: str = "prn",
) -> str:
    """Return ``etiquetas_<client>_<N>vol.<ext>`` with only ASCII alphanumerics."""

    safe = re.sub(r"[^A-Za-z0-9]", "", client_name)[:DOWNLOAD_NAME_MAX_CHARS]
    return f"etiquetas_{safe}_{total_volumes}vol.{extension}"


def download_batch(
    client_name: str,
    total_volumes: int,
    invoice_number: str = "",
    *,
    output_dir: str | Path,
    template_name: str = "dpl",
    date: str | None = None,
) -> Path:
    """Render the batch with ``template_name`` and write it into ``output_dir``."""

    request = LabelRequest(client_name, total_volumes, invoice_number, date)
    template = get_template(template_name)
    payload = template.render_batch(request)

    target_dir = Path(output_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / build_download_name(
        client_name, total_volumes, template.file_extension)
    path.write_bytes(payload)
    logger.info("Wrote %d labels to %s", total_volumes, path)
    return path


def print_batch_directly(
    client_name: str,
    total_volumes: int,
    invoice_number: str = "",
    *,
    surface: PrintSurface | None = None,
    close_delay: float = 2.0,
    date: str | None = None,
) -> bool:
    """Send every label to the print dialog as one multi-page job.

    Returns ``False`` without raising when the surface cannot be opened
    or cannot show the document.
    """

    request = LabelRequest(client_name, total_volumes, invoice_number, date)
    document = BrowserTemplate().render_document(
        request, auto_print=True, close_delay=close_delay)

    printer = DirectPrinter(surface or BrowserPrintSurface(), close_delay=close_delay)
    printed = printer.print_document(document)
    if printed:
        logger.info("Sent %d labels for %r to the print dialog",
                    total_volumes, client_name)
    return printed


def send_batch(
    request: LabelRequest,
    host: str,
    port: int = 9100,
    timeout: float = 5.0,
) -> int:
    """Stream the command batch for ``request`` to a networked printer.

    Returns the number of bytes sent.
    """

    payload = generate_batch(
        request.client_name,
        request.total_volumes,
        request.invoice_number,
        request.date,
    )
    with RawPrinterClient(host, port, timeout=timeout) as client:
        client.send(payload)
    return len(payload)


def render_png_preview(request: LabelRequest, volume_index: int = 1) -> bytes:
    """Rasterise one label of the PDF rendition to PNG at printer resolution."""

    template = get_template("pdf")
    pdf_bytes = template.render_label(request, volume_index, request.resolved_date())

    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        page = doc.load_page(0)
        pix = page.get_pixmap(dpi=template.raster_dpi)  # type: ignore[attr-defined]
        return pix.tobytes("png")
