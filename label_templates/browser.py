"""Browser-print HTML template for 100mm x 60mm volume labels."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from label_types import LabelRequest
from .base import (
    CLIENT_CAPTION,
    COMPANY_NAME,
    DATE_CAPTION,
    INVOICE_CAPTION,
    VOLUME_CAPTION,
    LabelTemplate,
    invoice_text,
)
from .utils import truncate_text

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

CLIENT_MAX_CHARS = 35

_ENV = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


class Template(LabelTemplate):
    """One print page per label, styled for the browser print dialog."""

    media_type = "text/html"
    file_extension = "html"

    def render_label(
        self,
        request: LabelRequest,
        volume_index: int,
        date: str,
    ) -> str:  # type: ignore[override]
        return _ENV.get_template("_label.html").render(
            company=COMPANY_NAME,
            captions={
                "client": CLIENT_CAPTION,
                "invoice": INVOICE_CAPTION,
                "volume": VOLUME_CAPTION,
                "date": DATE_CAPTION,
            },
            client=truncate_text(request.client_name.upper(), CLIENT_MAX_CHARS),
            invoice=invoice_text(request.invoice_number),
            volume=f"{volume_index}/{request.total_volumes}",
            date=date,
        )

    def render_document(
        self,
        request: LabelRequest,
        *,
        auto_print: bool = False,
        close_delay: float = 2.0,
    ) -> str:
        """Wrap every label fragment in one document with the print stylesheet.

        With ``auto_print`` the page prints itself once loaded and closes
        ``close_delay`` seconds later. The delay only keeps the window open
        while the print dialog captures the page; it is not a guarantee.
        """

        fragments = [str(doc.content) for doc in self.render_documents(request)]
        width_mm, height_mm = self.page_size
        return _ENV.get_template("labels_print.html").render(
            labels=fragments,
            width_mm=width_mm,
            height_mm=height_mm,
            auto_print=auto_print,
            close_delay_ms=int(close_delay * 1000),
        )

    def render_batch(self, request: LabelRequest) -> bytes:  # type: ignore[override]
        return self.render_document(request).encode("utf-8")
