"""Abstract base class for label templates."""

from __future__ import annotations

from abc import ABC, abstractmethod

from label_types import LabelDocument, LabelRequest

# Physical label stock: 100mm x 60mm.
LABEL_WIDTH_MM = 100
LABEL_HEIGHT_MM = 60

COMPANY_NAME = "IRMAOS MANTOVANI TEXTIL"

CLIENT_CAPTION = "CLIENTE"
INVOICE_CAPTION = "NOTA FISCAL"
VOLUME_CAPTION = "VOLUME"
DATE_CAPTION = "DATA"

INVOICE_PLACEHOLDER = "S/N"


def invoice_text(invoice_number: str) -> str:
    """Return the printable invoice number, or the unassigned placeholder."""

    text = (invoice_number or "").strip()
    return text or INVOICE_PLACEHOLDER


class LabelTemplate(ABC):
    """Defines the interface all label templates must implement."""

    media_type: str = "application/octet-stream"
    file_extension: str = "bin"

    @property
    def page_size(self) -> tuple[float, float]:
        """Return the label size in millimetres."""

        return (LABEL_WIDTH_MM, LABEL_HEIGHT_MM)

    @abstractmethod
    def render_label(
        self,
        request: LabelRequest,
        volume_index: int,
        date: str,
    ) -> str | bytes:
        """Return the rendered label for ``volume_index`` of ``request``."""

    @abstractmethod
    def render_batch(self, request: LabelRequest) -> bytes:
        """Return the complete deliverable for every volume of ``request``."""

    def render_documents(self, request: LabelRequest) -> list[LabelDocument]:
        """Render one document per volume, numbered from 1."""

        date = request.resolved_date()
        return [
            LabelDocument(
                volume_index=index,
                total_volumes=request.total_volumes,
                content=self.render_label(request, index, date),
            )
            for index in request.volumes()
        ]
