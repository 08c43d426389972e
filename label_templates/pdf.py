"""Vector PDF template: one 100mm x 60mm page per volume.

Tuned for thermal printers driven through a regular PDF driver: thick
strokes, inverted captions and triple-struck text for maximum density.
Layout values are millimetres measured from the top-left corner.
"""

from __future__ import annotations

from io import BytesIO

from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from fonts import FontSpec, build_font_config
from label_types import LabelRequest
from .base import (
    CLIENT_CAPTION,
    DATE_CAPTION,
    INVOICE_CAPTION,
    LABEL_HEIGHT_MM,
    LABEL_WIDTH_MM,
    VOLUME_CAPTION,
    LabelTemplate,
    invoice_text,
)
from .utils import shrink_fit, truncate_text, wrap_text_to_width

W = LABEL_WIDTH_MM
H = LABEL_HEIGHT_MM
PAGE_SIZE = (W * mm, H * mm)

BORDER = 1.5
MARGIN_X = 3

SECOND_LINE_MAX_CHARS = 35

STRIKE_OFFSETS = ((0.0, 0.0), (0.15, 0.0), (0.3, 0.1))

_FONTS = build_font_config(
    family="Helvetica",
    title_spec=FontSpec(weight=700, size=14),
    content_spec=FontSpec(weight=700, size=12),
    label_spec=FontSpec(weight=700, size=10),
)
BOLD_FONT = _FONTS.content.font_name


def _y(top: float) -> float:
    return (H - top) * mm


def _bold_text(
    canvas_obj: canvas.Canvas,
    text: str,
    x: float,
    y: float,
    align: str = "left",
) -> None:
    for dx, dy in STRIKE_OFFSETS:
        if align == "right":
            canvas_obj.drawRightString((x + dx) * mm, _y(y + dy), text)
        else:
            canvas_obj.drawString((x + dx) * mm, _y(y + dy), text)


def _box(
    canvas_obj: canvas.Canvas,
    x: float,
    y: float,
    width: float,
    height: float,
    line_width: float = 1.4,
) -> None:
    canvas_obj.setLineWidth(line_width * mm)
    canvas_obj.rect(x * mm, _y(y + height), width * mm, height * mm)


def _rule(canvas_obj: canvas.Canvas, y: float, line_width: float) -> None:
    canvas_obj.setLineWidth(line_width * mm)
    canvas_obj.line((MARGIN_X + 1) * mm, _y(y), (W - MARGIN_X - 1) * mm, _y(y))


def _inverted_caption(
    canvas_obj: canvas.Canvas,
    text: str,
    x: float,
    y: float,
    width: float,
    height: float,
    font_size: float,
) -> None:
    """Draw white caption text on a solid black block."""

    canvas_obj.setFillColorRGB(0, 0, 0)
    canvas_obj.rect(x * mm, _y(y + height), width * mm, height * mm, stroke=0, fill=1)
    canvas_obj.setFillColorRGB(1, 1, 1)
    canvas_obj.setFont(BOLD_FONT, font_size)
    _bold_text(canvas_obj, text, x + 1, y + height - 1.5)
    canvas_obj.setFillColorRGB(0, 0, 0)


def _centered_value(
    canvas_obj: canvas.Canvas,
    text: str,
    box_x: float,
    box_width: float,
    baseline: float,
    font_size: float,
) -> None:
    size = shrink_fit(
        text,
        (box_width - 2) * mm,
        max_font=font_size,
        min_font=font_size * 0.6,
        font_name=BOLD_FONT,
    )
    canvas_obj.setFont(BOLD_FONT, size)
    text_width = stringWidth(text, BOLD_FONT, size) / mm
    _bold_text(canvas_obj, text, box_x + (box_width - text_width) / 2, baseline)


def draw_label(
    canvas_obj: canvas.Canvas,
    client_name: str,
    invoice_number: str,
    volume_number: int,
    total_volumes: int,
    date: str,
) -> None:
    canvas_obj.setStrokeColorRGB(0, 0, 0)
    canvas_obj.setFillColorRGB(0, 0, 0)

    _box(canvas_obj, BORDER, BORDER, W - BORDER * 2, H - BORDER * 2, line_width=2.0)

    # header: IRMAOS | MANTOVANI TEXTIL
    header_y = 7
    center_x = W / 2
    canvas_obj.setFont(_FONTS.title.font_name, _FONTS.title.size)
    _bold_text(canvas_obj, "IRMAOS", center_x - 24, header_y, align="right")
    _bold_text(canvas_obj, "MANTOVANI", center_x + 2, header_y)
    textil_x = center_x + 2 + stringWidth(
        "MANTOVANI ", _FONTS.title.font_name, _FONTS.title.size) / mm
    canvas_obj.setFont(_FONTS.label.font_name, 11)
    _bold_text(canvas_obj, "TEXTIL", textil_x, header_y)

    _rule(canvas_obj, 10, 1.2)

    # client
    client_y = 15
    client_caption_w = 20
    client_box_x = client_caption_w + MARGIN_X + 1
    client_box_w = W - MARGIN_X - client_box_x - 1
    client_box_h = 11

    _inverted_caption(canvas_obj, CLIENT_CAPTION, MARGIN_X + 1, client_y,
                      client_caption_w, 6, 11)
    _box(canvas_obj, client_box_x, client_y - 1, client_box_w, client_box_h)

    canvas_obj.setFont(BOLD_FONT, _FONTS.content.size)
    client_text = client_name.upper()
    max_width = (client_box_w - 3) * mm
    if stringWidth(client_text, BOLD_FONT, _FONTS.content.size) > max_width:
        lines = list(wrap_text_to_width(
            client_text, BOLD_FONT, _FONTS.content.size, max_width)) or [client_text]
        _bold_text(canvas_obj, lines[0], client_box_x + 1.5, client_y + 3)
        rest = " ".join(lines[1:])
        if rest:
            if len(rest) > SECOND_LINE_MAX_CHARS:
                rest = truncate_text(rest, SECOND_LINE_MAX_CHARS) + "..."
            _bold_text(canvas_obj, rest, client_box_x + 1.5, client_y + 7.5)
    else:
        _bold_text(canvas_obj, client_text, client_box_x + 1.5, client_y + 5.5)

    _rule(canvas_obj, client_y + client_box_h + 1, 0.6)

    # invoice
    nf_y = 29
    nf_caption_w = 24
    nf_box_x = nf_caption_w + MARGIN_X + 1
    nf_box_w = W - MARGIN_X - nf_box_x - 1
    nf_box_h = 9

    _inverted_caption(canvas_obj, INVOICE_CAPTION, MARGIN_X + 1, nf_y,
                      nf_caption_w, 6, _FONTS.label.size)
    _box(canvas_obj, nf_box_x, nf_y - 1, nf_box_w, nf_box_h)
    canvas_obj.setFont(BOLD_FONT, 13)
    _bold_text(canvas_obj, invoice_text(invoice_number).upper(),
               nf_box_x + 1.5, nf_y + 4.5)

    _rule(canvas_obj, nf_y + nf_box_h + 1, 0.6)

    # volume and date
    bottom_y = 42
    bottom_box_h = 9
    vol_caption_w = 18
    vol_box_x = vol_caption_w + MARGIN_X + 1
    vol_box_w = 16
    date_caption_x = vol_box_x + vol_box_w + 2
    date_caption_w = 12
    date_box_x = date_caption_x + date_caption_w + 1
    date_box_w = W - MARGIN_X - date_box_x - 1

    _inverted_caption(canvas_obj, VOLUME_CAPTION, MARGIN_X + 1, bottom_y,
                      vol_caption_w, 6, _FONTS.label.size)
    _box(canvas_obj, vol_box_x, bottom_y - 1, vol_box_w, bottom_box_h)
    _centered_value(canvas_obj, f"{volume_number}/{total_volumes}",
                    vol_box_x, vol_box_w, bottom_y + 4.5, 13)

    _inverted_caption(canvas_obj, DATE_CAPTION, date_caption_x, bottom_y,
                      date_caption_w, 6, _FONTS.label.size)
    _box(canvas_obj, date_box_x, bottom_y - 1, date_box_w, bottom_box_h)
    _centered_value(canvas_obj, date, date_box_x, date_box_w, bottom_y + 4.5, 12)


class Template(LabelTemplate):
    """Multi-page PDF, one page per volume."""

    media_type = "application/pdf"
    file_extension = "pdf"

    @property
    def raster_dpi(self) -> int:
        """Return DPI for PNG previews; matches the thermal head."""

        return 203

    def render_label(
        self,
        request: LabelRequest,
        volume_index: int,
        date: str,
    ) -> bytes:  # type: ignore[override]
        buffer = BytesIO()
        canvas_obj = canvas.Canvas(buffer, pagesize=PAGE_SIZE)
        draw_label(canvas_obj, request.client_name, request.invoice_number,
                   volume_index, request.total_volumes, date)
        canvas_obj.showPage()
        canvas_obj.save()
        return buffer.getvalue()

    def render_batch(self, request: LabelRequest) -> bytes:  # type: ignore[override]
        buffer = BytesIO()
        canvas_obj = canvas.Canvas(buffer, pagesize=PAGE_SIZE)
        date = request.resolved_date()
        for index in request.volumes():
            draw_label(canvas_obj, request.client_name, request.invoice_number,
                       index, request.total_volumes, date)
            canvas_obj.showPage()
        canvas_obj.save()
        return buffer.getvalue()
