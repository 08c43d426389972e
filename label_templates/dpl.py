"""Datamax DPL template for 100mm x 60mm volume labels at 203 DPI.

The layout reproduces a label verified on a Datamax E-4204B: every
coordinate below is a dot position (8 dots/mm, so the label is 800 x 480
dots). Only the field values vary between labels.

Record formats emitted:

* line:  ``1X1100`` + width + height + column + row (4 digits each)
* text:  ``1`` + font + width mult + height mult + ``000`` + column (5
  digits, tenths of a dot) + row (4 digits) + data
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

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
from .utils import mm_to_dots, pad_field, strip_control_chars, truncate_text

STX = "\x02"
CR = "\r"

# Device text encoding; one byte per character keeps budgets exact.
DEVICE_ENCODING = "latin-1"

LABEL_WIDTH_DOTS = mm_to_dots(LABEL_WIDTH_MM)
LABEL_HEIGHT_DOTS = mm_to_dots(LABEL_HEIGHT_MM)

FONT = "6"
CAPTION_HEIGHT_MULT = 2
HEADER_HEIGHT_MULT = 3
TEXT_COLUMN_SCALE = 10
TEXT_COLUMN_WIDTH = 5

BOX_LINE = 2

CLIENT_MAX_CHARS = 30


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class Box:
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class FieldLayout:
    """Caption, bordered box and value position for one label field."""

    caption: str
    caption_at: Point
    box: Box
    value_at: Point
    max_chars: int | None = None


BORDER = (
    Box(5, 5, LABEL_WIDTH_DOTS, 3),
    Box(5, 460, LABEL_WIDTH_DOTS, 3),
    Box(5, 5, 3, 458),
    Box(LABEL_WIDTH_DOTS - 5, 5, 3, 458),
)

HEADER = (
    ("IRMAOS", Point(200, 20)),
    ("MANTOVANI TEXTIL", Point(350, 20)),
)

SEPARATOR = Box(25, 60, 750, 2)

FIELDS: dict[str, FieldLayout] = {
    "client": FieldLayout(
        caption=CLIENT_CAPTION,
        caption_at=Point(100, 75),
        box=Box(180, 70, 580, 70),
        value_at=Point(190, 90),
        max_chars=CLIENT_MAX_CHARS,
    ),
    "invoice": FieldLayout(
        caption=INVOICE_CAPTION,
        caption_at=Point(100, 160),
        box=Box(180, 160, 580, 50),
        value_at=Point(190, 175),
    ),
    "volume": FieldLayout(
        caption=VOLUME_CAPTION,
        caption_at=Point(100, 250),
        box=Box(130, 250, 120, 50),
        value_at=Point(140, 265),
    ),
    "date": FieldLayout(
        caption=DATE_CAPTION,
        caption_at=Point(280, 250),
        box=Box(350, 250, 380, 50),
        value_at=Point(370, 265),
    ),
}


class DplCommandBuilder:
    """Accumulates DPL command lines in emission order."""

    def __init__(self) -> None:
        self._lines: List[str] = []

    def command(self, code: str) -> "DplCommandBuilder":
        """Append an STX-prefixed control command."""

        self._lines.append(STX + code)
        return self

    def directive(self, text: str) -> "DplCommandBuilder":
        self._lines.append(text)
        return self

    def line(self, box: Box) -> "DplCommandBuilder":
        self._lines.append(
            "1X1100"
            + pad_field(box.width)
            + pad_field(box.height)
            + pad_field(box.x)
            + pad_field(box.y)
        )
        return self

    def text(
        self,
        at: Point,
        data: str,
        height_mult: int = CAPTION_HEIGHT_MULT,
    ) -> "DplCommandBuilder":
        self._lines.append(
            f"1{FONT}1{height_mult}000"
            + pad_field(at.x * TEXT_COLUMN_SCALE, TEXT_COLUMN_WIDTH)
            + pad_field(at.y)
            + data
        )
        return self

    def box(self, box: Box) -> "DplCommandBuilder":
        """Draw ``box`` as four segments: top, bottom, left, right."""

        side = box.height + BOX_LINE
        self.line(Box(box.x, box.y, box.width, BOX_LINE))
        self.line(Box(box.x, box.y + box.height, box.width, BOX_LINE))
        self.line(Box(box.x, box.y, BOX_LINE, side))
        self.line(Box(box.x + box.width, box.y, BOX_LINE, side))
        return self

    def field(self, layout: FieldLayout, value: str) -> "DplCommandBuilder":
        # CR, STX and friends would split the record or end the format
        value = strip_control_chars(value)
        if layout.max_chars is not None:
            value = truncate_text(value, layout.max_chars)
        self.text(layout.caption_at, layout.caption)
        self.box(layout.box)
        self.text(layout.value_at, value)
        return self

    def end(self) -> "DplCommandBuilder":
        self._lines.append("E")
        return self

    def build(self) -> str:
        return "".join(line + CR for line in self._lines)


def batch_preamble() -> str:
    """Global setup sent once before the labels of a batch."""

    builder = DplCommandBuilder()
    builder.command("n")
    builder.command("M" + pad_field(LABEL_HEIGHT_DOTS))
    builder.command("O0")
    return builder.build()


def build_label(
    client_name: str,
    invoice_number: str,
    volume_number: int,
    total_volumes: int,
    date: str,
) -> str:
    """Return the self-contained command block for one label."""

    builder = DplCommandBuilder()
    builder.command("L").directive("D11")
    builder.command("K")
    builder.command("L").directive("H15").directive("D11").directive("S2")

    for segment in BORDER:
        builder.line(segment)
    for text, at in HEADER:
        builder.text(at, text, height_mult=HEADER_HEIGHT_MULT)
    builder.line(SEPARATOR)

    builder.field(FIELDS["client"], client_name.upper())
    builder.field(FIELDS["invoice"], invoice_text(invoice_number))
    builder.field(FIELDS["volume"], f"{volume_number}/{total_volumes}")
    builder.field(FIELDS["date"], date)

    return builder.end().build()


class Template(LabelTemplate):
    """Raw DPL command file for Datamax thermal printers."""

    media_type = "application/octet-stream"
    file_extension = "prn"

    def render_label(
        self,
        request: LabelRequest,
        volume_index: int,
        date: str,
    ) -> str:  # type: ignore[override]
        return build_label(
            request.client_name,
            request.invoice_number,
            volume_index,
            request.total_volumes,
            date,
        )

    def render_batch(self, request: LabelRequest) -> bytes:  # type: ignore[override]
        commands = batch_preamble() + "".join(
            document.content for document in self.render_documents(request)  # type: ignore[misc]
        )
        return commands.encode(DEVICE_ENCODING, errors="replace")
