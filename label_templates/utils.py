"""Shared helpers for label rendering templates."""

from __future__ import annotations

import math
import re
from typing import Iterable, List

from reportlab.pdfbase.pdfmetrics import stringWidth

# 203 DPI thermal heads address 8 dots per millimetre.
DOTS_PER_MM = 8

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]+")


def mm_to_dots(mm: float, dots_per_mm: int = DOTS_PER_MM) -> int:
    """Convert millimetres to device dots, rounding half away from zero."""

    if mm < 0:
        raise ValueError(f"Measurement must be non-negative, got {mm}")
    return int(math.floor(mm * dots_per_mm + 0.5))


def pad_field(value: int, width: int = 4) -> str:
    """Return ``value`` as a zero-padded positional field of ``width`` digits.

    Values that do not fit would shift every following column of the
    command line, so they are rejected instead of truncated.
    """

    if value < 0:
        raise ValueError(f"Positional field cannot be negative, got {value}")
    text = f"{value:0{width}d}"
    if len(text) > width:
        raise ValueError(f"Value {value} does not fit in a {width}-digit field")
    return text


def strip_control_chars(text: str) -> str:
    """Replace each run of ASCII control characters with one space."""

    return _CONTROL_CHARS.sub(" ", text)


def truncate_text(text: str, max_chars: int) -> str:
    """Cut ``text`` to at most ``max_chars`` characters."""

    if max_chars < 0:
        raise ValueError(f"max_chars must be non-negative, got {max_chars}")
    return text[:max_chars]


def wrap_text_to_width(
    text: str,
    font_name: str,
    font_size: float,
    max_width_pt: float,
) -> Iterable[str]:
    """Wrap text into lines that fit within the specified width."""

    if not text or max_width_pt <= 0:
        return []

    words = text.split()
    if not words:
        return []

    lines: List[str] = []
    current: List[str] = []
    for word in words:
        tentative = " ".join(current + [word]) if current else word
        if stringWidth(tentative, font_name, font_size) <= max_width_pt:
            current.append(word)
            continue

        if current:
            lines.append(" ".join(current))
            current = [word]
            continue

        # single word exceeds width; perform character-level wrap
        partial = ""
        for ch in word:
            candidate = partial + ch
            if stringWidth(candidate, font_name, font_size) > max_width_pt:
                if partial:
                    lines.append(partial)
                partial = ch
            else:
                partial = candidate
        if partial:
            current = [partial]

    if current:
        lines.append(" ".join(current))
    return lines


def shrink_fit(
    text: str,
    max_width_pt: float,
    max_font: float,
    min_font: float,
    font_name: str,
    step: float = 0.5,
) -> float:
    """Return the largest font size that fits within ``max_width_pt``."""

    size = max_font
    step = max(step, 0.25)
    while (
        size >= min_font
        and stringWidth(text, font_name, size) > max_width_pt
    ):
        size -= step
    return max(size, min_font)
