"""Font settings for the PDF label template."""

from __future__ import annotations

from dataclasses import dataclass

from reportlab.pdfbase import pdfmetrics


def _font_key(name: str) -> str:
    return " ".join(name.strip().lower().split())


# ReportLab standard Type 1 fonts, keyed by family and weight.
FONT_SOURCES: dict[str, dict[int, str]] = {
    _font_key("Helvetica"): {400: "Helvetica", 700: "Helvetica-Bold"},
    _font_key("Courier"): {400: "Courier", 700: "Courier-Bold"},
    _font_key("Times"): {400: "Times-Roman", 700: "Times-Bold"},
}


@dataclass(frozen=True)
class FontSpec:
    """Desired font weight and size for a content block."""

    weight: float
    size: float


@dataclass(frozen=True)
class FontSettings:
    """Resolved font name/size pair registered with ReportLab."""

    font_name: str
    size: float


@dataclass(frozen=True)
class FontConfig:
    """Collection of font settings used to render a label."""

    title: FontSettings
    content: FontSettings
    label: FontSettings


def font_name_for(family: str, weight: float) -> str:
    """Return the ReportLab font name closest to ``weight`` in ``family``."""

    weights = FONT_SOURCES.get(_font_key(family))
    if weights is None:
        available = ", ".join(sorted(FONT_SOURCES))
        raise SystemExit(
            f"Unknown font family '{family}'. Available: {available}")

    closest = min(weights, key=lambda w: abs(w - weight))
    font_name = weights[closest]
    # raises KeyError when the face is not available to ReportLab
    pdfmetrics.getFont(font_name)
    return font_name


def build_font_config(
    family: str,
    title_spec: FontSpec,
    content_spec: FontSpec,
    label_spec: FontSpec,
) -> FontConfig:
    """Resolve fonts and return ready-to-use settings."""

    return FontConfig(
        title=FontSettings(
            font_name=font_name_for(family, title_spec.weight),
            size=title_spec.size,
        ),
        content=FontSettings(
            font_name=font_name_for(family, content_spec.weight),
            size=content_spec.size,
        ),
        label=FontSettings(
            font_name=font_name_for(family, label_spec.weight),
            size=label_spec.size,
        ),
    )


__all__ = [
    "FontConfig",
    "FontSettings",
    "FontSpec",
    "build_font_config",
    "font_name_for",
]
