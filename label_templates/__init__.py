"""Template loader for volume label generators."""

from __future__ import annotations

from typing import Iterable
from importlib import import_module

from .base import LabelTemplate

# template name -> module inside this package
_TEMPLATE_MODULES = {
    "dpl": "dpl",
    "html": "browser",
    "pdf": "pdf",
}


def _load_template_module(name: str):
    return import_module(f"{__name__}.{_TEMPLATE_MODULES[name]}")


def get_template(
    name: str,
) -> LabelTemplate:
    """Instantiate the template implementation for ``name``."""

    key = name.lower()
    if key not in _TEMPLATE_MODULES:
        available = ", ".join(sorted(_TEMPLATE_MODULES))
        raise SystemExit(
            f"Unknown template '{name}'. Available templates: {available}"
        )

    module = _load_template_module(key)

    template_cls: type[LabelTemplate] | None = getattr(
        module,
        "Template",
        None,
    )
    if not template_cls or not issubclass(template_cls, LabelTemplate):
        raise SystemExit(
            f"Template '{name}' does not export a valid Template class"
        )

    return template_cls()


def list_templates() -> Iterable[str]:
    """Return the template identifiers."""

    return sorted(_TEMPLATE_MODULES)
