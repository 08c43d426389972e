"""Runtime settings read from the environment (``.env`` supported)."""

from __future__ import annotations

import os
from dataclasses import dataclass

__all__ = ["Settings"]


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or "").strip() or default


def _env_number(name: str, default: float, kind: type = float):
    raw = _env_str(name)
    if not raw:
        return kind(default)
    try:
        return kind(raw)
    except ValueError:
        raise SystemExit(
            f"Invalid value for {name}: {raw!r} (expected {kind.__name__})"
        ) from None


@dataclass(frozen=True)
class Settings:
    """Deployment knobs. Label geometry is fixed by the templates."""

    output_dir: str = "."
    printer_host: str = ""
    printer_port: int = 9100
    printer_timeout: float = 5.0
    print_close_delay: float = 2.0
    browser: str | None = None
    origin_cep: str = ""
    secret_key: str = "volume-labels-ui"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``VOLUME_LABELS_*`` variables.

        Call ``load_dotenv()`` first to pick up a ``.env`` file.
        """

        return cls(
            output_dir=_env_str("VOLUME_LABELS_OUTPUT_DIR", "."),
            printer_host=_env_str("VOLUME_LABELS_PRINTER_HOST"),
            printer_port=_env_number("VOLUME_LABELS_PRINTER_PORT", 9100, int),
            printer_timeout=_env_number("VOLUME_LABELS_PRINTER_TIMEOUT", 5.0),
            print_close_delay=_env_number("VOLUME_LABELS_PRINT_CLOSE_DELAY", 2.0),
            browser=_env_str("VOLUME_LABELS_BROWSER") or None,
            origin_cep=_env_str("VOLUME_LABELS_ORIGIN_CEP"),
            secret_key=_env_str("FLASK_SECRET_KEY", "volume-labels-ui"),
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
        )
