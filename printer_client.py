"""Raw TCP transport for networked label printers (port 9100)."""

from __future__ import annotations

import logging
import socket
from typing import List, Optional

logger = logging.getLogger(__name__)

__all__ = ["PrinterConnectionError", "RawPrinterClient"]


class PrinterConnectionError(RuntimeError):
    """Raised when the printer cannot be reached or the send fails."""


class RawPrinterClient:
    """Send finished command streams to a printer's raw socket.

    Use as a context manager; with ``dry_run`` nothing is opened and every
    payload is kept in ``sent``.
    """

    def __init__(
        self,
        host: str,
        port: int = 9100,
        timeout: float = 5.0,
        dry_run: bool = False,
    ) -> None:
        self.host, self.port, self.timeout, self.dry_run = host, port, timeout, dry_run
        self._sock: Optional[socket.socket] = None
        self.sent: List[bytes] = []

    def __enter__(self) -> "RawPrinterClient":
        if not self.dry_run:
            try:
                self._sock = socket.create_connection(
                    (self.host, self.port), timeout=self.timeout)
            except OSError as exc:
                raise PrinterConnectionError(
                    f"Cannot connect to printer {self.host}:{self.port}: {exc}"
                ) from exc
            logger.debug("Connected to printer %s:%s", self.host, self.port)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._sock:
            try:
                self._sock.shutdown(socket.SHUT_WR)
            except OSError:
                logger.debug("Printer %s closed before shutdown", self.host)
            self._sock.close()
            self._sock = None

    def send(self, data: bytes) -> None:
        if not data:
            return
        if self.dry_run:
            self.sent.append(data)
            return
        if not self._sock:
            raise RuntimeError("RawPrinterClient not connected. Use context manager.")
        try:
            self._sock.sendall(data)
        except OSError as exc:
            raise PrinterConnectionError(
                f"Failed to send {len(data)} bytes to {self.host}:{self.port}: {exc}"
            ) from exc
        logger.info("Sent %d bytes to printer %s:%s", len(data), self.host, self.port)
