from __future__ import annotations

from dataclasses import dataclass

from formatters import format_date


@dataclass(frozen=True)
class LabelRequest:
    """One shipment to label: a client, an invoice and a volume count."""

    client_name: str
    total_volumes: int
    invoice_number: str = ""
    date: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.total_volumes, bool) or not isinstance(self.total_volumes, int):
            raise ValueError(
                f"total_volumes must be an integer, got {self.total_volumes!r}"
            )
        if self.total_volumes <= 0:
            raise ValueError(
                f"total_volumes must be positive, got {self.total_volumes}"
            )

    def resolved_date(self) -> str:
        """Return the supplied date or today's date in dd/mm/yyyy form."""

        return self.date or format_date()

    def volumes(self) -> range:
        return range(1, self.total_volumes + 1)


@dataclass(frozen=True)
class LabelDocument:
    """A rendered label for one volume of a shipment."""

    volume_index: int
    total_volumes: int
    content: str | bytes

    @property
    def volume_text(self) -> str:
        return f"{self.volume_index}/{self.total_volumes}"
