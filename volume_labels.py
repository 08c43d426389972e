#!/usr/bin/env python3
"""Generate shipping volume labels ("1/N" ... "N/N") for one shipment."""

import argparse
import logging
from typing import Optional, Sequence

from dotenv import load_dotenv

from config import Settings
from label_generation import download_batch, print_batch_directly, send_batch
from label_templates import list_templates
from label_types import LabelRequest
from printer_client import PrinterConnectionError
from volume_labels_web import run_web_app

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


def _build_request(args: argparse.Namespace) -> LabelRequest:
    try:
        return LabelRequest(
            client_name=args.client,
            total_volumes=args.volumes,
            invoice_number=args.invoice,
            date=args.date,
        )
    except ValueError as exc:
        raise SystemExit(f"Invalid label request: {exc}") from exc


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for volume label generation."""

    load_dotenv()
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    parser = argparse.ArgumentParser(
        description="Shipment volume labels for 100x60mm thermal stock"
    )
    parser.add_argument("client", nargs="?", help="Client name printed on every label")
    parser.add_argument(
        "-n", "--volumes",
        type=int,
        help="Total number of volumes in the shipment.",
    )
    parser.add_argument(
        "-i", "--invoice",
        default="",
        help="Invoice number (printed as S/N when omitted).",
    )
    parser.add_argument(
        "--date",
        default=None,
        help="Date printed on the labels, dd/mm/yyyy (default: today).",
    )
    parser.add_argument(
        "-t", "--template",
        default="dpl",
        choices=list(list_templates()),
        help="Output format for the batch file (default: dpl).",
    )
    parser.add_argument(
        "-o", "--output-dir",
        default=settings.output_dir,
        help=(
            "Directory for the batch file (defaults to VOLUME_LABELS_OUTPUT_DIR "
            "from the environment/.env, or the current directory)."
        ),
    )
    parser.add_argument(
        "--print",
        dest="print_directly",
        action="store_true",
        help="Open the labels in the browser print dialog instead of writing a file.",
    )
    parser.add_argument(
        "--send",
        metavar="HOST",
        nargs="?",
        const="",
        default=None,
        help=(
            "Send the raw command batch to a network printer on port "
            "VOLUME_LABELS_PRINTER_PORT (host defaults to VOLUME_LABELS_PRINTER_HOST)."
        ),
    )
    parser.add_argument(
        "--web",
        action="store_true",
        help="Start the local web UI.",
    )
    parser.add_argument(
        "--web-host",
        default="127.0.0.1",
        help="Host/IP for the web UI (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--web-port",
        type=int,
        default=5000,
        help="Port for the web UI (default: 5000).",
    )

    args = parser.parse_args(argv)

    if args.web:
        run_web_app(settings, host=args.web_host, port=args.web_port)
        return 0

    if not args.client or args.volumes is None:
        parser.error("CLIENT and -n/--volumes are required unless --web is given")

    request = _build_request(args)

    if args.print_directly:
        if not print_batch_directly(
            request.client_name,
            request.total_volumes,
            request.invoice_number,
            close_delay=settings.print_close_delay,
            date=request.date,
        ):
            logger.error("Could not open the print window; no labels were printed.")
            return 1
        print(f"Sent {request.total_volumes} labels to the print dialog.")
        return 0

    if args.send is not None:
        host = args.send or settings.printer_host
        if not host:
            raise SystemExit(
                "Printer host missing: pass --send HOST or set VOLUME_LABELS_PRINTER_HOST")
        try:
            sent = send_batch(
                request, host, settings.printer_port, settings.printer_timeout)
        except PrinterConnectionError as exc:
            raise SystemExit(str(exc)) from exc
        print(f"Sent {sent} bytes to {host}:{settings.printer_port}")
        return 0

    path = download_batch(
        request.client_name,
        request.total_volumes,
        request.invoice_number,
        output_dir=args.output_dir,
        template_name=args.template,
        date=request.date,
    )
    print(f"Wrote {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
