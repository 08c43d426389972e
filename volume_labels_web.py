"""Web UI for shipment volume labels."""

from __future__ import annotations

import argparse
import logging
import os
from io import BytesIO
from pathlib import Path

from dotenv import load_dotenv
from flask import (
    Flask,
    Response,
    jsonify,
    redirect,
    render_template,
    request,
    send_file,
    url_for,
)
from werkzeug.datastructures import MultiDict

from config import Settings
from formatters import format_sale_id
from label_generation import build_download_name, generate_batch, render_png_preview
from label_templates import get_template
from label_templates.browser import Template as BrowserTemplate
from label_types import LabelRequest
from shipping import ShippingError, ShippingRequest, quote_shipping

logger = logging.getLogger(__name__)

__all__ = ["run_web_app", "create_app", "create_app_from_env"]


# Largest batch accepted from the form; every volume is rendered in memory.
MAX_VOLUMES = 999


class InvalidLabelInput(ValueError):
    """Form data that cannot describe a label batch."""


def _parse_label_request(form: MultiDict[str, str]) -> LabelRequest:
    client_name = (form.get("client_name") or "").strip()
    if not client_name:
        raise InvalidLabelInput("Client name is required.")

    raw_volumes = (form.get("total_volumes") or "").strip()
    try:
        total_volumes = int(raw_volumes)
    except ValueError:
        raise InvalidLabelInput(
            f"Number of volumes must be an integer, got '{raw_volumes}'.") from None
    if total_volumes > MAX_VOLUMES:
        raise InvalidLabelInput(
            f"Number of volumes must be at most {MAX_VOLUMES}, got {total_volumes}.")

    try:
        return LabelRequest(
            client_name=client_name,
            total_volumes=total_volumes,
            invoice_number=(form.get("invoice_number") or "").strip(),
            date=(form.get("date") or "").strip() or None,
        )
    except ValueError as exc:
        raise InvalidLabelInput(str(exc)) from exc


def _parse_float(data: dict, key: str) -> float:
    try:
        return float(data[key])
    except (KeyError, TypeError, ValueError):
        raise ShippingError(f"{key} must be a number") from None


def create_app(settings: Settings) -> Flask:
    """Create the Flask app bound to ``settings``."""

    template_dir = Path(__file__).resolve().parent / "templates"
    app = Flask(__name__, template_folder=str(template_dir))
    app.config["SECRET_KEY"] = settings.secret_key

    def _invalid(message: str) -> Response:
        return redirect(url_for("index", error="invalid", message=message))

    @app.route("/", methods=["GET"])
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        error_key = request.args.get("error")
        error_message = None
        if error_key == "invalid":
            error_message = (
                request.args.get("message")
                or "Check the client name and the number of volumes."
            )
        elif error_key == "generation":
            error_message = (
                request.args.get("message")
                or "Unable to generate labels."
            )

        sale_id = (request.args.get("sale") or "").strip()
        return render_template(
            "index.html",
            error=error_message,
            client_name=request.args.get("client", ""),
            invoice_number=request.args.get("invoice", ""),
            sale_label=format_sale_id(sale_id) if sale_id else "",
        )

    @app.route("/labels/download", methods=["POST"])
    def labels_download() -> Response:  # pyright: ignore[reportUnusedFunction]
        try:
            label_request = _parse_label_request(request.form)
        except InvalidLabelInput as exc:
            return _invalid(str(exc))

        payload = generate_batch(
            label_request.client_name,
            label_request.total_volumes,
            label_request.invoice_number,
            label_request.date,
        )
        logger.info("Serving %d labels for %r as a command file",
                    label_request.total_volumes, label_request.client_name)
        return send_file(
            BytesIO(payload),
            mimetype="application/octet-stream",
            as_attachment=True,
            download_name=build_download_name(
                label_request.client_name, label_request.total_volumes, "prn"),
        )

    @app.route("/labels/pdf", methods=["POST"])
    def labels_pdf() -> Response:  # pyright: ignore[reportUnusedFunction]
        try:
            label_request = _parse_label_request(request.form)
        except InvalidLabelInput as exc:
            return _invalid(str(exc))

        template = get_template("pdf")
        return send_file(
            BytesIO(template.render_batch(label_request)),
            mimetype=template.media_type,
            as_attachment=True,
            download_name=build_download_name(
                label_request.client_name,
                label_request.total_volumes,
                template.file_extension,
            ),
        )

    @app.route("/labels/print", methods=["POST"])
    def labels_print() -> Response | str:  # pyright: ignore[reportUnusedFunction]
        try:
            label_request = _parse_label_request(request.form)
        except InvalidLabelInput as exc:
            return _invalid(str(exc))

        document = BrowserTemplate().render_document(
            label_request,
            auto_print=True,
            close_delay=settings.print_close_delay,
        )
        return Response(document, mimetype="text/html")

    @app.route("/labels/preview.png", methods=["GET"])
    def labels_preview() -> Response:  # pyright: ignore[reportUnusedFunction]
        try:
            label_request = _parse_label_request(request.args)
        except InvalidLabelInput as exc:
            return Response(str(exc), status=400, mimetype="text/plain")

        return send_file(
            BytesIO(render_png_preview(label_request)),
            mimetype="image/png",
        )

    @app.route("/shipping/quote", methods=["POST"])
    def shipping_quote() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        data = request.get_json(silent=True)
        if data is None:
            data = request.form.to_dict()
        if not isinstance(data, dict):
            return jsonify(
                {"success": False, "error": "Request body must be a JSON object"}), 400
        origin = (data.get("origin_cep") or settings.origin_cep or "")
        try:
            quotes = quote_shipping(
                ShippingRequest(
                    destination_cep=str(data.get("destination_cep") or ""),
                    weight=_parse_float(data, "weight"),
                    height=_parse_float(data, "height"),
                    width=_parse_float(data, "width"),
                    length=_parse_float(data, "length"),
                ),
                str(origin),
            )
        except ShippingError as exc:
            return jsonify({"success": False, "error": str(exc)}), 400
        return jsonify({
            "success": True,
            "shipping_options": [quote.to_dict() for quote in quotes],
        })

    return app


def create_app_from_env() -> Flask:
    """Create the Flask app using VOLUME_LABELS_* environment variables."""
    load_dotenv()
    return create_app(Settings.from_env())


def run_web_app(
    settings: Settings,
    host: str,
    port: int,
) -> None:
    """Launch the Flask development server."""
    app = create_app(settings)

    use_reloader_env = os.getenv("USE_RELOADER")
    use_reloader = (
        str(use_reloader_env).lower() in {"1", "true", "yes", "on"}
        if use_reloader_env is not None
        else False
    )
    logger.info("Starting web UI on http://%s:%s", host, port)
    app.run(host=host, port=port, debug=False, use_reloader=use_reloader)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for the web UI."""
    load_dotenv()
    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(
        description="Shipment volume labels web UI"
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host/IP for the web UI (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=4000,
        help="Port for the web UI (default: 4000).",
    )

    args = parser.parse_args(argv)

    run_web_app(settings, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
