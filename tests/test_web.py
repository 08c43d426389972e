import unittest
from unittest.mock import Mock, patch

from flask import Flask
from flask.testing import FlaskClient
from werkzeug.wrappers import Response

from config import Settings
from label_generation import generate_batch
from volume_labels_web import create_app

FORM = {
    "client_name": "ACME TEXTIL",
    "total_volumes": "2",
    "invoice_number": "NF-12345",
    "date": "01/01/2025",
}


class WebUiTests(unittest.TestCase):
    def setUp(self) -> None:
        self.app: Flask = create_app(
            Settings(print_close_delay=3.0, origin_cep="01310-100")
        )
        self.app.config["TESTING"] = True
        self.client: FlaskClient = self.app.test_client()

    def test_index_renders_form(self) -> None:
        response: Response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        body = response.get_data(as_text=True)
        self.assertIn('name="client_name"', body)
        self.assertIn('name="total_volumes"', body)

    def test_index_shows_sale_id_and_error(self) -> None:
        response: Response = self.client.get(
            "/?sale=123e4567-e89b-12d3-a456-426614174000&error=invalid&message=Boom"
        )
        body = response.get_data(as_text=True)
        self.assertRegex(body, r"#V\d{8}")
        self.assertIn("Boom", body)

    def test_download_returns_command_file(self) -> None:
        response: Response = self.client.post("/labels/download", data=FORM)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.mimetype, "application/octet-stream")
        self.assertIn(
            "etiquetas_ACMETEXTIL_2vol.prn",
            response.headers.get("Content-Disposition", ""),
        )
        self.assertEqual(
            response.get_data(),
            generate_batch("ACME TEXTIL", 2, "NF-12345", "01/01/2025"),
        )

    def test_download_invalid_volumes_redirects(self) -> None:
        for volumes in ("0", "abc", ""):
            with self.subTest(volumes=volumes):
                response: Response = self.client.post(
                    "/labels/download", data={**FORM, "total_volumes": volumes})
                self.assertEqual(response.status_code, 302)
                self.assertIn("error=invalid", response.headers.get("Location", ""))

    def test_download_rejects_oversized_batch(self) -> None:
        response: Response = self.client.post(
            "/labels/download", data={**FORM, "total_volumes": "50000000"})
        self.assertEqual(response.status_code, 302)
        self.assertIn("error=invalid", response.headers.get("Location", ""))
        response = self.client.post(
            "/labels/download", data={**FORM, "total_volumes": "999"})
        self.assertEqual(response.status_code, 200)

    def test_download_requires_client(self) -> None:
        response: Response = self.client.post(
            "/labels/download", data={**FORM, "client_name": "  "})
        self.assertEqual(response.status_code, 302)
        self.assertIn("error=invalid", response.headers.get("Location", ""))

    def test_pdf_download(self) -> None:
        response: Response = self.client.post("/labels/pdf", data=FORM)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.mimetype, "application/pdf")
        self.assertTrue(response.get_data().startswith(b"%PDF"))
        self.assertIn(
            "etiquetas_ACMETEXTIL_2vol.pdf",
            response.headers.get("Content-Disposition", ""),
        )

    def test_print_document(self) -> None:
        response: Response = self.client.post("/labels/print", data=FORM)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.mimetype, "text/html")
        body = response.get_data(as_text=True)
        self.assertEqual(body.count('class="label"'), 2)
        self.assertIn("window.print()", body)
        self.assertIn("3000", body)

    @patch("volume_labels_web.render_png_preview", return_value=b"\x89PNG\r\n\x1a\nfake")
    def test_preview_png(self, mock_preview: Mock) -> None:
        response: Response = self.client.get(
            "/labels/preview.png?client_name=ACME&total_volumes=3")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.mimetype, "image/png")
        request = mock_preview.call_args.args[0]
        self.assertEqual(request.client_name, "ACME")
        self.assertEqual(request.total_volumes, 3)

    def test_preview_invalid_request(self) -> None:
        response: Response = self.client.get("/labels/preview.png?client_name=ACME")
        self.assertEqual(response.status_code, 400)

    def test_shipping_quote_json(self) -> None:
        response: Response = self.client.post(
            "/shipping/quote",
            json={
                "destination_cep": "20040-020",
                "weight": 0.5,
                "height": 10,
                "width": 15,
                "length": 20,
            },
        )
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertTrue(data["success"])
        self.assertEqual(
            [option["service_name"] for option in data["shipping_options"]],
            ["PAC", "SEDEX"],
        )

    def test_shipping_quote_invalid(self) -> None:
        response: Response = self.client.post(
            "/shipping/quote",
            json={"destination_cep": "20040-020", "weight": "heavy"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.get_json()["success"])

    def test_shipping_quote_rejects_non_object_json(self) -> None:
        for body in ([1], "text", 3):
            with self.subTest(body=body):
                response: Response = self.client.post("/shipping/quote", json=body)
                self.assertEqual(response.status_code, 400)
                self.assertFalse(response.get_json()["success"])


if __name__ == "__main__":
    unittest.main()
