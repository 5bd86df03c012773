"""Fakes and payload builders shared by unit and integration tests."""

import io
import json
import random
from collections.abc import Callable
from typing import Any

import httpx
from PIL import Image

from webtocase.backend.client import WebToCaseClient

API_BASE = "https://example.test/services/apexrest/webtocase/v1"


def make_form_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "formId": "a0B000000000001",
        "title": "Contact support",
        "description": "Tell us what went wrong.",
        "successMessage": "Thanks, we got it.",
        "fields": [
            {"caseField": "SuppliedName", "label": "Name", "type": "Text", "required": True},
            {"caseField": "SuppliedEmail", "label": "Email", "type": "Email", "required": True},
            {"caseField": "Description", "label": "Details", "type": "Textarea", "required": False},
        ],
        "enableFileUpload": True,
        "maxFileSizeMB": 25,
        "enableCaptcha": False,
        "nonce": "nonce-initial",
    }
    payload.update(overrides)
    return payload


def make_image_bytes(
    size: tuple[int, int] = (64, 64),
    fmt: str = "JPEG",
    mode: str = "RGB",
) -> bytes:
    """Encode a solid-colour image in memory."""
    buf = io.BytesIO()
    Image.new(mode, size, (200, 30, 30) if mode == "RGB" else (200, 30, 30, 128)).save(
        buf, format=fmt
    )
    return buf.getvalue()


def make_noise_image_bytes(size: tuple[int, int], quality: int = 95) -> bytes:
    """Encode random noise, which JPEG cannot compress well."""
    width, height = size
    noise = random.Random(width * height).randbytes(width * height * 3)
    image = Image.frombytes("RGB", size, noise)
    buf = io.BytesIO()
    image.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


class FakeBackend:
    """In-memory stand-in for the public form endpoints.

    Every form fetch issues a new nonce. Responses for submit, chunk and
    status calls can be queued; otherwise sensible successes are returned.
    """

    def __init__(self, form: dict[str, Any] | None = None) -> None:
        self.form = form or make_form_payload()
        self.requests: list[tuple[str, str, dict[str, Any]]] = []
        self.submit_responses: list[dict[str, Any]] = []
        self.chunk_responses: list[dict[str, Any]] = []
        self.status_responses: list[dict[str, Any]] = []
        self.form_status = 200
        self.chunk_handler: Callable[[dict[str, Any]], dict[str, Any]] | None = None
        self._nonce_counter = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.rsplit("/v1", 1)[-1]
        body = json.loads(request.content) if request.content else {}
        self.requests.append((request.method, path, body))

        if request.method == "GET" and path.startswith("/form/"):
            if self.form_status != 200:
                return httpx.Response(self.form_status, json={"error": "Form not found"})
            payload = dict(self.form)
            if self._nonce_counter:
                payload["nonce"] = f"nonce-{self._nonce_counter}"
            self._nonce_counter += 1
            return httpx.Response(200, json=payload)
        if path == "/submit":
            if self.submit_responses:
                return httpx.Response(200, json=self.submit_responses.pop(0))
            return httpx.Response(
                200, json={"success": True, "caseNumber": "00001001", "caseId": "500000000000001"}
            )
        if path == "/upload-chunk":
            if self.chunk_handler is not None:
                return httpx.Response(200, json=self.chunk_handler(body))
            if self.chunk_responses:
                return httpx.Response(200, json=self.chunk_responses.pop(0))
            last = body["chunkIndex"] == body["totalChunks"] - 1
            return httpx.Response(200, json={"success": True, "complete": last})
        if path == "/upload-status":
            if self.status_responses:
                return httpx.Response(200, json=self.status_responses.pop(0))
            return httpx.Response(200, json={"status": "complete"})
        return httpx.Response(404, json={"error": "Unknown endpoint"})

    def calls(self, path: str) -> list[dict[str, Any]]:
        return [body for _method, p, body in self.requests if p == path]

    def client(self) -> WebToCaseClient:
        return WebToCaseClient(
            api_base=API_BASE,
            timeout_seconds=5,
            transport=httpx.MockTransport(self.handler),
        )

