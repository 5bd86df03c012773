from types import TracebackType
from typing import Any
from urllib.parse import quote

import httpx

from webtocase.backend.exceptions import BackendError, FormNotFoundError, NetworkError
from webtocase.backend.models import ChunkResult, StatusResult, SubmitResult
from webtocase.backend.parser import (
    build_chunk_result,
    build_status_result,
    build_submit_result,
)
from webtocase.logging.logger import Log


class WebToCaseClient:
    """Async JSON client for the public form endpoints.

    Requests never carry cookies or credentials; the backend is reached as an
    anonymous site guest.
    """

    def __init__(
        self,
        *,
        api_base: str,
        timeout_seconds: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=api_base.rstrip("/"),
            timeout=timeout_seconds,
            transport=transport,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
        )

    async def __aenter__(self) -> "WebToCaseClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get_form(self, form_name: str) -> dict[str, Any]:
        """Fetch the raw form description.

        Raises:
            FormNotFoundError: if the form is unknown or inactive.
            BackendError: for any other non-2xx answer.
            NetworkError: if the backend could not be reached.
        """
        response = await self._send("GET", f"/form/{quote(form_name, safe='')}")
        if response.status_code == 404:
            raise FormNotFoundError(f"Form '{form_name}' not found")
        data = self._decode(response)
        if response.is_error:
            raise BackendError(
                data.get("error") or f"HTTP {response.status_code}",
                error_code=data.get("errorCode"),
            )
        return data

    async def submit(self, payload: dict[str, Any]) -> SubmitResult:
        response = await self._send("POST", "/submit", json=payload)
        return build_submit_result(self._decode(response))

    async def upload_chunk(self, payload: dict[str, Any]) -> ChunkResult:
        response = await self._send("POST", "/upload-chunk", json=payload)
        return build_chunk_result(self._decode(response))

    async def upload_status(self, payload: dict[str, Any]) -> StatusResult:
        response = await self._send("POST", "/upload-status", json=payload)
        return build_status_result(self._decode(response))

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        Log.debug(f"{method} {path}")
        try:
            return await self._http.request(method, path, **kwargs)
        except (httpx.TransportError, httpx.TimeoutException) as exc:
            raise NetworkError(f"Backend unreachable: {exc}") from exc

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Unreadable response (HTTP {response.status_code})"
            ) from exc
        if not isinstance(data, dict):
            raise NetworkError(f"Unexpected response shape (HTTP {response.status_code})")
        return data
