"""Messages a form embedded in an iframe posts to its parent page."""

from collections.abc import Callable
from typing import Any

READY = "wtc:ready"
RESIZE = "wtc:resize"
SUCCESS = "wtc:success"
ERROR = "wtc:error"

Message = dict[str, Any]


class HostChannel:
    def __init__(self, post: Callable[[Message], None] | None = None) -> None:
        self._post = post

    @property
    def attached(self) -> bool:
        return self._post is not None

    def ready(self) -> None:
        self._send({"type": READY})

    def resize(self, height: int) -> None:
        self._send({"type": RESIZE, "height": int(height)})

    def success(self, case_number: str) -> None:
        self._send({"type": SUCCESS, "caseNumber": case_number})

    def error(self, message: str) -> None:
        self._send({"type": ERROR, "message": message})

    def _send(self, message: Message) -> None:
        if self._post is not None:
            self._post(message)
