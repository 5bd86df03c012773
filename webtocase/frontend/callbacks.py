from collections.abc import Callable
from dataclasses import dataclass

from webtocase.logging.logger import Log
from webtocase.submission.models import SubmissionOutcome


@dataclass(frozen=True)
class HostCallbacks:
    """Optional hooks the embedding page passes to a front end."""

    on_load: Callable[[], None] | None = None
    on_success: Callable[[str], None] | None = None
    on_error: Callable[[str], None] | None = None


class OutcomeNotifier:
    """Relays terminal outcomes to the host, at most once per attempt."""

    def __init__(self, callbacks: HostCallbacks | None = None) -> None:
        self._callbacks = callbacks or HostCallbacks()
        self._notified: set[int] = set()
        self._load_notified = False

    def loaded(self) -> None:
        if self._load_notified:
            return
        self._load_notified = True
        self._invoke(self._callbacks.on_load)

    def outcome(self, attempt_id: int, outcome: SubmissionOutcome) -> None:
        if attempt_id in self._notified:
            return
        self._notified.add(attempt_id)
        if outcome.succeeded:
            self._invoke(self._callbacks.on_success, outcome.case_number)
        else:
            self._invoke(self._callbacks.on_error, outcome.message)

    def error(self, attempt_id: int, message: str) -> None:
        if attempt_id in self._notified:
            return
        self._notified.add(attempt_id)
        self._invoke(self._callbacks.on_error, message)

    @staticmethod
    def _invoke(callback: Callable[..., None] | None, *args: object) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            Log.exception("Host callback raised")
