import asyncio
from collections.abc import Sequence

from webtocase.backend.client import WebToCaseClient
from webtocase.backend.exceptions import ApiError
from webtocase.backend.models import AssemblyStatus
from webtocase.logging.logger import Log
from webtocase.transfer.models import AssemblyOutcome, AssemblyResult, TransferSession

POLL_INTERVALS_SECONDS: tuple[float, ...] = (2, 3, 5)
MAX_POLL_WAIT_SECONDS: float = 60


class AssemblyPoller:
    """Waits for asynchronous server-side assembly of a chunked upload.

    Delays follow the interval schedule, the last interval repeating, until
    the cumulative scheduled wait reaches the ceiling.
    """

    def __init__(
        self,
        client: WebToCaseClient,
        intervals: Sequence[float] = POLL_INTERVALS_SECONDS,
        max_wait_seconds: float = MAX_POLL_WAIT_SECONDS,
    ) -> None:
        if not intervals:
            raise ValueError("intervals must not be empty")
        self._client = client
        self._intervals = tuple(intervals)
        self._max_wait_seconds = max_wait_seconds

    def delay_for(self, attempt: int) -> float:
        if attempt < len(self._intervals):
            return self._intervals[attempt]
        return self._intervals[-1]

    async def wait(self, session: TransferSession, upload_key: str) -> AssemblyResult:
        waited = 0.0
        attempt = 0
        while waited < self._max_wait_seconds:
            delay = self.delay_for(attempt)
            await asyncio.sleep(delay)
            waited += delay
            attempt += 1
            status, error = await self.poll(session, upload_key)
            if status == AssemblyStatus.COMPLETE:
                Log.info(f"Assembly for {session.case_id} complete after {attempt} polls")
                return AssemblyResult(AssemblyOutcome.COMPLETE, polls=attempt, waited_seconds=waited)
            if status == AssemblyStatus.ERROR:
                Log.warning(f"Assembly for {session.case_id} failed: {error}")
                return AssemblyResult(
                    AssemblyOutcome.FAILED,
                    polls=attempt,
                    waited_seconds=waited,
                    error=error or "Processing failed.",
                )
        Log.warning(
            f"Assembly for {session.case_id} still processing after {waited:g}s, giving up"
        )
        return AssemblyResult(AssemblyOutcome.TIMED_OUT, polls=attempt, waited_seconds=waited)

    async def poll(
        self,
        session: TransferSession,
        upload_key: str,
    ) -> tuple[AssemblyStatus, str | None]:
        """Query the status once; unreachable backend counts as still processing."""
        try:
            result = await self._client.upload_status({
                "caseId": session.case_id,
                "uploadKey": upload_key,
                "fileName": session.file_name,
                "formId": session.form_id,
            })
        except ApiError as exc:
            Log.warning(f"Status poll for {session.case_id} failed, will retry: {exc}")
            return AssemblyStatus.PROCESSING, None
        return result.status, result.error
