from collections.abc import Mapping

from webtocase.backend.exceptions import ApiError
from webtocase.files.models import Attachment
from webtocase.frontend.callbacks import HostCallbacks, OutcomeNotifier
from webtocase.frontend.host_channel import HostChannel
from webtocase.frontend.renderer import render_form
from webtocase.logging.logger import Log
from webtocase.submission.models import SubmissionOutcome
from webtocase.submission.pipeline import SubmissionPipeline

LOAD_ERROR_MESSAGE = "Unable to load form. Please try again later."


class FormWidget:
    """Self-rendering front end for one form instance on a page."""

    def __init__(
        self,
        pipeline: SubmissionPipeline,
        callbacks: HostCallbacks | None = None,
        channel: HostChannel | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._notifier = OutcomeNotifier(callbacks)
        self._channel = channel or HostChannel()
        self._attempts = 0
        self.markup = ""

    async def load(self) -> str:
        """Fetch the form, prepare CAPTCHA and return the rendered markup.

        Raises:
            ApiError: if the description cannot be fetched.
        """
        try:
            description = await self._pipeline.load()
        except ApiError as exc:
            Log.error(f"Failed to load form '{self._pipeline.form_name}': {exc}")
            self._notifier.error(0, str(exc) or LOAD_ERROR_MESSAGE)
            raise
        self.markup = render_form(description)
        self._notifier.loaded()
        self._channel.ready()
        return self.markup

    async def submit(
        self,
        values: Mapping[str, object],
        attachment: Attachment | None = None,
    ) -> SubmissionOutcome:
        self._attempts += 1
        attempt_id = self._attempts
        outcome = await self._pipeline.submit(values, attachment)
        self._notifier.outcome(attempt_id, outcome)
        if outcome.succeeded:
            self._channel.success(outcome.case_number)
        else:
            self._channel.error(outcome.message)
        return outcome

    def resize(self, height: int) -> None:
        self._channel.resize(height)

    def close(self) -> None:
        self._pipeline.close()
