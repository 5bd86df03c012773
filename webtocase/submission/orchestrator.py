from collections.abc import Awaitable, Callable

from webtocase.backend.exceptions import ApiError
from webtocase.backend.models import FormDescription
from webtocase.captcha.broker import CaptchaBroker
from webtocase.logging.logger import Log
from webtocase.submission.context import SubmissionContext, SubmissionStep
from webtocase.submission.models import SubmissionAttempt, SubmissionOutcome, SubmissionState
from webtocase.submission.state_machine import Effect, SubmissionEvent, SubmissionStateMachine

DEFAULT_SUCCESS_MESSAGE = "Your request has been submitted successfully."


class SubmissionOrchestrator:
    """Drives a single submission attempt from validation to a terminal outcome.

    Each effect decided by the state machine is carried out by one step;
    the event the step returns feeds the next transition. Instances are
    used once and then discarded.
    """

    def __init__(
        self,
        *,
        description: FormDescription,
        attempt: SubmissionAttempt,
        steps: dict[Effect, SubmissionStep],
        broker: CaptchaBroker,
        refresh: Callable[[], Awaitable[FormDescription]],
    ) -> None:
        self._context = SubmissionContext(description=description, attempt=attempt)
        self._steps = steps
        self._broker = broker
        self._refresh = refresh
        self._machine = SubmissionStateMachine()

    @property
    def state(self) -> SubmissionState:
        return self._machine.state

    @property
    def context(self) -> SubmissionContext:
        return self._context

    async def run(self) -> SubmissionOutcome:
        if self._machine.state != SubmissionState.IDLE:
            raise RuntimeError("SubmissionOrchestrator instances run only once")
        effect = self._machine.apply(SubmissionEvent.START)
        while not self._machine.is_terminal():
            step = self._steps.get(effect)
            if step is None:
                raise RuntimeError(f"No step configured for effect '{effect.value}'")
            previous = self._machine.state
            event = await step.run(self._context)
            effect = self._machine.apply(event)
            Log.debug(f"{previous.value} --{event.value}--> {self._machine.state.value}")
        return await self._finish(effect)

    async def _finish(self, effect: Effect) -> SubmissionOutcome:
        context = self._context
        if effect in (Effect.REPORT_SUCCESS, Effect.REPORT_SUCCESS_WITH_WARNING):
            if context.warning:
                Log.warning(f"Record {context.case_number} created with warning: {context.warning}")
            return SubmissionOutcome(
                state=SubmissionState.SUCCEEDED,
                case_number=context.case_number,
                message=context.description.success_message or DEFAULT_SUCCESS_MESSAGE,
                warning=context.warning,
            )

        if effect in (Effect.RESET_CAPTCHA_AND_FAIL, Effect.RECOVER_AND_FAIL):
            self._broker.reset()
        if effect == Effect.RECOVER_AND_FAIL:
            await self._refresh_for_manual_retry()
        return SubmissionOutcome(
            state=SubmissionState.FAILED,
            message=context.error_message,
            field_errors=list(context.field_errors),
            failure=context.failure,
        )

    async def _refresh_for_manual_retry(self) -> None:
        try:
            self._context.description = await self._refresh()
        except ApiError as exc:
            Log.warning(f"Failed to refresh nonce: {exc}")
