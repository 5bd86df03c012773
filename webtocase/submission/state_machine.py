"""Submission lifecycle as a pure transition table.

transition(state, event) decides the next state and the effect the
orchestrator must perform; it has no side effects of its own.
"""

from dataclasses import dataclass, field
from enum import Enum

from webtocase.submission.exceptions import InvalidTransitionError
from webtocase.submission.models import SubmissionState


class SubmissionEvent(str, Enum):
    START = "start"
    VALIDATED = "validated"
    VALIDATION_FAILED = "validation_failed"
    FILE_REJECTED = "file_rejected"
    TOKEN_ACQUIRED = "token_acquired"
    TOKEN_ACQUIRED_WITH_FILE = "token_acquired_with_file"
    CAPTCHA_FAILED = "captcha_failed"
    FILE_READY = "file_ready"
    SUBMITTED = "submitted"
    RECORD_CREATED = "record_created"
    NONCE_EXPIRED = "nonce_expired"
    NONCE_EXPIRED_AGAIN = "nonce_expired_again"
    SUBMIT_FAILED = "submit_failed"
    UPLOAD_COMPLETE = "upload_complete"
    ASSEMBLY_QUEUED = "assembly_queued"
    UPLOAD_FAILED = "upload_failed"
    ASSEMBLY_COMPLETE = "assembly_complete"
    ASSEMBLY_FAILED = "assembly_failed"
    ASSEMBLY_TIMED_OUT = "assembly_timed_out"


class Effect(str, Enum):
    VALIDATE = "validate"
    ACQUIRE_CAPTCHA = "acquire_captcha"
    PROCESS_FILE = "process_file"
    SUBMIT = "submit"
    REFRESH_AND_RESUBMIT = "refresh_and_resubmit"
    UPLOAD_CHUNKS = "upload_chunks"
    POLL_ASSEMBLY = "poll_assembly"
    REPORT_SUCCESS = "report_success"
    REPORT_SUCCESS_WITH_WARNING = "report_success_with_warning"
    REPORT_FAILURE = "report_failure"
    RESET_CAPTCHA_AND_FAIL = "reset_captcha_and_fail"
    RECOVER_AND_FAIL = "recover_and_fail"


@dataclass(frozen=True)
class Transition:
    state: SubmissionState
    effect: Effect


S = SubmissionState
E = SubmissionEvent

TRANSITIONS: dict[tuple[SubmissionState, SubmissionEvent], Transition] = {
    (S.IDLE, E.START): Transition(S.VALIDATING, Effect.VALIDATE),
    (S.VALIDATING, E.VALIDATED): Transition(S.ACQUIRING_CAPTCHA, Effect.ACQUIRE_CAPTCHA),
    (S.VALIDATING, E.VALIDATION_FAILED): Transition(S.FAILED, Effect.REPORT_FAILURE),
    (S.VALIDATING, E.FILE_REJECTED): Transition(S.FAILED, Effect.REPORT_FAILURE),
    (S.ACQUIRING_CAPTCHA, E.TOKEN_ACQUIRED): Transition(S.SUBMITTING, Effect.SUBMIT),
    (S.ACQUIRING_CAPTCHA, E.TOKEN_ACQUIRED_WITH_FILE): Transition(
        S.PROCESSING_FILE, Effect.PROCESS_FILE
    ),
    (S.ACQUIRING_CAPTCHA, E.CAPTCHA_FAILED): Transition(S.FAILED, Effect.RESET_CAPTCHA_AND_FAIL),
    (S.PROCESSING_FILE, E.FILE_READY): Transition(S.SUBMITTING, Effect.SUBMIT),
    (S.SUBMITTING, E.SUBMITTED): Transition(S.SUCCEEDED, Effect.REPORT_SUCCESS),
    (S.SUBMITTING, E.RECORD_CREATED): Transition(S.UPLOADING, Effect.UPLOAD_CHUNKS),
    (S.SUBMITTING, E.NONCE_EXPIRED): Transition(S.SUBMITTING, Effect.REFRESH_AND_RESUBMIT),
    (S.SUBMITTING, E.NONCE_EXPIRED_AGAIN): Transition(S.FAILED, Effect.RECOVER_AND_FAIL),
    (S.SUBMITTING, E.SUBMIT_FAILED): Transition(S.FAILED, Effect.RECOVER_AND_FAIL),
    (S.UPLOADING, E.UPLOAD_COMPLETE): Transition(S.SUCCEEDED, Effect.REPORT_SUCCESS),
    (S.UPLOADING, E.ASSEMBLY_QUEUED): Transition(S.ASSEMBLING, Effect.POLL_ASSEMBLY),
    (S.UPLOADING, E.UPLOAD_FAILED): Transition(S.SUCCEEDED, Effect.REPORT_SUCCESS_WITH_WARNING),
    (S.ASSEMBLING, E.ASSEMBLY_COMPLETE): Transition(S.SUCCEEDED, Effect.REPORT_SUCCESS),
    (S.ASSEMBLING, E.ASSEMBLY_FAILED): Transition(
        S.SUCCEEDED, Effect.REPORT_SUCCESS_WITH_WARNING
    ),
    (S.ASSEMBLING, E.ASSEMBLY_TIMED_OUT): Transition(
        S.SUCCEEDED, Effect.REPORT_SUCCESS_WITH_WARNING
    ),
}

TERMINAL_STATES = frozenset({S.SUCCEEDED, S.FAILED})


def transition(state: SubmissionState, event: SubmissionEvent) -> Transition:
    """Return the next state and effect for an event.

    Raises:
        InvalidTransitionError: if the event is not valid in the state.
    """
    result = TRANSITIONS.get((state, event))
    if result is None:
        raise InvalidTransitionError(state, event.value)
    return result


@dataclass
class SubmissionStateMachine:
    """Tracks the current state of one attempt and the events it went through."""

    state: SubmissionState = SubmissionState.IDLE
    history: list[tuple[SubmissionState, SubmissionEvent, SubmissionState]] = field(
        default_factory=list
    )

    def apply(self, event: SubmissionEvent) -> Effect:
        result = transition(self.state, event)
        self.history.append((self.state, event, result.state))
        self.state = result.state
        return result.effect

    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES
