from webtocase.submission.models import SubmissionState


class SubmissionInProgressError(Exception):
    """Raised when a submit is requested while another one is in flight."""


class InvalidTransitionError(Exception):
    """Raised when an event is not valid in the current submission state."""

    def __init__(self, state: SubmissionState, event: str) -> None:
        self.state = state
        self.event = event
        super().__init__(f"Event '{event}' is not valid in state '{state.value}'")
