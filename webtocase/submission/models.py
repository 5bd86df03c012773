from dataclasses import dataclass, field
from enum import Enum

from webtocase.files.models import Attachment
from webtocase.validation.models import FieldError


class SubmissionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    ACQUIRING_CAPTCHA = "acquiring_captcha"
    PROCESSING_FILE = "processing_file"
    SUBMITTING = "submitting"
    UPLOADING = "uploading"
    ASSEMBLING = "assembling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureKind(str, Enum):
    VALIDATION = "validation"
    FILE = "file"
    CAPTCHA = "captcha"
    NONCE_EXPIRED = "nonce_expired"
    BACKEND = "backend"
    NETWORK = "network"


@dataclass(slots=True)
class SubmissionAttempt:
    """Per-click state; created fresh for every submit."""

    values: dict[str, str]
    attachment: Attachment | None = None
    captcha_token: str = ""
    nonce_retried: bool = False


@dataclass(frozen=True)
class SubmissionOutcome:
    """Terminal result of one submission attempt."""

    state: SubmissionState
    case_number: str = ""
    message: str = ""
    warning: str = ""
    field_errors: list[FieldError] = field(default_factory=list)
    failure: FailureKind | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == SubmissionState.SUCCEEDED
