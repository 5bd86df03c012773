from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from webtocase.backend.models import FormDescription
from webtocase.files.models import Attachment, FileClass
from webtocase.submission.models import FailureKind, SubmissionAttempt
from webtocase.submission.state_machine import SubmissionEvent
from webtocase.transfer.models import (
    AssemblyResult,
    TransferPlan,
    TransferSession,
    UploadResult,
)
from webtocase.validation.models import FieldError


@dataclass(slots=True)
class SubmissionContext:
    """Everything one attempt accumulates on its way through the steps."""

    description: FormDescription
    attempt: SubmissionAttempt
    file_class: FileClass | None = None
    payload_file: Attachment | None = None
    plan: TransferPlan | None = None
    case_number: str = ""
    case_id: str | None = None
    session: TransferSession | None = None
    upload_result: UploadResult | None = None
    assembly_result: AssemblyResult | None = None
    field_errors: list[FieldError] = field(default_factory=list)
    failure: FailureKind | None = None
    error_message: str = ""
    warning: str = ""

    def fail(self, kind: FailureKind, message: str) -> None:
        self.failure = kind
        self.error_message = message


class SubmissionStep(ABC):
    @abstractmethod
    async def run(self, context: SubmissionContext) -> SubmissionEvent:
        raise NotImplementedError
