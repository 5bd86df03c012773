import uuid
from dataclasses import dataclass
from enum import Enum


class TransferMode(str, Enum):
    SINGLE = "single"
    CHUNKED = "chunked"


@dataclass(frozen=True)
class TransferPlan:
    mode: TransferMode
    total_chunks: int = 0


@dataclass(slots=True)
class TransferSession:
    """State of one chunked upload; discarded once the upload ends."""

    upload_key: str
    case_id: str
    file_name: str
    form_id: str
    total_chunks: int
    chunk_index: int = 0

    @classmethod
    def start(
        cls,
        *,
        case_id: str,
        file_name: str,
        form_id: str,
        total_chunks: int,
    ) -> "TransferSession":
        return cls(
            upload_key=str(uuid.uuid4()),
            case_id=case_id,
            file_name=file_name,
            form_id=form_id,
            total_chunks=total_chunks,
        )


class UploadOutcome(str, Enum):
    COMPLETE = "complete"
    PROCESSING = "processing"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadResult:
    outcome: UploadOutcome
    upload_key: str | None = None
    chunks_sent: int = 0
    error: str | None = None


class AssemblyOutcome(str, Enum):
    COMPLETE = "complete"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class AssemblyResult:
    outcome: AssemblyOutcome
    polls: int = 0
    waited_seconds: float = 0.0
    error: str | None = None
