from dataclasses import dataclass
from enum import Enum

NONCE_EXPIRED_CODE = "NONCE_EXPIRED"
NONCE_ERROR_MARKER = "nonce"


class FieldKind(str, Enum):
    """Input kinds a form field can be rendered as."""

    TEXT = "Text"
    TEXTAREA = "Textarea"
    EMAIL = "Email"
    PHONE = "Phone"


class CaptchaVariant(str, Enum):
    """reCAPTCHA interaction modes."""

    CHECKBOX = "V2_Checkbox"
    INVISIBLE = "V2_Invisible"
    SCORE = "V3_Score"


@dataclass(frozen=True)
class FieldSpec:
    """A single record field exposed by a form, in display order."""

    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False


@dataclass(frozen=True)
class FormDescription:
    """Declarative description of a public form as served by the backend.

    Superseded wholesale whenever it is re-fetched; the nonce it carries is
    single-use.
    """

    form_id: str
    name: str
    nonce: str
    fields: tuple[FieldSpec, ...] = ()
    title: str = ""
    description: str = ""
    success_message: str = ""
    file_upload_enabled: bool = False
    max_file_size_mb: float = 0.0
    captcha_enabled: bool = False
    captcha_variant: CaptchaVariant = CaptchaVariant.CHECKBOX
    captcha_site_key: str = ""


@dataclass(frozen=True)
class SubmitResult:
    """Response of the record-creation endpoint."""

    success: bool
    case_number: str = ""
    case_id: str | None = None
    error: str | None = None
    error_code: str | None = None

    @property
    def is_nonce_failure(self) -> bool:
        if self.success:
            return False
        if self.error_code:
            return self.error_code.upper() == NONCE_EXPIRED_CODE
        return NONCE_ERROR_MARKER in (self.error or "").lower()


@dataclass(frozen=True)
class ChunkResult:
    """Response for a single uploaded chunk."""

    success: bool
    complete: bool = False
    processing: bool = False
    upload_key: str | None = None
    error: str | None = None


class AssemblyStatus(str, Enum):
    COMPLETE = "complete"
    PROCESSING = "processing"
    ERROR = "error"


@dataclass(frozen=True)
class StatusResult:
    """Response of the asynchronous assembly status endpoint."""

    status: AssemblyStatus
    error: str | None = None
