from dataclasses import dataclass
from enum import Enum


class FieldErrorCode(str, Enum):
    REQUIRED = "required"
    INVALID_EMAIL = "invalid_email"


@dataclass(frozen=True)
class FieldError:
    """A single field-level problem, ready for display."""

    field: str
    label: str
    code: FieldErrorCode
    message: str
