import re
from collections.abc import Mapping, Sequence

from webtocase.backend.models import FieldKind, FieldSpec
from webtocase.validation.models import FieldError, FieldErrorCode

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.match(value) is not None


def collect_values(raw: Mapping[str, object]) -> dict[str, str]:
    """Normalize raw input values: trimmed strings, file inputs dropped."""
    values: dict[str, str] = {}
    for name, value in raw.items():
        if not name or isinstance(value, (bytes, bytearray)):
            continue
        values[name] = "" if value is None else str(value).strip()
    return values


class FieldValidator:
    """Checks collected values against the fields of a form.

    Errors are collected for every field in display order and returned
    together; validation never stops at the first problem.
    """

    def validate(
        self,
        values: Mapping[str, str],
        fields: Sequence[FieldSpec],
    ) -> list[FieldError]:
        errors: list[FieldError] = []
        for spec in fields:
            value = (values.get(spec.name) or "").strip()
            if not value:
                if spec.required:
                    errors.append(
                        FieldError(
                            field=spec.name,
                            label=spec.label,
                            code=FieldErrorCode.REQUIRED,
                            message=f"{spec.label or 'This field'} is required.",
                        )
                    )
                continue
            if spec.kind == FieldKind.EMAIL and not is_valid_email(value):
                errors.append(
                    FieldError(
                        field=spec.name,
                        label=spec.label,
                        code=FieldErrorCode.INVALID_EMAIL,
                        message="Please enter a valid email address.",
                    )
                )
        return errors
