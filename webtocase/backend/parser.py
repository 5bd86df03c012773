"""Builds domain objects from raw backend JSON payloads."""

from typing import Any

from webtocase.backend.exceptions import FormDescriptionError
from webtocase.backend.models import (
    AssemblyStatus,
    CaptchaVariant,
    ChunkResult,
    FieldKind,
    FieldSpec,
    FormDescription,
    StatusResult,
    SubmitResult,
)

_REQUIRED_FORM_KEYS = ("formId", "fields", "nonce")


def build_form_description(data: Any, form_name: str) -> FormDescription:
    """Validate a form payload and build a FormDescription.

    Raises:
        FormDescriptionError: on a missing key or a malformed field entry.
    """
    if not isinstance(data, dict):
        raise FormDescriptionError("Form description must be an object")
    for key in _REQUIRED_FORM_KEYS:
        if key not in data:
            raise FormDescriptionError(f"Missing required form key: {key}")
    nonce = data["nonce"]
    if not nonce or not isinstance(nonce, str):
        raise FormDescriptionError("'nonce' must be a non-empty string")
    fields = _build_fields(data["fields"])
    return FormDescription(
        form_id=str(data["formId"]),
        name=form_name,
        nonce=nonce,
        fields=fields,
        title=data.get("title") or "",
        description=data.get("description") or "",
        success_message=data.get("successMessage") or "",
        file_upload_enabled=bool(data.get("enableFileUpload", False)),
        max_file_size_mb=float(data.get("maxFileSizeMB") or 0),
        captcha_enabled=bool(data.get("enableCaptcha", False)),
        captcha_variant=_parse_variant(data.get("captchaType")),
        captcha_site_key=data.get("captchaSiteKey") or "",
    )


def _build_fields(raw: Any) -> tuple[FieldSpec, ...]:
    if not isinstance(raw, list):
        raise FormDescriptionError("'fields' must be a list")
    fields: list[FieldSpec] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise FormDescriptionError(f"Field at index {index} must be an object")
        name = item.get("caseField")
        if not name or not isinstance(name, str):
            raise FormDescriptionError(
                f"Field at index {index}: 'caseField' must be a non-empty string"
            )
        fields.append(
            FieldSpec(
                name=name,
                label=item.get("label") or name,
                kind=_parse_kind(item.get("type")),
                required=bool(item.get("required", False)),
            )
        )
    return tuple(fields)


def _parse_kind(raw: Any) -> FieldKind:
    try:
        return FieldKind(raw)
    except ValueError:
        return FieldKind.TEXT


def _parse_variant(raw: Any) -> CaptchaVariant:
    if not raw:
        return CaptchaVariant.CHECKBOX
    try:
        return CaptchaVariant(raw)
    except ValueError as exc:
        raise FormDescriptionError(f"Unknown captchaType {raw!r}") from exc


def build_submit_result(data: dict[str, Any]) -> SubmitResult:
    case_id = data.get("caseId")
    return SubmitResult(
        success=bool(data.get("success", False)),
        case_number=str(data.get("caseNumber") or ""),
        case_id=str(case_id) if case_id else None,
        error=data.get("error"),
        error_code=data.get("errorCode"),
    )


def build_chunk_result(data: dict[str, Any]) -> ChunkResult:
    return ChunkResult(
        success=bool(data.get("success", False)),
        complete=bool(data.get("complete", False)),
        processing=bool(data.get("processing", False)),
        upload_key=data.get("uploadKey"),
        error=data.get("error"),
    )


def build_status_result(data: dict[str, Any]) -> StatusResult:
    try:
        status = AssemblyStatus(data.get("status"))
    except ValueError:
        status = AssemblyStatus.ERROR
    return StatusResult(status=status, error=data.get("error"))
