import base64
from collections.abc import Awaitable, Callable

from webtocase.backend.client import WebToCaseClient
from webtocase.backend.exceptions import ApiError, NetworkError
from webtocase.backend.models import FormDescription
from webtocase.captcha.broker import CaptchaBroker
from webtocase.captcha.exceptions import CaptchaError
from webtocase.files.exceptions import FileGateError
from webtocase.files.file_gate import FileGate
from webtocase.imaging.optimizer import ImageOptimizer
from webtocase.logging.logger import Log
from webtocase.submission.context import SubmissionContext, SubmissionStep
from webtocase.submission.models import FailureKind
from webtocase.submission.state_machine import SubmissionEvent
from webtocase.transfer.assembly_poller import AssemblyPoller
from webtocase.transfer.chunk_uploader import ChunkUploader
from webtocase.transfer.models import AssemblyOutcome, TransferMode, TransferSession, UploadOutcome
from webtocase.transfer.planner import TransferPlanner
from webtocase.validation.field_validator import FieldValidator

NETWORK_ERROR_MESSAGE = "Network error. Please try again."
GENERIC_SUBMIT_ERROR = "Submission failed."
FILE_NOT_ATTACHED_WARNING = "Note: File could not be attached."
ASSEMBLY_PENDING_WARNING = (
    "Your case was created. The file is still being processed and will appear shortly."
)


class ValidateStep(SubmissionStep):
    """Local checks only: field values, then the attachment's type and size."""

    def __init__(self, validator: FieldValidator, file_gate: FileGate) -> None:
        self._validator = validator
        self._file_gate = file_gate

    async def run(self, context: SubmissionContext) -> SubmissionEvent:
        errors = self._validator.validate(context.attempt.values, context.description.fields)
        if errors:
            context.field_errors = errors
            context.fail(FailureKind.VALIDATION, "\n".join(e.message for e in errors))
            Log.info(f"Validation failed for {len(errors)} fields")
            return SubmissionEvent.VALIDATION_FAILED
        attachment = context.attempt.attachment
        if attachment is not None:
            if not context.description.file_upload_enabled:
                context.fail(FailureKind.FILE, "File uploads are not enabled for this form.")
                return SubmissionEvent.FILE_REJECTED
            try:
                context.file_class = self._file_gate.inspect(attachment)
            except FileGateError as exc:
                context.fail(FailureKind.FILE, str(exc))
                Log.info(f"Attachment {attachment.file_name} rejected: {exc}")
                return SubmissionEvent.FILE_REJECTED
        return SubmissionEvent.VALIDATED


class AcquireCaptchaStep(SubmissionStep):
    def __init__(self, broker: CaptchaBroker) -> None:
        self._broker = broker

    async def run(self, context: SubmissionContext) -> SubmissionEvent:
        try:
            context.attempt.captcha_token = await self._broker.acquire_token()
        except CaptchaError as exc:
            context.fail(FailureKind.CAPTCHA, str(exc))
            Log.info(f"CAPTCHA token not acquired: {exc}")
            return SubmissionEvent.CAPTCHA_FAILED
        if context.attempt.attachment is not None:
            return SubmissionEvent.TOKEN_ACQUIRED_WITH_FILE
        return SubmissionEvent.TOKEN_ACQUIRED


class ProcessFileStep(SubmissionStep):
    """Optimizes the attachment and plans its transfer."""

    def __init__(
        self,
        optimizer: ImageOptimizer,
        planner: TransferPlanner,
        on_progress: Callable[[int], None] | None = None,
    ) -> None:
        self._optimizer = optimizer
        self._planner = planner
        self._on_progress = on_progress

    async def run(self, context: SubmissionContext) -> SubmissionEvent:
        attachment = context.attempt.attachment
        if attachment is None:
            raise ValueError("SubmissionAttempt.attachment must be set before file processing")
        processed = self._optimizer.optimize(attachment, self._on_progress)
        context.payload_file = processed
        context.plan = self._planner.plan(processed)
        Log.info(
            f"Planned {context.plan.mode.value} transfer for {processed.file_name} "
            f"({processed.size} bytes)"
        )
        return SubmissionEvent.FILE_READY


class SubmitStep(SubmissionStep):
    """Creates the record, inlining the file only for single-request transfers."""

    def __init__(self, client: WebToCaseClient) -> None:
        self._client = client

    async def run(self, context: SubmissionContext) -> SubmissionEvent:
        payload = self._build_payload(context)
        Log.debug(
            f"Submitting form {context.description.form_id} "
            f"(nonce {Log.mask(context.description.nonce)}, "
            f"token {Log.mask(context.attempt.captcha_token)})"
        )
        try:
            result = await self._client.submit(payload)
        except NetworkError as exc:
            context.fail(FailureKind.NETWORK, NETWORK_ERROR_MESSAGE)
            Log.warning(f"Submit for form {context.description.form_id} failed: {exc}")
            return SubmissionEvent.SUBMIT_FAILED
        except ApiError as exc:
            context.fail(FailureKind.BACKEND, str(exc) or GENERIC_SUBMIT_ERROR)
            Log.warning(f"Submit for form {context.description.form_id} failed: {exc}")
            return SubmissionEvent.SUBMIT_FAILED

        if not result.success:
            message = result.error or GENERIC_SUBMIT_ERROR
            if result.is_nonce_failure:
                context.fail(FailureKind.NONCE_EXPIRED, message)
                if context.attempt.nonce_retried:
                    Log.warning("Nonce rejected again after refresh")
                    return SubmissionEvent.NONCE_EXPIRED_AGAIN
                Log.info("Nonce rejected, refreshing form description")
                return SubmissionEvent.NONCE_EXPIRED
            context.fail(FailureKind.BACKEND, message)
            Log.warning(f"Backend rejected submission: {message}")
            return SubmissionEvent.SUBMIT_FAILED

        context.failure = None
        context.error_message = ""
        context.case_number = result.case_number
        Log.info(f"Record {result.case_number} created")
        if context.plan is not None and context.plan.mode == TransferMode.CHUNKED:
            if result.case_id:
                context.case_id = result.case_id
                return SubmissionEvent.RECORD_CREATED
            context.warning = FILE_NOT_ATTACHED_WARNING
            Log.warning(f"No record id returned for {result.case_number}, file not attached")
        return SubmissionEvent.SUBMITTED

    @staticmethod
    def _build_payload(context: SubmissionContext) -> dict[str, object]:
        file_name = ""
        file_content = ""
        plan = context.plan
        payload_file = context.payload_file
        if payload_file is not None and plan is not None and plan.mode == TransferMode.SINGLE:
            file_name = payload_file.file_name
            file_content = base64.b64encode(payload_file.content).decode("ascii")
        return {
            "formId": context.description.form_id,
            "nonce": context.description.nonce,
            "fieldValues": dict(context.attempt.values),
            "fileName": file_name,
            "fileContent": file_content,
            "captchaToken": context.attempt.captcha_token,
        }


class RefreshNonceStep(SubmissionStep):
    """Replaces the description (and its nonce), then resubmits once."""

    def __init__(
        self,
        refresh: Callable[[], Awaitable[FormDescription]],
        submit_step: SubmitStep,
    ) -> None:
        self._refresh = refresh
        self._submit_step = submit_step

    async def run(self, context: SubmissionContext) -> SubmissionEvent:
        context.attempt.nonce_retried = True
        try:
            context.description = await self._refresh()
        except NetworkError as exc:
            context.fail(FailureKind.NETWORK, NETWORK_ERROR_MESSAGE)
            Log.warning(f"Nonce refresh failed: {exc}")
            return SubmissionEvent.SUBMIT_FAILED
        except ApiError as exc:
            context.fail(FailureKind.BACKEND, str(exc))
            Log.warning(f"Nonce refresh failed: {exc}")
            return SubmissionEvent.SUBMIT_FAILED
        Log.info("Resubmitting with refreshed nonce")
        return await self._submit_step.run(context)


class UploadChunksStep(SubmissionStep):
    def __init__(self, uploader: ChunkUploader) -> None:
        self._uploader = uploader

    async def run(self, context: SubmissionContext) -> SubmissionEvent:
        payload_file = context.payload_file
        if payload_file is None or context.plan is None or context.case_id is None:
            raise ValueError("payload_file, plan and case_id must be set before chunk upload")
        session = TransferSession.start(
            case_id=context.case_id,
            file_name=payload_file.file_name,
            form_id=context.description.form_id,
            total_chunks=context.plan.total_chunks,
        )
        context.session = session
        result = await self._uploader.upload(session, payload_file.content)
        context.upload_result = result
        if result.outcome == UploadOutcome.COMPLETE:
            return SubmissionEvent.UPLOAD_COMPLETE
        if result.outcome == UploadOutcome.PROCESSING:
            return SubmissionEvent.ASSEMBLY_QUEUED
        context.warning = f"File upload failed: {result.error or 'Unknown error'}"
        return SubmissionEvent.UPLOAD_FAILED


class AwaitAssemblyStep(SubmissionStep):
    def __init__(self, poller: AssemblyPoller) -> None:
        self._poller = poller

    async def run(self, context: SubmissionContext) -> SubmissionEvent:
        session = context.session
        upload_result = context.upload_result
        if session is None or upload_result is None:
            raise ValueError("session and upload_result must be set before polling")
        result = await self._poller.wait(session, upload_result.upload_key or session.upload_key)
        context.assembly_result = result
        if result.outcome == AssemblyOutcome.COMPLETE:
            return SubmissionEvent.ASSEMBLY_COMPLETE
        if result.outcome == AssemblyOutcome.FAILED:
            context.warning = (
                "Your case was created, but the file could not be attached: "
                f"{result.error or 'Processing failed.'}"
            )
            return SubmissionEvent.ASSEMBLY_FAILED
        context.warning = ASSEMBLY_PENDING_WARNING
        return SubmissionEvent.ASSEMBLY_TIMED_OUT
