import dataclasses
from collections.abc import Callable, Mapping, Sequence

from webtocase.backend.client import WebToCaseClient
from webtocase.backend.config_fetcher import ConfigFetcher
from webtocase.backend.models import FieldSpec, FormDescription
from webtocase.captcha.broker import CaptchaBroker, DisabledCaptchaBroker
from webtocase.captcha.exceptions import CaptchaError
from webtocase.captcha.factory import CaptchaBrokerFactory, CaptchaProviderFactory
from webtocase.captcha.provider import BaseCaptchaProvider
from webtocase.config.settings import Settings
from webtocase.files.file_gate import FileGate
from webtocase.files.models import Attachment
from webtocase.imaging.factory import ImageCompressorFactory
from webtocase.imaging.optimizer import ImageOptimizer
from webtocase.logging.logger import Log
from webtocase.submission.context import SubmissionStep
from webtocase.submission.exceptions import SubmissionInProgressError
from webtocase.submission.models import SubmissionAttempt, SubmissionOutcome
from webtocase.submission.orchestrator import SubmissionOrchestrator
from webtocase.submission.state_machine import Effect
from webtocase.submission.steps import (
    AcquireCaptchaStep,
    AwaitAssemblyStep,
    ProcessFileStep,
    RefreshNonceStep,
    SubmitStep,
    UploadChunksStep,
    ValidateStep,
)
from webtocase.transfer.assembly_poller import AssemblyPoller
from webtocase.transfer.chunk_uploader import ChunkUploader
from webtocase.transfer.planner import TransferPlanner
from webtocase.validation.field_validator import FieldValidator, collect_values

StageProgress = Callable[[str, int], None]


class SubmissionPipeline:
    """Submission machinery shared by the widget and the form connector.

    Owns the current form description (replaced wholesale on refresh) and
    the CAPTCHA broker of one form instance. At most one attempt is in
    flight at a time.
    """

    def __init__(
        self,
        *,
        form_name: str,
        client: WebToCaseClient,
        provider: BaseCaptchaProvider,
        settings: Settings,
        optimizer: ImageOptimizer,
        planner: TransferPlanner,
        poller: AssemblyPoller,
        validator: FieldValidator | None = None,
        file_gate: FileGate | None = None,
        on_progress: StageProgress | None = None,
    ) -> None:
        self.form_name = form_name
        self._client = client
        self._fetcher = ConfigFetcher(client)
        self._provider = provider
        self._settings = settings
        self._optimizer = optimizer
        self._planner = planner
        self._poller = poller
        self._validator = validator or FieldValidator()
        self._file_gate = file_gate or FileGate()
        self._on_progress = on_progress
        self._description: FormDescription | None = None
        self._broker: CaptchaBroker = DisabledCaptchaBroker()
        self._in_flight = False

    @property
    def description(self) -> FormDescription:
        if self._description is None:
            raise RuntimeError("Form description not loaded; call load() first")
        return self._description

    @property
    def broker(self) -> CaptchaBroker:
        return self._broker

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def load(self) -> FormDescription:
        """Fetch the description and set up CAPTCHA for this form instance."""
        description = await self._fetcher.fetch(self.form_name)
        self._description = description
        self._broker.close()
        self._broker = CaptchaBrokerFactory.create(description, self._provider, self._settings)
        try:
            await self._broker.prepare()
        except CaptchaError as exc:
            Log.warning(f"CAPTCHA unavailable for form '{self.form_name}': {exc}")
        return description

    async def refresh_description(self) -> FormDescription:
        """Replace the description, discarding the old nonce."""
        description = await self._fetcher.fetch(self.form_name)
        self._description = description
        return description

    async def submit(
        self,
        values: Mapping[str, object],
        attachment: Attachment | None = None,
        fields: Sequence[FieldSpec] | None = None,
    ) -> SubmissionOutcome:
        """Run one submission attempt.

        ``fields`` overrides the described fields for local validation, for
        host forms whose markup defines its own inputs.

        Raises:
            SubmissionInProgressError: if another attempt is still running.
        """
        if self._in_flight:
            raise SubmissionInProgressError("A submission is already in progress")
        description = self.description
        if fields is not None:
            description = dataclasses.replace(description, fields=tuple(fields))
        self._in_flight = True
        try:
            attempt = SubmissionAttempt(values=collect_values(values), attachment=attachment)
            orchestrator = SubmissionOrchestrator(
                description=description,
                attempt=attempt,
                steps=self._build_steps(),
                broker=self._broker,
                refresh=self.refresh_description,
            )
            outcome = await orchestrator.run()
        finally:
            self._in_flight = False
        Log.info(
            f"Submission for form '{self.form_name}' ended {outcome.state.value}"
            + (f" ({outcome.failure.value})" if outcome.failure else "")
        )
        return outcome

    def close(self) -> None:
        self._broker.close()

    def _build_steps(self) -> dict[Effect, SubmissionStep]:
        submit_step = SubmitStep(self._client)
        return {
            Effect.VALIDATE: ValidateStep(self._validator, self._file_gate),
            Effect.ACQUIRE_CAPTCHA: AcquireCaptchaStep(self._broker),
            Effect.PROCESS_FILE: ProcessFileStep(
                self._optimizer, self._planner, self._stage("optimizing")
            ),
            Effect.SUBMIT: submit_step,
            Effect.REFRESH_AND_RESUBMIT: RefreshNonceStep(self.refresh_description, submit_step),
            Effect.UPLOAD_CHUNKS: UploadChunksStep(
                ChunkUploader(self._client, self._planner.chunk_size, self._stage("uploading"))
            ),
            Effect.POLL_ASSEMBLY: AwaitAssemblyStep(self._poller),
        }

    def _stage(self, stage: str) -> Callable[[int], None] | None:
        callback = self._on_progress
        if callback is None:
            return None
        return lambda percent: callback(stage, percent)


def build_pipeline(
    settings: Settings,
    form_name: str,
    client: WebToCaseClient,
    provider: BaseCaptchaProvider | None = None,
    on_progress: StageProgress | None = None,
) -> SubmissionPipeline:
    """Build a SubmissionPipeline with all adapters configured from settings."""
    file_gate = FileGate()
    optimizer = ImageOptimizer(
        ImageCompressorFactory.create(settings),
        ImageCompressorFactory.options(settings),
        file_gate,
    )
    return SubmissionPipeline(
        form_name=form_name,
        client=client,
        provider=provider or CaptchaProviderFactory.create(settings),
        settings=settings,
        optimizer=optimizer,
        planner=TransferPlanner(settings.chunk_size_bytes),
        poller=AssemblyPoller(
            client,
            intervals=settings.poll_intervals_seconds,
            max_wait_seconds=settings.poll_max_wait_seconds,
        ),
        file_gate=file_gate,
        on_progress=on_progress,
    )
