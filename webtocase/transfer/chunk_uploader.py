import base64
from collections.abc import Callable

from webtocase.backend.client import WebToCaseClient
from webtocase.backend.exceptions import ApiError
from webtocase.logging.logger import Log
from webtocase.transfer.models import TransferSession, UploadOutcome, UploadResult
from webtocase.transfer.planner import CHUNK_SIZE_BYTES


class ChunkUploader:
    """Streams a file to an existing record, one chunk at a time.

    Chunks are sent strictly in order and never concurrently. The record
    already exists, so every failure is reported as a result rather than
    raised.
    """

    def __init__(
        self,
        client: WebToCaseClient,
        chunk_size: int = CHUNK_SIZE_BYTES,
        on_progress: Callable[[int], None] | None = None,
    ) -> None:
        self._client = client
        self._chunk_size = chunk_size
        self._on_progress = on_progress

    async def upload(self, session: TransferSession, content: bytes) -> UploadResult:
        Log.info(
            f"Uploading {session.file_name} to {session.case_id} "
            f"in {session.total_chunks} chunks"
        )
        while session.chunk_index < session.total_chunks:
            index = session.chunk_index
            start = index * self._chunk_size
            chunk = content[start:start + self._chunk_size]
            if self._on_progress is not None:
                self._on_progress(round((index + 1) / session.total_chunks * 100))
            try:
                result = await self._client.upload_chunk({
                    "caseId": session.case_id,
                    "fileName": session.file_name,
                    "chunkData": base64.b64encode(chunk).decode("ascii"),
                    "chunkIndex": index,
                    "totalChunks": session.total_chunks,
                    "uploadKey": session.upload_key,
                    "formId": session.form_id,
                })
            except ApiError as exc:
                Log.warning(f"Chunk {index} of {session.case_id} failed: {exc}")
                return UploadResult(UploadOutcome.FAILED, chunks_sent=index, error=str(exc))

            if not result.success:
                Log.warning(f"Chunk {index} of {session.case_id} rejected: {result.error}")
                return UploadResult(
                    UploadOutcome.FAILED,
                    chunks_sent=index,
                    error=result.error or "Unknown error",
                )
            if result.complete:
                Log.info(f"Upload for {session.case_id} assembled after chunk {index}")
                return UploadResult(UploadOutcome.COMPLETE, chunks_sent=index + 1)
            if result.processing:
                Log.info(f"Upload for {session.case_id} queued for assembly")
                return UploadResult(
                    UploadOutcome.PROCESSING,
                    upload_key=result.upload_key or session.upload_key,
                    chunks_sent=index + 1,
                )
            session.chunk_index += 1

        return UploadResult(
            UploadOutcome.FAILED,
            chunks_sent=session.total_chunks,
            error="Server did not confirm the upload",
        )
