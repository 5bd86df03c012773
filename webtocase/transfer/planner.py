import math

from webtocase.files.models import Attachment
from webtocase.transfer.models import TransferMode, TransferPlan

# 750KB raw is roughly 1MB once base64-encoded, under the per-request limit.
CHUNK_SIZE_BYTES = 750_000


class TransferPlanner:
    """Chooses between an inline submission and a chunked upload."""

    def __init__(self, chunk_size: int = CHUNK_SIZE_BYTES) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._chunk_size = chunk_size

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def plan(self, attachment: Attachment) -> TransferPlan:
        if attachment.size <= self._chunk_size:
            return TransferPlan(mode=TransferMode.SINGLE)
        return TransferPlan(
            mode=TransferMode.CHUNKED,
            total_chunks=math.ceil(attachment.size / self._chunk_size),
        )
