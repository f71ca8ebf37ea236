import threading
from collections.abc import Sequence

from upload_core.coordinator.models import (
    BatchResult,
    FailureKind,
    UploadFailure,
    UploadResult,
)


class ResultAggregator:
    """Collects per-file results into pre-sized slots.

    Results are placed by submission index, so completion order never
    affects the order of the built BatchResult.
    """

    def __init__(self, names: Sequence[str]) -> None:
        self._names = list(names)
        self._slots: list[UploadResult | None] = [None] * len(self._names)
        self._lock = threading.Lock()

    def record(self, index: int, result: UploadResult) -> None:
        with self._lock:
            if self._slots[index] is not None:
                raise ValueError(f"Result for index {index} was already recorded")
            self._slots[index] = result

    def build(self) -> BatchResult:
        """Return the BatchResult; inputs without a result are reported as cancelled."""
        with self._lock:
            results = tuple(
                slot
                if slot is not None
                else UploadFailure(
                    original_name=name,
                    kind=FailureKind.CANCELLED,
                    message="Upload was not scheduled before the batch stopped",
                )
                for name, slot in zip(self._names, self._slots)
            )
        return BatchResult(results=results)
