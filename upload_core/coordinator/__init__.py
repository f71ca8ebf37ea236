from upload_core.coordinator.coordinator import UploadCoordinator, build_coordinator
from upload_core.coordinator.exceptions import BatchCancelledError, CoordinatorError
from upload_core.coordinator.models import (
    BatchResult,
    FailureKind,
    UploadFailure,
    UploadResult,
    UploadSuccess,
)

__all__ = [
    "BatchCancelledError",
    "BatchResult",
    "CoordinatorError",
    "FailureKind",
    "UploadCoordinator",
    "UploadFailure",
    "UploadResult",
    "UploadSuccess",
    "build_coordinator",
]
