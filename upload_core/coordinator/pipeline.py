import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field

from upload_core.coordinator.models import UploadFailure
from upload_core.policy.models import UploadPolicy
from upload_core.storage.models import StoredObject
from upload_core.validation.models import CandidateFile, ValidationOutcome


def _never() -> bool:
    return False


@dataclass(slots=True)
class UploadContext:
    """State of one file moving through the upload steps."""

    file: CandidateFile
    policy: UploadPolicy
    should_stop: Callable[[], bool] = _never
    upload_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    outcome: ValidationOutcome | None = None
    key: str = ""
    stored: StoredObject | None = None
    failure: UploadFailure | None = None


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: UploadContext) -> UploadContext:
        raise NotImplementedError
