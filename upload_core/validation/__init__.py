from upload_core.validation.exceptions import FileReadError
from upload_core.validation.models import (
    CandidateFile,
    ValidationOutcome,
    Violation,
    ViolationKind,
)
from upload_core.validation.validator import Validator

__all__ = [
    "CandidateFile",
    "FileReadError",
    "ValidationOutcome",
    "Validator",
    "Violation",
    "ViolationKind",
]
