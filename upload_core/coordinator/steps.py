from upload_core.coordinator.models import FailureKind, UploadFailure
from upload_core.coordinator.pipeline import PipelineStep, UploadContext
from upload_core.logging.logger import Log
from upload_core.naming.generator import NameGenerator
from upload_core.storage.base import BaseStorageBackend
from upload_core.storage.models import StoredObject
from upload_core.validation.exceptions import FileReadError
from upload_core.validation.validator import Validator


class ValidateStep(PipelineStep):
    def __init__(self, validator: Validator) -> None:
        self._validator = validator

    def run(self, context: UploadContext) -> UploadContext:
        outcome = self._validator.validate(context.file, context.policy)
        context.outcome = outcome
        if not outcome.is_valid:
            context.failure = UploadFailure(
                original_name=context.file.original_name,
                kind=FailureKind.VALIDATION,
                message=outcome.summary(),
                violations=outcome.violations,
                security_issues=outcome.security_issues,
            )
            Log.warning(
                f"Upload {context.upload_id} '{context.file.original_name}' rejected: "
                f"{[kind.value for kind in outcome.kinds]}"
            )
        return context


class GenerateKeyStep(PipelineStep):
    def __init__(self, name_generator: NameGenerator) -> None:
        self._name_generator = name_generator

    def run(self, context: UploadContext) -> UploadContext:
        context.key = self._name_generator.generate_key(context.file, context.policy)
        Log.debug(f"Upload {context.upload_id} assigned key {context.key}")
        return context


class StoreStep(PipelineStep):
    def __init__(self, backend: BaseStorageBackend) -> None:
        self._backend = backend

    def run(self, context: UploadContext) -> UploadContext:
        if not context.key:
            raise ValueError("UploadContext.key must be set before storing")
        try:
            source = context.file.open()
        except OSError as exc:
            raise FileReadError(
                f"Failed to read '{context.file.original_name}': {exc}"
            ) from exc
        with source:
            stored = self._backend.store(source, context.key)
        if self._changed_since_validation(context, stored):
            self._backend.delete(stored.key)
            context.failure = UploadFailure(
                original_name=context.file.original_name,
                kind=FailureKind.CONTENT_CHANGED,
                message="File content changed between validation and storage",
                security_issues=context.outcome.security_issues if context.outcome else (),
            )
            Log.warning(
                f"Upload {context.upload_id} '{context.file.original_name}' changed after "
                f"validation ({stored.size} bytes stored), removed {stored.key}"
            )
            return context
        context.stored = stored
        Log.info(
            f"Upload {context.upload_id} stored '{context.file.original_name}' "
            f"as {context.key} ({context.stored.size} bytes)"
        )
        return context

    @staticmethod
    def _changed_since_validation(context: UploadContext, stored: StoredObject) -> bool:
        outcome = context.outcome
        if outcome is None:
            return False
        if outcome.actual_size is not None and stored.size != outcome.actual_size:
            return True
        return (
            outcome.checksum_sha256 is not None
            and stored.checksum_sha256 != outcome.checksum_sha256
        )
