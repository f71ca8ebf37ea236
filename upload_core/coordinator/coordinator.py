import threading
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from types import MappingProxyType

from upload_core.config.settings import Settings
from upload_core.coordinator.aggregator import ResultAggregator
from upload_core.coordinator.exceptions import BatchCancelledError
from upload_core.coordinator.models import (
    BatchResult,
    FailureKind,
    UploadFailure,
    UploadResult,
    UploadSuccess,
)
from upload_core.coordinator.pipeline import PipelineStep, UploadContext
from upload_core.coordinator.steps import GenerateKeyStep, StoreStep, ValidateStep
from upload_core.logging.logger import Log
from upload_core.naming.exceptions import NameCollisionError
from upload_core.naming.generator import NameGenerator
from upload_core.policy.mime_types import normalize_mime_type
from upload_core.policy.models import UploadPolicy
from upload_core.storage.base import BaseStorageBackend
from upload_core.storage.exceptions import StorageError
from upload_core.storage.factory import StorageBackendFactory
from upload_core.validation.exceptions import FileReadError
from upload_core.validation.models import DEFAULT_MIME_TYPE, CandidateFile
from upload_core.validation.validator import Validator


class UploadCoordinator:
    """Orchestrates validate -> name -> store for one file or a batch.

    Per-file problems never raise: they come back as UploadFailure. Only a
    malformed policy (ConfigurationError) or a batch cancelled before it
    started (BatchCancelledError) is raised.
    """

    def __init__(
        self,
        backend: BaseStorageBackend,
        *,
        validator: Validator | None = None,
        name_generator: NameGenerator | None = None,
        worker_pool_size: int = 4,
        batch_timeout: float | None = None,
    ) -> None:
        if worker_pool_size <= 0:
            raise ValueError(f"worker_pool_size must be greater than 0, got {worker_pool_size}")
        self._backend = backend
        self._validator = validator if validator is not None else Validator()
        self._name_generator = (
            name_generator if name_generator is not None else NameGenerator(exists=backend.exists)
        )
        self._worker_pool_size = worker_pool_size
        self._batch_timeout = batch_timeout
        self._steps: list[PipelineStep] = [
            ValidateStep(self._validator),
            GenerateKeyStep(self._name_generator),
            StoreStep(self._backend),
        ]

    @property
    def backend(self) -> BaseStorageBackend:
        return self._backend

    def submit_one(self, file: CandidateFile, policy: UploadPolicy) -> UploadResult:
        """Run the full pipeline for a single file.

        Raises:
            ConfigurationError: if ``policy`` is malformed.
        """
        policy.ensure_valid()
        return self._run_pipeline(UploadContext(file=file, policy=policy))

    def submit_batch(
        self,
        files: Iterable[CandidateFile],
        policy: UploadPolicy,
        *,
        cancel_event: threading.Event | None = None,
        timeout: float | None = None,
    ) -> BatchResult:
        """Run pipelines for many files on a bounded worker pool.

        Once ``cancel_event`` is set or ``timeout`` seconds have elapsed, no
        new file is validated or stored; those files come back as
        ``cancelled`` failures while in-flight stores finish.

        Raises:
            ConfigurationError: if ``policy`` is malformed; no file is touched.
            BatchCancelledError: if ``cancel_event`` is already set.
        """
        policy.ensure_valid()
        if cancel_event is not None and cancel_event.is_set():
            raise BatchCancelledError("Batch was cancelled before it started")

        files = list(files)
        aggregator = ResultAggregator([f.original_name for f in files])
        if not files:
            return aggregator.build()

        should_stop = self._stop_condition(
            cancel_event, timeout if timeout is not None else self._batch_timeout
        )
        Log.info(
            f"Starting batch of {len(files)} files with "
            f"{min(self._worker_pool_size, len(files))} workers"
        )
        with ThreadPoolExecutor(
            max_workers=min(self._worker_pool_size, len(files)),
            thread_name_prefix="upload",
        ) as pool:
            futures = {
                pool.submit(
                    self._run_pipeline,
                    UploadContext(file=file, policy=policy, should_stop=should_stop),
                ): index
                for index, file in enumerate(files)
            }
            for future in as_completed(futures):
                aggregator.record(futures[future], future.result())

        batch = aggregator.build()
        Log.info(
            f"Batch finished: {batch.succeeded}/{batch.total} succeeded, {batch.failed} failed"
        )
        return batch

    def _run_pipeline(self, context: UploadContext) -> UploadResult:
        try:
            for step in self._steps:
                if context.should_stop():
                    context.failure = self._cancelled(context)
                    break
                context = step.run(context)
                if context.failure is not None:
                    break
        except FileReadError as exc:
            Log.error(f"Upload {context.upload_id} read failed: {exc}")
            context.failure = self._failed(context, FailureKind.READ_ERROR, str(exc))
        except (StorageError, NameCollisionError) as exc:
            Log.error(f"Upload {context.upload_id} storage failed: {exc}")
            context.failure = self._failed(context, FailureKind.STORAGE_ERROR, str(exc))
        except Exception as exc:
            Log.exception(f"Upload {context.upload_id} failed unexpectedly: {exc}")
            context.failure = self._failed(context, FailureKind.UNEXPECTED, str(exc))
        finally:
            if context.key:
                self._name_generator.release(context.key)
        return self._to_result(context)

    def _to_result(self, context: UploadContext) -> UploadResult:
        if context.failure is not None:
            return context.failure
        if context.stored is None or context.outcome is None:
            return self._failed(
                context, FailureKind.UNEXPECTED, "Pipeline finished without storing the file"
            )
        return UploadSuccess(
            upload_id=context.upload_id,
            storage_key=context.stored.storage_key,
            original_name=context.file.original_name,
            mime_type=self._final_mime_type(context),
            size=context.stored.size,
            checksum_sha256=context.stored.checksum_sha256,
            uploaded_at=datetime.now(timezone.utc),
            metadata=MappingProxyType(
                {
                    "final_path": context.stored.final_path,
                    "detected_mime_type": context.outcome.detected_mime_type,
                    "security_issues": tuple(context.outcome.security_issues),
                }
            ),
        )

    @staticmethod
    def _final_mime_type(context: UploadContext) -> str:
        declared = normalize_mime_type(context.file.declared_mime_type)
        detected = context.outcome.detected_mime_type if context.outcome else None
        if declared in ("", DEFAULT_MIME_TYPE) and detected:
            return detected
        return declared or DEFAULT_MIME_TYPE

    @staticmethod
    def _failed(context: UploadContext, kind: FailureKind, message: str) -> UploadFailure:
        outcome = context.outcome
        return UploadFailure(
            original_name=context.file.original_name,
            kind=kind,
            message=message,
            violations=outcome.violations if outcome else (),
            security_issues=outcome.security_issues if outcome else (),
        )

    @classmethod
    def _cancelled(cls, context: UploadContext) -> UploadFailure:
        Log.warning(f"Upload {context.upload_id} '{context.file.original_name}' cancelled")
        return cls._failed(context, FailureKind.CANCELLED, "Upload cancelled before it was stored")

    @staticmethod
    def _stop_condition(
        cancel_event: threading.Event | None, timeout: float | None
    ) -> Callable[[], bool]:
        deadline = time.monotonic() + timeout if timeout is not None else None

        def should_stop() -> bool:
            if cancel_event is not None and cancel_event.is_set():
                return True
            return deadline is not None and time.monotonic() >= deadline

        return should_stop


def build_coordinator(
    settings: Settings, backend: BaseStorageBackend | None = None
) -> UploadCoordinator:
    """Build an UploadCoordinator with the configured storage backend."""
    Log.configure(settings.log_level)
    backend = backend if backend is not None else StorageBackendFactory.create(settings)
    Log.info(
        f"Upload coordinator starting (env={settings.app_env}, "
        f"backend={type(backend).__name__}, workers={settings.worker_pool_size})"
    )
    return UploadCoordinator(
        backend,
        validator=Validator(),
        name_generator=NameGenerator(exists=backend.exists),
        worker_pool_size=settings.worker_pool_size,
        batch_timeout=settings.batch_timeout_seconds,
    )
