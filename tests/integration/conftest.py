from pathlib import Path

import pytest

from upload_core.coordinator.coordinator import UploadCoordinator
from upload_core.storage.local_adapter import LocalFilesystemStorage


@pytest.fixture
def local_storage(tmp_path: Path) -> LocalFilesystemStorage:
    return LocalFilesystemStorage(root=tmp_path / "files", public_base_url="/files")


@pytest.fixture
def coordinator(local_storage: LocalFilesystemStorage) -> UploadCoordinator:
    return UploadCoordinator(local_storage, worker_pool_size=4)
