import hashlib
import io

import pytest

from upload_core.storage.exceptions import UnsafeKeyError
from upload_core.storage.memory_adapter import InMemoryStorage


@pytest.fixture()
def storage() -> InMemoryStorage:
    return InMemoryStorage()


class TestInMemoryStorage:
    def test_store_and_open(self, storage: InMemoryStorage) -> None:
        stored = storage.store(io.BytesIO(b"abc"), "images/a.png")
        assert stored.size == 3
        assert stored.checksum_sha256 == hashlib.sha256(b"abc").hexdigest()
        assert stored.public_url == "memory://objects/images/a.png"
        assert stored.storage_key.key == "images/a.png"
        assert storage.open("images/a.png").read() == b"abc"

    def test_delete(self, storage: InMemoryStorage) -> None:
        storage.store(io.BytesIO(b"abc"), "a.png")
        assert storage.delete("a.png") is True
        assert storage.delete("a.png") is False
        assert not storage.exists("a.png")

    def test_copy_and_move(self, storage: InMemoryStorage) -> None:
        storage.store(io.BytesIO(b"abc"), "a.png")
        assert storage.copy("a.png", "b.png") is True
        assert storage.move("b.png", "c/d.png") is True
        assert storage.list_keys() == ["a.png", "c/d.png"]

    def test_missing_source(self, storage: InMemoryStorage) -> None:
        assert storage.copy("nope.png", "b.png") is False
        assert storage.move("nope.png", "b.png") is False
        assert storage.list_keys() == []

    def test_list_keys_by_prefix(self, storage: InMemoryStorage) -> None:
        storage.store(io.BytesIO(b"1"), "images/a.png")
        storage.store(io.BytesIO(b"2"), "imagesx/b.png")
        assert storage.list_keys("images/") == ["images/a.png"]

    def test_size(self, storage: InMemoryStorage) -> None:
        storage.store(io.BytesIO(b"12345"), "a.bin")
        assert storage.size("a.bin") == 5
        assert storage.size("b.bin") is None

    def test_open_missing_raises(self, storage: InMemoryStorage) -> None:
        with pytest.raises(FileNotFoundError):
            storage.open("missing.bin")

    def test_rejects_unsafe_key(self, storage: InMemoryStorage) -> None:
        with pytest.raises(UnsafeKeyError):
            storage.store(io.BytesIO(b"x"), "../a.png")
