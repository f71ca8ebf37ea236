from dataclasses import dataclass


@dataclass(frozen=True)
class StorageKey:
    """Backend-resolved identity of a stored object."""

    key: str
    public_url: str


@dataclass(frozen=True)
class StoredObject:
    """What a backend reports after committing bytes under a key."""

    key: str
    final_path: str
    public_url: str
    size: int
    checksum_sha256: str

    @property
    def storage_key(self) -> StorageKey:
        return StorageKey(key=self.key, public_url=self.public_url)
