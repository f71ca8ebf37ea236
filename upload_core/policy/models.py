from dataclasses import dataclass, field
from enum import Enum

from upload_core.policy.exceptions import ConfigurationError
from upload_core.policy.mime_types import (
    normalize_extension,
    normalize_mime_type,
    plausible_mime_types,
)
from upload_core.storage.exceptions import UnsafeKeyError
from upload_core.storage.keys import ensure_safe_key


class NamingStrategy(str, Enum):
    """How the storage key of an accepted file is derived."""

    UNIQUE = "unique"
    PRESERVE = "preserve"


@dataclass(frozen=True)
class UploadPolicy:
    """Constraints governing one upload call or batch.

    Values are normalized on construction but only checked by
    ``ensure_valid``, so callers learn about a malformed policy at the
    moment they submit files with it.
    """

    max_file_size: int
    allowed_mime_types: frozenset[str] = field(default_factory=frozenset)
    allowed_extensions: frozenset[str] = field(default_factory=frozenset)
    naming_strategy: NamingStrategy = NamingStrategy.UNIQUE
    upload_root: str = ""
    enable_security: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "allowed_mime_types",
            frozenset(normalize_mime_type(m) for m in self.allowed_mime_types),
        )
        object.__setattr__(
            self,
            "allowed_extensions",
            frozenset(normalize_extension(e) for e in self.allowed_extensions),
        )
        if not isinstance(self.naming_strategy, NamingStrategy):
            object.__setattr__(self, "naming_strategy", self._parse_strategy(self.naming_strategy))
        object.__setattr__(self, "upload_root", self.upload_root.strip().rstrip("/"))

    def ensure_valid(self) -> None:
        """Check policy invariants.

        Raises:
            ConfigurationError: on the first invariant that does not hold.
        """
        if self.max_file_size <= 0:
            raise ConfigurationError(
                f"max_file_size must be greater than 0, got {self.max_file_size}"
            )
        if self.upload_root:
            try:
                ensure_safe_key(self.upload_root)
            except UnsafeKeyError as exc:
                raise ConfigurationError(
                    f"upload_root must be a relative prefix, got {self.upload_root!r}: {exc}"
                ) from exc
        if self.allowed_extensions and self.allowed_mime_types:
            for ext in sorted(self.allowed_extensions):
                candidates = plausible_mime_types(ext)
                if not candidates & self.allowed_mime_types:
                    raise ConfigurationError(
                        f"Allowed extension '{ext}' has no matching MIME type in "
                        f"{sorted(self.allowed_mime_types)}"
                    )

    def allows_extension(self, extension: str) -> bool:
        return not self.allowed_extensions or extension in self.allowed_extensions

    def allows_mime_type(self, mime_type: str) -> bool:
        if not self.allowed_mime_types:
            return True
        return normalize_mime_type(mime_type) in self.allowed_mime_types

    @staticmethod
    def _parse_strategy(raw: object) -> NamingStrategy:
        try:
            return NamingStrategy(str(raw).lower())
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown naming strategy '{raw}'. Choose from: "
                f"{[s.value for s in NamingStrategy]}"
            ) from exc
