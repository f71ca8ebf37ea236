import pytest

from upload_core.storage.exceptions import UnsafeKeyError
from upload_core.storage.keys import ensure_safe_key, join_key


class TestEnsureSafeKey:
    @pytest.mark.parametrize("key", ["a.png", "images/a.png", "docs/2024/report-1.pdf"])
    def test_accepts_relative_keys(self, key: str) -> None:
        assert ensure_safe_key(key) == key

    @pytest.mark.parametrize(
        "key",
        [
            "",
            "/etc/passwd",
            "C:/windows/win.ini",
            "images\\a.png",
            "images/../secrets",
            "../a.png",
            "images//a.png",
            "images/./a.png",
            "images/",
            "a\x00.png",
        ],
    )
    def test_rejects_unsafe_keys(self, key: str) -> None:
        with pytest.raises(UnsafeKeyError):
            ensure_safe_key(key)

    def test_unsafe_key_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            ensure_safe_key("../x")


class TestJoinKey:
    def test_joins_with_prefix(self) -> None:
        assert join_key("images", "a.png") == "images/a.png"

    def test_strips_slashes_from_prefix(self) -> None:
        assert join_key("/images/", "a.png") == "images/a.png"

    def test_empty_prefix(self) -> None:
        assert join_key("", "a.png") == "a.png"
