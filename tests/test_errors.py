"""Tests for docmirror._errors."""

from docmirror._errors import (
    AssetError,
    ConfigError,
    DecodeError,
    DocMirrorError,
    FetchError,
    FormatError,
    StorageError,
    SyncError,
)


class TestErrorHierarchy:
    """All docmirror errors inherit from DocMirrorError."""

    def test_base_is_exception(self) -> None:
        assert issubclass(DocMirrorError, Exception)

    def test_top_level_errors_inherit(self) -> None:
        for error_cls in (ConfigError, FetchError, SyncError, AssetError):
            assert issubclass(error_cls, DocMirrorError)

    def test_asset_errors_share_a_base(self) -> None:
        for error_cls in (FormatError, DecodeError, StorageError):
            assert issubclass(error_cls, AssetError)

    def test_fetch_error_is_not_an_asset_error(self) -> None:
        assert not issubclass(FetchError, AssetError)

    def test_message_preserved(self) -> None:
        assert str(FetchError("timeout")) == "timeout"
