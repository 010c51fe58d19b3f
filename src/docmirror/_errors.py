"""docmirror error hierarchy.

All docmirror-specific errors inherit from DocMirrorError for easy catching.
"""


class DocMirrorError(Exception):
    """Base error for all docmirror operations."""


class ConfigError(DocMirrorError):
    """Invalid or missing configuration."""


class FetchError(DocMirrorError):
    """The remote document could not be fetched (network, auth, not found)."""


class SyncError(DocMirrorError):
    """Misuse of the sync loop lifecycle."""


class AssetError(DocMirrorError):
    """An embedded image could not be materialized."""


class FormatError(AssetError):
    """The data URI does not split into a header and a payload."""


class DecodeError(AssetError):
    """The data URI payload is not valid base64."""


class StorageError(AssetError):
    """The image directory or file could not be written."""
