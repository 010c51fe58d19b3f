"""Asset materializer: persists embedded images to content-addressed files.

Decodes ``data:image/...;base64,`` URIs and writes the bytes under the
static images directory.  The filename is the first 8 bytes of the SHA-256
digest (hex) plus an extension inferred from the MIME type, so identical
payloads always land in the same file and rewriting it is harmless.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from dataclasses import dataclass
from typing import TYPE_CHECKING

from docmirror._errors import DecodeError, FormatError, StorageError

if TYPE_CHECKING:
    from pathlib import Path

    from docmirror._types import AssetRef
    from docmirror.observability.collector import SyncCollector

# URL prefix under which the images directory is served
IMAGES_URL_PREFIX = "/static/images/"

_DEFAULT_EXTENSION = ".png"

_EXTENSIONS: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/svg+xml": ".svg",
}


@dataclass(frozen=True, slots=True)
class AssetFile:
    """A materialized image on disk.

    Attributes:
        content_hash: Hex of the first 8 bytes of the SHA-256 digest.
        extension: File extension inferred from the declared MIME type.
        storage_path: Absolute path of the written file.

    """

    content_hash: str
    extension: str
    storage_path: Path

    @property
    def filename(self) -> str:
        return f"{self.content_hash}{self.extension}"

    @property
    def ref(self) -> AssetRef:
        """Reference path usable directly in emitted markup."""
        return f"{IMAGES_URL_PREFIX}{self.filename}"


def extension_for(mime_type: str) -> str:
    """Map a declared image MIME type to a file extension.

    Matching is exact and case-sensitive; anything unrecognized is ``.png``.
    """
    return _EXTENSIONS.get(mime_type, _DEFAULT_EXTENSION)


def content_hash(data: bytes) -> str:
    """Return the hex of the first 8 bytes of the SHA-256 digest of data."""
    return hashlib.sha256(data).digest()[:8].hex()


def _strip_line_breaks(payload: str) -> str:
    return payload.replace("\r", "").replace("\n", "")


def split_data_uri(data_uri: str) -> tuple[str, str]:
    """Split a data URI into (mime_type, base64 payload).

    Raises:
        FormatError: If the URI does not have exactly one comma.

    """
    parts = data_uri.split(",")
    if len(parts) != 2:
        msg = f"invalid data URI format: expected 2 comma-separated parts, got {len(parts)}"
        raise FormatError(msg)
    header, payload = parts
    mime_type = header.split(";", 1)[0].removeprefix("data:")
    return mime_type, payload


class AssetMaterializer:
    """Writes decoded data-URI images into a content-addressed directory.

    Args:
        images_path: Directory the image files are written to.  Created on
            first use.
        collector: Optional collector for ``AssetMaterialized`` events.

    """

    __slots__ = ("_collector", "_images_path")

    def __init__(
        self,
        images_path: Path,
        collector: SyncCollector | None = None,
    ) -> None:
        self._images_path = images_path
        self._collector = collector

    @property
    def images_path(self) -> Path:
        return self._images_path

    def materialize(self, data_uri: str) -> AssetRef:
        """Persist the image in data_uri and return its reference path.

        Raises:
            FormatError: The URI does not split into header and payload.
            DecodeError: The payload is not valid standard base64.
            StorageError: The directory or file could not be written.

        """
        return self.materialize_file(data_uri).ref

    def materialize_file(self, data_uri: str) -> AssetFile:
        """Like :meth:`materialize` but returns the full :class:`AssetFile`."""
        mime_type, payload = split_data_uri(data_uri)
        extension = extension_for(mime_type)

        try:
            data = base64.b64decode(_strip_line_breaks(payload), validate=True)
        except (binascii.Error, ValueError) as exc:
            msg = f"decoding base64: {exc}"
            raise DecodeError(msg) from exc

        digest = content_hash(data)
        asset = AssetFile(
            content_hash=digest,
            extension=extension,
            storage_path=self._images_path / f"{digest}{extension}",
        )

        try:
            self._images_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"creating images directory {self._images_path}: {exc}"
            raise StorageError(msg) from exc

        try:
            asset.storage_path.write_bytes(data)
        except OSError as exc:
            msg = f"writing image file {asset.storage_path.name}: {exc}"
            raise StorageError(msg) from exc

        if self._collector is not None:
            self._collector.record_asset(asset.ref, size_bytes=len(data))

        return asset
