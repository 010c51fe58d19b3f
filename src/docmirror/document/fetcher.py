"""Document fetchers: produce a StructuredDocument or raise FetchError.

``GoogleDocsFetcher`` reads a service-account key and calls the Google Docs
API (read-only scope).  The client is built lazily on first fetch so a bad
credentials file surfaces as a ``FetchError`` in the sync loop rather than
at import time.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from docmirror._errors import FetchError
from docmirror.document.model import StructuredDocument

if TYPE_CHECKING:
    from pathlib import Path

    from docmirror._types import DocumentID

DOCUMENTS_READONLY_SCOPE = "https://www.googleapis.com/auth/documents.readonly"


@runtime_checkable
class DocumentFetcher(Protocol):
    """Fetch collaborator used by the sync loop.

    ``fetch`` is called from a worker thread and may block.
    """

    def fetch(self, document_id: DocumentID) -> StructuredDocument: ...


class GoogleDocsFetcher:
    """Fetches documents from the Google Docs API.

    Args:
        credentials_file: Path to a service-account JSON key.

    """

    def __init__(self, credentials_file: Path) -> None:
        self._credentials_file = credentials_file
        self._service: Any = None
        self._lock = threading.Lock()

    def _get_service(self) -> Any:
        with self._lock:
            if self._service is None:
                self._service = self._build_service()
            return self._service

    def _build_service(self) -> Any:
        from google.oauth2 import service_account
        from googleapiclient.discovery import build

        try:
            credentials = service_account.Credentials.from_service_account_file(
                str(self._credentials_file),
                scopes=[DOCUMENTS_READONLY_SCOPE],
            )
        except (OSError, ValueError) as exc:
            msg = f"reading credentials: {exc}"
            raise FetchError(msg) from exc

        try:
            return build("docs", "v1", credentials=credentials, cache_discovery=False)
        except Exception as exc:
            msg = f"creating docs service: {exc}"
            raise FetchError(msg) from exc

    def fetch_payload(self, document_id: DocumentID) -> dict[str, Any]:
        """Return the raw ``documents.get`` payload."""
        if not document_id:
            msg = "no document id configured"
            raise FetchError(msg)

        service = self._get_service()
        try:
            return service.documents().get(documentId=document_id).execute()
        except Exception as exc:
            msg = f"fetching document: {exc}"
            raise FetchError(msg) from exc

    def fetch(self, document_id: DocumentID) -> StructuredDocument:
        """Fetch and parse the document.

        Raises:
            FetchError: Credentials, network, permission, or not-found failures.

        """
        return StructuredDocument.from_api(self.fetch_payload(document_id))
