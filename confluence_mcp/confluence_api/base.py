"""Abstract interface for the remote document store.

The patch-update coordinator only needs to read a document and write it back
with a declared prior version. Anything implementing this interface (the
Confluence REST client, or an in-memory double in tests) can back it.
"""
from __future__ import annotations

from abc import ABC
from abc import abstractmethod

from ..models import Document


class RemoteDocumentClient(ABC):
    """Read/write access to versioned remote documents."""

    @abstractmethod
    def fetch_document(self, document_id: str) -> Document:
        """Fetch the current state of a document.

        Args:
            document_id: Remote identifier of the document

        Returns:
            The document with its body, version and space

        Raises:
            NotFoundError: If the document does not exist
            AuthError: If the credentials are rejected
            RemoteError: On any other transport or HTTP failure
        """
        pass

    @abstractmethod
    def write_document(
        self,
        document_id: str,
        title: str,
        body: str,
        expected_prior_version: int,
    ) -> Document:
        """Replace a document's title and body.

        The write declares the version it was based on, so the remote store
        can refuse it when another writer got there first. The store then
        assigns ``expected_prior_version + 1``.

        Args:
            document_id: Remote identifier of the document
            title: New title
            body: New body markup
            expected_prior_version: Version the caller believes is current

        Returns:
            The document as stored after the write

        Raises:
            VersionConflictError: If the remote store rejects a stale version
            AuthError: If the credentials are rejected
            RemoteError: On any other transport or HTTP failure
        """
        pass
