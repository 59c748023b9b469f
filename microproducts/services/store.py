"""
Contract for the versioned file store that holds submission records.

The store is treated as an opaque content store keyed by path. Every file
has a revision marker; writes and deletes that target an existing file must
present the revision that the caller last read, and the store rejects them
with :class:`.StoreConflict` if the file has changed since. This is the
only ordering guarantee that the submission service relies upon.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..domain import StoredFile, DirectoryEntry


class FileStore(ABC):
    """A versioned store of files, addressed by path."""

    @abstractmethod
    def get(self, path: str) -> StoredFile:
        """
        Get the content and current revision of a file.

        Raises
        ------
        :class:`.NotFound`
            Raised if there is no file at ``path``.

        """

    @abstractmethod
    def list(self, dir_path: str) -> List[DirectoryEntry]:
        """
        List the entries in a directory.

        Raises
        ------
        :class:`.NotFound`
            Raised if there is no directory at ``dir_path``.

        """

    @abstractmethod
    def put(self, path: str, content: bytes, message: str,
            revision: Optional[str] = None) -> str:
        """
        Create or update a file, and return its new revision.

        If ``revision`` is ``None`` the file must not already exist.

        Raises
        ------
        :class:`.StoreConflict`
            Raised if ``revision`` is stale, or if it was omitted and a file
            already exists at ``path``.

        """

    @abstractmethod
    def delete(self, path: str, message: str, revision: str) -> None:
        """
        Delete a file.

        Raises
        ------
        :class:`.StoreConflict`
            Raised if ``revision`` is stale.
        :class:`.NotFound`
            Raised if there is no file at ``path``.

        """

    def is_available(self) -> bool:
        """Determine whether the store can be reached."""
        return True
