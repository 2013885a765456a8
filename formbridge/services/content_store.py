"""
FormBridge - Abstract Content Store Interface
==============================================

What:  Contract for a path-addressed, versioned file store with conditional writes.
How:   Concrete stores inherit from ContentStore and implement read() and write().
Who:   SubmissionService uses it for both the image upload and the record list.

The conditional-write contract:
    read(path)                    → StoredFile(content, sha)
    write(path, ..., sha=None)    → create; fails with a conflict if the file exists
    write(path, ..., sha=<sha>)   → update only if the file still has that sha
    stale sha                     → RemoteWriteConflictError (never retried here)

The sha is opaque to callers. It is handed back unchanged from a read to the
next write of the same path.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StoredFile:
    """A file as read from the store: decoded bytes plus its version token."""

    path: str
    content: bytes
    sha: str


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a successful write: the file's new sha and the commit created."""

    path: str
    sha: str
    commit_sha: Optional[str] = None


class ContentStore(ABC):
    """
    Abstract interface for the remote repository holding images and records.

    Implementations:
        - GitHubContentStore: GitHub REST "contents" API over httpx
        - (tests) FakeContentStore: in-memory store with sha tracking
    """

    @abstractmethod
    async def read(self, path: str, missing_ok: bool = False) -> Optional[StoredFile]:
        """
        Fetch a file and its version token.

        Args:
            path:       Repository-relative path, e.g. "prices.json"
            missing_ok: Return None instead of raising when the path does not exist

        Returns:
            StoredFile, or None when missing_ok is set and the file is absent.

        Raises:
            RemoteNotFoundError: The path does not exist (missing_ok=False)
            RemoteStoreError:    Any other failure talking to the store
        """
        ...

    @abstractmethod
    async def write(
        self,
        path: str,
        content: bytes,
        message: str,
        sha: Optional[str] = None,
    ) -> WriteResult:
        """
        Create or conditionally update a file, recording a commit.

        Args:
            path:    Repository-relative path
            content: Raw bytes to store (transport encoding is the store's job)
            message: Commit message
            sha:     Token from the last read; None to create a new file

        Raises:
            RemoteWriteConflictError: sha is stale, or missing for an existing file
            RemoteStoreError:         Any other failure talking to the store
        """
        ...

    async def check(self) -> bool:
        """Lightweight reachability probe for the health endpoint."""
        return True

    async def close(self) -> None:
        """Release any pooled connections."""
        return None
