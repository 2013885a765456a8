"""
FormBridge - Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the failure modes of a submission.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) turn them into JSON
       error responses. The context is logged, never returned to the client.
Who:   Raised by the content store client and SubmissionService.

Exception Hierarchy:
    FormBridgeError (base)
    ├── ValidationError                → 400 Bad Request (missing required fields)
    └── RemoteStoreError               → 500 (network, auth, rate limit, 5xx)
        ├── RemoteNotFoundError        → 500 when it escapes (file expected to exist)
        └── RemoteWriteConflictError   → 500 once the retry budget is spent

A record list that is not valid JSON (or not an array) is not an error at all:
SubmissionService logs it and starts from an empty list.
"""

from typing import Any, Dict, List, Optional


class FormBridgeError(Exception):
    """
    Base exception for all FormBridge application errors.

    Attributes:
        message:  Human-readable error description
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(FormBridgeError):
    """
    Raised when a submission is missing one or more required fields.

    Always raised before any remote call, so a rejected submission leaves no
    trace in the repository.

    Example response:
        {
            "error": "Missing required fields",
            "details": {"missing": ["store", "price"]},
            "request_id": "a1b2c3d4"
        }
    """

    def __init__(
        self,
        message: str = "Missing required fields",
        missing: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if missing:
            ctx["missing"] = list(missing)
        super().__init__(message=message, context=ctx)
        self.missing = list(missing or [])


class RemoteStoreError(FormBridgeError):
    """
    Raised when a call to the GitHub contents API fails.

    Covers connection errors, timeouts, authentication failures, rate
    limiting and any unexpected status code. ``status_code`` is None for
    network-level failures; ``context["response"]`` holds the response body
    when there was one, so the handler can log what GitHub said.
    """

    def __init__(
        self,
        message: str = "Content store request failed",
        path: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if path:
            ctx["path"] = path
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.path = path
        self.status_code = status_code


class RemoteNotFoundError(RemoteStoreError):
    """
    Raised when the requested path does not exist in the repository.

    Callers that treat absence as an empty state read with ``missing_ok=True``
    and never see this exception.
    """

    def __init__(
        self,
        path: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=f"'{path}' was not found in the content store",
            path=path,
            status_code=404,
            context=context,
        )


class RemoteWriteConflictError(RemoteStoreError):
    """
    Raised when a conditional write is rejected because its sha is stale.

    GitHub answers 409 when the supplied sha no longer matches the file, and
    422 when a file was created concurrently and no sha was supplied. Both
    mean "re-read and try again" to SubmissionService.
    """

    def __init__(
        self,
        path: str,
        sha: Optional[str] = None,
        status_code: int = 409,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["sha"] = sha
        super().__init__(
            message=f"Write to '{path}' was rejected: the file changed since it was read",
            path=path,
            status_code=status_code,
            context=ctx,
        )
        self.sha = sha
