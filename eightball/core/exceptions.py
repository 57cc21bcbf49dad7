"""Exception hierarchy for the oracle.

All custom exceptions inherit from OracleError so callers can catch
them selectively.

Hierarchy:
    OracleError (base)
    ├── PreconditionError - missing identity or blank question (HTTP 400)
    ├── DirectoryError - community directory lookup failed
    └── PersistenceError - key-value store read/write failure
"""

from __future__ import annotations


class OracleError(Exception):
    """Base exception for all oracle errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PreconditionError(OracleError):
    """
    Request precondition failure.

    Raised when the context lacks a post or user id, or the question is
    blank. The message is shown to the client as-is and never retried.
    """

    pass


class DirectoryError(OracleError):
    """
    Community directory error.

    Raised by directory clients on timeouts, HTTP errors and malformed
    payloads. The metadata provider recovers from it locally.
    """

    def __init__(self, message: str, community: str | None = None):
        self.community = community
        super().__init__(message)


class PersistenceError(OracleError):
    """
    Storage read/write failure.

    Raised when the key-value store cannot complete a write or a scan.
    """

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)
