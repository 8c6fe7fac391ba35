"""
Structured error types for vds.

One typed hierarchy carries every failure the store, the mutation protocol
and the CRUD layer can raise.  Each error knows its machine-readable
``code`` (what front ends translate into HTTP statuses or tool payloads),
its ``category`` for log routing, whether a retry can succeed, and the
context it was raised in (branch, base version, entity).

Manifesto:
    - **Typed Error Hierarchy:** validation, concurrency and store failures
      are distinct types, never a bare ``Exception`` with a message
    - **Explicit Retry Semantics:** a merge conflict or a lock timeout is
      retryable; a missing item is not
    - **Rich Context:** errors carry the branch and base version so the
      log line for a failed mutation is self-contained
    - **Error Chaining:** driver exceptions are preserved as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                         VdsError                                 │
        │      (code, category, retryable, retry_after, context, cause)   │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ValidationError       ConflictError       LockTimeoutError     │
        │  (VALIDATION_FAILED)   (CONFLICT, retry)   (LOCK_TIMEOUT, retry)│
        │       │                                                          │
        │  NotFoundError         StoreError          ResourceUnavailable  │
        │  InUseError            (STORE_ERROR)       (pool exhausted)     │
        │  AlreadyExistsError         │                                    │
        │                        StoreUnavailableError                    │
        │  ConfigError           BranchCreateError                        │
        │                          └ UnknownVersionError                  │
        │                        BranchExistsError                        │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> err = NotFoundError("item", "abc")
    >>> err.code, str(err)
    ('NOT_FOUND', 'item not found: abc')

    >>> err = LockTimeoutError("merge lock busy", retry_after=10)
    >>> err.retryable, err.retry_after
    (True, 10)

Tags:
    errors, exceptions, retry, concurrency, vds

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Error categories for classification and log routing.

    Categories are coarse; the ``code`` on each error is what callers
    switch on.

    Attributes:
        VALIDATION: Bad input, missing rows, uniqueness violations
        CONCURRENCY: Merge conflicts and merge-lock contention
        DATABASE: Statement failures reported by the store
        NETWORK: Store connectivity lost
        RESOURCE: Session pool exhausted
        CONFIG: Invalid settings
        INTERNAL: Bugs, unexpected state
    """

    VALIDATION = "VALIDATION"
    CONCURRENCY = "CONCURRENCY"
    DATABASE = "DATABASE"
    NETWORK = "NETWORK"
    RESOURCE = "RESOURCE"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only the fields that are set are serialised by :meth:`to_dict`, so
    the same context type works for a CRUD miss (``entity``/``entity_id``)
    and for a failed merge (``branch``/``base_version``).

    Attributes:
        branch: Mutation branch the failure happened on
        base_version: Commit the mutation branch was forked from
        entity: Kind of row involved ("item", "attribute type", ...)
        entity_id: Identifier of that row
        request_id: Correlation id of the originating request
        metadata: Free-form extra fields
    """

    branch: str | None = None
    base_version: str | None = None
    entity: str | None = None
    entity_id: str | None = None
    request_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return set fields only, with metadata flattened in."""
        result: dict[str, Any] = {}
        for key in ("branch", "base_version", "entity", "entity_id", "request_id"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        result.update(self.metadata)
        return result


class VdsError(Exception):
    """
    Base exception for every vds error.

    Subclasses set ``code``, ``default_category`` and ``default_retryable``
    as class attributes; instances may override category and retry hints.

    Examples:
        >>> err = VdsError("boom")
        >>> err.code, err.category.value, err.retryable
        ('INTERNAL', 'INTERNAL', False)

        >>> err = VdsError("merge failed").with_context(branch="vds-mut-1")
        >>> err.context.branch
        'vds-mut-1'
    """

    code: str = "INTERNAL"
    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        retry_after: int | None = None,
        context: ErrorContext | None = None,
        details: Any = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.retry_after = retry_after
        self.context = context or ErrorContext()
        self.details = details
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> VdsError:
        """Add context to this error (fluent API)."""
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.retry_after is not None:
            result["retry_after"] = self.retry_after
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.details is not None:
            result["details"] = self.details
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, code={self.code})"


# =============================================================================
# VALIDATION ERRORS (raised by the CRUD layer, never retryable)
# =============================================================================


class ValidationError(VdsError):
    """Bad input.  Never retryable; the request must change."""

    code = "VALIDATION_FAILED"
    default_category = ErrorCategory.VALIDATION


class NotFoundError(ValidationError):
    """Addressed row does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str, **kwargs: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}", **kwargs)
        self.context.entity = entity
        self.context.entity_id = entity_id


class InUseError(ValidationError):
    """Row is still referenced and cannot be removed."""

    code = "IN_USE"

    def __init__(self, entity: str, entity_id: str, **kwargs: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} is still in use", **kwargs)
        self.context.entity = entity
        self.context.entity_id = entity_id


class AlreadyExistsError(ValidationError):
    """Uniqueness constraint violated."""

    code = "ALREADY_EXISTS"


# =============================================================================
# CONCURRENCY ERRORS (retryable)
# =============================================================================


class ConflictError(VdsError):
    """
    Merge into trunk reported conflicting changes.

    The mutation branch has been discarded and trunk is unchanged.  The
    caller should re-read trunk and retry the whole mutation.
    """

    code = "CONFLICT"
    default_category = ErrorCategory.CONCURRENCY
    default_retryable = True


class LockTimeoutError(VdsError):
    """
    Merge lock was not acquired within its bounded wait.

    Nothing reached trunk.  ``retry_after`` carries a backoff hint in
    seconds.
    """

    code = "LOCK_TIMEOUT"
    default_category = ErrorCategory.CONCURRENCY
    default_retryable = True


# =============================================================================
# STORE ERRORS
# =============================================================================


class StoreError(VdsError):
    """A statement against the versioned store failed."""

    code = "STORE_ERROR"
    default_category = ErrorCategory.DATABASE


class StoreUnavailableError(StoreError):
    """Connectivity to the store was lost or refused."""

    code = "UNAVAILABLE"
    default_category = ErrorCategory.NETWORK
    default_retryable = True


class BranchCreateError(StoreError):
    """A mutation branch could not be created or checked out."""

    code = "BRANCH_CREATE_FAILED"


class UnknownVersionError(BranchCreateError):
    """The requested base version does not exist in the store."""

    code = "UNKNOWN_VERSION"
    default_category = ErrorCategory.VALIDATION

    def __init__(self, version: str, **kwargs: Any):
        self.version = version
        super().__init__(f"unknown version: {version}", **kwargs)
        self.context.base_version = version


class BranchExistsError(StoreError):
    """Store refused a branch name that is already taken."""

    code = "BRANCH_EXISTS"

    def __init__(self, branch: str, **kwargs: Any):
        self.branch = branch
        super().__init__(f"branch already exists: {branch}", **kwargs)
        self.context.branch = branch


class ResourceUnavailableError(VdsError):
    """No dedicated session could be taken from the pool in time."""

    code = "RESOURCE_UNAVAILABLE"
    default_category = ErrorCategory.RESOURCE
    default_retryable = True


class ConfigError(VdsError):
    """Configuration is missing or invalid."""

    code = "CONFIG_INVALID"
    default_category = ErrorCategory.CONFIG


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, VdsError):
        return error.retryable
    return isinstance(error, (ConnectionError, BrokenPipeError))


def error_code(error: Exception) -> str:
    """Machine-readable code for any exception (``INTERNAL`` for foreign ones)."""
    if isinstance(error, VdsError):
        return error.code
    return "INTERNAL"


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "VdsError",
    "ValidationError",
    "NotFoundError",
    "InUseError",
    "AlreadyExistsError",
    "ConflictError",
    "LockTimeoutError",
    "StoreError",
    "StoreUnavailableError",
    "BranchCreateError",
    "UnknownVersionError",
    "BranchExistsError",
    "ResourceUnavailableError",
    "ConfigError",
    "is_retryable",
    "error_code",
]
