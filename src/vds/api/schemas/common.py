"""
Common API schemas: the versioned envelope and RFC 7807 errors.

Every 2xx body is :class:`VersionedResponse` (``{"data": …, "version": …}``)
and carries the same version in its ``ETag`` header.  Every 4xx/5xx body
is :class:`ProblemDetail`.

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorDetail(BaseModel):
    """Structured error detail for field-level or nested errors."""

    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    field: str | None = Field(default=None, description="Field path if error is field-specific")


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    Error Codes:
        - ``NOT_FOUND`` (404): Resource does not exist
        - ``VALIDATION_FAILED`` / ``UNKNOWN_VERSION`` (400): Invalid input
        - ``IN_USE`` / ``ALREADY_EXISTS`` (409): Constraint violation
        - ``CONFLICT`` (409): Merge conflict, refetch and retry
        - ``LOCK_TIMEOUT`` (503): Merge lock busy, retry after ``Retry-After``
        - ``RESOURCE_UNAVAILABLE`` / ``UNAVAILABLE`` (503): Store busy or down
        - ``INTERNAL`` (500): Unexpected server error

    Example:
        {
            "type": "about:blank",
            "title": "item not found: 6f1c…",
            "status": 404,
            "code": "NOT_FOUND",
            "detail": "",
            "instance": "/items/6f1c…",
            "details": {},
            "errors": []
        }
    """

    type: str = Field(default="about:blank", description="Error type URI")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code")
    code: str = Field(default="INTERNAL", description="Machine-readable error code")
    detail: str = Field(default="", description="Human-readable explanation of the error")
    instance: str = Field(default="", description="URI of the failing request")
    details: dict[str, Any] = Field(default_factory=dict, description="Structured error data")
    errors: list[ErrorDetail] = Field(default_factory=list)


class VersionedResponse(BaseModel, Generic[T]):
    """Payload plus the trunk version it was read at or written as."""

    data: T
    version: str = Field(description="Trunk head commit hash")
