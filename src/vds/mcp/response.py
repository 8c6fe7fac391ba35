"""Tool payloads: ``{"data", "version"}`` on success, ``{"error": {...}}`` otherwise."""

from __future__ import annotations

from typing import Any

from vds.core.errors import VdsError
from vds.ops.result import Versioned


def mcp_ok(result: Versioned) -> dict[str, Any]:
    return result.to_dict()


def mcp_err(code: str, message: str, details: Any = None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"error": error}


def to_mcp_error(exc: Exception) -> dict[str, Any]:
    """Same codes as the REST problem bodies; anything untyped is INTERNAL."""
    if isinstance(exc, VdsError):
        return mcp_err(exc.code, exc.message, exc.details)
    return mcp_err("INTERNAL", str(exc) or exc.__class__.__name__)
