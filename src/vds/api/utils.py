"""
Shared router helpers for the versioned envelope.

Every successful response carries ``ETag: <version>``; bodies are
``{"data": …, "version": …}`` and deletes are 204 with no body.
"""

from __future__ import annotations

from typing import Any

from fastapi import Response

from vds.ops.result import Versioned


def versioned(response: Response, result: Versioned) -> dict[str, Any]:
    """Set the ``ETag`` header and return the envelope."""
    response.headers["ETag"] = result.version
    return result.to_dict()


def no_content(result: Versioned) -> Response:
    return Response(status_code=204, headers={"ETag": result.version})
