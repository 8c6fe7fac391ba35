"""Versioned operation result."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Versioned(Generic[T]):
    """Payload plus the trunk version it was read at or written as.

    Attributes:
        data: Operation payload (plain dicts and lists)
        version: Trunk head commit hash
    """

    data: T
    version: str

    def to_dict(self) -> dict[str, Any]:
        return {"data": self.data, "version": self.version}
