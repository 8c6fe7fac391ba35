"""
Request-scoped context for operations.

The context carries the two capabilities an operation needs: a source of
pooled trunk sessions for reads, and the mutation entry point for writes.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar

from sqlalchemy.engine import Connection

from vds.branching.orchestrator import MutationResult, UnitOfWork
from vds.ops.result import Versioned
from vds.store.protocols import SessionSource, VersionedSession

T = TypeVar("T")


class MutationRunner(Protocol):
    def run(
        self,
        message: str,
        unit_of_work: UnitOfWork[T],
        base_version: str | None = None,
    ) -> MutationResult[T]: ...


@dataclass
class OperationContext:
    """Context passed to every operation function.

    Attributes:
        sessions: Pool of dedicated sessions (reads use trunk)
        mutations: Branched mutation orchestrator (writes)
        request_id: Unique ID for this invocation (auto-generated)
        caller: Origin of the request: ``"api"``, ``"mcp"``, ``"cli"``, ``"sdk"``
        metadata: Arbitrary key/value pairs forwarded to logging
    """

    sessions: SessionSource
    mutations: MutationRunner
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    caller: str = "sdk"
    metadata: dict[str, Any] = field(default_factory=dict)

    @contextmanager
    def read(self) -> Iterator[VersionedSession]:
        with self.sessions.session() as session:
            yield session

    def query(
        self,
        fn: Callable[[Connection, str], T],
        as_of: str | None = None,
    ) -> Versioned[T]:
        """Run a read pinned to one commit and tag it with that commit.

        The revision is fixed before ``fn`` runs: the trunk head, or
        ``as_of`` resolved to a commit hash.  ``fn`` receives it and reads
        ``AS OF`` it, so the returned version names the commit the data
        came from.
        """
        with self.read() as session:
            revision = session.resolve(as_of) if as_of else session.head()
            return Versioned(fn(session.conn, revision), revision)

    def mutate(
        self,
        message: str,
        fn: Callable[[Connection], T],
        base_version: str | None = None,
    ) -> Versioned[T]:
        """Run a write as one branched mutation."""
        outcome = self.mutations.run(message, lambda session: fn(session.conn), base_version)
        return Versioned(outcome.result, outcome.version)
