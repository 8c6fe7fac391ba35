"""Mutation branch lifecycle: fork from a base version, check out, delete.

Mutation branches are named ``<prefix><uuid4 hex>``.  Names are random so
a collision is exceptional; one regeneration is attempted before giving
up with :class:`~vds.core.errors.BranchCreateError`.

Tags:
    vds, branching, lifecycle, dolt

Doc-Types:
    api-reference
"""

from __future__ import annotations

import uuid
from collections.abc import Callable

from vds.core.errors import (
    BranchCreateError,
    BranchExistsError,
    StoreUnavailableError,
    UnknownVersionError,
    VdsError,
)
from vds.core.logging import get_logger
from vds.store.protocols import VersionedSession

logger = get_logger(__name__)


class BranchLifecycleManager:
    """Creates, checks out and removes ephemeral mutation branches.

    Example:
        >>> lifecycle = BranchLifecycleManager(trunk="main", prefix="vds-mut-")
        >>> branch = lifecycle.create_and_checkout(session, base_version=head)
        >>> ...  # unit of work, commit
        >>> lifecycle.checkout_trunk(session)
        >>> lifecycle.delete_branch(session, branch)
    """

    def __init__(
        self,
        trunk: str = "main",
        prefix: str = "vds-mut-",
        name_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the lifecycle manager.

        Args:
            trunk: Line every mutation merges back into
            prefix: Naming convention shared with the orphan sweeper
            name_factory: Source of the random suffix (tests pin it)
        """
        self.trunk = trunk
        self.prefix = prefix
        self._name_factory = name_factory or (lambda: uuid.uuid4().hex)

    def new_branch_name(self) -> str:
        return f"{self.prefix}{self._name_factory()}"

    def is_mutation_branch(self, name: str) -> bool:
        return name.startswith(self.prefix) and name != self.trunk

    def create_and_checkout(self, session: VersionedSession, base_version: str) -> str:
        """Fork a new branch from ``base_version`` and check it out.

        On return the session's active branch is the new branch.

        Raises:
            UnknownVersionError: ``base_version`` does not exist.
            BranchCreateError: the name collided twice, or checkout failed.
            StoreUnavailableError: the store went away.
        """
        name = self._create(session, base_version)

        try:
            session.checkout(name)
        except VdsError as exc:
            self._discard_unused(session, name)
            if isinstance(exc, StoreUnavailableError):
                raise
            raise BranchCreateError(
                f"could not check out mutation branch {name}", cause=exc
            ).with_context(branch=name, base_version=base_version) from exc

        logger.debug("branch_created", branch=name, base_version=base_version)
        return name

    def _create(self, session: VersionedSession, base_version: str) -> str:
        name = self.new_branch_name()
        try:
            session.create_branch(name, base_version)
            return name
        except UnknownVersionError:
            raise
        except BranchExistsError:
            logger.warning("branch_name_collision", branch=name)

        name = self.new_branch_name()
        try:
            session.create_branch(name, base_version)
        except BranchExistsError as exc:
            raise BranchCreateError(
                f"mutation branch name collided twice: {name}", cause=exc
            ).with_context(branch=name, base_version=base_version) from exc
        return name

    def _discard_unused(self, session: VersionedSession, name: str) -> None:
        try:
            session.delete_branch(name)
        except VdsError as exc:
            logger.error("branch_discard_failed", branch=name, error=str(exc))

    def checkout_trunk(self, session: VersionedSession) -> None:
        """Switch the session back to trunk.  Required before merging."""
        session.checkout(self.trunk)

    def delete_branch(self, session: VersionedSession, name: str) -> bool:
        """Force-delete ``name``; an already-absent branch is a no-op.

        Returns:
            True if a branch was removed, False if it was already gone
        """
        return session.delete_branch(name)
