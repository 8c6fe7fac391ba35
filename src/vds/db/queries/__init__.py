"""
Plain parameterised CRUD queries.

Every function takes the connection of whatever branch is checked out on
the caller's session and returns plain dicts.  Missing rows raise
:class:`~vds.core.errors.NotFoundError`; uniqueness violations raise
:class:`~vds.core.errors.AlreadyExistsError`.  Reads accept ``as_of`` (a
commit hash, branch, or date) for point-in-time queries.
"""
