"""Point-in-time table references.

Dolt reads a table at an earlier revision with ``AS OF``::

    SELECT * FROM items AS OF 'a1b2c3'                     -- commit or branch
    SELECT * FROM items AS OF TIMESTAMP('2025-01-31')      -- wall clock

The revision is always bound as a parameter; only the table name is
interpolated, and it must be one of ours.
"""

from __future__ import annotations

import re

from vds.core.errors import ValidationError
from vds.db.tables import TABLE_NAMES

AS_OF_PARAM = "as_of"

_DATE_LIKE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def is_timestamp(as_of: str) -> bool:
    """True when ``as_of`` looks like a date or datetime, not a ref."""
    return bool(_DATE_LIKE.match(as_of))


def as_of_table(table: str, as_of: str | None = None, alias: str | None = None) -> str:
    """SQL table reference for ``table`` at revision ``as_of``.

    Bind ``as_of`` under :data:`AS_OF_PARAM` when it is set.
    """
    if table not in TABLE_NAMES:
        raise ValidationError(f"unknown table: {table}")
    if not as_of:
        ref = table
    elif is_timestamp(as_of):
        ref = f"{table} AS OF TIMESTAMP(:{AS_OF_PARAM})"
    else:
        ref = f"{table} AS OF :{AS_OF_PARAM}"
    if alias:
        ref += f" AS {alias}"
    return ref


def as_of_params(as_of: str | None) -> dict[str, str]:
    """Bind parameters matching :func:`as_of_table`."""
    return {AS_OF_PARAM: as_of} if as_of else {}
