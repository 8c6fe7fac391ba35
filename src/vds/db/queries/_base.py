"""Shared helpers for the query modules."""

from __future__ import annotations

import datetime
from typing import Any

from sqlalchemy import exc as sa_exc
from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.sql.elements import TextClause

from vds.core.errors import AlreadyExistsError, NotFoundError, ValidationError
from vds.store.session import translate_store_error


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    return value


def to_row(mapping: Any) -> dict[str, Any]:
    return {key: _jsonable(value) for key, value in dict(mapping).items()}


def _is_unique_violation(exc: sa_exc.IntegrityError) -> bool:
    errno = getattr(exc.orig, "errno", None)
    if errno == 1062:
        return True
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message


def execute(conn: Connection, sql: str | TextClause, params: dict[str, Any] | None = None, *, what: str = "query"):
    """Run ``sql`` and translate driver errors.

    Integrity errors become validation errors: duplicates map to
    ``AlreadyExistsError`` and dangling references to ``ValidationError``.
    """
    try:
        stmt = text(sql) if isinstance(sql, str) else sql
        return conn.execute(stmt, params or {})
    except sa_exc.IntegrityError as exc:
        if _is_unique_violation(exc):
            raise AlreadyExistsError(f"{what} already exists", cause=exc) from exc
        raise ValidationError(f"{what} references a missing row", cause=exc) from exc
    except sa_exc.SQLAlchemyError as exc:
        raise translate_store_error(exc, what) from exc


def fetch_all(conn: Connection, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
    return [to_row(row) for row in execute(conn, sql, params).mappings()]


def fetch_one(conn: Connection, sql: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
    row = execute(conn, sql, params).mappings().first()
    return to_row(row) if row is not None else None


def fetch_required(
    conn: Connection,
    sql: str,
    params: dict[str, Any],
    *,
    entity: str,
    entity_id: str,
) -> dict[str, Any]:
    row = fetch_one(conn, sql, params)
    if row is None:
        raise NotFoundError(entity, entity_id)
    return row


def page_clause(limit: int | None, offset: int | None, params: dict[str, Any]) -> str:
    """``LIMIT``/``OFFSET`` suffix; binds into ``params``."""
    clause = ""
    if limit:
        params["limit"] = int(limit)
        clause += " LIMIT :limit"
        if offset:
            params["offset"] = int(offset)
            clause += " OFFSET :offset"
    return clause
