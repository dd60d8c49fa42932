# app/adapters/repos/upsert.py
from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy.ext.asyncio import AsyncSession


def upsert_stmt(
    session: AsyncSession,
    model: Any,
    values: dict[str, Any],
    *,
    index_elements: Iterable[str],
    update_cols: Iterable[str],
):
    """
    INSERT ... ON CONFLICT (...) DO UPDATE for sqlite and postgres.
    One statement, so concurrent writers can't interleave a select and an insert.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"upsert not supported for dialect {dialect!r}")

    stmt = insert(model).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=list(index_elements),
        set_={c: stmt.excluded[c] for c in update_cols},
    )
