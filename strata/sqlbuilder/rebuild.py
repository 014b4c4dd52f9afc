"""
Strata SQLBuilder — live table definitions for rebuild-based ALTERs.

Used by the DDL builders when the dialect cannot ALTER TABLE ... DROP
(``supports_alter_drop`` is false).
"""

from __future__ import annotations

import logging
from typing import Any

from ..dialect.sqlite_table import SQLiteTable
from ..faults import SQLBuildFault

logger = logging.getLogger("strata.sqlbuilder")

__all__ = ["load_table"]


async def load_table(engine: Any, table: str) -> SQLiteTable:
    """
    Read and parse the stored definition of ``table``.

    ``#`` in ``table`` is resolved against the engine's table prefix.

    Raises:
        SQLBuildFault: The table does not exist
    """
    name = table.replace("#", engine.table_prefix)
    (table_query, table_args), (index_query, index_args) = engine.dialect.table_definition_queries(name)

    create_sql = await engine.query_val(table_query, table_args)
    if not create_sql:
        raise SQLBuildFault(f"table '{name}' does not exist")

    rows = await engine.query(index_query, index_args)
    logger.debug("Loaded definition of '%s' with %d indexes", name, len(rows))
    return engine.dialect.parse_table(name, create_sql, [(r["name"], r["sql"]) for r in rows])
