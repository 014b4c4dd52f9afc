"""
Strata SQLBuilder — fluent statement builders.

Statements are written in the placeholder language (``{ident}``, ``#``,
``?``, ``@name``) and rewritten by the engine's dialect at execution.
Builder errors are sticky: the first one is raised by the terminal call.
"""

from .base import BaseStmt, DDLStmt, ExecStmt, QueryStmt
from .builder import SQLBuilder
from .constraint import AddConstraintStmt, DropConstraintStmt
from .delete import DeleteStmt
from .index import CreateIndexStmt, DropIndexStmt
from .insert import InsertStmt
from .rebuild import load_table
from .select import SelectStmt
from .table import (
    AddColumnStmt,
    CreateTableStmt,
    DropColumnStmt,
    DropTableStmt,
    TruncateStmt,
)
from .text import TextBuilder
from .update import UpdateStmt
from .view import CreateViewStmt, DropViewStmt
from .where import WhereStmt

__all__ = [
    "SQLBuilder",
    "TextBuilder",
    "WhereStmt",
    "BaseStmt",
    "ExecStmt",
    "QueryStmt",
    "DDLStmt",
    "SelectStmt",
    "InsertStmt",
    "UpdateStmt",
    "DeleteStmt",
    "CreateTableStmt",
    "DropTableStmt",
    "TruncateStmt",
    "AddColumnStmt",
    "DropColumnStmt",
    "CreateIndexStmt",
    "DropIndexStmt",
    "AddConstraintStmt",
    "DropConstraintStmt",
    "CreateViewStmt",
    "DropViewStmt",
    "load_table",
]
