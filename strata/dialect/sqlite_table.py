"""
Strata Dialect — SQLite table definition parser.

SQLite cannot drop constraints (and older versions cannot drop columns)
with ALTER TABLE. The table is rebuilt instead: the stored CREATE TABLE
text is read from ``sqlite_master``, split into column and constraint
definitions, edited, and replayed into a new table which replaces the
original. Indexes are stored separately and recreated afterwards.

The definition is parsed with sqlglot; the original text of every
definition is kept so the rebuild replays it unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import FrozenSet, List, Optional, Sequence, Tuple

import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError, TokenError
from sqlglot.tokens import Token, TokenType

from ..faults import ConstraintNotFoundFault, SQLBuildFault
from ..models.constraint import ConstraintKind

logger = logging.getLogger("strata.dialect.sqlite")

QUERY_CREATE_TABLE = "SELECT sql FROM sqlite_master WHERE type='table' AND tbl_name=?"
QUERY_INDEXES = (
    "SELECT name, sql FROM sqlite_master "
    "WHERE type='index' AND sql IS NOT NULL AND tbl_name=? ORDER BY rowid"
)

_CONSTRAINT_KINDS = (
    (exp.PrimaryKey, ConstraintKind.PRIMARY_KEY),
    (exp.PrimaryKeyColumnConstraint, ConstraintKind.PRIMARY_KEY),
    (exp.UniqueColumnConstraint, ConstraintKind.UNIQUE),
    (exp.CheckColumnConstraint, ConstraintKind.CHECK),
    (exp.ForeignKey, ConstraintKind.FOREIGN_KEY),
)


def _tokenize(sql: str) -> List[Token]:
    try:
        return sqlglot.tokenize(sql, read="sqlite")
    except TokenError as exc:
        raise SQLBuildFault(f"cannot tokenize {sql[:80]!r}: {exc}") from exc


def _parse(sql: str) -> exp.Expression:
    try:
        tree = sqlglot.parse_one(sql, read="sqlite")
    except (ParseError, TokenError) as exc:
        raise SQLBuildFault(f"cannot parse {sql[:80]!r}: {exc}") from exc
    if tree is None:
        raise SQLBuildFault(f"empty statement {sql[:80]!r}")
    return tree


def split_top_level(body: str) -> List[str]:
    """Split at commas outside parentheses and quotes."""
    parts: List[str] = []
    depth = 0
    start = 0
    for tok in _tokenize(body):
        if tok.token_type == TokenType.L_PAREN:
            depth += 1
        elif tok.token_type == TokenType.R_PAREN:
            depth -= 1
        elif tok.token_type == TokenType.COMMA and depth == 0:
            parts.append(body[start:tok.start].strip())
            start = tok.end + 1
    parts.append(body[start:].strip())
    return [p for p in parts if p]


def _outer_parens(sql: str) -> Tuple[int, int]:
    """Offsets of the first top-level parenthesis pair."""
    depth = 0
    start = -1
    for tok in _tokenize(sql):
        if tok.token_type == TokenType.L_PAREN:
            if depth == 0:
                start = tok.start
            depth += 1
        elif tok.token_type == TokenType.R_PAREN:
            depth -= 1
            if depth == 0:
                return start, tok.start
    if start < 0:
        raise SQLBuildFault(f"not a CREATE TABLE statement: {sql[:80]!r}")
    raise SQLBuildFault(f"unbalanced parentheses in {sql[:80]!r}")


def _constraint_kind(node: exp.Expression) -> Optional[ConstraintKind]:
    if isinstance(node, exp.Constraint):
        node = node.expressions[0] if node.expressions else None
    for cls, kind in _CONSTRAINT_KINDS:
        if isinstance(node, cls):
            return kind
    return None


def referenced_columns(node: exp.Expression) -> FrozenSet[str]:
    """
    Lower-cased local column names a table constraint depends on.

    Columns of a foreign key's REFERENCES clause belong to the other
    table and string literals are not identifiers, so neither counts.
    """
    names = set()
    for ident in node.find_all(exp.Identifier):
        if isinstance(node, exp.Constraint) and ident is node.this:
            continue
        if ident.find_ancestor(exp.Reference) is not None:
            continue
        names.add(ident.name.lower())
    return frozenset(names)


@dataclass
class TableColumn:
    name: str
    sql: str


@dataclass
class TableConstraint:
    name: Optional[str]
    kind: ConstraintKind
    sql: str
    columns: FrozenSet[str] = frozenset()


@dataclass
class TableIndex:
    name: str
    sql: str

    @property
    def columns(self) -> List[str]:
        tree = _parse(self.sql)
        return [
            col.name
            for col in tree.find_all(exp.Column, bfs=False)
            if col.find_ancestor(exp.Where) is None
        ]


@dataclass
class SQLiteTable:
    """Ordered, editable view of a stored SQLite table definition."""

    name: str
    columns: List[TableColumn] = field(default_factory=list)
    constraints: List[TableConstraint] = field(default_factory=list)
    indexes: List[TableIndex] = field(default_factory=list)
    options: str = ""

    @classmethod
    def parse(
        cls,
        name: str,
        create_sql: str,
        indexes: Sequence[Tuple[str, str]] = (),
    ) -> "SQLiteTable":
        """
        Parse ``create_sql`` as stored in ``sqlite_master``.

        Table options after the closing parenthesis (``WITHOUT ROWID``,
        ``STRICT``) are kept as text.

        Raises:
            SQLBuildFault: On text that is not a recognizable definition
        """
        start, end = _outer_parens(create_sql)
        tree = _parse(create_sql[:end + 1])
        if (
            not isinstance(tree, exp.Create)
            or str(tree.args.get("kind") or "").upper() != "TABLE"
            or not isinstance(tree.this, exp.Schema)
        ):
            raise SQLBuildFault(f"not a CREATE TABLE statement: {create_sql[:80]!r}")

        lines = split_top_level(create_sql[start + 1:end])
        nodes = tree.this.expressions
        if len(lines) != len(nodes):
            raise SQLBuildFault(
                f"table '{name}': {len(nodes)} definitions parsed from {len(lines)} entries"
            )

        table = cls(name=name, options=create_sql[end + 1:].strip())
        for line, node in zip(lines, nodes):
            if isinstance(node, exp.ColumnDef):
                table.columns.append(TableColumn(node.name, line))
                continue
            kind = _constraint_kind(node)
            if kind is None:
                raise SQLBuildFault(f"unknown constraint in table '{name}': {line!r}")
            cons_name = node.name if isinstance(node, exp.Constraint) else None
            table.constraints.append(
                TableConstraint(cons_name, kind, line, referenced_columns(node))
            )

        table.indexes = [TableIndex(n, s) for n, s in indexes]
        return table

    # ── Lookup ──────────────────────────────────────────────────────────

    def find_column(self, name: str) -> Optional[TableColumn]:
        for col in self.columns:
            if col.name.lower() == name.lower():
                return col
        return None

    def find_constraint(self, name: str) -> Optional[TableConstraint]:
        for cons in self.constraints:
            if cons.name is not None and cons.name.lower() == name.lower():
                return cons
        return None

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    # ── Edits (each returns a new table) ────────────────────────────────

    def without_column(self, name: str) -> "SQLiteTable":
        if self.find_column(name) is None:
            raise SQLBuildFault(f"column '{name}' not found in table '{self.name}'")
        if len(self.columns) == 1:
            raise SQLBuildFault(f"cannot drop the only column of table '{self.name}'")
        for cons in self.constraints:
            if name.lower() in cons.columns:
                raise SQLBuildFault(
                    f"column '{name}' is used by constraint '{cons.name or cons.sql}'"
                )

        return replace(
            self,
            columns=[c for c in self.columns if c.name.lower() != name.lower()],
            constraints=list(self.constraints),
            indexes=[
                i for i in self.indexes
                if name.lower() not in (c.lower() for c in i.columns)
            ],
        )

    def without_constraint(self, name: str) -> "SQLiteTable":
        if self.find_constraint(name) is None:
            raise ConstraintNotFoundFault(self.name, name)
        return replace(
            self,
            columns=list(self.columns),
            constraints=[
                c for c in self.constraints
                if c.name is None or c.name.lower() != name.lower()
            ],
            indexes=list(self.indexes),
        )

    def with_constraint(self, name: str, kind: ConstraintKind, sql: str) -> "SQLiteTable":
        if self.find_constraint(name) is not None:
            raise SQLBuildFault(f"constraint '{name}' already exists on '{self.name}'")
        return replace(
            self,
            columns=list(self.columns),
            constraints=self.constraints + [TableConstraint(name, kind, sql)],
            indexes=list(self.indexes),
        )

    # ── Output ──────────────────────────────────────────────────────────

    def create_table_sql(self, name: Optional[str] = None) -> str:
        lines = [c.sql for c in self.columns] + [c.sql for c in self.constraints]
        sql = "CREATE TABLE {" + (name or self.name) + "} (" + ",".join(lines) + ")"
        if self.options:
            sql += " " + self.options
        return sql

    def rebuild_sql(self, copy_columns: Optional[Sequence[str]] = None) -> List[str]:
        """
        Statements replacing the stored table with this definition.

        Args:
            copy_columns: Columns whose data is copied; defaults to every
                column of this definition.
        """
        tmp = self.name + "__rebuild"
        cols = ",".join("{" + c + "}" for c in (copy_columns or self.column_names))
        stmts = [
            self.create_table_sql(tmp),
            "INSERT INTO {" + tmp + "} (" + cols + ") SELECT " + cols + " FROM {" + self.name + "}",
            "DROP TABLE {" + self.name + "}",
            "ALTER TABLE {" + tmp + "} RENAME TO {" + self.name + "}",
        ]
        stmts.extend(i.sql for i in self.indexes)
        logger.debug("Rebuilding sqlite table '%s' in %d statements", self.name, len(stmts))
        return stmts


__all__ = [
    "QUERY_CREATE_TABLE",
    "QUERY_INDEXES",
    "SQLiteTable",
    "TableColumn",
    "TableConstraint",
    "TableIndex",
    "referenced_columns",
    "split_top_level",
]
