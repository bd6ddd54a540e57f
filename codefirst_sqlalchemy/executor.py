"""
Live Schema Executor - issues DDL through SQLAlchemy's schema API.

Provides:
- SchemaExecutor: create/drop tables, add indexes, existence checks
- Introspection helpers (columns, indexes) used for verification

Every call runs in its own ``engine.begin()`` transaction. Errors raised by
SQLAlchemy (duplicate table, missing table, lost connection) propagate to
the caller unchanged; nothing is retried.

Usage:
    executor = SchemaExecutor.from_url("sqlite://")
    executor.create_table("users", {"email": {"type": "string", "required": True}})
    executor.add_index("users", "email", unique=True)
    assert executor.table_exists("users")
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

import sqlalchemy as sa
from sqlalchemy.engine import Engine

from .faults import SchemaContractFault
from .schema import (
    TIMESTAMP_COLUMNS,
    canonical_columns,
    column_options,
    needs_timestamps,
    normalize_attributes,
)
from .types import map_type, sqlalchemy_type

if TYPE_CHECKING:
    from .config import CodeFirstConfig

logger = logging.getLogger("codefirst.executor")

__all__ = ["SchemaExecutor", "default_index_name"]


def default_index_name(table_name: str, columns: Sequence[str]) -> str:
    """``ix_<table>_<col>[_<col>...]`` (SQLAlchemy's naming convention)."""
    return f"ix_{table_name}_{'_'.join(columns)}"


def _server_default(value: Any) -> Any:
    """Translate a declared default into a ``server_default`` argument."""
    if value is None:
        return None
    if isinstance(value, bool):
        return sa.true() if value else sa.false()
    if isinstance(value, (int, float, Decimal)):
        return sa.text(str(value))
    return str(value)


class SchemaExecutor:
    """
    Executes schema changes against a connected database.

    The engine is owned by the caller; :meth:`from_url` is a convenience
    for scripts and tests.
    """

    def __init__(self, engine: Engine, *, type_mapper: Callable[[Any], str] = map_type):
        self.engine = engine
        self.type_mapper = type_mapper

    @classmethod
    def from_url(cls, url: str, **engine_options: Any) -> "SchemaExecutor":
        return cls(sa.create_engine(url, **engine_options))

    @classmethod
    def from_config(cls, config: "CodeFirstConfig", **engine_options: Any) -> "SchemaExecutor":
        """Executor for the configured ``database_url``."""
        return cls.from_url(config.database_url, **engine_options)

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def dispose(self) -> None:
        self.engine.dispose()

    # ── Table construction ───────────────────────────────────────────

    def build_column(self, name: str, schema: Mapping[str, Any]) -> sa.Column:
        """One ``Column`` built from a normalised attribute schema."""
        opts = column_options(schema)
        column_type = sqlalchemy_type(
            self.type_mapper(schema["type"]),
            limit=opts.get("limit"),
            precision=opts.get("precision"),
            scale=opts.get("scale"),
        )
        kwargs: Dict[str, Any] = {"nullable": opts.get("null", True)}
        if "default" in opts and opts["default"] is not None:
            kwargs["server_default"] = _server_default(opts["default"])
        return sa.Column(name, column_type, **kwargs)

    def build_table(
        self,
        table_name: str,
        attributes: Optional[Mapping[str, Any]],
        *,
        timestamps: bool = True,
        metadata: Optional[sa.MetaData] = None,
    ) -> sa.Table:
        """Build (without creating) the ``Table`` for an attribute schema."""
        attrs = normalize_attributes(attributes)

        columns: List[sa.Column] = [
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        ]
        for name, schema in attrs.items():
            if name == "id":
                continue
            columns.append(self.build_column(name, schema))

        if timestamps and needs_timestamps(attrs):
            for col in TIMESTAMP_COLUMNS:
                columns.append(sa.Column(col, sa.DateTime(), nullable=False))

        return sa.Table(table_name, metadata if metadata is not None else sa.MetaData(), *columns)

    # ── DDL ──────────────────────────────────────────────────────────

    def create_table(
        self,
        table_name: str,
        attributes: Optional[Mapping[str, Any]],
        *,
        timestamps: bool = True,
    ) -> sa.Table:
        """
        Issue ``CREATE TABLE`` for ``attributes``.

        ``id`` is always the autoincrement primary key; a declared ``id``
        attribute is skipped. ``created_at``/``updated_at`` are appended when
        ``timestamps`` is set and neither is declared.
        """
        table = self.build_table(table_name, attributes, timestamps=timestamps)
        with self.engine.begin() as conn:
            table.create(conn, checkfirst=False)
        logger.info(f"Created table '{table_name}' ({len(table.columns)} columns)")
        return table

    def add_index(
        self,
        table_name: str,
        columns: Union[str, Sequence[str]],
        *,
        unique: bool = False,
        name: Optional[str] = None,
    ) -> sa.Index:
        """Issue ``CREATE [UNIQUE] INDEX`` on one or more columns of an existing table."""
        cols = canonical_columns(columns, subject=f"index on '{table_name}'")
        index_name = name or default_index_name(table_name, cols)

        with self.engine.begin() as conn:
            table = sa.Table(table_name, sa.MetaData(), autoload_with=conn)
            missing = [c for c in cols if c not in table.c]
            if missing:
                raise SchemaContractFault(
                    f"index '{index_name}'",
                    f"unknown column(s) {missing} on table '{table_name}'",
                )
            index = sa.Index(index_name, *(table.c[c] for c in cols), unique=unique)
            index.create(conn)

        logger.info(f"Created {'unique ' if unique else ''}index '{index_name}' on {table_name}({', '.join(cols)})")
        return index

    def drop_table(self, table_name: str) -> None:
        """Issue ``DROP TABLE``; a missing table is a database error."""
        with self.engine.begin() as conn:
            conn.execute(sa.schema.DropTable(sa.Table(table_name, sa.MetaData())))
        logger.info(f"Dropped table '{table_name}'")

    # ── Introspection ────────────────────────────────────────────────

    def table_exists(self, table_name: str) -> bool:
        """Query live state; a fresh inspector is used so nothing is cached."""
        return sa.inspect(self.engine).has_table(table_name)

    def columns(self, table_name: str) -> List[Dict[str, Any]]:
        """Reflected columns: name, type (as rendered DDL), nullable, default, primary_key."""
        inspector = sa.inspect(self.engine)
        result = []
        for col in inspector.get_columns(table_name):
            result.append({
                "name": col["name"],
                "type": str(col["type"]),
                "nullable": bool(col.get("nullable", True)),
                "default": col.get("default"),
                "primary_key": bool(col.get("primary_key")),
            })
        return result

    def indexes(self, table_name: str) -> List[Dict[str, Any]]:
        """Reflected indexes: name, columns, unique."""
        inspector = sa.inspect(self.engine)
        return [
            {
                "name": idx["name"],
                "columns": list(idx["column_names"]),
                "unique": bool(idx.get("unique")),
            }
            for idx in inspector.get_indexes(table_name)
        ]
