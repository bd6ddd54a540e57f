"""
Migration base class for rendered migration files.

Rendered migrations subclass :class:`Migration` and describe their change
inside ``change()``. Running one is a plain method call against a
:class:`~codefirst_sqlalchemy.executor.SchemaExecutor`:

    CreateUsers(executor).change()

There is no history table and no ordering between migration files; those
belong to whatever tool the host uses to apply migrations.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional, Sequence, Union

from .schema import NO_DEFAULT

if TYPE_CHECKING:
    from .executor import SchemaExecutor

logger = logging.getLogger("codefirst.migration")

__all__ = ["MIGRATION_VERSION", "TableDefinition", "Migration"]

# Version tag written into rendered migration classes
MIGRATION_VERSION = "1.0"


class TableDefinition:
    """
    Column collector yielded by :meth:`Migration.create_table`.

    Each builder call records one attribute schema entry; keyword options
    use the rendered spelling (``null=False``) and are stored under the
    schema spelling (``required``).
    """

    def __init__(self, name: str):
        self.name = name
        self.attributes: Dict[str, Dict[str, Any]] = {}

    def column(
        self,
        name: str,
        type_: str,
        *,
        null: bool = True,
        default: Any = NO_DEFAULT,
        limit: Optional[int] = None,
        precision: Optional[int] = None,
        scale: Optional[int] = None,
    ) -> None:
        schema: Dict[str, Any] = {"type": type_}
        if not null:
            schema["required"] = True
        if default is not NO_DEFAULT:
            schema["default"] = default
        if limit is not None:
            schema["limit"] = limit
        if precision is not None:
            schema["precision"] = precision
        if scale is not None:
            schema["scale"] = scale
        self.attributes[name] = schema

    def string(self, name: str, **options: Any) -> None:
        self.column(name, "string", **options)

    def integer(self, name: str, **options: Any) -> None:
        self.column(name, "integer", **options)

    def boolean(self, name: str, **options: Any) -> None:
        self.column(name, "boolean", **options)

    def datetime(self, name: str, **options: Any) -> None:
        self.column(name, "datetime", **options)

    def text(self, name: str, **options: Any) -> None:
        self.column(name, "text", **options)

    def decimal(self, name: str, **options: Any) -> None:
        self.column(name, "decimal", **options)

    def float(self, name: str, **options: Any) -> None:
        self.column(name, "float", **options)

    def date(self, name: str, **options: Any) -> None:
        self.column(name, "date", **options)

    def binary(self, name: str, **options: Any) -> None:
        self.column(name, "binary", **options)

    def json(self, name: str, **options: Any) -> None:
        self.column(name, "json", **options)

    def timestamps(self, *, null: bool = False) -> None:
        self.datetime("created_at", null=null)
        self.datetime("updated_at", null=null)


class Migration:
    """
    Base class for rendered migrations.

    Subclasses set ``version`` and implement ``change()``.
    """

    version: str = MIGRATION_VERSION

    def __init__(self, executor: "SchemaExecutor"):
        self.executor = executor

    @property
    def name(self) -> str:
        return type(self).__name__

    @contextmanager
    def create_table(self, table_name: str) -> Iterator[TableDefinition]:
        """Collect columns, then create the table when the block exits cleanly."""
        definition = TableDefinition(table_name)
        yield definition
        logger.debug(f"{self.name}: create_table {table_name} ({len(definition.attributes)} columns)")
        # timestamps are explicit in rendered source (t.timestamps())
        self.executor.create_table(table_name, definition.attributes, timestamps=False)

    def add_index(
        self,
        table_name: str,
        columns: Union[str, Sequence[str]],
        *,
        unique: bool = False,
        name: Optional[str] = None,
    ) -> None:
        self.executor.add_index(table_name, columns, unique=unique, name=name)

    def drop_table(self, table_name: str) -> None:
        self.executor.drop_table(table_name)

    def change(self) -> None:
        raise NotImplementedError(f"{self.name} must implement change()")

    def __repr__(self) -> str:
        return f"<{self.name} version={self.version}>"
