"""
Migration Text Renderer - model schema to migration source.

Renders the Python body of a ``create_table`` migration and wraps it in a
versioned ``Migration`` subclass. The rendered source runs against
:class:`codefirst_sqlalchemy.migration.Migration`:

    class CreateUsers(Migration):
        version = "1.0"

        def change(self):
            with self.create_table("users") as t:
                t.string("email", null=False)
                t.integer("age")

                t.timestamps()

            self.add_index("users", "email")
"""

from __future__ import annotations

import datetime
import json
import logging
import math
from decimal import Decimal
from typing import Any, Callable, List, Mapping, Optional

from .faults import SchemaContractFault
from .inflector import camelize
from .migration import MIGRATION_VERSION
from .schema import (
    IndexPlan,
    column_options,
    needs_timestamps,
    normalize_attributes,
    normalize_indices,
    plan_indexes,
)
from .types import PHYSICAL_TYPES, map_type

logger = logging.getLogger("codefirst.rendering")

__all__ = [
    "MigrationRenderer",
    "render_literal",
    "build_column_options",
    "build_index_options",
    "generate_create_table_migration",
    "generate_migration_class",
]

_INDENT = "    "


def render_literal(value: Any) -> str:
    """
    Render a default value as Python source.

    Strings are double-quoted, ``Decimal`` values become plain numeric
    literals and dates/times their ISO-8601 string, so rendered migrations
    only ever need ``Migration`` in scope.

    Raises:
        SchemaContractFault: for values with no self-contained literal form
    """
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if value is None or isinstance(value, (bool, int)):
        return repr(value)
    if isinstance(value, (float, Decimal)):
        finite = value.is_finite() if isinstance(value, Decimal) else math.isfinite(value)
        if not finite:
            raise SchemaContractFault("default", f"non-finite number {value!r} has no literal form")
        return str(value) if isinstance(value, Decimal) else repr(value)
    if isinstance(value, (datetime.date, datetime.time)):
        return json.dumps(value.isoformat())
    raise SchemaContractFault("default", f"cannot render a {type(value).__name__} literal")


def _quote(name: str) -> str:
    return json.dumps(name, ensure_ascii=False)


def _join_options(opts: Mapping[str, Any]) -> str:
    return ", ".join(f"{key}={render_literal(value)}" for key, value in opts.items())


class MigrationRenderer:
    """
    Renders migration source for one table.

    The type mapper is injected so a host can extend the abstract type
    table without touching the renderer.
    """

    def __init__(self, type_mapper: Callable[[Any], str] = map_type):
        self.type_mapper = type_mapper

    # ── Option builders ──────────────────────────────────────────────

    def build_column_options(self, schema: Mapping[str, Any]) -> str:
        """``null=False, default="x", limit=n, precision=n, scale=n`` (only those present)."""
        return _join_options(column_options(schema))

    def build_index_options(self, schema: Mapping[str, Any]) -> str:
        """``unique=True, name="..."`` (only those present)."""
        opts = {}
        if schema.get("unique"):
            opts["unique"] = True
        if schema.get("name"):
            opts["name"] = schema["name"]
        return _join_options(opts)

    # ── Body rendering ───────────────────────────────────────────────

    def column_line(self, name: str, schema: Mapping[str, Any]) -> str:
        column_type = self.type_mapper(schema["type"])
        options = self.build_column_options(schema)
        suffix = f", {options}" if options else ""

        if column_type in PHYSICAL_TYPES:
            return f"t.{column_type}({_quote(name)}{suffix})"
        return f"t.column({_quote(name)}, {_quote(column_type)}{suffix})"

    def index_line(self, table_name: str, plan: IndexPlan) -> str:
        if plan.composite:
            target = json.dumps(plan.columns, ensure_ascii=False)
        else:
            target = _quote(plan.columns[0])
        options = self.build_index_options(plan.options())
        suffix = f", {options}" if options else ""
        return f"self.add_index({_quote(table_name)}, {target}{suffix})"

    def generate_create_table_migration(
        self,
        table_name: str,
        attributes: Optional[Mapping[str, Any]],
        indices: Optional[Mapping[str, Any]] = None,
        *,
        timestamps: bool = True,
    ) -> str:
        """
        Render the ``create_table`` block followed by its ``add_index`` calls.

        Args:
            table_name: Physical table name
            attributes: Attribute schema (insertion order is column order)
            indices: Index schema (insertion order is index order)
            timestamps: Append ``t.timestamps()`` when neither timestamp
                column is declared

        Raises:
            SchemaContractFault: if either schema is malformed
        """
        attrs = normalize_attributes(attributes)
        idx = normalize_indices(indices)

        lines: List[str] = [f"with self.create_table({_quote(table_name)}) as t:"]

        for name, schema in attrs.items():
            if name == "id":
                continue
            lines.append(_INDENT + self.column_line(name, schema))

        if timestamps and needs_timestamps(attrs):
            lines.append("")
            lines.append(_INDENT + "t.timestamps()")

        if len(lines) == 1:
            # empty table block still needs a body
            lines.append(_INDENT + "pass")

        for plan in plan_indexes(attrs, idx):
            lines.append("")
            lines.append(self.index_line(table_name, plan))

        logger.debug(f"Rendered create_table migration for '{table_name}' ({len(attrs)} attributes)")
        return "\n".join(lines)

    def generate_migration_class(
        self,
        table_name: str,
        attributes: Optional[Mapping[str, Any]],
        indices: Optional[Mapping[str, Any]],
        migration_name: str,
        *,
        version: str = MIGRATION_VERSION,
        timestamps: bool = True,
    ) -> str:
        """Wrap the ``create_table`` body in a versioned ``Migration`` subclass."""
        class_name = camelize(migration_name)
        if not class_name:
            raise ValueError(f"Cannot derive a class name from migration name {migration_name!r}")

        body = self.generate_create_table_migration(
            table_name, attributes, indices, timestamps=timestamps,
        )
        indented = "\n".join(
            (_INDENT * 2 + line) if line else "" for line in body.split("\n")
        )

        return (
            f"class {class_name}(Migration):\n"
            f"    version = {_quote(str(version))}\n"
            f"\n"
            f"    def change(self):\n"
            f"{indented}\n"
        )


_default_renderer = MigrationRenderer()


def build_column_options(schema: Mapping[str, Any]) -> str:
    return _default_renderer.build_column_options(schema)


def build_index_options(schema: Mapping[str, Any]) -> str:
    return _default_renderer.build_index_options(schema)


def generate_create_table_migration(
    table_name: str,
    attributes: Optional[Mapping[str, Any]],
    indices: Optional[Mapping[str, Any]] = None,
    *,
    timestamps: bool = True,
) -> str:
    return _default_renderer.generate_create_table_migration(
        table_name, attributes, indices, timestamps=timestamps,
    )


def generate_migration_class(
    table_name: str,
    attributes: Optional[Mapping[str, Any]],
    indices: Optional[Mapping[str, Any]],
    migration_name: str,
    *,
    version: str = MIGRATION_VERSION,
    timestamps: bool = True,
) -> str:
    return _default_renderer.generate_migration_class(
        table_name, attributes, indices, migration_name,
        version=version, timestamps=timestamps,
    )
