"""
Type mapping - abstract attribute types to physical column types.

Two layers:

    map_type()         abstract token -> physical token (``time`` -> ``datetime``)
    sqlalchemy_type()  physical token -> SQLAlchemy ``TypeEngine`` instance

Type tokens form an open set: a token missing from the tables passes
through verbatim and, at DDL time, is emitted as the raw column type.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import sqlalchemy as sa
from sqlalchemy.types import TypeEngine, UserDefinedType

__all__ = [
    "TYPE_MAP",
    "PHYSICAL_TYPES",
    "RawType",
    "type_token",
    "map_type",
    "sqlalchemy_type",
]


# Abstract type -> physical column type
TYPE_MAP: Dict[str, str] = {
    "string": "string",
    "integer": "integer",
    "boolean": "boolean",
    "time": "datetime",
    "text": "text",
    "decimal": "decimal",
    "float": "float",
    "date": "date",
    "binary": "binary",
    "json": "json",
}

# Physical types with a dedicated builder method on TableDefinition
PHYSICAL_TYPES = frozenset({
    "string",
    "integer",
    "boolean",
    "datetime",
    "text",
    "decimal",
    "float",
    "date",
    "binary",
    "json",
})


def type_token(type_: Any) -> str:
    """Coerce a declared type (string or object exposing ``name``) to its token."""
    if isinstance(type_, str):
        return type_
    name = getattr(type_, "name", None)
    if isinstance(name, str):
        return name
    raise TypeError(f"Unsupported attribute type: {type_!r}")


def map_type(type_: Any) -> str:
    """
    Translate an abstract type token into the physical column type.

    Total and idempotent: unknown tokens are returned unchanged, and every
    value in the table maps to itself.
    """
    token = type_token(type_)
    return TYPE_MAP.get(token, token)


class RawType(UserDefinedType):
    """Column type emitted verbatim, for tokens without a SQLAlchemy mapping."""

    cache_ok = True

    def __init__(self, name: str):
        self.name = name

    def get_col_spec(self, **kw: Any) -> str:
        return self.name.upper()

    def __repr__(self) -> str:
        return f"RawType({self.name!r})"


def sqlalchemy_type(
    token: str,
    *,
    limit: Optional[int] = None,
    precision: Optional[int] = None,
    scale: Optional[int] = None,
) -> TypeEngine:
    """Resolve a physical type token to a SQLAlchemy type instance."""
    if token == "string":
        return sa.String(limit)
    if token == "integer":
        # limit is a byte width, as in most schema DSLs
        if limit is not None and limit > 4:
            return sa.BigInteger()
        return sa.Integer()
    if token == "boolean":
        return sa.Boolean()
    if token == "datetime":
        return sa.DateTime()
    if token == "text":
        return sa.Text(limit)
    if token == "decimal":
        return sa.Numeric(precision=precision, scale=scale)
    if token == "float":
        return sa.Float(precision=precision)
    if token == "date":
        return sa.Date()
    if token == "binary":
        return sa.LargeBinary(limit)
    if token == "json":
        return sa.JSON()
    return RawType(token)
