"""
Attribute and index schema normalisation.

Both the migration renderer and the live executor consume schemas through
this module, so the two paths derive identical column options and index
plans from the same declaration.

Attribute schema::

    {"email": {"type": "string", "index": True, "required": True},
     "age":   {"type": "integer", "default": 0}}

Index schema::

    {"user_post": {"columns": ["user_id", "post_id"], "unique": True}}

Index columns are canonicalised to a list of strings; a bare string is
treated as a one-column list.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .faults import SchemaContractFault
from .types import type_token

__all__ = [
    "NO_DEFAULT",
    "TIMESTAMP_COLUMNS",
    "IndexPlan",
    "canonical_columns",
    "normalize_attributes",
    "normalize_indices",
    "needs_timestamps",
    "column_options",
    "plan_indexes",
]


class _NoDefaultType:
    """Sentinel to distinguish 'no default' from a ``None`` default."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "<NO_DEFAULT>"

    def __bool__(self):
        return False


NO_DEFAULT = _NoDefaultType()

TIMESTAMP_COLUMNS = ("created_at", "updated_at")

_ATTRIBUTE_KEYS = frozenset({
    "type", "index", "unique", "default", "required", "limit", "precision", "scale",
})


@dataclass
class IndexPlan:
    """One index to create: canonical column list plus options."""

    columns: List[str]
    unique: bool = False
    name: Optional[str] = None

    @property
    def composite(self) -> bool:
        return len(self.columns) > 1

    def options(self) -> Dict[str, Any]:
        opts: Dict[str, Any] = {}
        if self.unique:
            opts["unique"] = True
        if self.name:
            opts["name"] = self.name
        return opts


def canonical_columns(columns: Any, *, subject: str = "index") -> List[str]:
    """Return ``columns`` as a non-empty list of column names."""
    if isinstance(columns, str):
        cols = [columns]
    elif isinstance(columns, Sequence):
        cols = list(columns)
    else:
        raise SchemaContractFault(subject, f"columns must be a name or a sequence of names, got {columns!r}")

    if not cols:
        raise SchemaContractFault(subject, "columns must not be empty")
    for col in cols:
        if not isinstance(col, str) or not col:
            raise SchemaContractFault(subject, f"column names must be non-empty strings, got {col!r}")
    return cols


def normalize_attributes(attributes: Optional[Mapping[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """
    Validate an attribute schema and return a copy with string type tokens.

    Raises:
        SchemaContractFault: on a non-string name, a non-mapping entry,
            a missing ``type`` key or an unsupported type value.
    """
    if attributes is None:
        return {}
    if not isinstance(attributes, Mapping):
        raise SchemaContractFault("attributes", f"expected a mapping, got {type(attributes).__name__}")

    normalized: Dict[str, Dict[str, Any]] = {}
    for name, spec in attributes.items():
        if not isinstance(name, str) or not name:
            raise SchemaContractFault("attributes", f"attribute names must be non-empty strings, got {name!r}")
        if not isinstance(spec, Mapping):
            raise SchemaContractFault(f"attribute '{name}'", f"expected a mapping, got {type(spec).__name__}")
        if "type" not in spec or spec["type"] is None:
            raise SchemaContractFault(f"attribute '{name}'", "missing 'type'")

        try:
            token = type_token(spec["type"])
        except TypeError as exc:
            raise SchemaContractFault(f"attribute '{name}'", str(exc)) from exc

        entry = {k: v for k, v in spec.items() if k in _ATTRIBUTE_KEYS}
        entry["type"] = token
        normalized[name] = entry
    return normalized


def normalize_indices(indices: Optional[Mapping[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Validate an index schema; ``columns`` always comes back as a list."""
    if indices is None:
        return {}
    if not isinstance(indices, Mapping):
        raise SchemaContractFault("indices", f"expected a mapping, got {type(indices).__name__}")

    normalized: Dict[str, Dict[str, Any]] = {}
    for key, spec in indices.items():
        if not isinstance(spec, Mapping):
            raise SchemaContractFault(f"index '{key}'", f"expected a mapping, got {type(spec).__name__}")
        if "columns" not in spec:
            raise SchemaContractFault(f"index '{key}'", "missing 'columns'")
        normalized[str(key)] = {
            "columns": canonical_columns(spec["columns"], subject=f"index '{key}'"),
            "unique": bool(spec.get("unique", False)),
            "name": spec.get("name"),
        }
    return normalized


def needs_timestamps(attributes: Mapping[str, Any]) -> bool:
    """True when neither ``created_at`` nor ``updated_at`` is declared."""
    return not any(col in attributes for col in TIMESTAMP_COLUMNS)


def column_options(spec: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Native column options for one attribute, in rendering order.

    ``null=False`` iff required, ``default`` iff the key is present (a
    ``None`` default counts), then ``limit``, ``precision``, ``scale``.
    """
    opts: Dict[str, Any] = {}
    if spec.get("required"):
        opts["null"] = False
    if "default" in spec and spec["default"] is not NO_DEFAULT:
        opts["default"] = spec["default"]
    for key in ("limit", "precision", "scale"):
        if spec.get(key) is not None:
            opts[key] = spec[key]
    return opts


def plan_indexes(
    attributes: Mapping[str, Mapping[str, Any]],
    indices: Mapping[str, Mapping[str, Any]],
) -> List[IndexPlan]:
    """
    Ordered index plan for a table.

    Explicit index entries come first in insertion order. Every attribute
    flagged ``index`` then gets a single-column index unless an explicit
    entry already covers exactly ``[name]``.
    """
    plans = [
        IndexPlan(columns=list(spec["columns"]), unique=spec["unique"], name=spec["name"])
        for spec in indices.values()
    ]

    covered = [spec["columns"] for spec in indices.values()]
    for name, spec in attributes.items():
        if not spec.get("index"):
            continue
        if [name] in covered:
            continue
        plans.append(IndexPlan(columns=[name], unique=bool(spec.get("unique", False))))
    return plans
