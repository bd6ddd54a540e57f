"""
Command-line attribute parser.

Turns generator arguments of the form ``name[:type][:index]`` into
:class:`AttributeDefinition` objects:

    email:string:index   -> email, string, indexed
    slug:string:uniq     -> slug, string, indexed + unique
    author:references    -> author_id, integer
    published:bool       -> published, boolean, default False
    title                -> title, string
"""

from __future__ import annotations

import keyword
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from ..faults import AttributeParseFault
from ..rendering import render_literal
from ..schema import NO_DEFAULT

__all__ = [
    "CLI_TYPE_MAP",
    "AttributeDefinition",
    "normalize_type",
    "parse_attribute",
    "parse_attributes",
]


# Command-line spelling -> abstract type
CLI_TYPE_MAP: Dict[str, str] = {
    "string": "string",
    "text": "string",
    "integer": "integer",
    "int": "integer",
    "boolean": "boolean",
    "bool": "boolean",
    "datetime": "datetime",
    "time": "datetime",
    "timestamp": "datetime",
    "date": "date",
    "decimal": "decimal",
    "numeric": "decimal",
    "float": "float",
    "double": "float",
    "binary": "binary",
    "blob": "binary",
    "json": "json",
    "jsonb": "json",
}

_REFERENCE_TYPES = frozenset({"references", "belongs_to"})
_INDEX_MODIFIERS = frozenset({"index"})
_UNIQUE_MODIFIERS = frozenset({"uniq", "unique"})


def normalize_type(raw: str) -> str:
    """Map a command-line type spelling to its abstract type; unknown spellings pass through."""
    return CLI_TYPE_MAP.get(raw.lower(), raw)


@dataclass
class AttributeDefinition:
    """One parsed generator attribute."""

    name: str
    type: str
    indexed: bool = False
    unique: bool = False
    default: Any = NO_DEFAULT
    reference: bool = False

    def __post_init__(self) -> None:
        if self.default is NO_DEFAULT and self.type == "boolean":
            self.default = False

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    def to_schema(self) -> Dict[str, Any]:
        """Attribute schema entry for the migration renderer."""
        schema: Dict[str, Any] = {"type": self.type}
        if self.indexed:
            schema["index"] = True
        if self.unique:
            schema["unique"] = True
        if self.has_default:
            schema["default"] = self.default
        return schema

    def declaration_options(self) -> str:
        """Keyword arguments for the model's ``attribute(...)`` declaration."""
        options: List[str] = []
        if self.indexed:
            options.append("index=True")
        if self.unique:
            options.append("unique=True")
        if self.has_default:
            options.append(f"default={render_literal(self.default)}")
        return ", ".join(options)


def parse_attribute(token: str, *, default: Any = NO_DEFAULT) -> AttributeDefinition:
    """
    Parse one ``name[:type][:index]`` token.

    Raises:
        AttributeParseFault: empty name, invalid identifier or stray segments
    """
    if not isinstance(token, str) or not token.strip():
        raise AttributeParseFault(str(token), "attribute name is missing")

    segments = [s.strip() for s in token.strip().split(":")]
    name, rest = segments[0], segments[1:]

    indexed = unique = False
    while rest and rest[-1].lower() in (_INDEX_MODIFIERS | _UNIQUE_MODIFIERS):
        modifier = rest.pop().lower()
        indexed = True
        if modifier in _UNIQUE_MODIFIERS:
            unique = True

    if name.endswith("_index"):
        name = name[: -len("_index")]
        indexed = True

    if not name:
        raise AttributeParseFault(token, "attribute name is missing")
    if len(rest) > 1:
        raise AttributeParseFault(token, f"unexpected segment(s) {rest[1:]}")

    raw_type = rest[0] if rest and rest[0] else "string"

    reference = raw_type.lower() in _REFERENCE_TYPES
    if reference:
        raw_type = "integer"
        if not name.endswith("_id"):
            name = f"{name}_id"

    if not name.isidentifier() or keyword.iskeyword(name):
        raise AttributeParseFault(token, f"{name!r} is not a valid attribute name")

    return AttributeDefinition(
        name=name,
        type=normalize_type(raw_type),
        indexed=indexed,
        unique=unique,
        default=default,
        reference=reference,
    )


def parse_attributes(tokens: Sequence[str]) -> List[AttributeDefinition]:
    """
    Parse every token; the first invalid one aborts the whole batch.

    Raises:
        AttributeParseFault: also when two tokens resolve to the same name
            (``author:references`` and ``author_id`` included)
    """
    parsed: List[AttributeDefinition] = []
    seen = set()
    for token in tokens:
        attr = parse_attribute(token)
        if attr.name in seen:
            raise AttributeParseFault(token, f"duplicate attribute {attr.name!r}")
        seen.add(attr.name)
        parsed.append(attr)
    return parsed
