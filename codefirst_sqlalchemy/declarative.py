"""
Code-first model declarations.

Models declare attributes and indexes as class attributes; the class
collects them into the plain schema mappings the renderer and executor
consume.

    class Comment(Model):
        body = attribute("text", required=True)
        user_id = attribute("integer")
        post_id = attribute("integer")

        user_post = index("user_id", "post_id", unique=True)

    Comment.table_name          # "comments"
    Comment.attributes_schema   # {"body": {"type": "text", "required": True}, ...}
    Comment.indices_schema      # {"user_post": {"columns": ["user_id", "post_id"], "unique": True}}
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Optional

from .inflector import tableize
from .schema import NO_DEFAULT, canonical_columns

__all__ = ["Attribute", "Index", "Model", "attribute", "index"]


class Attribute:
    """A declared model attribute."""

    def __init__(
        self,
        type_: Any,
        *,
        index: bool = False,
        unique: bool = False,
        default: Any = NO_DEFAULT,
        required: bool = False,
        limit: Optional[int] = None,
        precision: Optional[int] = None,
        scale: Optional[int] = None,
    ):
        self.type = type_
        self.index = index
        self.unique = unique
        self.default = default
        self.required = required
        self.limit = limit
        self.precision = precision
        self.scale = scale
        self.name: Optional[str] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def to_schema(self) -> Dict[str, Any]:
        """Schema entry with only the options that were set."""
        schema: Dict[str, Any] = {"type": self.type}
        if self.index:
            schema["index"] = True
        if self.unique:
            schema["unique"] = True
        if self.default is not NO_DEFAULT:
            schema["default"] = self.default
        if self.required:
            schema["required"] = True
        for key in ("limit", "precision", "scale"):
            value = getattr(self, key)
            if value is not None:
                schema[key] = value
        return schema

    def __repr__(self) -> str:
        return f"Attribute(name={self.name!r}, type={self.type!r})"


class Index:
    """A declared (possibly composite) index."""

    def __init__(self, *columns: str, unique: bool = False, name: Optional[str] = None):
        self.columns = canonical_columns(list(columns), subject="index declaration")
        self.unique = unique
        self.name = name

    def to_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"columns": list(self.columns)}
        if self.unique:
            schema["unique"] = True
        if self.name:
            schema["name"] = self.name
        return schema

    def __repr__(self) -> str:
        return f"Index(columns={self.columns!r}, unique={self.unique!r})"


def attribute(type_: Any, **options: Any) -> Attribute:
    return Attribute(type_, **options)


def index(*columns: str, unique: bool = False, name: Optional[str] = None) -> Index:
    return Index(*columns, unique=unique, name=name)


class Model:
    """
    Base class for code-first models.

    Class attributes:
        table_name: Defaults to the pluralised snake-case class name
        timestamps: Whether ``created_at``/``updated_at`` are added when
            neither is declared
    """

    table_name: ClassVar[str] = ""
    timestamps: ClassVar[bool] = True
    attributes_schema: ClassVar[Dict[str, Dict[str, Any]]] = {}
    indices_schema: ClassVar[Dict[str, Dict[str, Any]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        attributes: Dict[str, Attribute] = {}
        indices: Dict[str, Index] = {}

        # Each base already carries its own ancestors' declarations
        for base in reversed(cls.__bases__):
            attributes.update(getattr(base, "_declared_attributes", {}))
            indices.update(getattr(base, "_declared_indices", {}))

        for key, value in cls.__dict__.items():
            if isinstance(value, Attribute):
                attributes[key] = value
            elif isinstance(value, Index):
                indices[key] = value
            else:
                # a plain class attribute shadows an inherited declaration
                attributes.pop(key, None)
                indices.pop(key, None)

        cls._declared_attributes = attributes
        cls._declared_indices = indices
        cls.attributes_schema = {name: attr.to_schema() for name, attr in attributes.items()}
        cls.indices_schema = {name: idx.to_schema() for name, idx in indices.items()}

        if "table_name" not in cls.__dict__:
            cls.table_name = tableize(cls.__name__)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} table={self.table_name}>"
