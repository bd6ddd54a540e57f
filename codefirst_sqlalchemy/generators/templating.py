"""
Jinja2 environment for generated source files.

Templates live in ``codefirst_sqlalchemy/generators/templates``. Output is
Python source, so autoescaping is off and undefined variables fail loudly.
"""

from __future__ import annotations

from typing import Any, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined

from ..rendering import render_literal

__all__ = ["get_environment", "render_template"]

_environment: Optional[Environment] = None


def get_environment() -> Environment:
    """Shared environment, created on first use."""
    global _environment
    if _environment is None:
        env = Environment(
            loader=PackageLoader("codefirst_sqlalchemy.generators", "templates"),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        env.filters["pyliteral"] = render_literal
        _environment = env
    return _environment


def render_template(name: str, **context: Any) -> str:
    return get_environment().get_template(name).render(**context)
