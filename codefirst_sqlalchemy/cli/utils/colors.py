"""
CodeFirst CLI - styled output helpers built on Click.

    success(), error(), dim()
    kv()            - aligned key-value pair
    file_written()  - generated file announcement
    next_steps()    - numbered follow-up list

click.style handles NO_COLOR / TERM=dumb, so output degrades on plain
terminals.
"""

from __future__ import annotations

from typing import Sequence

import click

_ARROW = "\u2192"     # →
_CHECK = "\u2713"     # ✓
_CROSS = "\u2717"     # ✗


def success(message: str) -> None:
    """Print success message in green."""
    click.echo(click.style(message, fg="green"))


def error(message: str) -> None:
    """Print error message in red (to stderr)."""
    click.echo(click.style(message, fg="red"), err=True)


def dim(message: str) -> None:
    click.echo(click.style(message, dim=True))


def kv(key: str, value: str, *, key_width: int = 14, indent: int = 2) -> None:
    """
    Print an aligned key-value pair.

        Table:        admin_users
    """
    k = click.style(f"{key}:", fg="white")
    v = click.style(str(value), fg="cyan")
    padding = " " * max(1, key_width - len(key) - 1)
    click.echo(f"{' ' * indent}{k}{padding}{v}")


def file_written(label: str, *, verbose: bool = False, path: str = "") -> None:
    """Announce a generated file."""
    mark = click.style(f"  {_CHECK}", fg="green")
    click.echo(f"{mark} {click.style(label, fg='white')}")
    if verbose and path:
        dim(f"    {_ARROW} {path}")


def next_steps(steps_list: Sequence[str], *, title: str = "Next steps") -> None:
    click.echo(click.style(f"  {title}", fg="cyan", bold=True))
    for i, text in enumerate(steps_list, 1):
        click.echo(f"    {i}. {text}")
