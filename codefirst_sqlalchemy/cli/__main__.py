"""CodeFirst CLI - Main Entry Point.

Commands:
    generate model - Scaffold a model and its create-table migration
    schema create  - Create a model's table and indexes in the database
"""

import importlib
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__, __cli_name__
from .utils.colors import (
    success, error, dim, kv, next_steps, file_written,
    _CHECK, _CROSS,
)
from ..faults import Fault, ModelLookupFault


# ═══════════════════════════════════════════════════════════════════════════
# Custom Click help formatter
# ═══════════════════════════════════════════════════════════════════════════


class CodeFirstGroup(click.Group):
    """Click group subclass with aligned, coloured command listing."""

    def format_commands(
        self, ctx: click.Context, formatter: click.HelpFormatter
    ) -> None:
        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.get_command(ctx, subcommand)
            if cmd is None or cmd.hidden:
                continue
            commands.append((subcommand, cmd.get_short_help_str(limit=48)))

        if commands:
            with formatter.section(click.style("Commands", fg="cyan", bold=True)):
                max_len = max(len(c[0]) for c in commands) + 2
                for name, help_text in commands:
                    styled_name = click.style(name.ljust(max_len), fg="green")
                    formatter.write(f"  {styled_name} {help_text}\n")


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@click.group(cls=CodeFirstGroup)
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Minimal output')
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool):
    """Code-first models and migrations for SQLAlchemy.

    \b
    Quick start:
      codefirst generate model User email:string:index age:integer
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet
    _configure_logging(verbose, quiet)


# ============================================================================
# Commands
# ============================================================================

@cli.group(cls=CodeFirstGroup)
def generate():
    """Generate code from templates."""
    pass


@generate.command('model')
@click.argument('name')
@click.argument('attributes', nargs=-1)
@click.option('--skip-migration', is_flag=True, help='Do not generate a migration')
@click.option('--parent', type=str, help='Parent class (bare name or dotted path)')
@click.option('--timestamps/--no-timestamps', default=True, help='Add created_at/updated_at columns')
@click.option('--force', is_flag=True, help='Overwrite existing files')
@click.option('--config', 'config_path', type=click.Path(), default='codefirst.yaml',
              help='Config file (default: codefirst.yaml)')
@click.pass_context
def generate_model(
    ctx,
    name: str,
    attributes: Tuple[str, ...],
    skip_migration: bool,
    parent: Optional[str],
    timestamps: bool,
    force: bool,
    config_path: str,
):
    """
    Generate a model and its create-table migration.

    Attributes are written as name[:type][:index|uniq].

    Examples:
      codefirst generate model User email:string:index age:integer
      codefirst generate model Admin::Post title body:text author:references
      codefirst generate model Tag name:uniq --no-timestamps
      codefirst generate model Comment body:text --parent=ApplicationModel
    """
    from ..config import ConfigLoader
    from ..generators.model import ModelGenerator

    try:
        config = ConfigLoader.load(config_path)
        generator = ModelGenerator(
            name,
            attributes,
            skip_migration=skip_migration,
            parent=parent,
            timestamps=timestamps,
            force=force,
            config=config,
        )
        written = generator.run()
    except Fault as e:
        error(f"  {_CROSS} Failed to generate model: {e}")
        sys.exit(1)

    if not ctx.obj['quiet']:
        click.echo()
        success(f"  {_CHECK} Generated model '{generator.class_name}'")
        kv("Table", generator.table_name)
        for path in written:
            file_written(Path(path).name, verbose=ctx.obj['verbose'], path=str(path))
        if skip_migration:
            dim("  Migration skipped")
        click.echo()
        next_steps([
            "Review the generated model",
            "Apply the migration with your migration runner",
        ])


def _load_model(target: str):
    """Resolve ``module:Class`` (or ``module.Class``) from the current directory."""
    from ..declarative import Model

    module_name, sep, class_name = target.partition(":")
    if not sep:
        module_name, _, class_name = target.rpartition(".")
    if not module_name or not class_name:
        raise ModelLookupFault(target, "expected module:Class")

    # Ensure cwd is on sys.path
    cwd_str = str(Path.cwd())
    if cwd_str not in sys.path:
        sys.path.insert(0, cwd_str)
    importlib.invalidate_caches()

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ModelLookupFault(target, str(exc)) from exc

    model = getattr(module, class_name, None)
    if not (isinstance(model, type) and issubclass(model, Model)):
        raise ModelLookupFault(target, f"{class_name!r} is not a Model subclass")
    return model


@cli.group(cls=CodeFirstGroup)
def schema():
    """Apply model schemas to a live database."""
    pass


@schema.command('create')
@click.argument('target')
@click.option('--database-url', type=str, help='Database URL (default: database_url from config)')
@click.option('--config', 'config_path', type=click.Path(), default='codefirst.yaml',
              help='Config file (default: codefirst.yaml)')
@click.pass_context
def schema_create(ctx, target: str, database_url: Optional[str], config_path: str):
    """
    Create a model's table and indexes in the configured database.

    Examples:
      codefirst schema create models.user:User
      codefirst schema create models.user:User --database-url=sqlite:///app.db
    """
    from sqlalchemy.exc import SQLAlchemyError

    from ..adapter import SQLAlchemyAdapter
    from ..config import ConfigLoader
    from ..executor import SchemaExecutor

    try:
        config = ConfigLoader.load(config_path, overrides={"database_url": database_url})
        model = _load_model(target)
        executor = SchemaExecutor.from_config(config)
        try:
            adapter = SQLAlchemyAdapter(executor, migration_version=config.migration_version)
            indexes = adapter.create_schema(model)
        finally:
            executor.dispose()
    except (Fault, SQLAlchemyError) as e:
        error(f"  {_CROSS} Failed to create schema: {e}")
        sys.exit(1)

    if not ctx.obj['quiet']:
        click.echo()
        success(f"  {_CHECK} Created table '{model.table_name}'")
        kv("Database", config.database_url)
        for name in indexes:
            kv("Index", name)


def main():
    """Entry point for `codefirst` command."""
    cli(obj={})


if __name__ == '__main__':
    main()
