"""
Shared test fixtures and helpers for the codefirst test suite.
"""

import datetime

import pytest
import sqlalchemy as sa

from codefirst_sqlalchemy.executor import SchemaExecutor
from codefirst_sqlalchemy.migration import Migration
from codefirst_sqlalchemy.rendering import MigrationRenderer


FIXED_NOW = datetime.datetime(2026, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)


@pytest.fixture
def executor():
    """In-memory SQLite executor, disposed after the test."""
    ex = SchemaExecutor.from_url("sqlite://")
    yield ex
    ex.dispose()


@pytest.fixture
def renderer():
    return MigrationRenderer()


@pytest.fixture
def fixed_now():
    return lambda: FIXED_NOW


# ============================================================================
# Migration Helpers
# ============================================================================


def load_migration(source: str, class_name: str):
    """Execute rendered migration source and return the named class."""
    namespace = {"Migration": Migration}
    exec(compile(source, f"<{class_name}>", "exec"), namespace)
    return namespace[class_name]


def run_migration(source: str, class_name: str, executor: SchemaExecutor) -> Migration:
    migration = load_migration(source, class_name)(executor)
    migration.change()
    return migration


def table_ddl(executor: SchemaExecutor, table_name: str) -> str:
    """The CREATE TABLE statement SQLite stored for ``table_name``."""
    with executor.engine.connect() as conn:
        return conn.execute(
            sa.text("SELECT sql FROM sqlite_master WHERE type = 'table' AND name = :name"),
            {"name": table_name},
        ).scalar_one()
