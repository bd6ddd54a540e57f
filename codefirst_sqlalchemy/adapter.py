"""
SQLAlchemy adapter - model-facing entry point.

Composes the type mapper, the migration renderer and (optionally) the
live schema executor. Nothing registers itself globally: the host builds
an adapter and hands it to whoever needs it.

    executor = SchemaExecutor.from_url("sqlite:///app.db")
    adapter = SQLAlchemyAdapter(executor=executor)

    print(adapter.generate_migration_class(User, "create_users"))
    adapter.create_schema(User)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence, Type, Union

from .declarative import Model
from .executor import SchemaExecutor
from .faults import AdapterConfigurationFault
from .migration import MIGRATION_VERSION
from .rendering import MigrationRenderer
from .schema import normalize_attributes, normalize_indices, plan_indexes
from .types import map_type

logger = logging.getLogger("codefirst.adapter")

__all__ = ["SQLAlchemyAdapter"]


class SQLAlchemyAdapter:
    """
    Adapter between code-first models and SQLAlchemy.

    Args:
        executor: Live DDL executor; required only for the DDL operations
        renderer: Migration renderer (default: one sharing ``type_mapper``)
        type_mapper: Abstract -> physical type translation
        migration_version: Version tag written into migration classes
    """

    name = "sqlalchemy"

    def __init__(
        self,
        executor: Optional[SchemaExecutor] = None,
        renderer: Optional[MigrationRenderer] = None,
        *,
        type_mapper: Callable[[Any], str] = map_type,
        migration_version: str = MIGRATION_VERSION,
    ):
        self.type_mapper = type_mapper
        self.renderer = renderer or MigrationRenderer(type_mapper)
        self.executor = executor
        self.migration_version = migration_version

    def _require_executor(self, operation: str) -> SchemaExecutor:
        if self.executor is None:
            raise AdapterConfigurationFault(operation, "SchemaExecutor")
        return self.executor

    # ── Mapping & rendering ──────────────────────────────────────────

    def map_type(self, type_: Any) -> str:
        return self.type_mapper(type_)

    def build_column_options(self, schema: dict) -> str:
        return self.renderer.build_column_options(schema)

    def build_index_options(self, schema: dict) -> str:
        return self.renderer.build_index_options(schema)

    def generate_create_table_migration(self, model: Type[Model]) -> str:
        return self.renderer.generate_create_table_migration(
            model.table_name,
            model.attributes_schema,
            model.indices_schema,
            timestamps=model.timestamps,
        )

    def generate_migration_class(self, model: Type[Model], migration_name: str) -> str:
        return self.renderer.generate_migration_class(
            model.table_name,
            model.attributes_schema,
            model.indices_schema,
            migration_name,
            version=self.migration_version,
            timestamps=model.timestamps,
        )

    # ── Live DDL ─────────────────────────────────────────────────────

    def create_table(self, model: Type[Model]):
        executor = self._require_executor("create table")
        return executor.create_table(
            model.table_name, model.attributes_schema, timestamps=model.timestamps,
        )

    def add_index(
        self,
        model: Type[Model],
        columns: Union[str, Sequence[str]],
        *,
        unique: bool = False,
        name: Optional[str] = None,
    ):
        executor = self._require_executor("add index")
        return executor.add_index(model.table_name, columns, unique=unique, name=name)

    def drop_table(self, model: Type[Model]) -> None:
        self._require_executor("drop table").drop_table(model.table_name)

    def table_exists(self, model: Type[Model]) -> bool:
        return self._require_executor("check table existence").table_exists(model.table_name)

    def create_schema(self, model: Type[Model]) -> List[str]:
        """
        Create the model's table plus every index its migration would add.

        Returns:
            Names of the indexes created, in creation order
        """
        executor = self._require_executor("create schema")
        attrs = normalize_attributes(model.attributes_schema)
        indices = normalize_indices(model.indices_schema)

        executor.create_table(model.table_name, attrs, timestamps=model.timestamps)
        created = []
        for plan in plan_indexes(attrs, indices):
            index = executor.add_index(
                model.table_name, plan.columns, unique=plan.unique, name=plan.name,
            )
            created.append(index.name)

        logger.info(f"Created schema for {model.__name__} ({len(created)} indexes)")
        return created
