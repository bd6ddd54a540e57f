"""
CodeFirst SQLAlchemy - code-first models and migrations on SQLAlchemy.

Complete integration of:
- Declarations: Model, attribute(), index()
- Rendering: model schema to runnable migration source
- Executor: live CREATE TABLE / CREATE INDEX through a SQLAlchemy engine
- Adapter: explicit composition of mapper, renderer and executor
- Generators: `codefirst generate model` scaffolding
- Faults: structured error handling with fault domains
"""

__version__ = "0.1.0"

from .adapter import SQLAlchemyAdapter
from .config import CodeFirstConfig, ConfigLoader
from .declarative import Attribute, Index, Model, attribute, index
from .executor import SchemaExecutor, default_index_name
from .faults import (
    AdapterConfigurationFault,
    AttributeParseFault,
    ConfigInvalidFault,
    Fault,
    FaultDomain,
    GeneratorConflictFault,
    ModelLookupFault,
    SchemaContractFault,
    Severity,
)
from .migration import MIGRATION_VERSION, Migration, TableDefinition
from .rendering import (
    MigrationRenderer,
    build_column_options,
    build_index_options,
    generate_create_table_migration,
    generate_migration_class,
)
from .schema import NO_DEFAULT
from .types import RawType, map_type, sqlalchemy_type

__all__ = [
    "__version__",
    # Declarations
    "Model",
    "Attribute",
    "Index",
    "attribute",
    "index",
    # Rendering
    "MigrationRenderer",
    "build_column_options",
    "build_index_options",
    "generate_create_table_migration",
    "generate_migration_class",
    # Migrations
    "MIGRATION_VERSION",
    "Migration",
    "TableDefinition",
    # Executor / adapter
    "SchemaExecutor",
    "SQLAlchemyAdapter",
    "default_index_name",
    # Types
    "map_type",
    "sqlalchemy_type",
    "RawType",
    "NO_DEFAULT",
    # Config
    "CodeFirstConfig",
    "ConfigLoader",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "SchemaContractFault",
    "AttributeParseFault",
    "GeneratorConflictFault",
    "ConfigInvalidFault",
    "AdapterConfigurationFault",
    "ModelLookupFault",
]
