"""
Model generator - scaffolds a model file and its create-table migration.

    codefirst generate model Admin::User email:string:index age:integer

writes

    models/admin/__init__.py
    models/admin/user.py
    migrations/20260101_120000_create_admin_users.py

Every attribute is parsed and every artifact rendered before the first
file is written, so a bad token or a conflicting file leaves the
workspace untouched.
"""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..config import CodeFirstConfig
from ..faults import AttributeParseFault, GeneratorConflictFault
from ..inflector import camelize, pluralize, tableize, underscore
from ..rendering import MigrationRenderer, render_literal
from .attributes import AttributeDefinition, parse_attributes
from .templating import render_template

logger = logging.getLogger("codefirst.generators.model")

__all__ = ["GeneratedFile", "ModelGenerator"]

_NAMESPACE_SEPARATORS = re.compile(r"::|\.|/")


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass
class GeneratedFile:
    """A rendered artifact waiting to be written."""

    path: Path
    content: str
    overwrite_ok: bool = False


class ModelGenerator:
    """
    Generates model and migration source for one model.

    Args:
        name: Model name, optionally namespaced (``Admin::User``,
            ``admin.User`` or ``admin/User``)
        attributes: ``name[:type][:index]`` tokens
        skip_migration: Only generate the model file
        parent: Parent class, bare (resolved in the models package) or dotted
        timestamps: Give the table ``created_at``/``updated_at`` columns
            (through ``Model.timestamps``; ``timestamps = False`` otherwise)
        force: Overwrite existing files
        config: Paths and migration version
        root: Workspace root the configured paths are relative to
        now: Clock used for migration revisions
        renderer: Migration renderer
    """

    def __init__(
        self,
        name: str,
        attributes: Sequence[str] = (),
        *,
        skip_migration: bool = False,
        parent: Optional[str] = None,
        timestamps: bool = True,
        force: bool = False,
        config: Optional[CodeFirstConfig] = None,
        root: str | Path = ".",
        now: Callable[[], datetime.datetime] = _utcnow,
        renderer: Optional[MigrationRenderer] = None,
    ):
        self.name = name
        self.attribute_tokens = list(attributes)
        self.skip_migration = skip_migration
        self.parent = parent
        self.timestamps = timestamps
        self.force = force
        self.config = config or CodeFirstConfig()
        self.root = Path(root)
        self.now = now
        self.renderer = renderer or MigrationRenderer()

        parts = [p for p in _NAMESPACE_SEPARATORS.split(name.strip()) if p]
        if not parts:
            raise AttributeParseFault(name, "model name is missing")

        self.class_name = camelize(parts[-1])
        if not self.class_name.isidentifier():
            raise AttributeParseFault(name, f"{self.class_name!r} is not a valid class name")

        self.namespace: List[str] = [underscore(p) for p in parts[:-1]]
        self.file_name = underscore(self.class_name)
        self.table_name = pluralize("_".join(self.namespace + [self.file_name]))
        self.migration_name = f"create_{self.table_name}"

    # ── Paths ────────────────────────────────────────────────────────

    @property
    def models_dir(self) -> Path:
        return self.root / self.config.models_path

    @property
    def migrations_dir(self) -> Path:
        return self.root / self.config.migrations_path

    @property
    def model_path(self) -> Path:
        return self.models_dir.joinpath(*self.namespace, f"{self.file_name}.py")

    def migration_path(self, revision: str) -> Path:
        return self.migrations_dir / f"{revision}_{self.migration_name}.py"

    # ── Rendering ────────────────────────────────────────────────────

    def parsed_attributes(self) -> List[AttributeDefinition]:
        return [a for a in parse_attributes(self.attribute_tokens) if a.name != "id"]

    def _parent(self) -> Tuple[str, Optional[str]]:
        """(class name, import line) for the model's parent class."""
        if not self.parent:
            return "Model", None

        dotted = self.parent.replace("::", ".")
        if "." in dotted:
            module, _, class_name = dotted.rpartition(".")
        else:
            class_name = dotted
            package = self.config.models_path.strip("/").replace("/", ".")
            module = f"{package}.{underscore(class_name)}" if package else underscore(class_name)
        return class_name, f"from {module} import {class_name}"

    def render_model(self, attributes: List[AttributeDefinition]) -> str:
        declarations = []
        for attr in attributes:
            options = attr.declaration_options()
            suffix = f", {options}" if options else ""
            declarations.append(f"{attr.name} = attribute({render_literal(attr.type)}{suffix})")

        header = []
        if self.table_name != tableize(self.class_name):
            header.append(f"table_name = {render_literal(self.table_name)}")
        if not self.timestamps:
            header.append("timestamps = False")

        parent_name, parent_import = self._parent()
        library_imports = [] if parent_import else ["Model"]
        if declarations:
            library_imports.append("attribute")

        imports = []
        if library_imports:
            imports.append(f"from codefirst_sqlalchemy import {', '.join(library_imports)}")
        if parent_import:
            imports.append(parent_import)

        return render_template(
            "model.py.j2",
            class_name=self.class_name,
            namespace=".".join(self.namespace),
            imports=imports,
            parent_name=parent_name,
            header=header,
            declarations=declarations,
            validation_example=attributes[0].name if attributes else "name",
            belongs_to=[a.name[: -len("_id")] for a in attributes if a.reference],
        )

    def render_migration(self, attributes: List[AttributeDefinition], revision: str) -> str:
        schema: Dict[str, dict] = {attr.name: attr.to_schema() for attr in attributes}
        migration_class = self.renderer.generate_migration_class(
            self.table_name,
            schema,
            {},
            self.migration_name,
            version=self.config.migration_version,
            timestamps=self.timestamps,
        )
        return render_template(
            "migration.py.j2",
            revision=revision,
            migration_name=self.migration_name,
            generated_at=self.now().isoformat(),
            model_name=".".join(self.namespace + [self.class_name]),
            migration_class=migration_class.rstrip("\n"),
        )

    def render(self) -> List[GeneratedFile]:
        """Render every artifact without touching the filesystem."""
        attributes = self.parsed_attributes()
        files: List[GeneratedFile] = []

        # Namespace packages so the nested model is importable
        package_dir = self.models_dir
        for part in self.namespace:
            package_dir = package_dir / part
            files.append(GeneratedFile(package_dir / "__init__.py", "", overwrite_ok=True))

        files.append(GeneratedFile(self.model_path, self.render_model(attributes)))

        if not self.skip_migration:
            revision = self.now().strftime("%Y%m%d_%H%M%S")
            files.append(GeneratedFile(
                self.migration_path(revision),
                self.render_migration(attributes, revision),
            ))
        return files

    # ── Writing ──────────────────────────────────────────────────────

    def _check_conflicts(self, files: List[GeneratedFile]) -> None:
        if self.force:
            return
        for gen in files:
            if gen.path.exists() and not gen.overwrite_ok:
                raise GeneratorConflictFault(str(gen.path))
        if not self.skip_migration and self.migrations_dir.is_dir():
            existing = sorted(self.migrations_dir.glob(f"*_{self.migration_name}.py"))
            if existing:
                raise GeneratorConflictFault(
                    str(existing[0]),
                    f"another migration is already named {self.migration_name}",
                )

    def run(self) -> List[Path]:
        """
        Render, check for conflicts, then write.

        Returns:
            Paths written (existing namespace ``__init__.py`` files are left alone)
        """
        files = self.render()
        self._check_conflicts(files)

        written: List[Path] = []
        for gen in files:
            if gen.overwrite_ok and gen.path.exists():
                continue
            gen.path.parent.mkdir(parents=True, exist_ok=True)
            gen.path.write_text(gen.content, encoding="utf-8")
            written.append(gen.path)
            logger.info(f"Wrote {gen.path}")
        return written
