"""
Tests for the model generator.
"""

import pytest

from codefirst_sqlalchemy.adapter import SQLAlchemyAdapter
from codefirst_sqlalchemy.config import CodeFirstConfig
from codefirst_sqlalchemy.faults import AttributeParseFault, GeneratorConflictFault
from codefirst_sqlalchemy.generators.model import ModelGenerator


def _exec(source: str) -> dict:
    namespace: dict = {}
    exec(compile(source, "<generated>", "exec"), namespace)
    return namespace


@pytest.fixture
def generate(tmp_path, fixed_now):
    def _generate(name, attributes=(), **kwargs):
        kwargs.setdefault("root", tmp_path)
        kwargs.setdefault("now", fixed_now)
        return ModelGenerator(name, attributes, **kwargs)
    return _generate


class TestNames:
    def test_plain(self, generate):
        gen = generate("BlogPost")
        assert gen.class_name == "BlogPost"
        assert gen.table_name == "blog_posts"
        assert gen.migration_name == "create_blog_posts"

    def test_lowercase_name_is_camelized(self, generate, tmp_path):
        gen = generate("user")
        assert gen.class_name == "User"
        assert gen.model_path == tmp_path / "models" / "user.py"

    @pytest.mark.parametrize("name", ["Admin::User", "admin.User", "admin/User"])
    def test_namespaced(self, generate, tmp_path, name):
        gen = generate(name)
        assert gen.class_name == "User"
        assert gen.namespace == ["admin"]
        assert gen.table_name == "admin_users"
        assert gen.model_path == tmp_path / "models" / "admin" / "user.py"

    def test_invalid_name(self, generate):
        with pytest.raises(AttributeParseFault):
            generate("::")
        with pytest.raises(AttributeParseFault):
            generate("9Lives")


class TestModelFile:
    def test_rendered_model(self, generate, tmp_path):
        generate("User", ["email:string:index", "age:integer"]).run()
        source = (tmp_path / "models" / "user.py").read_text()
        assert source == (
            '"""\n'
            'User model.\n'
            '"""\n'
            '\n'
            'from codefirst_sqlalchemy import Model, attribute\n'
            '\n'
            '\n'
            'class User(Model):\n'
            '    email = attribute("string", index=True)\n'
            '    age = attribute("integer")\n'
            '\n'
            '    # Add validations here\n'
            '    # validates("email", presence=True)\n'
            '\n'
            '    # Add associations here\n'
            '    # belongs_to("owner")\n'
            '    # has_many("items")\n'
        )

    def test_model_is_importable(self, generate, tmp_path):
        generate("Post", ["title", "published:bool", "slug:uniq"]).run()
        Post = _exec((tmp_path / "models" / "post.py").read_text())["Post"]
        assert Post.table_name == "posts"
        assert Post.attributes_schema == {
            "title": {"type": "string"},
            "published": {"type": "boolean", "default": False},
            "slug": {"type": "string", "index": True, "unique": True},
        }

    def test_namespaced_model(self, generate, tmp_path):
        written = generate("Admin::User", ["name"], skip_migration=True).run()
        assert written == [
            tmp_path / "models" / "admin" / "__init__.py",
            tmp_path / "models" / "admin" / "user.py",
        ]
        source = written[1].read_text()
        assert "User model (admin)." in source
        assert '    table_name = "admin_users"\n\n    name = attribute("string")' in source
        assert _exec(source)["User"].table_name == "admin_users"

    def test_existing_namespace_package_is_kept(self, generate, tmp_path):
        package = tmp_path / "models" / "admin"
        package.mkdir(parents=True)
        (package / "__init__.py").write_text("# admin models\n")

        written = generate("Admin::Post", skip_migration=True).run()
        assert written == [package / "post.py"]
        assert (package / "__init__.py").read_text() == "# admin models\n"

    def test_no_timestamps(self, generate, tmp_path):
        generate("Tag", ["name"], timestamps=False).run()
        source = (tmp_path / "models" / "tag.py").read_text()
        assert "    timestamps = False\n" in source
        assert "created_at" not in source
        assert _exec(source)["Tag"].timestamps is False

    def test_declared_timestamp_suppresses_pair(self, generate, tmp_path):
        generate("Event", ["created_at:datetime"]).run()
        source = (tmp_path / "models" / "event.py").read_text()
        assert source.count("created_at = attribute") == 1
        assert "updated_at" not in source

    def test_id_attribute_ignored(self, generate, tmp_path):
        generate("Thing", ["id:integer", "label"]).run()
        assert "id = attribute" not in (tmp_path / "models" / "thing.py").read_text()

    def test_references_suggest_belongs_to(self, generate, tmp_path):
        generate("Comment", ["body:text", "author:references"]).run()
        source = (tmp_path / "models" / "comment.py").read_text()
        assert '    author_id = attribute("integer")' in source
        assert '    # belongs_to("author")' in source
        assert '# belongs_to("owner")' not in source

    def test_bare_parent(self, generate, tmp_path):
        generate("User", ["name"], parent="ApplicationModel").run()
        source = (tmp_path / "models" / "user.py").read_text()
        assert "from codefirst_sqlalchemy import attribute\n" in source
        assert "from models.application_model import ApplicationModel\n" in source
        assert "class User(ApplicationModel):" in source

    def test_dotted_parent(self, generate, tmp_path):
        generate("User", ["name"], parent="app.base.Base").run()
        source = (tmp_path / "models" / "user.py").read_text()
        assert "from app.base import Base\n" in source
        assert "class User(Base):" in source

    def test_configured_paths(self, generate, tmp_path):
        config = CodeFirstConfig(models_path="app/models", migrations_path="db/migrate")
        written = generate("User", ["name"], parent="Base", config=config).run()
        assert written == [
            tmp_path / "app" / "models" / "user.py",
            tmp_path / "db" / "migrate" / "20260102_030405_create_users.py",
        ]
        assert "from app.models.base import Base" in written[0].read_text()


class TestModelMatchesMigration:
    """The generated model renders the same migration the generator wrote."""

    @pytest.mark.parametrize("timestamps", [True, False])
    def test_adapter_render_matches_file(self, generate, tmp_path, timestamps):
        generate("User", ["email:string:index", "age:integer"], timestamps=timestamps).run()
        User = _exec((tmp_path / "models" / "user.py").read_text())["User"]
        (path,) = (tmp_path / "migrations").glob("*_create_users.py")

        rendered = SQLAlchemyAdapter().generate_migration_class(User, "create_users")
        assert rendered.rstrip("\n") in path.read_text()
        assert ("t.timestamps()" in rendered) is timestamps

    def test_model_timestamp_columns_are_not_null(self, generate, tmp_path, executor):
        generate("User", ["email"]).run()
        User = _exec((tmp_path / "models" / "user.py").read_text())["User"]
        assert "created_at" not in User.attributes_schema

        SQLAlchemyAdapter(executor).create_table(User)
        cols = {c["name"]: c for c in executor.columns("users")}
        assert cols["created_at"]["nullable"] is False
        assert cols["updated_at"]["nullable"] is False


class TestEmptyModel:
    def test_no_attributes_no_timestamps(self, generate, tmp_path, executor):
        generate("Tag", timestamps=False).run()
        model_source = (tmp_path / "models" / "tag.py").read_text()
        assert "from codefirst_sqlalchemy import Model\n" in model_source
        Tag = _exec(model_source)["Tag"]
        assert Tag.attributes_schema == {}
        assert Tag.timestamps is False

        (path,) = (tmp_path / "migrations").glob("*_create_tags.py")
        _exec(path.read_text())["CreateTags"](executor).change()
        assert [c["name"] for c in executor.columns("tags")] == ["id"]

    def test_no_attributes_with_timestamps(self, generate, tmp_path):
        generate("Tag").run()
        source = (tmp_path / "models" / "tag.py").read_text()
        assert "class Tag(Model):\n    pass\n" in source
        assert _exec(source)["Tag"].timestamps is True

    def test_no_attributes_with_parent(self, generate, tmp_path):
        generate("Tag", parent="app.base.Base", timestamps=False).run()
        source = (tmp_path / "models" / "tag.py").read_text()
        assert "class Tag(Base):\n    timestamps = False\n\n    # Add validations here" in source
        compile(source, "<generated>", "exec")


class TestMigrationFile:
    def test_migration_file(self, generate, tmp_path, executor):
        written = generate("User", ["email:string:index", "age:integer"]).run()
        path = tmp_path / "migrations" / "20260102_030405_create_users.py"
        assert written[-1] == path

        source = path.read_text()
        assert source.startswith(
            '"""\n'
            'Migration: 20260102_030405_create_users\n'
            'Generated: 2026-01-02T03:04:05+00:00\n'
            'Model: User\n'
            '"""\n'
            '\n'
            'from codefirst_sqlalchemy.migration import Migration\n'
            '\n'
            '\n'
            'class CreateUsers(Migration):\n'
            '    version = "1.0"\n'
        )
        assert source.endswith('        self.add_index("users", "email")\n')

        _exec(source)["CreateUsers"](executor).change()
        assert [c["name"] for c in executor.columns("users")] == [
            "id", "email", "age", "created_at", "updated_at",
        ]
        assert executor.indexes("users") == [
            {"name": "ix_users_email", "columns": ["email"], "unique": False},
        ]

    def test_configured_version(self, generate, tmp_path):
        generate("User", config=CodeFirstConfig(migration_version="2.0")).run()
        (path,) = (tmp_path / "migrations").glob("*_create_users.py")
        assert 'version = "2.0"' in path.read_text()

    def test_no_timestamps_migration(self, generate, tmp_path):
        generate("Tag", ["name:uniq"], timestamps=False).run()
        (path,) = (tmp_path / "migrations").glob("*.py")
        source = path.read_text()
        assert "t.timestamps()" not in source
        assert 'self.add_index("tags", "name", unique=True)' in source

    def test_namespaced_migration(self, generate, tmp_path):
        generate("Admin::User").run()
        path = tmp_path / "migrations" / "20260102_030405_create_admin_users.py"
        source = path.read_text()
        assert "Model: admin.User" in source
        assert "class CreateAdminUsers(Migration):" in source
        assert 'with self.create_table("admin_users") as t:' in source

    def test_skip_migration(self, generate, tmp_path):
        written = generate("User", ["name"], skip_migration=True).run()
        assert written == [tmp_path / "models" / "user.py"]
        assert not (tmp_path / "migrations").exists()


class TestConflicts:
    def test_existing_model_file(self, generate, tmp_path):
        generate("User").run()
        with pytest.raises(GeneratorConflictFault):
            generate("User").run()

    def test_existing_migration_with_other_revision(self, generate, tmp_path):
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        (migrations / "20250101_000000_create_users.py").write_text("")

        with pytest.raises(GeneratorConflictFault, match="already named create_users"):
            generate("User").run()
        assert not (tmp_path / "models").exists()

    def test_force_overwrites(self, generate, tmp_path):
        generate("User", ["name"]).run()
        generate("User", ["email"], force=True).run()
        assert "email = attribute" in (tmp_path / "models" / "user.py").read_text()

    def test_duplicate_attribute_writes_nothing(self, generate, tmp_path):
        with pytest.raises(AttributeParseFault, match="duplicate attribute 'email'"):
            generate("User", ["email", "email:integer"]).run()
        assert list(tmp_path.iterdir()) == []

    def test_parse_error_writes_nothing(self, generate, tmp_path):
        with pytest.raises(AttributeParseFault):
            generate("User", ["name", "first-name"]).run()
        assert list(tmp_path.iterdir()) == []

    def test_render_does_not_touch_filesystem(self, generate, tmp_path):
        files = generate("Admin::User", ["name"]).render()
        assert [f.path.name for f in files] == [
            "__init__.py", "user.py", "20260102_030405_create_admin_users.py",
        ]
        assert list(tmp_path.iterdir()) == []
