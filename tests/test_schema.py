"""
Tests for schema normalisation and index planning.
"""

import pytest

from codefirst_sqlalchemy.faults import SchemaContractFault
from codefirst_sqlalchemy.schema import (
    NO_DEFAULT,
    IndexPlan,
    canonical_columns,
    column_options,
    needs_timestamps,
    normalize_attributes,
    normalize_indices,
    plan_indexes,
)


class TestCanonicalColumns:
    def test_scalar_becomes_list(self):
        assert canonical_columns("email") == ["email"]

    def test_sequence_keeps_order(self):
        assert canonical_columns(("user_id", "post_id")) == ["user_id", "post_id"]

    def test_empty_rejected(self):
        with pytest.raises(SchemaContractFault):
            canonical_columns([])

    def test_non_string_rejected(self):
        with pytest.raises(SchemaContractFault):
            canonical_columns(["a", 3])
        with pytest.raises(SchemaContractFault):
            canonical_columns(42)


class TestNormalizeAttributes:
    def test_none_is_empty(self):
        assert normalize_attributes(None) == {}

    def test_type_objects_become_tokens(self):
        class Text:
            name = "text"

        assert normalize_attributes({"body": {"type": Text()}}) == {"body": {"type": "text"}}

    def test_unknown_keys_dropped(self):
        attrs = normalize_attributes({"email": {"type": "string", "label": "E-mail"}})
        assert attrs == {"email": {"type": "string"}}

    def test_missing_type(self):
        with pytest.raises(SchemaContractFault, match="missing 'type'"):
            normalize_attributes({"email": {}})

    def test_non_mapping(self):
        with pytest.raises(TypeError):
            normalize_attributes(["email"])
        with pytest.raises(TypeError):
            normalize_attributes({"email": "string"})

    def test_non_string_name(self):
        with pytest.raises(SchemaContractFault):
            normalize_attributes({1: {"type": "string"}})

    def test_insertion_order_preserved(self):
        attrs = normalize_attributes({
            "b": {"type": "string"},
            "a": {"type": "integer"},
        })
        assert list(attrs) == ["b", "a"]


class TestNormalizeIndices:
    def test_scalar_columns_canonicalised(self):
        idx = normalize_indices({"email_idx": {"columns": "email"}})
        assert idx == {"email_idx": {"columns": ["email"], "unique": False, "name": None}}

    def test_missing_columns(self):
        with pytest.raises(SchemaContractFault):
            normalize_indices({"broken": {"unique": True}})

    def test_empty_columns(self):
        with pytest.raises(SchemaContractFault):
            normalize_indices({"broken": {"columns": []}})


class TestTimestampsRule:
    def test_neither_declared(self):
        assert needs_timestamps({"email": {"type": "string"}})

    def test_one_declared_suppresses_both(self):
        assert not needs_timestamps({"created_at": {"type": "datetime"}})
        assert not needs_timestamps({"updated_at": {"type": "datetime"}})


class TestColumnOptions:
    def test_empty(self):
        assert column_options({"type": "string"}) == {}

    def test_fixed_order(self):
        opts = column_options({
            "type": "decimal",
            "scale": 2,
            "precision": 10,
            "default": 0,
            "required": True,
            "limit": 4,
        })
        assert list(opts.items()) == [
            ("null", False), ("default", 0), ("limit", 4), ("precision", 10), ("scale", 2),
        ]

    def test_none_default_is_kept(self):
        assert column_options({"type": "string", "default": None}) == {"default": None}

    def test_no_default_sentinel_is_absent(self):
        assert column_options({"type": "string", "default": NO_DEFAULT}) == {}

    def test_required_false_omitted(self):
        assert column_options({"type": "string", "required": False}) == {}


class TestPlanIndexes:
    def test_explicit_first_then_attribute_level(self):
        attrs = normalize_attributes({
            "email": {"type": "string", "index": True},
            "user_id": {"type": "integer"},
            "post_id": {"type": "integer"},
        })
        idx = normalize_indices({"user_post": {"columns": ["user_id", "post_id"], "unique": True}})
        assert plan_indexes(attrs, idx) == [
            IndexPlan(columns=["user_id", "post_id"], unique=True),
            IndexPlan(columns=["email"]),
        ]

    def test_duplicate_single_column_index_is_collapsed(self):
        attrs = normalize_attributes({"email": {"type": "string", "index": True}})
        idx = normalize_indices({"email_idx": {"columns": "email", "name": "by_email"}})
        plans = plan_indexes(attrs, idx)
        assert plans == [IndexPlan(columns=["email"], name="by_email")]

    def test_composite_does_not_cover_single(self):
        attrs = normalize_attributes({"email": {"type": "string", "index": True}})
        idx = normalize_indices({"pair": {"columns": ["email", "name"]}})
        assert len(plan_indexes(attrs, idx)) == 2

    def test_unique_attribute_index(self):
        attrs = normalize_attributes({"slug": {"type": "string", "index": True, "unique": True}})
        assert plan_indexes(attrs, {}) == [IndexPlan(columns=["slug"], unique=True)]

    def test_options(self):
        assert IndexPlan(columns=["a"]).options() == {}
        assert IndexPlan(columns=["a", "b"], unique=True, name="ab").options() == {
            "unique": True, "name": "ab",
        }
        assert IndexPlan(columns=["a", "b"]).composite
