"""Tests for building the data model from a snapshot."""

import pytest

from sourcerer.codegen.core.schema import DataModelError, TypeHintRegistry, build_data_model


class TestBuildDataModel:
    def test_entities_and_fields(self, data_model):
        assert list(data_model.entities) == ["User", "Post"]

        user = data_model.get_entity("User")
        assert user.table_name == "users"
        assert user.description == "Registered accounts"
        assert [f.name for f in user.fields] == ["id", "email", "role", "createdAt"]
        assert user.primary_key.column_name == "id"
        assert user.get_field("created_at") is user.get_field("createdAt")

    def test_enums(self, data_model):
        role = data_model.enums["UserRole"]
        assert role.type_name == "user_role"
        assert role.values == ["admin", "member"]
        assert data_model.get_entity("User").get_field("role").enum_name == "UserRole"

    def test_array_columns(self, data_model):
        tags = data_model.get_entity("Post").get_field("tags")
        assert tags.is_array
        assert tags.pg_type == "text"

    def test_relations(self, data_model):
        (relation,) = data_model.get_entity("Post").relations
        assert relation.name == "author"
        assert relation.target_entity == "User"
        assert relation.local_columns == ["author_id"]
        assert relation.foreign_columns == ["id"]

    def test_views_are_not_tables(self, snapshot, inflection):
        snapshot["tables"].append({"name": "active_users", "kind": "view", "columns": []})
        model = build_data_model(snapshot, inflection)
        assert [e.name for e in model.tables()] == ["User", "Post"]
        assert not model.get_entity("ActiveUser").is_table

    def test_unknown_relation_target_is_skipped(self, snapshot, inflection):
        snapshot["tables"][1]["foreign_keys"][0]["references"]["table"] = "ghosts"
        model = build_data_model(snapshot, inflection)
        assert model.get_entity("Post").relations == []

    def test_tag_overrides_names(self, snapshot, inflection):
        snapshot["tables"][0]["tags"] = {"name": "Account"}
        model = build_data_model(snapshot, inflection)
        assert "Account" in model.entities


class TestMalformedSnapshots:
    def test_not_an_object(self, inflection):
        with pytest.raises(DataModelError):
            build_data_model([], inflection)

    def test_table_without_name(self, inflection):
        with pytest.raises(DataModelError, match="without a name"):
            build_data_model({"tables": [{"columns": []}]}, inflection)

    def test_two_tables_mapping_to_one_entity(self, inflection):
        snapshot = {"tables": [{"name": "user"}, {"name": "users"}]}
        with pytest.raises(DataModelError, match="both map to entity 'User'"):
            build_data_model(snapshot, inflection)


class TestTypeHints:
    def test_hints_merge_in_order(self):
        hints = TypeHintRegistry([
            {"match": {"pg_type": "jsonb"}, "hints": {"ts": "Json", "zod": "z.any()"}},
            {"match": {"pg_type": "jsonb", "column": "settings"}, "hints": {"ts": "Settings"}},
        ])
        assert hints.get_hints(pg_type="jsonb", column="payload") == {"ts": "Json", "zod": "z.any()"}
        assert hints.get("ts", pg_type="jsonb", column="settings") == "Settings"
        assert hints.get_hints(pg_type="text") == {}
