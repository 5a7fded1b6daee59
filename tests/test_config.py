"""Tests for configuration loading and templates."""

import json

import pytest

from sourcerer.codegen.core.config import (
    DEFAULT_HEADER,
    ConfigError,
    ConfigManager,
    GeneratorConfig,
    load_config,
)
from sourcerer.codegen.core.templates import (
    TemplateError,
    create_template_engine,
    render_interface,
)


@pytest.fixture
def manager():
    return ConfigManager()


class TestConfigLoading:
    def test_defaults(self, manager):
        config = manager.get_config()
        assert config.plugins == ["types"]
        assert config.output_dir == "generated"
        assert config.default_file == "index.ts"
        assert config.header_comment == DEFAULT_HEADER
        assert config.inflection["entity_name"] == ["singularize", "pascal_case"]
        assert config.config_dir is None

    def test_config_file_sets_config_dir(self, manager, tmp_path):
        path = tmp_path / "sourcerer.json"
        path.write_text(json.dumps({"plugins": ["types", "zod"], "output_dir": "src/gen"}))

        config = manager.get_config(config_file=path)

        assert config.plugins == ["types", "zod"]
        assert config.output_dir == "src/gen"
        assert config.config_dir == str(tmp_path.resolve())

    def test_overrides_win_over_file(self, manager, tmp_path):
        path = tmp_path / "sourcerer.json"
        path.write_text(json.dumps({"plugins": ["types", "zod"]}))
        config = manager.get_config({"plugins": ["kysely"]}, path)
        assert config.plugins == ["kysely"]

    def test_unknown_keys_go_to_custom(self, manager):
        config = manager.get_config({"banner": "hi"})
        assert config.custom == {"banner": "hi"}

    def test_missing_file(self, manager, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            manager.get_config(config_file=tmp_path / "missing.json")

    def test_non_json_file(self, manager, tmp_path):
        path = tmp_path / "sourcerer.yaml"
        path.write_text("plugins: []")
        with pytest.raises(ConfigError, match="must be JSON"):
            manager.get_config(config_file=path)

    def test_invalid_json(self, manager, tmp_path):
        path = tmp_path / "sourcerer.json"
        path.write_text("{nope")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            manager.get_config(config_file=path)

    def test_json_must_be_an_object(self, manager, tmp_path):
        path = tmp_path / "sourcerer.json"
        path.write_text("[]")
        with pytest.raises(ConfigError, match="JSON object"):
            manager.get_config(config_file=path)

    def test_save_config_flattens_custom(self, manager, tmp_path):
        path = tmp_path / "out.json"
        manager.save_config(GeneratorConfig(plugins=["zod"], custom={"banner": "hi"}), path)

        saved = json.loads(path.read_text())
        assert saved["plugins"] == ["zod"]
        assert saved["banner"] == "hi"
        assert "custom" not in saved

    def test_load_config_uses_global_manager(self):
        assert load_config({"output_dir": "out"}).output_dir == "out"


class TestValidateConfig:
    def test_valid_config_has_no_warnings(self, manager):
        assert manager.validate_config(manager.get_config()) == []

    def test_warnings(self, manager):
        config = GeneratorConfig(
            plugins=[{"options": {}}, 3],
            file_rules=[{"pattern": "types:"}],
            inflection={"table_name": []},
            default_file=None,
        )
        warnings = manager.validate_config(config)

        assert "Plugin entry 0 has no 'name'" in warnings
        assert "Plugin entry 1 must be a name or an object" in warnings
        assert "File rule 0 needs both 'pattern' and 'file'" in warnings
        assert "Unknown inflection setting: table_name" in warnings

    def test_no_plugins(self, manager):
        warnings = manager.validate_config(GeneratorConfig(plugins=[]))
        assert any("No plugins" in warning for warning in warnings)


class TestTemplates:
    def test_render_interface(self):
        source = render_interface("User", [
            {"name": "id", "type": "number", "optional": False},
            {"name": "email", "type": "string", "optional": True},
        ])
        assert source == "interface User {\n  id: number;\n  email?: string;\n}"

    def test_filters(self):
        engine = create_template_engine(templates={
            "t": "{{ name | camel_case }} {{ name | pascal_case }} {{ text | quote }}",
        })
        assert engine.template_exists("t")
        assert engine.render_template("t", {"name": "user_id", "text": 'say "hi"'}) == \
            'userId UserId "say \\"hi\\""'

    def test_undefined_variable_is_an_error(self):
        engine = create_template_engine()
        with pytest.raises(TemplateError):
            engine.render_string("{{ missing }}", {})

    def test_output_is_not_escaped(self):
        engine = create_template_engine()
        assert engine.render_string("{{ t }}", {"t": "Array<string> & {}"}) == "Array<string> & {}"
