"""Tests for pre-render validation."""

import pytest

from sourcerer.codegen.core.errors import (
    CategoryConflict,
    CircularDependency,
    UnsatisfiedRequirement,
)
from sourcerer.codegen.core.registry import SymbolRegistry
from sourcerer.codegen.core.symbols import SymbolDeclaration
from sourcerer.codegen.core.validation import (
    validate_all,
    validate_category_providers,
    validate_dependency_graph,
    validate_plugin_graph,
    validate_requirements,
)


class TestCategoryProviders:
    def test_two_providers_for_one_category(self, make_plugin):
        plugins = [
            make_plugin("kysely", provides=["queries"]),
            make_plugin("drizzle", provides=["queries"]),
        ]
        with pytest.raises(CategoryConflict) as exc_info:
            validate_category_providers(plugins)
        assert exc_info.value.existing_provider == "kysely"
        assert exc_info.value.new_provider == "drizzle"

    def test_prefix_entries_are_not_categories(self, make_plugin):
        plugins = [
            make_plugin("a", provides=["types:"]),
            make_plugin("b", provides=["types:"]),
        ]
        validate_category_providers(plugins)


class TestRequirements:
    def test_category_requirement_met_by_prefix_provides(self, make_plugin):
        plugins = [
            make_plugin("types", provides=["types:"]),
            make_plugin("kysely", provides=["queries"], consumes=["types"]),
        ]
        validate_requirements(plugins, SymbolRegistry())

    def test_category_requirement_met_by_category_provider(self, make_plugin):
        registry = SymbolRegistry()
        registry.register_category_provider("queries", "kysely")
        plugins = [
            make_plugin("kysely", provides=["queries"]),
            make_plugin("hono", consumes=["queries"]),
        ]
        validate_requirements(plugins, registry)

    def test_category_requirement_met_by_declaration(self, make_plugin):
        registry = SymbolRegistry()
        registry.register(SymbolDeclaration("User", "types:User"))
        validate_requirements([make_plugin("zod", consumes=["types"])], registry)

    def test_missing_category(self, make_plugin):
        plugins = [make_plugin("hono", consumes=["queries"])]
        with pytest.raises(UnsatisfiedRequirement) as exc_info:
            validate_requirements(plugins, SymbolRegistry())
        assert exc_info.value.capability == "queries"
        assert exc_info.value.consumer == "hono"

    def test_qualified_requirement_met_by_declaration(self, make_plugin):
        registry = SymbolRegistry()
        registry.register(SymbolDeclaration("User", "types:User"))
        validate_requirements([make_plugin("zod", consumes=["types:User"])], registry)

    def test_qualified_requirement_met_by_prefix_entry(self, make_plugin):
        plugins = [
            make_plugin("types", provides=["types:"]),
            make_plugin("zod", consumes=["types:User"]),
        ]
        validate_requirements(plugins, SymbolRegistry())

    def test_qualified_requirement_unmet(self, make_plugin):
        plugins = [
            make_plugin("types", provides=["types:Post"]),
            make_plugin("zod", consumes=["types:User"]),
        ]
        with pytest.raises(UnsatisfiedRequirement):
            validate_requirements(plugins, SymbolRegistry())


class TestGraphs:
    def test_plugin_cycle(self, make_plugin):
        plugins = [
            make_plugin("a", provides=["alpha"], consumes=["beta"]),
            make_plugin("b", provides=["beta"], consumes=["alpha"]),
        ]
        with pytest.raises(CircularDependency) as exc_info:
            validate_plugin_graph(plugins, SymbolRegistry())
        assert exc_info.value.level == "plugin"
        assert exc_info.value.cycle == ["a", "b", "a"]
        assert "a -> b -> a" in str(exc_info.value)

    def test_self_requirement_is_not_a_cycle(self, make_plugin):
        plugins = [make_plugin("a", provides=["alpha"], consumes=["alpha"])]
        validate_plugin_graph(plugins, SymbolRegistry())

    def test_owner_of_declaration_is_a_provider(self, make_plugin):
        registry = SymbolRegistry()
        registry.register(SymbolDeclaration("X", "misc:X"), owner="b")
        plugins = [
            make_plugin("a", provides=["alpha"], consumes=["misc:X"]),
            make_plugin("b", consumes=["alpha"]),
        ]
        with pytest.raises(CircularDependency):
            validate_plugin_graph(plugins, registry)

    def test_symbol_cycle(self):
        declarations = [
            SymbolDeclaration("A", "x:A", depends_on=("x:B",)),
            SymbolDeclaration("B", "x:B", depends_on=("x:A",)),
        ]
        with pytest.raises(CircularDependency) as exc_info:
            validate_dependency_graph(declarations)
        assert exc_info.value.level == "symbol"
        assert exc_info.value.cycle == ["x:A", "x:B", "x:A"]

    def test_symbol_dag(self):
        declarations = [
            SymbolDeclaration("A", "x:A", depends_on=("x:B", "x:C")),
            SymbolDeclaration("B", "x:B", depends_on=("x:C",)),
            SymbolDeclaration("C", "x:C"),
        ]
        validate_dependency_graph(declarations)

    def test_symbol_cycle_through_category_capabilities(self):
        registry = SymbolRegistry()
        registry.register_category_provider("queries", "kysely")
        registry.register(
            SymbolDeclaration("a", "queries:kysely:A", depends_on=("queries:B",)), owner="kysely"
        )
        registry.register(
            SymbolDeclaration("b", "queries:kysely:B", depends_on=("queries:A",)), owner="kysely"
        )

        with pytest.raises(CircularDependency) as exc_info:
            validate_all([], registry)
        assert exc_info.value.cycle == ["queries:kysely:A", "queries:kysely:B", "queries:kysely:A"]


class TestValidateAll:
    def test_valid_setup_passes(self, make_plugin):
        registry = SymbolRegistry()
        registry.register_category_provider("queries", "kysely")
        registry.register(SymbolDeclaration("User", "types:User"), owner="types")
        plugins = [
            make_plugin("types", provides=["types:"]),
            make_plugin("kysely", provides=["queries"], consumes=["types"]),
            make_plugin("hono", provides=["http-routes"], consumes=["queries"]),
        ]
        validate_all(plugins, registry)

    def test_requirements_checked_before_cycles(self, make_plugin):
        plugins = [
            make_plugin("a", provides=["alpha"], consumes=["beta", "missing"]),
            make_plugin("b", provides=["beta"], consumes=["alpha"]),
        ]
        with pytest.raises(UnsatisfiedRequirement):
            validate_all(plugins, SymbolRegistry())
