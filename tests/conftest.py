"""Global fixtures for sourcerer tests."""

import json
from typing import Callable, List, Optional, Sequence

import pytest

from sourcerer.codegen.core.file_assignment import FileRule
from sourcerer.codegen.core.naming import Inflection
from sourcerer.codegen.core.plugin import DeclareContext, Plugin, RenderContext
from sourcerer.codegen.core.schema import build_data_model
from sourcerer.codegen.core.symbols import RenderedSymbol, SymbolDeclaration
from sourcerer.codegen.core.syntax import Declaration, DeclarationKind, ExportKind

DEFAULT_CHAINS = {
    "entity_name": ["singularize", "pascal_case"],
    "field_name": ["camel_case"],
    "enum_name": ["pascal_case"],
}


SNAPSHOT = {
    "enums": [{"name": "user_role", "schema": "public", "values": ["admin", "member"]}],
    "tables": [
        {
            "name": "users",
            "schema": "public",
            "kind": "table",
            "description": "Registered accounts",
            "columns": [
                {"name": "id", "type": "int4", "primary_key": True, "has_default": True},
                {"name": "email", "type": "text"},
                {"name": "role", "type": "user_role"},
                {"name": "created_at", "type": "timestamptz", "has_default": True},
            ],
        },
        {
            "name": "posts",
            "schema": "public",
            "kind": "table",
            "columns": [
                {"name": "id", "type": "uuid", "primary_key": True, "has_default": True},
                {"name": "author_id", "type": "int4"},
                {"name": "title", "type": "text"},
                {"name": "body", "type": "text", "nullable": True},
                {"name": "tags", "type": "text[]"},
            ],
            "foreign_keys": [
                {
                    "name": "posts_author_id_fkey",
                    "columns": ["author_id"],
                    "references": {"table": "users", "columns": ["id"]},
                }
            ],
        },
    ],
}


class StubPlugin(Plugin):
    """Configurable plugin for pipeline tests."""

    def __init__(
        self,
        name: str,
        provides: Sequence[str] = (),
        consumes: Sequence[str] = (),
        declarations: Sequence[SymbolDeclaration] = (),
        render: Optional[Callable[[RenderContext], List[RenderedSymbol]]] = None,
        rules: Sequence[FileRule] = (),
        render_with_imports: Sequence[str] = (),
        declare: Optional[Callable[[DeclareContext], List[SymbolDeclaration]]] = None,
    ):
        super().__init__({})
        self._name = name
        self._provides = list(provides)
        self._consumes = list(consumes)
        self._declarations = list(declarations)
        self._render = render
        self._declare = declare
        self._rules = list(rules)
        self.render_with_imports = list(render_with_imports)
        self.render_calls = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def provides(self) -> List[str]:
        return self._provides

    @property
    def consumes(self) -> List[str]:
        return self._consumes

    def file_defaults(self) -> List[FileRule]:
        return self._rules

    def declare(self, ctx: DeclareContext) -> List[SymbolDeclaration]:
        if self._declare:
            return self._declare(ctx)
        return self._declarations

    def render(self, ctx: RenderContext) -> List[RenderedSymbol]:
        self.render_calls += 1
        if self._render:
            return self._render(ctx)
        return [
            RenderedSymbol(
                name=declaration.name,
                capability=declaration.capability,
                node=Declaration(
                    DeclarationKind.CONST,
                    declaration.name,
                    f"const {declaration.name} = 1;",
                ),
                exports=ExportKind.NAMED,
            )
            for declaration in ctx.symbols.own()
        ]


@pytest.fixture
def snapshot():
    """A copy of the users/posts snapshot."""
    return json.loads(json.dumps(SNAPSHOT))


@pytest.fixture
def snapshot_file(tmp_path, snapshot):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot), encoding="utf-8")
    return path


@pytest.fixture
def inflection():
    return Inflection(DEFAULT_CHAINS)


@pytest.fixture
def data_model(snapshot, inflection):
    return build_data_model(snapshot, inflection)


@pytest.fixture
def make_plugin():
    """Factory for StubPlugin instances."""
    return StubPlugin
