"""
TypeScript types plugin.

Declares one interface per entity (``types:User``), an insert shape per
table (``types:User:insert`` -> ``UserInsert``) and a string-union type
per enum.
"""

from typing import List

from ...logging_config import get_logger
from ..core.file_assignment import FileRule, normalize_file_naming
from ..core.plugin import DeclareContext, Plugin, RenderContext
from ..core.schema import Entity, EnumDef
from ..core.symbols import RenderedSymbol, SymbolDeclaration
from ..core.syntax import Declaration, DeclarationKind, ExportKind
from ..core.templates import get_default_template_engine, render_interface
from .type_mapping import TypeMapper

logger = get_logger(__name__)


class TypesPlugin(Plugin):
    """TypeScript interfaces for entities, insert shapes and enums."""

    @property
    def name(self) -> str:
        return "types"

    @property
    def provides(self) -> List[str]:
        return ["types:"]

    def file_defaults(self) -> List[FileRule]:
        return [FileRule("types:", normalize_file_naming(self.option("file"), "types.ts"))]

    def declare(self, ctx: DeclareContext) -> List[SymbolDeclaration]:
        declarations = []

        for enum in ctx.data_model.enums.values():
            declarations.append(
                SymbolDeclaration(
                    name=enum.name,
                    capability=f"types:{enum.name}",
                    base_entity_name=enum.name,
                )
            )

        for entity in ctx.data_model.entities.values():
            declarations.append(
                SymbolDeclaration(
                    name=entity.name,
                    capability=f"types:{entity.name}",
                    base_entity_name=entity.name,
                )
            )
            if entity.is_table and self.option("insert_shapes", True):
                declarations.append(
                    SymbolDeclaration(
                        name=ctx.inflection.shape_name(entity.name, "insert"),
                        capability=f"types:{entity.name}:insert",
                        base_entity_name=entity.name,
                    )
                )

        return declarations

    def render(self, ctx: RenderContext) -> List[RenderedSymbol]:
        mapper = TypeMapper(ctx.data_model, ctx.type_hints)
        symbols = ctx.symbols
        rendered = []

        for declaration in symbols.own():
            capability = declaration.capability
            entity = ctx.data_model.get_entity(declaration.base_entity_name)

            if entity is None:
                enum = ctx.data_model.enums[declaration.base_entity_name]
                node = self._render_enum(enum)
            else:
                insert = capability.endswith(":insert")
                node = symbols.for_symbol(
                    capability,
                    lambda: self._render_entity(entity, declaration.name, insert, mapper, symbols),
                )

            rendered.append(
                RenderedSymbol(
                    name=declaration.name,
                    capability=capability,
                    node=node,
                    exports=ExportKind.NAMED,
                )
            )

        logger.debug("Rendered %d type declarations", len(rendered))
        return rendered

    def _render_enum(self, enum: EnumDef) -> Declaration:
        union = " | ".join(f'"{value}"' for value in enum.values) or "never"
        source = get_default_template_engine().render_template(
            "ts_type_alias", {"name": enum.name, "value": union}
        )
        return Declaration(DeclarationKind.TYPE, enum.name, source)

    def _render_entity(self, entity: Entity, name: str, insert: bool,
                       mapper: TypeMapper, symbols) -> Declaration:
        fields = []
        for column in entity.fields:
            ts_type = mapper.column_type(entity.table_name, column)
            for referenced in sorted(ts_type.references):
                symbols.import_(f"types:{referenced}").ref()
            fields.append({
                "name": column.name,
                "type": ts_type.ts,
                "optional": insert and mapper.is_optional_on_insert(column),
            })

        description = entity.description
        if insert:
            description = f"Values accepted when inserting into {entity.table_name}."
        return Declaration(DeclarationKind.INTERFACE, name,
                           render_interface(name, fields), comment=description)
