"""
Zod schemas plugin.

Provides the ``schemas`` category: ``schemas:zod:User`` -> ``UserSchema``
and, for tables, ``schemas:zod:User:insert`` -> ``UserInsertSchema``.
Each schema is checked against its TypeScript type and exposes a
``consume`` callback so other plugins can parse input with it.
"""

from typing import Any, Dict, List, Optional

from ...logging_config import get_logger
from ..core.file_assignment import FileRule, normalize_file_naming
from ..core.plugin import DeclareContext, Plugin, RenderContext
from ..core.schema import Entity
from ..core.symbols import ExternalImport, RenderedSymbol, SymbolDeclaration
from ..core.syntax import CallExpression, Declaration, DeclarationKind, ExportKind
from ..core.templates import create_template_engine
from .type_mapping import TypeMapper

logger = get_logger(__name__)


ZOD_OBJECT_TEMPLATE = """
const {{ name }} = z.object({
{% for field in fields %}
  {{ field.name }}: {{ field.zod }}{% if field.optional %}.optional(){% endif %},
{% endfor %}
}){% if type_name %} satisfies z.ZodType<{{ type_name }}>{% endif %};
"""


def _parse_callback(schema_name: str):
    def consume(value: Any) -> CallExpression:
        return CallExpression(f"{schema_name}.parse", [value])

    return consume


class ZodPlugin(Plugin):
    """Zod validation schemas for entities and insert shapes."""

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        super().__init__(options)
        self._engine = create_template_engine(templates={"zod_object": ZOD_OBJECT_TEMPLATE})

    @property
    def name(self) -> str:
        return "zod"

    @property
    def provides(self) -> List[str]:
        return ["schemas"]

    @property
    def consumes(self) -> List[str]:
        return ["types"] if self.option("check_types", True) else []

    def file_defaults(self) -> List[FileRule]:
        return [FileRule("schemas:", normalize_file_naming(self.option("file"), "schemas.ts"))]

    def declare(self, ctx: DeclareContext) -> List[SymbolDeclaration]:
        declarations = []
        for entity in ctx.data_model.entities.values():
            declarations.append(
                SymbolDeclaration(
                    name=f"{entity.name}Schema",
                    capability=f"schemas:zod:{entity.name}",
                    base_entity_name=entity.name,
                )
            )
            if entity.is_table:
                insert_name = ctx.inflection.shape_name(entity.name, "insert")
                declarations.append(
                    SymbolDeclaration(
                        name=f"{insert_name}Schema",
                        capability=f"schemas:zod:{entity.name}:insert",
                        base_entity_name=entity.name,
                    )
                )
        return declarations

    def render(self, ctx: RenderContext) -> List[RenderedSymbol]:
        mapper = TypeMapper(ctx.data_model, ctx.type_hints)
        symbols = ctx.symbols
        rendered = []

        for declaration in symbols.own():
            entity = ctx.data_model.get_entity(declaration.base_entity_name)
            insert = declaration.capability.endswith(":insert")
            node = symbols.for_symbol(
                declaration.capability,
                lambda: self._render_schema(entity, declaration.name, insert, mapper, symbols),
            )
            rendered.append(
                RenderedSymbol(
                    name=declaration.name,
                    capability=declaration.capability,
                    node=node,
                    exports=ExportKind.NAMED,
                    metadata={
                        "entity": entity.name,
                        "variant": "insert" if insert else "entity",
                        "consume": _parse_callback(declaration.name),
                    },
                    external_imports=[ExternalImport("zod", names=("z",))],
                )
            )

        logger.debug("Rendered %d zod schemas", len(rendered))
        return rendered

    def _render_schema(self, entity: Entity, name: str, insert: bool,
                       mapper: TypeMapper, symbols) -> Declaration:
        type_capability = f"types:{entity.name}:insert" if insert else f"types:{entity.name}"
        type_name = None
        if self.option("check_types", True) and symbols.has(type_capability):
            type_name = symbols.import_(type_capability).ref().name

        fields = [
            {
                "name": column.name,
                "zod": mapper.column_type(entity.table_name, column).zod,
                "optional": insert and mapper.is_optional_on_insert(column),
            }
            for column in entity.fields
        ]
        source = self._engine.render_template(
            "zod_object", {"name": name, "fields": fields, "type_name": type_name}
        )
        return Declaration(DeclarationKind.CONST, name, source)
