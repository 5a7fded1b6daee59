"""
Kysely queries plugin.

Provides the ``queries`` category. For every table with a primary key it
declares ``findById``, ``findMany`` and ``insert`` functions plus a
metadata-only index symbol (``queries:kysely:User``) that tells other
plugins the function names and primary key. The database instance is
imported from a user module.
"""

from typing import Any, Dict, List, Optional

from ...logging_config import get_logger
from ..core.file_assignment import FileRule, normalize_file_naming
from ..core.naming import pluralize
from ..core.plugin import DeclareContext, Plugin, RenderContext
from ..core.schema import Entity
from ..core.symbols import RenderedSymbol, SymbolDeclaration, UserModuleRef
from ..core.syntax import Declaration, DeclarationKind, ExportKind
from ..core.templates import create_template_engine
from .type_mapping import TypeMapper

logger = get_logger(__name__)


QUERY_TEMPLATES = {
    "find_by_id": """
async function {{ name }}({{ pk }}: {{ entity_type }}["{{ pk }}"]): Promise<{{ entity_type }} | undefined> {
  return {{ db }}
    .selectFrom({{ table | quote }})
    .selectAll()
    .where({{ pk_column | quote }}, "=", {{ pk }})
    .executeTakeFirst();
}
""",
    "find_many": """
async function {{ name }}(options: { limit?: number; offset?: number } = {}): Promise<{{ entity_type }}[]> {
  let query = {{ db }}.selectFrom({{ table | quote }}).selectAll();
  if (options.limit !== undefined) query = query.limit(options.limit);
  if (options.offset !== undefined) query = query.offset(options.offset);
  return query.execute();
}
""",
    "insert": """
async function {{ name }}(values: {{ insert_type }}): Promise<{{ entity_type }}> {
  return {{ db }}
    .insertInto({{ table | quote }})
    .values(values)
    .returningAll()
    .executeTakeFirstOrThrow();
}
""",
}

OPERATIONS = ("findById", "findMany", "insert")

DEFAULT_DB_IMPORT = {"path": "./db.ts", "named": ["db"]}


class KyselyPlugin(Plugin):
    """Kysely query functions per table."""

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        super().__init__(options)
        self._engine = create_template_engine(templates=QUERY_TEMPLATES)
        self.db_import = UserModuleRef.from_dict(self.option("db_import", DEFAULT_DB_IMPORT))
        self.db_name = self.option("db_name") or (
            self.db_import.default or self.db_import.namespace or self.db_import.named[0]
        )

    @property
    def name(self) -> str:
        return "kysely"

    @property
    def provides(self) -> List[str]:
        return ["queries"]

    @property
    def consumes(self) -> List[str]:
        return ["types"]

    def file_defaults(self) -> List[FileRule]:
        return [
            FileRule(
                "queries:",
                normalize_file_naming(
                    self.option("file"), lambda ctx: f"{ctx.folder_name}/queries.ts"
                ),
            )
        ]

    @staticmethod
    def function_names(entity: Entity) -> Dict[str, str]:
        return {
            "findById": f"find{entity.name}ById",
            "findMany": f"find{pluralize(entity.name)}",
            "insert": f"insert{entity.name}",
        }

    def _tables(self, ctx: DeclareContext) -> List[Entity]:
        return [entity for entity in ctx.data_model.tables() if entity.primary_key is not None]

    def declare(self, ctx: DeclareContext) -> List[SymbolDeclaration]:
        declarations = []
        for entity in self._tables(ctx):
            for operation, function_name in self.function_names(entity).items():
                declarations.append(
                    SymbolDeclaration(
                        name=function_name,
                        capability=f"queries:kysely:{entity.name}:{operation}",
                        base_entity_name=entity.name,
                    )
                )
            declarations.append(
                SymbolDeclaration(
                    name=f"{entity.name}Queries",
                    capability=f"queries:kysely:{entity.name}",
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
            parts = declaration.capability.split(":")
            operation = parts[3] if len(parts) > 3 else None

            # queries:kysely:{Entity} is the index symbol
            if operation is None:
                rendered.append(self._render_index(entity, declaration, mapper))
                continue

            node = symbols.for_symbol(
                declaration.capability,
                lambda: self._render_operation(entity, declaration.name, operation, symbols),
            )
            rendered.append(
                RenderedSymbol(
                    name=declaration.name,
                    capability=declaration.capability,
                    node=node,
                    exports=ExportKind.NAMED,
                    user_imports=[self.db_import],
                )
            )

        logger.debug("Rendered %d kysely symbols", len(rendered))
        return rendered

    def _render_index(self, entity: Entity, declaration: SymbolDeclaration,
                      mapper: TypeMapper) -> RenderedSymbol:
        primary_key = entity.primary_key
        return RenderedSymbol(
            name=declaration.name,
            capability=declaration.capability,
            exports=ExportKind.NONE,
            metadata={
                "entity": entity.name,
                "table": entity.table_name,
                "primary_key": primary_key.name,
                "primary_key_type": mapper.base_type(entity.table_name, primary_key).ts,
                "methods": self.function_names(entity),
            },
        )

    def _render_operation(self, entity: Entity, name: str, operation: str,
                          symbols) -> Declaration:
        entity_type = symbols.import_(f"types:{entity.name}").ref().name
        table = entity.table_name if entity.schema == "public" \
            else f"{entity.schema}.{entity.table_name}"
        context = {
            "name": name,
            "db": self.db_name,
            "table": table,
            "entity_type": entity_type,
            "pk": entity.primary_key.name,
            "pk_column": entity.primary_key.column_name,
        }

        if operation == "findById":
            template = "find_by_id"
        elif operation == "findMany":
            template = "find_many"
        else:
            template = "insert"
            context["insert_type"] = symbols.import_(f"types:{entity.name}:insert").ref().name

        source = self._engine.render_template(template, context)
        return Declaration(DeclarationKind.FUNCTION, name, source)
