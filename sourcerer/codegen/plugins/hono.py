"""
Hono HTTP routes plugin.

Provides the ``http-routes`` category: one router per table. Queries and
schemas are looked up through their categories (``queries:User:findById``,
``schemas:User:insert``) so any provider of those categories works.
"""

from typing import Any, Dict, List, Optional

from ...logging_config import get_logger
from ..core.errors import CapabilityNotFound
from ..core.file_assignment import FileRule, normalize_file_naming
from ..core.naming import uncapitalize
from ..core.plugin import DeclareContext, Plugin, RenderContext
from ..core.symbols import ExternalImport, RenderedSymbol, SymbolDeclaration
from ..core.syntax import Declaration, DeclarationKind, ExportKind
from ..core.templates import create_template_engine

logger = get_logger(__name__)


ROUTER_TEMPLATE = """
const {{ name }} = new Hono()
  .get("/", async (c) => {
    const limit = c.req.query("limit");
    const offset = c.req.query("offset");
    return c.json(
      await {{ find_many }}({
        limit: limit === undefined ? undefined : Number(limit),
        offset: offset === undefined ? undefined : Number(offset),
      }),
    );
  })
  .get("/:{{ pk }}", async (c) => {
    const row = await {{ find_by_id }}({{ id_expr }});
    return row ? c.json(row) : c.notFound();
  })
  .post("/", async (c) => {
    const values = {{ parse_body }};
    return c.json(await {{ insert }}(values), 201);
  });
"""


class HonoPlugin(Plugin):
    """Hono routers exposing list, get and create endpoints per table."""

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        super().__init__(options)
        self._engine = create_template_engine(templates={"router": ROUTER_TEMPLATE})

    @property
    def name(self) -> str:
        return "hono"

    @property
    def provides(self) -> List[str]:
        return ["http-routes"]

    @property
    def consumes(self) -> List[str]:
        return ["queries", "schemas"]

    def file_defaults(self) -> List[FileRule]:
        return [
            FileRule(
                "http-routes:",
                normalize_file_naming(
                    self.option("file"), lambda ctx: f"routes/{ctx.folder_name}.ts"
                ),
            )
        ]

    def declare(self, ctx: DeclareContext) -> List[SymbolDeclaration]:
        return [
            SymbolDeclaration(
                name=f"{uncapitalize(entity.name)}Routes",
                capability=f"http-routes:hono:{entity.name}",
                base_entity_name=entity.name,
            )
            for entity in ctx.data_model.tables()
            if entity.primary_key is not None
        ]

    def render(self, ctx: RenderContext) -> List[RenderedSymbol]:
        symbols = ctx.symbols
        rendered = []

        for declaration in symbols.own():
            entity_name = declaration.base_entity_name
            index = symbols.get_metadata(f"queries:{entity_name}")
            if index is None:
                # The queries provider has not rendered yet
                raise CapabilityNotFound(f"queries:{entity_name}")

            node = symbols.for_symbol(
                declaration.capability,
                lambda: self._render_router(entity_name, declaration.name, index, symbols),
            )
            rendered.append(
                RenderedSymbol(
                    name=declaration.name,
                    capability=declaration.capability,
                    node=node,
                    exports=ExportKind.NAMED,
                    external_imports=[ExternalImport("hono", names=("Hono",))],
                )
            )

        logger.debug("Rendered %d hono routers", len(rendered))
        return rendered

    def _render_router(self, entity_name: str, name: str, index: Dict[str, Any],
                       symbols) -> Declaration:
        find_by_id = symbols.import_(f"queries:{entity_name}:findById")
        find_many = symbols.import_(f"queries:{entity_name}:findMany")
        insert = symbols.import_(f"queries:{entity_name}:insert")
        insert_schema = symbols.import_(f"schemas:{entity_name}:insert")

        pk = index["primary_key"]
        id_expr = f'c.req.param("{pk}")'
        if index.get("primary_key_type") == "number":
            id_expr = f"Number({id_expr})"

        context = {
            "name": name,
            "pk": pk,
            "id_expr": id_expr,
            "find_by_id": find_by_id.ref(),
            "find_many": find_many.ref(),
            "insert": insert.ref(),
            "parse_body": insert_schema.consume("await c.req.json()"),
        }
        source = self._engine.render_template("router", context)
        return Declaration(DeclarationKind.CONST, name, source)
