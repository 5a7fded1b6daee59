"""
Pipeline orchestrator.

Runs plugins through the two-phase pipeline:

0. Register category providers (bare entries in ``provides``)
1. Declare: every plugin declares its symbols
2. Validate: requirements and dependency graphs
3. Assign: every declaration is placed in an output file
4. Render: every plugin renders its symbols, references being recorded

Plugin order is authoritative; a plugin may only use what earlier plugins
declared and rendered.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

from ...logging_config import get_logger
from .errors import PluginExecutionError, SourcererError
from .file_assignment import (
    FileAssignmentConfig,
    assign_symbols_to_files,
    group_by_file,
    merge_file_rules,
)
from .capability import SEPARATOR
from .naming import Inflection
from .plugin import DeclareContext, Plugin, RenderContext
from .registry import SymbolRegistry
from .schema import DataModel, TypeHintRegistry
from .symbols import AssignedSymbol, RenderedSymbol, SymbolDeclaration
from .validation import validate_all

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class OrchestratorConfig:
    """Everything one pipeline run needs."""

    plugins: Sequence[Plugin]
    data_model: DataModel
    inflection: Inflection = field(default_factory=Inflection)
    type_hints: TypeHintRegistry = field(default_factory=TypeHintRegistry)
    default_file: Optional[str] = "index.ts"

    # User file rules from configuration, checked before plugin defaults
    file_rules: List[Mapping[str, Any]] = field(default_factory=list)


@dataclass
class OrchestratorResult:
    """Outcome of a successful run, consumed by the emitter."""

    declarations: List[SymbolDeclaration]
    rendered: List[RenderedSymbol]
    file_groups: Dict[str, List[AssignedSymbol]]
    registry: SymbolRegistry

    # capability -> capabilities it referenced while rendering
    references: Dict[str, List[str]]


def _run_plugin_step(plugin: Plugin, phase: str, step: Callable[[], T]) -> T:
    """Run a plugin body, wrapping untyped failures with plugin and phase."""
    try:
        return step()
    except SourcererError:
        raise
    except Exception as e:
        logger.error("Plugin %s failed during %s: %s", plugin.name, phase, e)
        raise PluginExecutionError(plugin.name, phase, e) from e


def run_plugins(config: OrchestratorConfig) -> OrchestratorResult:
    """
    Run every configured plugin through declare, validate, assign and render.

    Args:
        config: Plugins, data model and naming services

    Returns:
        Declarations, rendered symbols, file groups, the registry and the
        recorded reference graph

    Raises:
        SourcererError: Any pipeline failure; the run is aborted
    """
    registry = SymbolRegistry()
    plugins = list(config.plugins)

    # Phase 0: category providers must be known before any capability resolves
    logger.info("Registering category providers for %d plugins", len(plugins))
    for plugin in plugins:
        for entry in plugin.provides:
            if SEPARATOR not in entry:
                registry.register_category_provider(entry, plugin.name)

    # Phase 1: Declare
    logger.info("Declare phase")
    declare_ctx = DeclareContext(
        data_model=config.data_model,
        inflection=config.inflection,
        type_hints=config.type_hints,
    )
    all_declarations: List[SymbolDeclaration] = []
    owned_by_plugin: Dict[str, List[SymbolDeclaration]] = {}

    for plugin in plugins:
        declarations = list(
            _run_plugin_step(plugin, "declare", lambda: plugin.declare(declare_ctx))
        )
        registry.register_all(declarations, owner=plugin.name)
        all_declarations.extend(declarations)
        owned_by_plugin[plugin.name] = declarations
        logger.debug("Plugin %s declared %d symbols", plugin.name, len(declarations))

    # Phase 2: Validate
    logger.info("Validate phase")
    validate_all(plugins, registry)

    # Phase 3: Assign
    logger.info("Assign phase")
    plugin_rules = [rule for plugin in plugins for rule in plugin.file_defaults()]
    known_tokens = {plugin.name for plugin in plugins} | set(registry.provider_names())
    known_tokens |= set(registry.category_providers())
    assignment = FileAssignmentConfig(
        rules=merge_file_rules(plugin_rules, config.file_rules),
        inflection=config.inflection,
        default_file=config.default_file,
        extra_known_tokens=frozenset(token.lower() for token in known_tokens),
    )
    file_groups = group_by_file(assign_symbols_to_files(all_declarations, assignment))
    logger.debug("Assigned %d symbols to %d files", len(all_declarations), len(file_groups))

    # Phase 4: Render
    logger.info("Render phase")
    all_rendered: List[RenderedSymbol] = []

    for plugin in plugins:
        owned = owned_by_plugin[plugin.name]
        scope = registry.begin_render([d.capability for d in owned], owned)
        try:
            for capability in plugin.render_with_imports:
                scope.import_(capability).ref()

            render_ctx = RenderContext(
                data_model=config.data_model,
                inflection=config.inflection,
                type_hints=config.type_hints,
                symbols=scope,
            )
            rendered = list(
                _run_plugin_step(plugin, "render", lambda: plugin.render(render_ctx))
            )
        finally:
            registry.clear_current_capabilities()

        for symbol in rendered:
            registry.set_rendered(symbol)
        all_rendered.extend(rendered)
        logger.debug("Plugin %s rendered %d symbols", plugin.name, len(rendered))

    return OrchestratorResult(
        declarations=all_declarations,
        rendered=all_rendered,
        file_groups=file_groups,
        registry=registry,
        references=registry.get_all_references(),
    )
