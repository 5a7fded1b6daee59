"""
Pre-render validation.

Checks, in order, that category providers are unique, that every plugin
requirement can be satisfied, and that neither the plugin graph nor the
symbol dependency graph has a cycle. Validation never mutates the
registry.
"""

from typing import Dict, List, Optional, Sequence, Set

from ...logging_config import get_logger
from .capability import SEPARATOR, capability_key, category_of
from .errors import CategoryConflict, CircularDependency, UnsatisfiedRequirement
from .plugin import Plugin
from .registry import SymbolRegistry
from .symbols import SymbolDeclaration

logger = get_logger(__name__)


def _provides_entry_matches(entry: str, requirement: str) -> bool:
    """Whether a ``provides`` entry covers a qualified requirement."""
    if entry == requirement:
        return True
    if entry.endswith(SEPARATOR) and requirement.startswith(entry):
        return True
    return False


def _in_category(entry: str, category: str) -> bool:
    return entry == category or entry.startswith(f"{category}{SEPARATOR}")


def validate_category_providers(plugins: Sequence[Plugin]):
    """
    Check that no bare category is provided by two plugins.

    Raises:
        CategoryConflict: On the first category seen twice
    """
    providers: Dict[str, str] = {}
    for plugin in plugins:
        for entry in plugin.provides:
            if SEPARATOR in entry:
                continue
            if entry in providers:
                raise CategoryConflict(entry, providers[entry], plugin.name)
            providers[entry] = plugin.name


def _is_satisfied(requirement: str, plugins: Sequence[Plugin], registry: SymbolRegistry) -> bool:
    if SEPARATOR not in requirement:
        if registry.get_category_provider(requirement):
            return True
        if any(_in_category(entry, requirement) for p in plugins for entry in p.provides):
            return True
        return bool(registry.query(f"{requirement}{SEPARATOR}"))

    if registry.has(requirement):
        return True
    return any(
        _provides_entry_matches(entry, requirement) for p in plugins for entry in p.provides
    )


def validate_requirements(plugins: Sequence[Plugin], registry: SymbolRegistry):
    """
    Check that every plugin's ``consumes`` entries can be satisfied.

    A colon-free requirement names a category: it needs a category
    provider, a ``provides`` entry in that category, or a declaration in
    it. A qualified requirement needs a resolvable declaration or a
    ``provides`` entry equal to it or prefixing it (``"types:"``).

    Raises:
        UnsatisfiedRequirement: For the first unmet requirement
    """
    for plugin in plugins:
        for requirement in plugin.consumes:
            if not _is_satisfied(requirement, plugins, registry):
                raise UnsatisfiedRequirement(requirement, plugin.name)


def _providers_of(requirement: str, plugins: Sequence[Plugin], registry: SymbolRegistry) -> List[str]:
    found: Dict[str, None] = {}

    category_provider = registry.get_category_provider(category_of(requirement))
    if category_provider:
        found[category_provider] = None

    for plugin in plugins:
        for entry in plugin.provides:
            if SEPARATOR not in requirement:
                matched = _in_category(entry, requirement)
            else:
                matched = _provides_entry_matches(entry, requirement)
            if matched:
                found[plugin.name] = None

    if SEPARATOR not in requirement:
        for declaration in registry.query(f"{requirement}{SEPARATOR}"):
            owner = registry.owner_of(declaration.capability)
            if owner:
                found[owner] = None
    else:
        owner = registry.owner_of(requirement)
        if owner:
            found[owner] = None

    return list(found)


def _find_cycle(adjacency: Dict[str, List[str]]) -> List[str]:
    """Depth-first search with a recursion stack; returns the first cycle."""
    visited: Set[str] = set()
    on_stack: Set[str] = set()
    path: List[str] = []

    def visit(node: str) -> List[str]:
        if node in on_stack:
            start = path.index(node)
            return path[start:] + [node]
        if node in visited:
            return []

        visited.add(node)
        on_stack.add(node)
        path.append(node)
        try:
            for neighbour in adjacency.get(node, []):
                cycle = visit(neighbour)
                if cycle:
                    return cycle
        finally:
            on_stack.discard(node)
            path.pop()
        return []

    for node in list(adjacency):
        cycle = visit(node)
        if cycle:
            return cycle
    return []


def validate_plugin_graph(plugins: Sequence[Plugin], registry: SymbolRegistry):
    """
    Check that plugin-level requirements are acyclic.

    One node per plugin; an edge runs from each provider of a requirement
    to the plugin consuming it. Self edges are ignored.

    Raises:
        CircularDependency: With ``level="plugin"``
    """
    adjacency: Dict[str, List[str]] = {plugin.name: [] for plugin in plugins}

    for consumer in plugins:
        for requirement in consumer.consumes:
            for provider in _providers_of(requirement, plugins, registry):
                if provider == consumer.name:
                    continue
                edges = adjacency.setdefault(provider, [])
                if consumer.name not in edges:
                    edges.append(consumer.name)

    cycle = _find_cycle(adjacency)
    if cycle:
        raise CircularDependency(cycle, level="plugin")


def validate_dependency_graph(declarations: Sequence[SymbolDeclaration],
                              registry: Optional[SymbolRegistry] = None):
    """
    Check that symbol ``depends_on`` edges form a DAG.

    With a registry, generic dependencies such as ``queries:User`` are
    resolved to their provider-specific capability first.

    Raises:
        CircularDependency: With ``level="symbol"``
    """
    resolve = registry.resolve_capability if registry is not None else capability_key
    adjacency = {
        declaration.capability: [resolve(dep) for dep in declaration.depends_on]
        for declaration in declarations
    }
    cycle = _find_cycle(adjacency)
    if cycle:
        raise CircularDependency(cycle, level="symbol")


def validate_all(plugins: Sequence[Plugin], registry: SymbolRegistry):
    """Run every validation in order; the first failure propagates."""
    validate_category_providers(plugins)
    validate_requirements(plugins, registry)
    validate_plugin_graph(plugins, registry)
    validate_dependency_graph(registry.all(), registry)
    logger.debug("Validation passed for %d plugins", len(plugins))
