"""
Symbol registry for the two-phase plugin pipeline.

Holds every declared symbol, category-provider bindings, rendered output
and the cross-reference graph recorded while plugins render. It is the
only mutable state in a pipeline run.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from ...logging_config import get_logger
from .capability import SEPARATOR, Capability, CapabilityLike, capability_key, matches_pattern
from .errors import CapabilityNotFound, CategoryConflict, SymbolCollision
from .symbols import RenderedSymbol, SymbolDeclaration, SymbolHandle, SymbolRef

logger = get_logger(__name__)

T = TypeVar("T")


class RenderScope:
    """Explicit render context handed to one plugin's render call.

    Tracks which capabilities references are attributed to and which
    declarations the plugin owns. Lookups go through the shared registry;
    reference edges are reported back to it.
    """

    def __init__(
        self,
        registry: "SymbolRegistry",
        capabilities: Iterable[CapabilityLike] = (),
        owned: Iterable[SymbolDeclaration] = (),
    ):
        self._registry = registry
        self._current: Tuple[str, ...] = tuple(capability_key(c) for c in capabilities)
        self._owned: Tuple[SymbolDeclaration, ...] = tuple(owned)
        self._stack: List[Tuple[str, ...]] = []

    @property
    def current_capabilities(self) -> Tuple[str, ...]:
        return self._current

    def own(self) -> Tuple[SymbolDeclaration, ...]:
        """Declarations made by the plugin being rendered."""
        return self._owned

    def for_symbol(self, capability: CapabilityLike, fn: Callable[[], T]) -> T:
        """Attribute every reference made inside ``fn`` to ``capability`` only."""
        self._stack.append(self._current)
        self._current = (capability_key(capability),)
        try:
            return fn()
        finally:
            self._current = self._stack.pop()

    def import_(self, capability: CapabilityLike) -> SymbolHandle:
        """Handle for another symbol; raises CapabilityNotFound if undeclared."""
        return self._registry.make_handle(capability, self._record)

    def resolve(self, capability: CapabilityLike) -> Optional[SymbolRef]:
        return self._registry.resolve(capability)

    def has(self, capability: CapabilityLike) -> bool:
        return self._registry.has(capability)

    def get(self, capability: CapabilityLike) -> Optional[SymbolDeclaration]:
        return self._registry.get(capability)

    def query(self, pattern: str) -> List[SymbolDeclaration]:
        return self._registry.query(pattern)

    def get_metadata(self, capability: CapabilityLike) -> Optional[Dict[str, Any]]:
        return self._registry.get_metadata(capability)

    def _record(self, target: str):
        self._registry.record_reference(self._current, target)

    # Used by the registry's ambient-context methods.

    def _set_current(self, capabilities: Iterable[CapabilityLike]):
        self._current = tuple(capability_key(c) for c in capabilities)

    def _set_owned(self, owned: Iterable[SymbolDeclaration]):
        self._owned = tuple(owned)

    def _reset(self):
        self._current = ()
        self._owned = ()
        self._stack = []


class SymbolRegistry:
    """Authoritative table of declared and rendered symbols."""

    def __init__(self):
        self._symbols: Dict[str, SymbolDeclaration] = {}
        self._owners: Dict[str, str] = {}
        self._rendered: Dict[str, RenderedSymbol] = {}

        # category -> provider plugin name, e.g. "queries" -> "kysely"
        self._category_providers: Dict[str, str] = {}

        # source capability -> ordered set of referenced capabilities
        self._references: Dict[str, Dict[str, None]] = {}

        self._active = RenderScope(self)

    # Declarations

    def register(self, declaration: SymbolDeclaration, owner: Optional[str] = None):
        """Store a declaration; the first writer of a capability wins.

        Raises:
            SymbolCollision: If the capability is already registered
        """
        existing = self._symbols.get(declaration.capability)
        if existing is not None:
            raise SymbolCollision(
                declaration.capability, existing.name, declaration.name
            )
        self._symbols[declaration.capability] = declaration
        if owner:
            self._owners[declaration.capability] = owner
        logger.debug(
            "Registered %s as %s (owner=%s)", declaration.capability, declaration.name, owner
        )

    def register_all(
        self, declarations: Iterable[SymbolDeclaration], owner: Optional[str] = None
    ):
        for declaration in declarations:
            self.register(declaration, owner)

    def all(self) -> List[SymbolDeclaration]:
        """All declarations in registration order."""
        return list(self._symbols.values())

    def owner_of(self, capability: CapabilityLike) -> Optional[str]:
        return self._owners.get(self.resolve_capability(capability))

    # Category providers

    def register_category_provider(self, category: str, plugin_name: str):
        """Bind a category to its single provider plugin.

        Raises:
            CategoryConflict: On any second registration of the category
        """
        existing = self._category_providers.get(category)
        if existing is not None:
            raise CategoryConflict(category, existing, plugin_name)
        self._category_providers[category] = plugin_name
        logger.debug("Category %s provided by %s", category, plugin_name)

    def get_category_provider(self, category: str) -> Optional[str]:
        return self._category_providers.get(category)

    def provider_names(self) -> List[str]:
        """Distinct provider plugin names in binding order."""
        return list(dict.fromkeys(self._category_providers.values()))

    def category_providers(self) -> Dict[str, str]:
        return dict(self._category_providers)

    # Resolution

    def resolve_capability(self, capability: CapabilityLike) -> str:
        """Rewrite a generic capability to its provider-specific form.

        ``queries:User:findById`` becomes ``queries:kysely:User:findById``
        when ``kysely`` provides ``queries``. Colon-free capabilities,
        categories without a provider, minted qualified capabilities and
        capabilities already naming a registered provider are unchanged.
        """
        if isinstance(capability, Capability) and capability.qualified:
            return str(capability)

        text = capability_key(capability)
        category, sep, rest = text.partition(SEPARATOR)
        if not sep:
            return text

        provider = self._category_providers.get(category)
        if provider is None:
            return text

        if rest.startswith(f"{provider}{SEPARATOR}"):
            return text

        first_segment, has_more, _ = rest.partition(SEPARATOR)
        if has_more and first_segment in self._category_providers.values():
            return text

        return f"{category}{SEPARATOR}{provider}{SEPARATOR}{rest}"

    def resolve(self, capability: CapabilityLike) -> Optional[SymbolRef]:
        declaration = self.get(capability)
        if declaration is None:
            return None
        return SymbolRef(name=declaration.name, capability=declaration.capability)

    def has(self, capability: CapabilityLike) -> bool:
        return self.resolve_capability(capability) in self._symbols

    def get(self, capability: CapabilityLike) -> Optional[SymbolDeclaration]:
        return self._symbols.get(self.resolve_capability(capability))

    def query(self, pattern: str) -> List[SymbolDeclaration]:
        """Declarations whose capability starts with ``pattern``.

        A bare category pattern such as ``"queries:"`` is rewritten to its
        provider prefix (``"queries:kysely:"``).
        """
        category, sep, rest = pattern.partition(SEPARATOR)
        if sep and not rest:
            provider = self._category_providers.get(category)
            if provider:
                pattern = f"{category}{SEPARATOR}{provider}{SEPARATOR}"
        return [
            declaration
            for declaration in self._symbols.values()
            if matches_pattern(declaration.capability, pattern)
        ]

    # Rendered output

    def set_rendered(self, symbol: RenderedSymbol):
        self._rendered[symbol.capability] = symbol

    def get_rendered(self, capability: CapabilityLike) -> Optional[RenderedSymbol]:
        return self._rendered.get(self.resolve_capability(capability))

    def get_metadata(self, capability: CapabilityLike) -> Optional[Dict[str, Any]]:
        rendered = self.get_rendered(capability)
        return rendered.metadata if rendered else None

    # Handles and reference tracking

    def make_handle(
        self, capability: CapabilityLike, on_reference: Callable[[str], None]
    ) -> SymbolHandle:
        """Build a handle whose accessors report to ``on_reference``.

        Raises:
            CapabilityNotFound: If the capability does not resolve
        """
        resolved = self.resolve_capability(capability)
        declaration = self._symbols.get(resolved)
        if declaration is None:
            raise CapabilityNotFound(capability_key(capability), resolved)
        return SymbolHandle(declaration, self.get_metadata(resolved), on_reference)

    def import_(self, capability: CapabilityLike) -> SymbolHandle:
        """Handle attributed to the ambient capability context."""
        return self._active.import_(capability)

    def record_reference(self, sources: Sequence[str], target: str):
        for source in sources:
            if source == target:
                continue
            self._references.setdefault(source, {})[target] = None

    def get_references(self, capability: CapabilityLike) -> List[str]:
        return list(self._references.get(capability_key(capability), {}))

    def get_all_references(self) -> Dict[str, List[str]]:
        return {source: list(targets) for source, targets in self._references.items()}

    # Ambient render context

    def begin_render(
        self,
        capabilities: Iterable[CapabilityLike],
        owned: Iterable[SymbolDeclaration],
    ) -> RenderScope:
        """Open the render scope for one plugin and make it the active one."""
        self._active = RenderScope(self, capabilities, owned)
        return self._active

    def set_current_capabilities(self, capabilities: Iterable[CapabilityLike]):
        self._active._set_current(capabilities)

    def clear_current_capabilities(self):
        self._active._reset()
        self._active = RenderScope(self)

    def current_capabilities(self) -> Tuple[str, ...]:
        return self._active.current_capabilities

    def set_owned_declarations(self, declarations: Iterable[SymbolDeclaration]):
        self._active._set_owned(declarations)

    def own(self) -> Tuple[SymbolDeclaration, ...]:
        return self._active.own()

    def for_symbol(self, capability: CapabilityLike, fn: Callable[[], T]) -> T:
        return self._active.for_symbol(capability, fn)
