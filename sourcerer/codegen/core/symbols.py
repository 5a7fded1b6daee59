"""
Symbol records exchanged between plugins and the pipeline.

Plugins create SymbolDeclaration values while declaring and RenderedSymbol
values while rendering. The pipeline adds AssignedSymbol and EmittedFile.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .capability import capability_key
from .syntax import CallExpression, ExportKind, Identifier, SyntaxNode


@dataclass(frozen=True)
class SymbolDeclaration:
    """What a plugin promises to produce."""

    name: str
    capability: str

    # Groups derived artifacts (e.g. "UserInsert") with their entity.
    base_entity_name: Optional[str] = None

    # Bypasses file assignment when set.
    output_path: Optional[str] = None

    # Capabilities this symbol requires; checked for cycles only.
    depends_on: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "capability", capability_key(self.capability))
        object.__setattr__(
            self, "depends_on", tuple(capability_key(c) for c in self.depends_on)
        )


@dataclass(frozen=True)
class SymbolRef:
    """Name and capability of a declared symbol."""

    name: str
    capability: str


@dataclass(frozen=True)
class ExternalImport:
    """Import from a package or a path relative to the output directory."""

    source: str
    names: Tuple[str, ...] = ()
    types: Tuple[str, ...] = ()
    default: Optional[str] = None
    namespace: Optional[str] = None


@dataclass(frozen=True)
class UserModuleRef:
    """Import of a user-authored module, path relative to the config file."""

    path: str
    named: Tuple[str, ...] = ()
    default: Optional[str] = None
    namespace: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserModuleRef":
        return cls(
            path=data["path"],
            named=tuple(data.get("named", ())),
            default=data.get("default"),
            namespace=data.get("namespace"),
        )


@dataclass
class RenderedSymbol:
    """The rendered body of one declared symbol."""

    name: str
    capability: str
    node: Optional[SyntaxNode] = None
    exports: ExportKind = ExportKind.NONE
    metadata: Optional[Dict[str, Any]] = None
    external_imports: List[ExternalImport] = field(default_factory=list)
    user_imports: List[UserModuleRef] = field(default_factory=list)

    # Deprecated: raw text prepended to the file. Prefer user_imports.
    file_header: Optional[str] = None

    def __post_init__(self):
        self.capability = capability_key(self.capability)
        self.exports = ExportKind.coerce(self.exports)


@dataclass(frozen=True)
class AssignedSymbol:
    """A declaration placed in an output file."""

    declaration: SymbolDeclaration
    file_path: str


@dataclass(frozen=True)
class EmittedFile:
    """A file ready for the writer."""

    path: str
    content: str


class SymbolHandle:
    """Handle for using another plugin's symbol.

    Nothing is recorded when the handle is created; each accessor records a
    reference edge when it is actually invoked, so imports follow real use.
    """

    def __init__(
        self,
        declaration: SymbolDeclaration,
        metadata: Optional[Dict[str, Any]],
        on_reference: Callable[[str], None],
    ):
        self.name = declaration.name
        self.capability = declaration.capability
        self.metadata = metadata
        self._on_reference = on_reference

        consume_fn = (metadata or {}).get("consume")
        self._consume_fn = consume_fn if callable(consume_fn) else None

    @property
    def can_consume(self) -> bool:
        return self._consume_fn is not None

    def ref(self) -> Identifier:
        """Use the symbol by name."""
        self._on_reference(self.capability)
        return Identifier(self.name)

    def call(self, *args) -> CallExpression:
        """Use the symbol as ``name(args...)``."""
        self._on_reference(self.capability)
        return CallExpression(Identifier(self.name), args)

    def consume(self, value):
        """Apply the target's consume callback (e.g. a schema parse)."""
        if self._consume_fn is None:
            raise AttributeError(f'Symbol "{self.name}" does not provide consume()')
        self._on_reference(self.capability)
        return self._consume_fn(value)

    def __repr__(self) -> str:
        return f"SymbolHandle({self.capability!r} -> {self.name!r})"
