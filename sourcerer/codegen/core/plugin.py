"""
Plugin contract for the generation pipeline.

Defines the interface every generator plugin implements and the context
values handed to its declare and render steps.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .file_assignment import FileRule
from .naming import Inflection
from .registry import RenderScope
from .schema import DataModel, TypeHintRegistry
from .symbols import RenderedSymbol, SymbolDeclaration


@dataclass
class DeclareContext:
    """Read-only inputs for the declare phase."""

    data_model: DataModel
    inflection: Inflection
    type_hints: TypeHintRegistry = field(default_factory=TypeHintRegistry)


@dataclass
class RenderContext(DeclareContext):
    """Declare inputs plus the plugin's render scope."""

    symbols: Optional[RenderScope] = None


class Plugin(ABC):
    """Abstract base class for all generator plugins.

    ``provides`` lists categories (colon-free, making this plugin the
    category provider) or capability prefixes. ``consumes`` lists what the
    plugin needs from others; it is checked before any rendering runs.
    """

    #: Capabilities imported eagerly on behalf of every owned symbol.
    render_with_imports: List[str] = []

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        """Initialize plugin with optional configuration."""
        self.options = dict(options or {})

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the plugin name (e.g., 'zod')."""
        pass

    @property
    @abstractmethod
    def provides(self) -> List[str]:
        pass

    @property
    def consumes(self) -> List[str]:
        return []

    @property
    def description(self) -> str:
        return self.__class__.__doc__.strip().splitlines()[0] if self.__class__.__doc__ else ""

    def file_defaults(self) -> List[FileRule]:
        """
        Default file rules for this plugin's symbols.

        User rules from configuration are checked first; a user rule with
        the same pattern replaces the plugin's.

        Returns:
            List of file rules (can be empty)
        """
        return []

    @abstractmethod
    def declare(self, ctx: DeclareContext) -> List[SymbolDeclaration]:
        """
        Declare every symbol this plugin will produce.

        Args:
            ctx: Data model, inflection and type hints

        Returns:
            Declarations, all registered with this plugin as owner
        """
        pass

    @abstractmethod
    def render(self, ctx: RenderContext) -> List[RenderedSymbol]:
        """
        Render the declared symbols.

        References to other symbols must go through ``ctx.symbols.import_``
        so that imports can be synthesized.

        Args:
            ctx: Declare inputs plus the render scope

        Returns:
            Rendered symbols, one per declaration
        """
        pass

    def option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"
