"""
Minimal syntax nodes for generated TypeScript modules.

The pipeline treats rendered code as opaque except for three questions:
is the node already wrapped in an export, what kind of declaration is it,
and what does it print as. Every node answers those through SyntaxNode.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Union


class DeclarationKind(Enum):
    """Declaration kinds used for export collision detection."""

    CONST = "const"
    LET = "let"
    VAR = "var"
    FUNCTION = "function"
    CLASS = "class"
    INTERFACE = "interface"
    TYPE = "type"
    ENUM = "enum"
    MODULE = "module"
    NAMESPACE = "namespace"
    IMPORT = "import"
    EXPORT = "export"
    OTHER = "other"


class ExportKind(Enum):
    """How a rendered symbol is exported from its module."""

    NONE = "none"
    NAMED = "named"
    DEFAULT = "default"

    @classmethod
    def coerce(cls, value: Union["ExportKind", bool, str, None]) -> "ExportKind":
        """Accept the loose spellings plugins commonly use."""
        if isinstance(value, ExportKind):
            return value
        if value is None or value is False:
            return cls.NONE
        if value is True:
            return cls.NAMED
        return cls(str(value).lower())


class SyntaxNode(ABC):
    """Contract every pluggable syntax representation implements."""

    @abstractmethod
    def declaration_kind(self) -> DeclarationKind:
        """Kind of declaration, looking through any export wrapper."""

    @abstractmethod
    def to_source(self) -> str:
        """Print the node as source text."""

    def is_export_wrapped(self) -> bool:
        return False

    def leading_comment(self) -> Optional[str]:
        """Comment printed above the node, outside any export wrapper."""
        return None

    def body_source(self) -> str:
        """Source without the leading comment."""
        return self.to_source()

    def __str__(self) -> str:
        return self.to_source()


class Identifier(SyntaxNode):
    """A bare identifier reference."""

    def __init__(self, name: str):
        self.name = name

    def declaration_kind(self) -> DeclarationKind:
        return DeclarationKind.OTHER

    def to_source(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Identifier({self.name!r})"


class CallExpression(SyntaxNode):
    """``callee(arg, ...)``"""

    def __init__(self, callee: Union[str, SyntaxNode], args: Sequence = ()):
        self.callee = callee
        self.args = list(args)

    def declaration_kind(self) -> DeclarationKind:
        return DeclarationKind.OTHER

    def to_source(self) -> str:
        args = ", ".join(_source(arg) for arg in self.args)
        return f"{_source(self.callee)}({args})"


class Declaration(SyntaxNode):
    """A top-level declaration whose source text a plugin produced."""

    def __init__(self, kind: DeclarationKind, name: str, source: str,
                 comment: Optional[str] = None):
        self.kind = kind
        self.name = name
        self.source = source.strip("\n")
        self.comment = comment

    def declaration_kind(self) -> DeclarationKind:
        return self.kind

    def leading_comment(self) -> Optional[str]:
        if not self.comment:
            return None
        return f"/** {self.comment} */"

    def body_source(self) -> str:
        return self.source

    def to_source(self) -> str:
        return _with_comment(self.leading_comment(), self.source)

    def __repr__(self) -> str:
        return f"Declaration({self.kind.value}, {self.name!r})"


class RawStatement(SyntaxNode):
    """Free-form statement text; classified as OTHER."""

    def __init__(self, text: str):
        self.text = text.strip("\n")

    def declaration_kind(self) -> DeclarationKind:
        return DeclarationKind.OTHER

    def to_source(self) -> str:
        return self.text


class ExportNamed(SyntaxNode):
    """``export <declaration>``"""

    def __init__(self, declaration: Optional[SyntaxNode]):
        self.declaration = declaration

    def declaration_kind(self) -> DeclarationKind:
        if self.declaration is None:
            return DeclarationKind.EXPORT
        return self.declaration.declaration_kind()

    def is_export_wrapped(self) -> bool:
        return True

    def to_source(self) -> str:
        if self.declaration is None:
            return "export {};"
        return _with_comment(self.declaration.leading_comment(),
                             f"export {self.declaration.body_source()}")


class ExportDefault(SyntaxNode):
    """``export default <declaration or expression>``"""

    def __init__(self, declaration: SyntaxNode):
        self.declaration = declaration

    def declaration_kind(self) -> DeclarationKind:
        return self.declaration.declaration_kind()

    def is_export_wrapped(self) -> bool:
        return True

    def to_source(self) -> str:
        return _with_comment(self.declaration.leading_comment(),
                             f"export default {self.declaration.body_source()}")


class ImportDeclaration(SyntaxNode):
    """An ES module import statement."""

    def __init__(
        self,
        source: str,
        named: Iterable[str] = (),
        default: Optional[str] = None,
        namespace: Optional[str] = None,
        type_only: bool = False,
    ):
        self.source = source
        self.named = list(named)
        self.default = default
        self.namespace = namespace
        self.type_only = type_only

    def declaration_kind(self) -> DeclarationKind:
        return DeclarationKind.IMPORT

    def to_source(self) -> str:
        clauses = []
        if self.default:
            clauses.append(self.default)
        if self.namespace:
            clauses.append(f"* as {self.namespace}")
        if self.named:
            clauses.append("{ " + ", ".join(self.named) + " }")
        keyword = "import type" if self.type_only else "import"
        if not clauses:
            return f'import "{self.source}";'
        return f'{keyword} {", ".join(clauses)} from "{self.source}";'


def _with_comment(comment: Optional[str], source: str) -> str:
    if comment:
        return f"{comment}\n{source}"
    return source


def _source(value) -> str:
    if isinstance(value, SyntaxNode):
        return value.to_source()
    return str(value)


def wrap_export(node: SyntaxNode, exports: ExportKind) -> SyntaxNode:
    """Wrap a node in the export form requested, unless already wrapped."""
    if exports is ExportKind.NONE or node.is_export_wrapped():
        return node
    if exports is ExportKind.DEFAULT:
        return ExportDefault(node)
    return ExportNamed(node)


def print_program(statements: Sequence[SyntaxNode]) -> str:
    """Print statements one after another, one per line group."""
    lines: List[str] = [statement.to_source() for statement in statements]
    return "\n".join(lines)
