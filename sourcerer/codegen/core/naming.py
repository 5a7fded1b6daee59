"""
Naming utilities for safe code generation.

Handles case conversions, reserved-word conflicts, and the inflection
policy (entity, field, shape and folder names) shared by every plugin.
The inflection keeps a provenance registry so a generated name such as
"UserInsert" can be traced back to its base entity and variant.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set

from ...logging_config import get_logger

logger = get_logger(__name__)


class NamingCase(Enum):
    """Different naming case styles."""
    SNAKE_CASE = "snake"      # user_name
    CAMEL_CASE = "camel"      # userName
    PASCAL_CASE = "pascal"    # UserName
    KEBAB_CASE = "kebab"      # user-name
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME


TYPESCRIPT_RESERVED = {
    "break", "case", "catch", "class", "const", "continue", "debugger", "default",
    "delete", "do", "else", "enum", "export", "extends", "false", "finally", "for",
    "function", "if", "import", "in", "instanceof", "new", "null", "return", "super",
    "switch", "this", "throw", "true", "try", "typeof", "var", "void", "while", "with",
    "yield", "let", "static", "implements", "interface", "package", "private",
    "protected", "public", "abstract", "as", "async", "await", "constructor", "declare",
    "get", "is", "module", "namespace", "never", "readonly", "require", "number",
    "object", "set", "string", "symbol", "type", "undefined", "unique", "unknown",
    "from", "global", "keyof", "of", "infer", "any", "boolean", "bigint",
}


class NameSanitizer:
    """Handles name sanitization and case conversion."""

    def __init__(self, reserved_words: Set[str] = None):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
        """
        self.reserved_words = reserved_words or set()
        self._name_cache: Dict[str, str] = {}

    def sanitize_name(self, name: str, target_case: NamingCase = NamingCase.CAMEL_CASE,
                      suffix_on_conflict: str = "_") -> str:
        """
        Sanitize a name for safe use as an identifier.

        Args:
            name: Original name to sanitize
            target_case: Desired case style
            suffix_on_conflict: Suffix appended to reserved words

        Returns:
            Sanitized name safe for use
        """
        cache_key = f"{name}_{target_case.value}_{suffix_on_conflict}"
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        cleaned = self.clean_basic(name)
        converted = self.convert_case(cleaned, target_case)
        final_name = self.safe_identifier(converted, suffix_on_conflict)

        self._name_cache[cache_key] = final_name
        return final_name

    def safe_identifier(self, name: str, suffix: str = "_") -> str:
        """Append ``suffix`` to reserved words."""
        if name in self.reserved_words:
            return f"{name}{suffix}"
        return name

    def clean_basic(self, name: str) -> str:
        """Basic name cleanup - remove invalid characters."""
        cleaned = re.sub(r'[^a-zA-Z0-9_-]', '_', name)
        cleaned = cleaned.strip('_-')

        # Identifiers cannot start with a digit
        if cleaned and cleaned[0].isdigit():
            cleaned = f"_{cleaned}"

        if not cleaned:
            cleaned = "field"

        return cleaned

    def convert_case(self, name: str, target_case: NamingCase) -> str:
        """Convert name to target case style."""
        if target_case == NamingCase.SNAKE_CASE:
            return to_snake_case(name)
        elif target_case == NamingCase.CAMEL_CASE:
            return to_camel_case(name)
        elif target_case == NamingCase.PASCAL_CASE:
            return to_pascal_case(name)
        elif target_case == NamingCase.KEBAB_CASE:
            return to_snake_case(name).replace('_', '-')
        elif target_case == NamingCase.SCREAMING_SNAKE:
            return to_snake_case(name).upper()
        else:
            return name


def to_snake_case(name: str) -> str:
    """Convert to snake_case."""
    name = name.replace('-', '_')
    name = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', name)
    name = name.lower()
    name = re.sub(r'_+', '_', name)
    return name.strip('_')


def to_camel_case(name: str) -> str:
    """Convert to camelCase."""
    parts = to_snake_case(name).split('_')
    if not parts:
        return name
    return parts[0].lower() + ''.join(part.capitalize() for part in parts[1:])


def to_pascal_case(name: str) -> str:
    """Convert to PascalCase."""
    parts = to_snake_case(name).split('_')
    return ''.join(part.capitalize() for part in parts if part)


def pluralize(word: str) -> str:
    """Naive English plural covering the common table-name cases."""
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    if word.endswith("y") and not re.search(r"[aeiou]y$", word, re.IGNORECASE):
        return word[:-1] + "ies"
    return word + "s"


def singularize(word: str) -> str:
    """Inverse of :func:`pluralize` for the same cases."""
    if word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if word.endswith(("sses", "xes", "zes", "ches", "shes")):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss") and len(word) > 1:
        return word[:-1]
    return word


def capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def uncapitalize(word: str) -> str:
    return word[:1].lower() + word[1:]


TRANSFORMS: Dict[str, Callable[[str], str]] = {
    "camel_case": to_camel_case,
    "pascal_case": to_pascal_case,
    "snake_case": to_snake_case,
    "singularize": singularize,
    "pluralize": pluralize,
    "capitalize": capitalize,
    "uncapitalize": uncapitalize,
    "lowercase": str.lower,
    "uppercase": str.upper,
}


def apply_transform_chain(value: str, chain: Iterable[str]) -> str:
    """Apply named transforms in order; an empty chain is the identity.

    Transform names may be given as ``pascal_case`` or ``pascalCase``.
    """
    for transform_name in chain:
        key = to_snake_case(transform_name)
        if key not in TRANSFORMS:
            raise ValueError(
                f"Unknown name transform '{transform_name}'. "
                f"Available: {', '.join(sorted(TRANSFORMS))}"
            )
        value = TRANSFORMS[key](value)
    return value


@dataclass(frozen=True)
class NameInfo:
    """Where a generated name came from."""

    base_entity: str
    variant: str = "entity"


class NameRegistry:
    """Provenance table from generated name back to base entity/variant."""

    def __init__(self):
        self._names: Dict[str, NameInfo] = {}

    def register(self, name: str, base_entity: str, variant: str = "entity"):
        info = NameInfo(base_entity=base_entity, variant=variant)
        existing = self._names.get(name)
        if existing is not None and existing != info:
            logger.warning(
                "Name %s already recorded for %s/%s; ignoring %s/%s",
                name, existing.base_entity, existing.variant, base_entity, variant,
            )
            return
        self._names[name] = info

    def lookup(self, name: str) -> Optional[NameInfo]:
        return self._names.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)


INFLECTION_KEYS = ("entity_name", "field_name", "enum_name", "enum_value", "shape_suffix")


class Inflection:
    """Naming policy service shared by every plugin and by file assignment.

    Each configurable name is produced by a transform chain; empty chains
    keep database names as they are.
    """

    def __init__(self, chains: Optional[Mapping[str, List[str]]] = None,
                 registry: Optional[NameRegistry] = None):
        chains = dict(chains or {})
        unknown = set(chains) - set(INFLECTION_KEYS)
        if unknown:
            raise ValueError(f"Unknown inflection settings: {', '.join(sorted(unknown))}")

        self.chains: Dict[str, List[str]] = {
            key: list(chains.get(key, [])) for key in INFLECTION_KEYS
        }
        self.registry = registry or NameRegistry()
        self.sanitizer = NameSanitizer(TYPESCRIPT_RESERVED)

    camel_case = staticmethod(to_camel_case)
    pascal_case = staticmethod(to_pascal_case)
    snake_case = staticmethod(to_snake_case)
    pluralize = staticmethod(pluralize)
    singularize = staticmethod(singularize)

    def safe_identifier(self, text: str) -> str:
        return self.sanitizer.safe_identifier(text)

    def entity_name(self, table_name: str, override: Optional[str] = None) -> str:
        """Entity name for a table or view; records its provenance."""
        name = override or apply_transform_chain(table_name, self.chains["entity_name"])
        self.registry.register(name, name, "entity")
        return name

    def field_name(self, column_name: str, override: Optional[str] = None) -> str:
        return override or apply_transform_chain(column_name, self.chains["field_name"])

    def enum_name(self, type_name: str, override: Optional[str] = None) -> str:
        name = override or apply_transform_chain(type_name, self.chains["enum_name"])
        self.registry.register(name, name, "entity")
        return name

    def enum_value_name(self, value: str) -> str:
        return apply_transform_chain(value, self.chains["enum_value"])

    def shape_name(self, entity_name: str, variant: str) -> str:
        """Name of a derived shape such as ``UserInsert``; records provenance."""
        suffix = apply_transform_chain(variant, self.chains["shape_suffix"] or ["capitalize"])
        name = f"{entity_name}{suffix}"
        self.registry.register(name, entity_name, variant)
        return name

    def folder_name(self, base_entity_name: str) -> str:
        """Folder for an entity's files: ``User`` -> ``user``, ``UserEmail`` -> ``userEmail``."""
        return uncapitalize(base_entity_name)
