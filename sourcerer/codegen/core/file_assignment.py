"""
File assignment: deterministic placement of symbols into output files.

Configuration controls the file layout; plugins only declare symbols.
Each declaration is matched against file rules by capability prefix and
the first matching rule names its file. The name provenance registry
keeps derived shapes ("UserInsert") in the same folder as their entity.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Union

from ...logging_config import get_logger
from .capability import SEPARATOR
from .errors import FileAssignmentError
from .naming import Inflection
from .symbols import AssignedSymbol, SymbolDeclaration

logger = get_logger(__name__)


DEFAULT_CATEGORIES = frozenset({
    "type", "types", "schema", "schemas", "query", "queries",
    "http-routes", "http-router", "http",
})

DEFAULT_PROVIDERS = frozenset({
    "kysely", "drizzle", "sql", "prisma",
    "zod", "arktype", "valibot", "yup", "typebox",
    "hono", "elysia", "fastify", "express", "trpc",
})


@dataclass(frozen=True)
class FileNamingContext:
    """Entity information handed to file naming functions."""

    name: str
    entity_name: str
    base_entity_name: str
    folder_name: str
    schema: str
    capability: str
    variant: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "entity_name": self.entity_name,
            "base_entity_name": self.base_entity_name,
            "folder_name": self.folder_name,
            "folder": self.folder_name,
            "schema": self.schema,
            "capability": self.capability,
            "variant": self.variant or "",
        }


FileNaming = Callable[[FileNamingContext], str]


@dataclass(frozen=True)
class FileRule:
    """Capability prefix mapped to a file name, optionally under a subdirectory."""

    pattern: str
    file_naming: FileNaming
    output_dir: Optional[str] = None

    def file_for(self, context: FileNamingContext) -> str:
        file_name = self.file_naming(context)
        if self.output_dir:
            return f"{self.output_dir.rstrip('/')}/{file_name}"
        return file_name


@dataclass
class FileAssignmentConfig:
    """Inputs to file assignment."""

    rules: Sequence[FileRule]
    inflection: Inflection
    default_file: Optional[str] = None
    extra_known_tokens: FrozenSet[str] = frozenset()

    @property
    def known_tokens(self) -> FrozenSet[str]:
        return DEFAULT_CATEGORIES | DEFAULT_PROVIDERS | self.extra_known_tokens


def normalize_file_naming(option: Union[str, FileNaming, None], default: str) -> FileNaming:
    """
    Turn a static name, a ``str.format`` pattern or a function into a FileNaming.

    Patterns may use any FileNamingContext field, e.g. ``"{folder}/queries.ts"``.
    """
    if option is None:
        option = default
    if callable(option):
        return option
    text = str(option)
    if "{" in text:
        return lambda context: text.format(**context.as_dict())
    return lambda context: text


def normalize_file_rule(rule: Union[FileRule, Mapping[str, Any]]) -> FileRule:
    """
    Convert a config rule ``{"pattern", "file", "output_dir"?}`` into a FileRule.

    Raises:
        ValueError: If pattern or file is missing
    """
    if isinstance(rule, FileRule):
        return rule
    if "pattern" not in rule or "file" not in rule:
        raise ValueError(f"File rule needs 'pattern' and 'file': {dict(rule)!r}")
    return FileRule(
        pattern=rule["pattern"],
        file_naming=normalize_file_naming(rule["file"], rule["file"]),
        output_dir=rule.get("output_dir"),
    )


def merge_file_rules(plugin_defaults: Iterable[FileRule],
                     user_rules: Iterable[Union[FileRule, Mapping[str, Any]]]) -> List[FileRule]:
    """
    Combine user rules with plugin defaults.

    User rules come first so they win on overlapping prefixes; a plugin
    rule whose exact pattern a user rule names is dropped.
    """
    user = [normalize_file_rule(rule) for rule in user_rules]
    user_patterns = {rule.pattern for rule in user}
    merged = list(user)
    merged.extend(rule for rule in plugin_defaults if rule.pattern not in user_patterns)
    return merged


def parse_capability_info(capability: str,
                          known_tokens: FrozenSet[str] = DEFAULT_CATEGORIES | DEFAULT_PROVIDERS
                          ) -> Dict[str, str]:
    """
    Extract entity name and schema from a capability string.

    ``queries:kysely:User:findById`` -> ``User``; ``types:public.User`` ->
    ``User`` in schema ``public``. Known category and provider tokens are
    skipped; if every segment is known, the last one is used.
    """
    parts = capability.split(SEPARATOR)

    for part in parts:
        if part.lower() in known_tokens:
            continue
        if "." in part:
            schema, _, entity = part.partition(".")
            return {"entity_name": entity or part, "schema": schema or "public"}
        return {"entity_name": part, "schema": "public"}

    return {"entity_name": parts[-1] or capability, "schema": "public"}


def get_file_for_capability(declaration: SymbolDeclaration, config: FileAssignmentConfig) -> str:
    """
    Find the output file (relative to the output directory) for a declaration.

    Entity information comes from, in order: the inflection provenance
    registry, the declaration's ``base_entity_name``, then parsing of the
    capability itself.

    Raises:
        FileAssignmentError: If no rule matches and there is no default file
    """
    if declaration.output_path:
        return declaration.output_path

    parsed = parse_capability_info(declaration.capability, config.known_tokens)
    entity_name = parsed["entity_name"]
    schema = parsed["schema"]
    variant = None

    provenance = config.inflection.registry.lookup(declaration.name)
    if provenance is not None:
        base_entity_name = provenance.base_entity
        variant = provenance.variant if provenance.variant != "entity" else None
    elif declaration.base_entity_name:
        base_entity_name = declaration.base_entity_name
        entity_name = declaration.base_entity_name
    else:
        base_entity_name = entity_name

    context = FileNamingContext(
        name=declaration.name,
        entity_name=entity_name,
        base_entity_name=base_entity_name,
        folder_name=config.inflection.folder_name(base_entity_name),
        schema=schema,
        capability=declaration.capability,
        variant=variant,
    )

    for rule in config.rules:
        if declaration.capability.startswith(rule.pattern):
            return rule.file_for(context)

    if config.default_file:
        return config.default_file

    raise FileAssignmentError(declaration.capability)


def assign_symbols_to_files(declarations: Iterable[SymbolDeclaration],
                            config: FileAssignmentConfig) -> List[AssignedSymbol]:
    return [
        AssignedSymbol(declaration=declaration,
                       file_path=get_file_for_capability(declaration, config))
        for declaration in declarations
    ]


def group_by_file(assigned: Iterable[AssignedSymbol]) -> Dict[str, List[AssignedSymbol]]:
    """Group assigned symbols by file path in first-seen order."""
    groups: Dict[str, List[AssignedSymbol]] = {}
    for item in assigned:
        groups.setdefault(item.file_path, []).append(item)
    return groups
