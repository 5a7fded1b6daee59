"""
Emit phase: turn an orchestrator result into file contents.

For each file group this synthesizes imports from the reference graph
recorded during rendering, merges external and user-module imports,
checks for colliding exports and prints the module. Emission is pure:
nothing is written to disk here.
"""

import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ...logging_config import get_logger
from .errors import ExportCollision
from .orchestrator import OrchestratorResult
from .symbols import AssignedSymbol, EmittedFile, RenderedSymbol, UserModuleRef
from .syntax import (
    DeclarationKind,
    ExportKind,
    ImportDeclaration,
    SyntaxNode,
    print_program,
    wrap_export,
)

logger = get_logger(__name__)


@dataclass
class EmitConfig:
    """Output options for the emit phase."""

    header_comment: Optional[str] = None

    # Directory containing the config file; user module paths are relative to it
    config_dir: Optional[str] = None

    # Output directory, relative to config_dir or absolute
    output_dir: Optional[str] = None


def _to_js(file_name: str) -> str:
    return re.sub(r"\.ts$", ".js", file_name)


def compute_relative_path(from_file: str, to_file: str) -> str:
    """
    Module specifier for importing ``to_file`` from ``from_file``.

    Both paths are relative to the output directory. ``.ts`` becomes
    ``.js`` and the result always starts with ``./`` or ``../``.

    >>> compute_relative_path("user/queries.ts", "types.ts")
    '../types.js'
    """
    from_parts = from_file.split("/")[:-1]
    to_parts = to_file.split("/")
    to_name = to_parts.pop()

    common = 0
    while (common < len(from_parts) and common < len(to_parts)
           and from_parts[common] == to_parts[common]):
        common += 1

    parts = [".."] * (len(from_parts) - common)
    parts.extend(to_parts[common:])
    parts.append(_to_js(to_name))

    if parts[0] != "..":
        parts.insert(0, ".")
    return "/".join(parts)


def compute_user_module_path(output_file: str, module_path: str,
                             config_dir: str, output_dir: str) -> str:
    """Module specifier for a user module (relative to config_dir) from an output file."""
    module_absolute = os.path.normpath(os.path.join(config_dir, module_path))
    output_dir_absolute = output_dir if os.path.isabs(output_dir) \
        else os.path.join(config_dir, output_dir)
    output_file_dir = os.path.dirname(
        os.path.normpath(os.path.join(output_dir_absolute, output_file))
    )

    relative = os.path.relpath(module_absolute, output_file_dir).replace(os.sep, "/")
    relative = _to_js(relative)
    if not relative.startswith("."):
        relative = f"./{relative}"
    return relative


def _is_internal_source(source: str) -> bool:
    return (source.startswith("./") or source.startswith("../")
            or bool(re.search(r"\.(ts|js)$", source)))


def _resolve_import_source(file_path: str, source: str) -> str:
    """Rewrite output-relative module paths for this file; packages pass through."""
    if not _is_internal_source(source):
        return source
    normalized = re.sub(r"^\./", "", source)
    normalized = re.sub(r"\.js$", ".ts", normalized)
    return compute_relative_path(file_path, normalized)


def _cross_file_imports(file_path: str, symbols: Sequence[AssignedSymbol],
                        result: OrchestratorResult,
                        locations: Dict[str, Tuple[str, str]]) -> List[ImportDeclaration]:
    names_by_file: Dict[str, Dict[str, None]] = {}

    for assigned in symbols:
        for target in result.references.get(assigned.declaration.capability, []):
            location = locations.get(target)
            if location is None:
                continue
            name, target_file = location
            if target_file == file_path:
                continue
            names_by_file.setdefault(target_file, {})[name] = None

    return [
        ImportDeclaration(compute_relative_path(file_path, target_file), named=list(names))
        for target_file, names in names_by_file.items()
    ]


class _ExternalImports:
    """Accumulates external imports per module, keeping value and type imports apart."""

    def __init__(self):
        self.values: Dict[str, Dict[str, None]] = {}
        self.types: Dict[str, Dict[str, None]] = {}
        self.defaults: Dict[str, str] = {}
        self.namespaces: Dict[str, str] = {}

    def add(self, external):
        source = external.source
        if external.names or external.default or external.namespace:
            names = self.values.setdefault(source, {})
            for name in external.names:
                names[name] = None
        if external.types:
            types = self.types.setdefault(source, {})
            for name in external.types:
                types[name] = None
        if external.default:
            self.defaults.setdefault(source, external.default)
        if external.namespace:
            self.namespaces.setdefault(source, external.namespace)

    def statements(self, file_path: str) -> Tuple[List[ImportDeclaration], List[ImportDeclaration]]:
        type_imports = [
            ImportDeclaration(_resolve_import_source(file_path, source),
                              named=list(names), type_only=True)
            for source, names in self.types.items() if names
        ]
        value_imports = [
            ImportDeclaration(
                _resolve_import_source(file_path, source),
                named=list(names),
                default=self.defaults.get(source),
                namespace=self.namespaces.get(source),
            )
            for source, names in self.values.items()
        ]
        return type_imports, value_imports


def _user_module_import(ref: UserModuleRef, file_path: str,
                        config: EmitConfig) -> ImportDeclaration:
    return ImportDeclaration(
        compute_user_module_path(file_path, ref.path, config.config_dir, config.output_dir),
        named=list(ref.named),
        default=ref.default,
        namespace=ref.namespace,
    )


def _collect_body(file_path: str, symbols: Sequence[AssignedSymbol],
                  rendered_by_capability: Dict[str, RenderedSymbol]) -> List[SyntaxNode]:
    """Export-wrapped bodies; raises ExportCollision on a same-name same-kind pair."""
    seen: Dict[str, Dict[DeclarationKind, str]] = {}
    body: List[SyntaxNode] = []

    for assigned in symbols:
        capability = assigned.declaration.capability
        rendered = rendered_by_capability.get(capability)
        if rendered is None or rendered.exports is ExportKind.NONE or rendered.node is None:
            continue

        wrapped = wrap_export(rendered.node, rendered.exports)
        kind = wrapped.declaration_kind()

        kinds = seen.setdefault(rendered.name, {})
        if kind in kinds:
            raise ExportCollision(file_path, rendered.name, kind.value,
                                  kinds[kind], capability)
        kinds[kind] = capability
        body.append(wrapped)

    return body


def _is_comment_line(line: str) -> bool:
    return line.lstrip().startswith(("/**", "*", "//"))


def _format_code(code: str) -> str:
    """Insert a blank line before each top-level export not already preceded by one.

    A doc comment directly above the export stays attached to it.
    """
    lines: List[str] = []
    for line in code.split("\n"):
        if line.startswith("export "):
            start = len(lines)
            while start > 0 and _is_comment_line(lines[start - 1]):
                start -= 1
            if start > 0 and lines[start - 1] != "":
                lines.insert(start, "")
        lines.append(line)
    return "\n".join(lines)


def emit_files(result: OrchestratorResult, config: Optional[EmitConfig] = None) -> List[EmittedFile]:
    """
    Build the content of every output file.

    Args:
        result: Output of run_plugins
        config: Header and directory options

    Returns:
        Emitted files in first-seen file order; files with only
        metadata symbols are omitted

    Raises:
        ExportCollision: If one file would export the same name twice
            with the same declaration kind
    """
    config = config or EmitConfig()

    rendered_by_capability = {symbol.capability: symbol for symbol in result.rendered}
    locations: Dict[str, Tuple[str, str]] = {}
    for file_path, symbols in result.file_groups.items():
        for assigned in symbols:
            locations[assigned.declaration.capability] = (assigned.declaration.name, file_path)

    emitted: List[EmittedFile] = []

    for file_path, symbols in result.file_groups.items():
        cross_imports = _cross_file_imports(file_path, symbols, result, locations)

        externals = _ExternalImports()
        user_imports: List[ImportDeclaration] = []
        seen_user_refs: Set[UserModuleRef] = set()
        file_headers: List[str] = []

        for assigned in symbols:
            rendered = rendered_by_capability.get(assigned.declaration.capability)
            if rendered is None:
                continue

            if rendered.file_header and rendered.file_header not in file_headers:
                file_headers.append(rendered.file_header)

            if rendered.user_imports and config.config_dir and config.output_dir:
                for ref in rendered.user_imports:
                    if ref in seen_user_refs:
                        continue
                    seen_user_refs.add(ref)
                    user_imports.append(_user_module_import(ref, file_path, config))

            for external in rendered.external_imports:
                externals.add(external)

        body = _collect_body(file_path, symbols, rendered_by_capability)
        if not body:
            logger.debug("Skipping %s: no emitted symbols", file_path)
            continue

        type_imports, value_imports = externals.statements(file_path)
        program = [*user_imports, *type_imports, *value_imports, *cross_imports, *body]

        code = _format_code(print_program(program))
        if file_headers:
            code = "\n".join(file_headers) + "\n\n" + code
        if config.header_comment:
            code = config.header_comment + "\n\n" + code
        if not code.endswith("\n"):
            code += "\n"

        emitted.append(EmittedFile(path=file_path, content=code))

    logger.info("Emitted %d files", len(emitted))
    return emitted
