"""
Core pipeline components.

Provides the capability registry, plugin contract, validation, file
assignment, orchestration and emission used by every plugin.
"""

from .capability import Capability, capability_key, category_of, matches_pattern
from .errors import (
    SourcererError,
    SymbolCollision,
    CategoryConflict,
    CapabilityNotFound,
    UnsatisfiedRequirement,
    CircularDependency,
    PluginExecutionError,
    ExportCollision,
    FileAssignmentError,
)
from .symbols import (
    SymbolDeclaration,
    SymbolRef,
    RenderedSymbol,
    ExternalImport,
    UserModuleRef,
    AssignedSymbol,
    EmittedFile,
    SymbolHandle,
)
from .syntax import (
    DeclarationKind,
    ExportKind,
    SyntaxNode,
    Declaration,
    Identifier,
    CallExpression,
    RawStatement,
    ExportNamed,
    ExportDefault,
    ImportDeclaration,
    wrap_export,
    print_program,
)
from .registry import SymbolRegistry, RenderScope
from .naming import Inflection, NameRegistry, NameSanitizer, NamingCase
from .schema import DataModel, Entity, Field, EnumDef, Relation, TypeHintRegistry, build_data_model, DataModelError
from .file_assignment import (
    FileRule,
    FileNamingContext,
    FileAssignmentConfig,
    get_file_for_capability,
    assign_symbols_to_files,
    group_by_file,
    merge_file_rules,
    normalize_file_rule,
    parse_capability_info,
)
from .plugin import Plugin, DeclareContext, RenderContext
from .validation import validate_all
from .orchestrator import OrchestratorConfig, OrchestratorResult, run_plugins
from .emit import EmitConfig, emit_files, compute_relative_path
from .config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, TemplateError, create_template_engine

__all__ = [
    # Capabilities
    "Capability",
    "capability_key",
    "category_of",
    "matches_pattern",
    # Errors
    "SourcererError",
    "SymbolCollision",
    "CategoryConflict",
    "CapabilityNotFound",
    "UnsatisfiedRequirement",
    "CircularDependency",
    "PluginExecutionError",
    "ExportCollision",
    "FileAssignmentError",
    # Symbols
    "SymbolDeclaration",
    "SymbolRef",
    "RenderedSymbol",
    "ExternalImport",
    "UserModuleRef",
    "AssignedSymbol",
    "EmittedFile",
    "SymbolHandle",
    # Syntax
    "DeclarationKind",
    "ExportKind",
    "SyntaxNode",
    "Declaration",
    "Identifier",
    "CallExpression",
    "RawStatement",
    "ExportNamed",
    "ExportDefault",
    "ImportDeclaration",
    "wrap_export",
    "print_program",
    # Registry
    "SymbolRegistry",
    "RenderScope",
    # Naming and data model
    "Inflection",
    "NameRegistry",
    "NameSanitizer",
    "NamingCase",
    "DataModel",
    "Entity",
    "Field",
    "EnumDef",
    "Relation",
    "TypeHintRegistry",
    "build_data_model",
    "DataModelError",
    # File assignment
    "FileRule",
    "FileNamingContext",
    "FileAssignmentConfig",
    "get_file_for_capability",
    "assign_symbols_to_files",
    "group_by_file",
    "merge_file_rules",
    "normalize_file_rule",
    "parse_capability_info",
    # Pipeline
    "Plugin",
    "DeclareContext",
    "RenderContext",
    "validate_all",
    "OrchestratorConfig",
    "OrchestratorResult",
    "run_plugins",
    "EmitConfig",
    "emit_files",
    "compute_relative_path",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
