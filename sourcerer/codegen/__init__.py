"""
Sourcerer Code Generation Module

Generates TypeScript modules from a database introspection snapshot by
coordinating independently written plugins.
"""

import json

from .registry import (
    PluginRegistry,
    RegistryError,
    build_plugins,
    get_plugin,
    list_available_plugins,
    register_plugin,
)
from .core.generator import GenerationResult, generate_code, run_pipeline
from .core.config import GeneratorConfig, ConfigManager, load_config
from .core.orchestrator import OrchestratorConfig, OrchestratorResult, run_plugins
from .core.emit import EmitConfig, emit_files
from .core.plugin import Plugin, DeclareContext, RenderContext

# Version info
__version__ = "0.1.0"


# Convenience functions
def generate(snapshot, config=None, config_file=None, **overrides) -> GenerationResult:
    """
    Generate files from an introspection snapshot.

    Args:
        snapshot: Snapshot as a dict or JSON string
        config: Configuration dict overrides
        config_file: Path to a JSON configuration file
        **overrides: Individual configuration values (e.g. ``plugins=[...]``)

    Returns:
        GenerationResult with emitted files
    """
    if isinstance(snapshot, str):
        snapshot = json.loads(snapshot)

    custom = dict(config or {})
    custom.update(overrides)
    generator_config = load_config(custom_config=custom, config_file=config_file)

    return generate_code(snapshot, generator_config)


def quick_generate(snapshot, plugins=("types",), **options):
    """
    Quick generation returning ``{path: content}``.

    Raises:
        RuntimeError: If generation fails
    """
    result = generate(snapshot, plugins=list(plugins), **options)

    if result.success:
        return {emitted.path: emitted.content for emitted in result.files}
    else:
        raise RuntimeError(result.error_message)


# Export main interfaces
__all__ = [
    "PluginRegistry",
    "RegistryError",
    "Plugin",
    "DeclareContext",
    "RenderContext",
    "GenerationResult",
    "GeneratorConfig",
    "ConfigManager",
    "OrchestratorConfig",
    "OrchestratorResult",
    "EmitConfig",
    "run_plugins",
    "emit_files",
    "run_pipeline",
    "generate_code",
    "generate",
    "quick_generate",
    "build_plugins",
    "get_plugin",
    "list_available_plugins",
    "register_plugin",
    "load_config",
]
