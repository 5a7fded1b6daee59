"""
End-to-end generation: snapshot and configuration in, emitted files out.

Wires the data model, inflection, plugins, orchestrator and emitter
together for one stateless run.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ...logging_config import get_logger
from .config import ConfigError, GeneratorConfig, get_config_manager
from .emit import EmitConfig, emit_files
from .errors import SourcererError
from .naming import Inflection
from .orchestrator import OrchestratorConfig, OrchestratorResult, run_plugins
from .plugin import Plugin
from .schema import DataModelError, TypeHintRegistry, build_data_model
from .symbols import EmittedFile
from .templates import TemplateError

logger = get_logger(__name__)


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(self, files: List[EmittedFile] = None, warnings: List[str] = None,
                 metadata: Dict[str, Any] = None):
        """
        Initialize generation result.

        Args:
            files: Emitted files, paths relative to the output directory
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.files = files or []
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message: Optional[str] = None
        self.exception: Optional[Exception] = None

    @classmethod
    def error(cls, message: str, exception: Exception = None) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls()
        result.success = False
        result.error_message = message
        result.exception = exception
        return result


def run_pipeline(snapshot: Dict[str, Any], config: GeneratorConfig,
                 plugins: Sequence[Plugin]) -> Tuple[OrchestratorResult, List[EmittedFile]]:
    """
    Run one pipeline pass; every failure propagates.

    Args:
        snapshot: Introspection snapshot
        config: Generator configuration
        plugins: Plugin instances in execution order

    Returns:
        The orchestrator result and the emitted files
    """
    inflection = Inflection(config.inflection)
    data_model = build_data_model(snapshot, inflection)

    result = run_plugins(
        OrchestratorConfig(
            plugins=plugins,
            data_model=data_model,
            inflection=inflection,
            type_hints=TypeHintRegistry(config.type_hints),
            default_file=config.default_file,
            file_rules=config.file_rules,
        )
    )
    files = emit_files(
        result,
        EmitConfig(
            header_comment=config.header_comment,
            config_dir=config.config_dir or str(Path.cwd()),
            output_dir=config.output_dir,
        ),
    )
    return result, files


def generate_code(snapshot: Dict[str, Any], config: GeneratorConfig,
                  plugins: Optional[Sequence[Plugin]] = None) -> GenerationResult:
    """
    Generate files with error handling.

    Args:
        snapshot: Introspection snapshot
        config: Generator configuration
        plugins: Plugin instances; built from ``config.plugins`` when omitted

    Returns:
        GenerationResult with files, warnings, and metadata
    """
    # Local import: the plugin registry imports the plugin contract from core
    from ..registry import RegistryError, build_plugins

    warnings = get_config_manager().validate_config(config)

    try:
        if plugins is None:
            plugins = build_plugins(config.plugins)
        result, files = run_pipeline(snapshot, config, plugins)
    except (SourcererError, ConfigError, DataModelError, RegistryError, TemplateError,
            ValueError) as e:
        tag = getattr(e, "tag", type(e).__name__)
        logger.error("Generation failed [%s]: %s", tag, e)
        return GenerationResult.error(f"Code generation failed: {e}", exception=e)

    metadata = {
        "plugins": [plugin.name for plugin in plugins],
        "symbol_count": len(result.declarations),
        "file_count": len(files),
        "category_providers": result.registry.category_providers(),
        "reference_count": sum(len(targets) for targets in result.references.values()),
    }
    return GenerationResult(files, warnings, metadata)
