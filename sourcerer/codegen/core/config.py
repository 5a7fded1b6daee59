"""
Configuration management for code generation.

Handles loading and merging configuration from JSON files,
providing defaults and validation for pipeline settings.
"""

import json
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from dataclasses import dataclass, field, asdict

from ...logging_config import get_logger
from .naming import INFLECTION_KEYS

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""
    pass


DEFAULT_HEADER = "// This file is auto-generated by sourcerer. Do not edit."


@dataclass
class GeneratorConfig:
    """Configuration for one pipeline run."""

    # Output settings
    output_dir: str = "generated"
    default_file: Optional[str] = "index.ts"
    header_comment: Optional[str] = DEFAULT_HEADER

    # Directory user module paths are relative to (defaults to the config
    # file's directory, or the working directory)
    config_dir: Optional[str] = None

    # Plugins in execution order: names or {"name": ..., "options": {...}}
    plugins: List[Any] = field(default_factory=lambda: ["types"])

    # User file rules, checked before plugin defaults:
    # {"pattern": "types:", "file": "models.ts", "output_dir": "db"}
    file_rules: List[Dict[str, Any]] = field(default_factory=list)

    # Naming transform chains, see naming.INFLECTION_KEYS
    inflection: Dict[str, List[str]] = field(default_factory=dict)

    # Type hints handed to plugins
    type_hints: List[Dict[str, Any]] = field(default_factory=list)

    # Custom settings
    custom: Dict[str, Any] = field(default_factory=dict)


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._defaults: Dict[str, Any] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Load default configuration values."""
        self._defaults = {
            "output_dir": "generated",
            "default_file": "index.ts",
            "header_comment": DEFAULT_HEADER,
            "plugins": ["types"],
            "inflection": {
                "entity_name": ["singularize", "pascal_case"],
                "field_name": ["camel_case"],
                "enum_name": ["pascal_case"],
            },
        }

    def get_config(self, custom_config: Optional[Dict[str, Any]] = None,
                   config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
        """
        Get complete configuration.

        Args:
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration
        """
        base_config = json.loads(json.dumps(self._defaults))

        if config_file:
            file_config = self._load_config_file(config_file)
            base_config.update(file_config)
            if not base_config.get("config_dir"):
                base_config["config_dir"] = str(Path(config_file).resolve().parent)
            logger.info("Loaded configuration from %s", config_file)

        if custom_config:
            base_config.update(custom_config)

        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == '.json':
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {str(e)}")
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {str(e)}")

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        known_fields = {f.name for f in GeneratorConfig.__dataclass_fields__.values()}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        if custom_args:
            existing_custom = dict(config_args.get('custom', {}))
            existing_custom.update(custom_args)
            config_args['custom'] = existing_custom

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = asdict(config)
        custom = config_dict.pop("custom")
        config_dict.update(custom)

        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {str(e)}")

    def validate_config(self, config: GeneratorConfig) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation warnings
        """
        warnings = []

        if not config.plugins:
            warnings.append("No plugins configured; nothing will be generated")

        for index, plugin in enumerate(config.plugins):
            if isinstance(plugin, dict):
                if "name" not in plugin:
                    warnings.append(f"Plugin entry {index} has no 'name'")
            elif not isinstance(plugin, str):
                warnings.append(f"Plugin entry {index} must be a name or an object")

        for index, rule in enumerate(config.file_rules):
            if "pattern" not in rule or "file" not in rule:
                warnings.append(f"File rule {index} needs both 'pattern' and 'file'")

        for key in config.inflection:
            if key not in INFLECTION_KEYS:
                warnings.append(f"Unknown inflection setting: {key}")

        if config.default_file is None and not config.file_rules:
            warnings.append(
                "No default_file: symbols not matched by a plugin rule will fail"
            )

        return warnings


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(custom_config: Optional[Dict[str, Any]] = None,
                config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration
    """
    manager = get_config_manager()
    return manager.get_config(custom_config, config_file)


# Example configuration file for reference
EXAMPLE_CONFIG = {
    "output_dir": "src/generated",
    "plugins": [
        "types",
        "zod",
        {"name": "kysely", "options": {"db_import": {"path": "./db.ts", "named": ["db"]}}},
        "hono",
    ],
    "file_rules": [{"pattern": "types:", "file": "models.ts"}],
    "inflection": {"entity_name": ["singularize", "pascal_case"], "field_name": ["camel_case"]},
}
