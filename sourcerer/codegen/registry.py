"""
Plugin registry system for managing available generator plugins.

Provides dynamic registration and instantiation of plugins by name.
"""

from typing import Dict, Type, Optional, Any, List, Sequence, Union

from ..logging_config import get_logger
from .core.plugin import Plugin

logger = get_logger(__name__)


class RegistryError(Exception):
    """Exception raised for registry-related errors."""

    pass


PluginSpec = Union[str, Dict[str, Any]]


class PluginRegistry:
    """Registry for managing available generator plugins."""

    def __init__(self):
        """Initialize empty registry."""
        self._plugins: Dict[str, Type[Plugin]] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        name: str,
        plugin_class: Type[Plugin],
        aliases: Optional[List[str]] = None,
        replace: bool = False,
    ):
        """
        Register a plugin class under a name.

        Args:
            name: Primary plugin name (e.g., 'zod')
            plugin_class: Class implementing Plugin
            aliases: Alternative names for this plugin
            replace: If True, replace existing registration. If False, skip if exists.

        Raises:
            RegistryError: If plugin class is invalid or an alias conflicts
        """
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, Plugin):
            raise RegistryError("Plugin class must inherit from Plugin")

        key = name.lower()

        # Already registered, skip silently
        if key in self._plugins and not replace:
            return

        alias_keys = [alias.lower() for alias in aliases or [] if alias.lower() != key]

        if not replace:
            for alias_key in alias_keys:
                if alias_key in self._plugins:
                    raise RegistryError(
                        f"Alias '{alias_key}' conflicts with existing plugin name"
                    )
                if alias_key in self._aliases and self._aliases[alias_key] != key:
                    raise RegistryError(
                        f"Alias '{alias_key}' already points to '{self._aliases[alias_key]}'"
                    )

        self._plugins[key] = plugin_class
        for alias_key in alias_keys:
            self._aliases[alias_key] = key

        logger.debug("Registered plugin %s (%s)", key, plugin_class.__name__)

    def unregister(self, name: str):
        """
        Unregister a plugin and its aliases.

        Args:
            name: Plugin name to unregister
        """
        key = name.lower()
        self._plugins.pop(key, None)

        for alias in [alias for alias, target in self._aliases.items() if target == key]:
            del self._aliases[alias]

    def _resolve_name(self, name: str) -> str:
        key = name.lower()
        if key in self._plugins:
            return key
        if key in self._aliases:
            return self._aliases[key]
        raise RegistryError(
            f"No plugin registered with name: {name}. "
            f"Available: {', '.join(self.list_plugins())}"
        )

    def get_plugin_class(self, name: str) -> Type[Plugin]:
        """
        Get plugin class for a name or alias.

        Raises:
            RegistryError: If the name is not registered
        """
        return self._plugins[self._resolve_name(name)]

    def create_plugin(self, name: str, options: Optional[Dict[str, Any]] = None) -> Plugin:
        """
        Create a plugin instance.

        Args:
            name: Plugin name or alias
            options: Plugin options

        Returns:
            Configured plugin instance

        Raises:
            RegistryError: If plugin creation fails
        """
        plugin_class = self.get_plugin_class(name)
        try:
            return plugin_class(options or {})
        except (TypeError, ValueError, KeyError, IndexError) as e:
            raise RegistryError(f"Failed to create {name} plugin: {e}") from e

    def list_plugins(self) -> List[str]:
        """Get list of registered primary plugin names."""
        return sorted(self._plugins.keys())

    def get_aliases_for_plugin(self, name: str) -> List[str]:
        key = name.lower()
        return sorted(alias for alias, target in self._aliases.items() if target == key)

    def is_supported(self, name: str) -> bool:
        key = name.lower()
        return key in self._plugins or key in self._aliases

    def get_plugin_info(self, name: str) -> Dict[str, Any]:
        """
        Get information about a registered plugin.

        Returns:
            Dict with name, class, provides, consumes, aliases and module
        """
        key = self._resolve_name(name)
        plugin = self.create_plugin(key)

        return {
            "name": plugin.name,
            "class": type(plugin).__name__,
            "description": plugin.description,
            "provides": list(plugin.provides),
            "consumes": list(plugin.consumes),
            "aliases": self.get_aliases_for_plugin(key),
            "module": type(plugin).__module__,
        }


# Global registry instance - created once
_global_registry: Optional[PluginRegistry] = None


def get_registry() -> PluginRegistry:
    """Get the global plugin registry, initializing if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = PluginRegistry()
        _auto_register_plugins(_global_registry)
    return _global_registry


def _auto_register_plugins(registry: PluginRegistry):
    """Register the built-in plugins with their aliases."""
    from .plugins import HonoPlugin, KyselyPlugin, TypesPlugin, ZodPlugin

    registry.register("types", TypesPlugin, aliases=["typescript", "ts"])
    registry.register("zod", ZodPlugin)
    registry.register("kysely", KyselyPlugin, aliases=["queries"])
    registry.register("hono", HonoPlugin, aliases=["http"])


# Public API functions using the global registry


def register_plugin(name: str, plugin_class: Type[Plugin], aliases: Optional[List[str]] = None):
    """Register a plugin in the global registry."""
    get_registry().register(name, plugin_class, aliases)


def get_plugin(name: str, options: Optional[Dict[str, Any]] = None) -> Plugin:
    """Get a plugin instance from the global registry."""
    return get_registry().create_plugin(name, options)


def list_available_plugins() -> List[str]:
    """List all plugins in the global registry."""
    return get_registry().list_plugins()


def build_plugins(specs: Sequence[PluginSpec],
                  registry: Optional[PluginRegistry] = None) -> List[Plugin]:
    """
    Instantiate plugins from configuration entries, keeping their order.

    Args:
        specs: Plugin names or ``{"name": ..., "options": {...}}`` dicts
        registry: Registry to use (defaults to the global one)

    Returns:
        Plugin instances in the given order

    Raises:
        RegistryError: For unknown names or malformed entries
    """
    registry = registry or get_registry()
    plugins = []
    for spec in specs:
        if isinstance(spec, str):
            plugins.append(registry.create_plugin(spec))
        elif isinstance(spec, dict) and "name" in spec:
            plugins.append(registry.create_plugin(spec["name"], spec.get("options")))
        else:
            raise RegistryError(f"Invalid plugin entry: {spec!r}")
    return plugins
