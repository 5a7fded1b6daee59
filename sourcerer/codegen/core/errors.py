"""
Typed pipeline errors.

Every failure the orchestration pipeline can raise is a subclass of
SourcererError carrying a stable ``tag`` plus the structured fields that
identify what went wrong. Any of them aborts the whole run.
"""

from typing import List, Optional


class SourcererError(Exception):
    """Base exception for all pipeline failures."""

    tag = "SourcererError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SymbolCollision(SourcererError):
    """Two declarations claimed the same capability."""

    tag = "SymbolCollision"

    def __init__(self, capability: str, existing_symbol: str, new_symbol: str):
        super().__init__(
            f'Capability "{capability}" already registered by symbol '
            f'"{existing_symbol}" (cannot register "{new_symbol}")'
        )
        self.capability = capability
        self.existing_symbol = existing_symbol
        self.new_symbol = new_symbol


class CategoryConflict(SourcererError):
    """Two registrations for the same capability category."""

    tag = "CategoryConflict"

    def __init__(self, category: str, existing_provider: str, new_provider: str):
        super().__init__(
            f'Category "{category}" already provided by "{existing_provider}", '
            f'cannot add "{new_provider}"'
        )
        self.category = category
        self.existing_provider = existing_provider
        self.new_provider = new_provider


class CapabilityNotFound(SourcererError):
    """A capability was requested that nobody declared."""

    tag = "CapabilityNotFound"

    def __init__(self, capability: str, resolved: Optional[str] = None):
        resolved = resolved or capability
        super().__init__(
            f'Capability "{capability}" not found in registry '
            f'(resolved to "{resolved}")'
        )
        self.capability = capability
        self.resolved = resolved


class UnsatisfiedRequirement(SourcererError):
    """A plugin consumes a capability or category nothing provides."""

    tag = "UnsatisfiedRequirement"

    def __init__(self, capability: str, consumer: str):
        super().__init__(
            f'Plugin "{consumer}" consumes "{capability}" but no plugin provides it'
        )
        self.capability = capability
        self.consumer = consumer


class CircularDependency(SourcererError):
    """The plugin graph or the symbol graph contains a cycle."""

    tag = "CircularDependency"

    def __init__(self, cycle: List[str], level: str = "plugin"):
        super().__init__(
            f"Circular {level} dependency detected: {' -> '.join(cycle)}"
        )
        self.cycle = list(cycle)
        self.level = level


class PluginExecutionError(SourcererError):
    """An exception escaped a plugin's declare or render body."""

    tag = "PluginExecutionError"

    def __init__(self, plugin: str, phase: str, cause: Exception):
        super().__init__(f'Plugin "{plugin}" failed during {phase}: {cause}')
        self.plugin = plugin
        self.phase = phase
        self.cause = cause


class ExportCollision(SourcererError):
    """Two exports of the same name and kind were placed in one file."""

    tag = "ExportCollision"

    def __init__(
        self,
        file: str,
        export_name: str,
        export_kind: str,
        capability1: str,
        capability2: str,
    ):
        super().__init__(
            f'Export collision in {file}: "{export_name}" is already declared '
            f"as {export_kind} (by {capability1}, again by {capability2})"
        )
        self.file = file
        self.export_name = export_name
        self.export_kind = export_kind
        self.capability1 = capability1
        self.capability2 = capability2


class FileAssignmentError(SourcererError):
    """No file rule matched and no default file is configured."""

    tag = "FileAssignmentError"

    def __init__(self, capability: str):
        super().__init__(
            f'No file rule matches capability "{capability}" '
            "and no default file is configured"
        )
        self.capability = capability
