"""Schema-driven TypeScript code generation from database snapshots."""

from .codegen import __version__, generate, quick_generate

__all__ = ["__version__", "generate", "quick_generate"]
