"""
Built-in generator plugins.

Each plugin contributes symbols for one concern of a TypeScript backend.
"""

from .types import TypesPlugin
from .zod import ZodPlugin
from .kysely import KyselyPlugin
from .hono import HonoPlugin
from .type_mapping import TsType, TypeMapper

__all__ = [
    "TypesPlugin",
    "ZodPlugin",
    "KyselyPlugin",
    "HonoPlugin",
    "TsType",
    "TypeMapper",
]
