"""
PostgreSQL to TypeScript type mapping shared by the built-in plugins.

Maps a column type to its TypeScript type and zod expression, applying
user type hints and nullability.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional

from ..core.schema import DataModel, Field, TypeHintRegistry


@dataclass(frozen=True)
class TsType:
    """TypeScript rendering of one column type."""

    ts: str
    zod: str
    references: FrozenSet[str] = field(default_factory=frozenset)

    def nullable(self) -> "TsType":
        return TsType(f"{self.ts} | null", f"{self.zod}.nullable()", self.references)

    def array(self) -> "TsType":
        ts = f"({self.ts})[]" if "|" in self.ts else f"{self.ts}[]"
        return TsType(ts, f"z.array({self.zod})", self.references)


STRING = TsType("string", "z.string()")
NUMBER = TsType("number", "z.number()")
BOOLEAN = TsType("boolean", "z.boolean()")
DATE = TsType("Date", "z.coerce.date()")
UNKNOWN = TsType("unknown", "z.unknown()")

PG_TYPE_MAP: Dict[str, TsType] = {
    "text": STRING,
    "varchar": STRING,
    "character varying": STRING,
    "char": STRING,
    "bpchar": STRING,
    "citext": STRING,
    "name": STRING,
    "uuid": TsType("string", "z.string().uuid()"),
    "int2": NUMBER,
    "int4": NUMBER,
    "smallint": NUMBER,
    "integer": NUMBER,
    "serial": NUMBER,
    "float4": NUMBER,
    "float8": NUMBER,
    "real": NUMBER,
    "double precision": NUMBER,
    # 64-bit and arbitrary precision values arrive as strings
    "int8": STRING,
    "bigint": STRING,
    "bigserial": STRING,
    "numeric": STRING,
    "decimal": STRING,
    "bool": BOOLEAN,
    "boolean": BOOLEAN,
    "date": DATE,
    "timestamp": DATE,
    "timestamptz": DATE,
    "time": STRING,
    "timetz": STRING,
    "interval": STRING,
    "json": UNKNOWN,
    "jsonb": UNKNOWN,
    "bytea": TsType("Buffer", "z.instanceof(Buffer)"),
    "inet": STRING,
    "cidr": STRING,
}


class TypeMapper:
    """Resolves column types, honouring type hints.

    A hint ``{"match": {"pg_type": "jsonb"}, "hints": {"ts": "Json", "zod":
    "z.any()"}}`` overrides the mapping for matching columns. Hints may
    match on ``table``, ``column`` and ``pg_type``.
    """

    def __init__(self, data_model: DataModel, type_hints: Optional[TypeHintRegistry] = None):
        self.data_model = data_model
        self.type_hints = type_hints or TypeHintRegistry()

    def base_type(self, table_name: str, column: Field) -> TsType:
        hints = self.type_hints.get_hints(
            table=table_name, column=column.column_name, pg_type=column.pg_type
        )
        if "ts" in hints or "zod" in hints:
            return TsType(hints.get("ts", "unknown"), hints.get("zod", "z.unknown()"))

        if column.enum_name:
            enum = self.data_model.enums[column.enum_name]
            values = ", ".join(f'"{value}"' for value in enum.values)
            return TsType(enum.name, f"z.enum([{values}])", frozenset({enum.name}))

        return PG_TYPE_MAP.get(column.pg_type.lower(), UNKNOWN)

    def column_type(self, table_name: str, column: Field) -> TsType:
        """Full type including array and null handling."""
        ts_type = self.base_type(table_name, column)
        if column.is_array:
            ts_type = ts_type.array()
        if column.nullable:
            ts_type = ts_type.nullable()
        return ts_type

    @staticmethod
    def is_optional_on_insert(column: Field) -> bool:
        return column.nullable or column.has_default
