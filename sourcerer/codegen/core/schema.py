"""
Data model representation for code generation.

Converts an introspection snapshot (JSON) into the normalized entities,
fields, relations and enums that plugins read while declaring and
rendering. The pipeline itself never looks inside the model.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ...logging_config import get_logger
from .naming import Inflection

logger = get_logger(__name__)


class DataModelError(Exception):
    """Exception raised for malformed data model snapshots."""

    pass


@dataclass
class Field:
    """A single column of an entity."""

    name: str
    column_name: str
    pg_type: str
    nullable: bool = False
    has_default: bool = False
    is_primary_key: bool = False
    is_array: bool = False
    enum_name: Optional[str] = None
    description: Optional[str] = None


@dataclass
class Relation:
    """A foreign-key relation from one entity to another."""

    name: str
    target_entity: str
    local_columns: List[str] = field(default_factory=list)
    foreign_columns: List[str] = field(default_factory=list)


@dataclass
class Entity:
    """A table or view."""

    name: str
    table_name: str
    schema: str = "public"
    kind: str = "table"  # table, view
    fields: List[Field] = field(default_factory=list)
    relations: List[Relation] = field(default_factory=list)
    description: Optional[str] = None

    @property
    def primary_key(self) -> Optional[Field]:
        for entity_field in self.fields:
            if entity_field.is_primary_key:
                return entity_field
        return None

    @property
    def is_table(self) -> bool:
        return self.kind == "table"

    def get_field(self, name: str) -> Optional[Field]:
        for entity_field in self.fields:
            if entity_field.name == name or entity_field.column_name == name:
                return entity_field
        return None


@dataclass
class EnumDef:
    """A database enum type."""

    name: str
    type_name: str
    values: List[str] = field(default_factory=list)
    schema: str = "public"


@dataclass
class DataModel:
    """All entities and enums available to plugins."""

    entities: Dict[str, Entity] = field(default_factory=dict)
    enums: Dict[str, EnumDef] = field(default_factory=dict)

    def tables(self) -> List[Entity]:
        return [entity for entity in self.entities.values() if entity.is_table]

    def get_entity(self, name: str) -> Optional[Entity]:
        return self.entities.get(name)


class TypeHintRegistry:
    """User-provided type hints, passed through to plugins uninterpreted.

    Each hint is ``{"match": {...}, "hints": {...}}``; a hint applies when
    every key in ``match`` equals the queried attribute.
    """

    def __init__(self, hints: Optional[List[Dict[str, Any]]] = None):
        self.hints = list(hints or [])

    def get_hints(self, **attributes) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for hint in self.hints:
            match = hint.get("match", {})
            if all(attributes.get(key) == value for key, value in match.items()):
                merged.update(hint.get("hints", {}))
        return merged

    def get(self, key: str, **attributes) -> Any:
        return self.get_hints(**attributes).get(key)


def build_data_model(snapshot: Dict[str, Any], inflection: Inflection) -> DataModel:
    """
    Build a DataModel from an introspection snapshot.

    Snapshot layout::

        {
          "enums": [{"name": "user_role", "schema": "public", "values": [...]}],
          "tables": [{
            "name": "users", "schema": "public", "kind": "table",
            "columns": [{"name": "id", "type": "uuid", "nullable": false,
                         "has_default": true, "primary_key": true}],
            "foreign_keys": [{"name": "posts_author_id_fkey",
                              "columns": ["author_id"],
                              "references": {"table": "users", "columns": ["id"]}}]
          }]
        }

    Args:
        snapshot: Parsed JSON snapshot
        inflection: Naming policy used for entity and field names

    Returns:
        The normalized data model

    Raises:
        DataModelError: If the snapshot is malformed
    """
    if not isinstance(snapshot, dict):
        raise DataModelError("Data model snapshot must be a JSON object")

    model = DataModel()
    enum_names: Dict[str, str] = {}

    for raw_enum in snapshot.get("enums", []):
        try:
            type_name = raw_enum["name"]
        except (KeyError, TypeError) as e:
            raise DataModelError(f"Enum entry without a name: {raw_enum!r}") from e
        name = inflection.enum_name(type_name, raw_enum.get("tags", {}).get("name"))
        model.enums[name] = EnumDef(
            name=name,
            type_name=type_name,
            values=[inflection.enum_value_name(v) for v in raw_enum.get("values", [])],
            schema=raw_enum.get("schema", "public"),
        )
        enum_names[type_name] = name

    table_entities: Dict[str, str] = {}
    raw_tables = snapshot.get("tables", [])

    for raw_table in raw_tables:
        try:
            table_name = raw_table["name"]
        except (KeyError, TypeError) as e:
            raise DataModelError(f"Table entry without a name: {raw_table!r}") from e

        name = inflection.entity_name(table_name, raw_table.get("tags", {}).get("name"))
        if name in model.entities:
            raise DataModelError(
                f"Tables '{model.entities[name].table_name}' and '{table_name}' "
                f"both map to entity '{name}'"
            )
        table_entities[table_name] = name

        fields = []
        for column in raw_table.get("columns", []):
            pg_type = column.get("type", "text")
            is_array = pg_type.endswith("[]")
            base_type = pg_type[:-2] if is_array else pg_type
            fields.append(
                Field(
                    name=inflection.field_name(column["name"], column.get("tags", {}).get("name")),
                    column_name=column["name"],
                    pg_type=base_type,
                    nullable=column.get("nullable", False),
                    has_default=column.get("has_default", False),
                    is_primary_key=column.get("primary_key", False),
                    is_array=is_array,
                    enum_name=enum_names.get(base_type),
                    description=column.get("description"),
                )
            )

        model.entities[name] = Entity(
            name=name,
            table_name=table_name,
            schema=raw_table.get("schema", "public"),
            kind=raw_table.get("kind", "table"),
            fields=fields,
            description=raw_table.get("description"),
        )

    # Relations need every entity name first
    for raw_table in raw_tables:
        entity = model.entities[table_entities[raw_table["name"]]]
        for foreign_key in raw_table.get("foreign_keys", []):
            references = foreign_key.get("references", {})
            target = table_entities.get(references.get("table"))
            if target is None:
                logger.warning(
                    "Skipping relation %s on %s: unknown table %s",
                    foreign_key.get("name"), entity.table_name, references.get("table"),
                )
                continue
            entity.relations.append(
                Relation(
                    name=_relation_name(foreign_key.get("name", ""), target),
                    target_entity=target,
                    local_columns=list(foreign_key.get("columns", [])),
                    foreign_columns=list(references.get("columns", [])),
                )
            )

    logger.info(
        "Built data model: %d entities, %d enums", len(model.entities), len(model.enums)
    )
    return model


def _relation_name(constraint_name: str, target: str) -> str:
    """``posts_author_id_fkey`` -> ``author``."""
    name = constraint_name
    if name.endswith("_fkey"):
        name = name[: -len("_fkey")]
    if name.endswith("_id"):
        name = name[: -len("_id")]
    _, sep, rest = name.partition("_")
    name = rest if sep else name
    return name or target[:1].lower() + target[1:]
