"""Core value types shared by schemas, attributes and models.

Kept free of imports from the rest of the package so every other module
can depend on it:

  MISSING                 = "no default declared" marker
  AttributeKind           = tag of each SchemaAttribute variant
  Cardinality             = ONE / MANY for relation attributes
  ConditionalRequirement  = rule deciding whether an attribute is required
  SerializableModel       = capability set any relation target satisfies
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Protocol, runtime_checkable


RFC3339 = "%Y-%m-%dT%H:%M:%S%z"
ISO_DATE = "%Y-%m-%d"


# ---------------------------------------------------------------------------
# MISSING: distinguishes "no default" from a default of None
# ---------------------------------------------------------------------------

class _MissingType:
    """Sentinel for an attribute without a declared default."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _MissingType:
        return self

    def __deepcopy__(self, memo) -> _MissingType:
        return self


MISSING = _MissingType()


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

class AttributeKind(Enum):
    """The closed set of attribute variants."""
    ANY = "any"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"
    DATE = "date"
    ENUM = "enum"
    ARRAY = "array"
    RELATION = "relation"


class Cardinality(Enum):
    """How many related entities a relation attribute holds."""
    ONE = "one"
    MANY = "many"


# ---------------------------------------------------------------------------
# ConditionalRequirement
# ---------------------------------------------------------------------------

class RequirementKind(Enum):
    ALWAYS = "always"
    EQUALS_FIELD = "equals_field"
    PREDICATE = "predicate"


@dataclass(frozen=True)
class ConditionalRequirement:
    """A rule making an attribute required.

    Evaluated against the entity as filled so far, after every input key
    of a fill pass has been applied.
    """
    kind: RequirementKind
    field_name: str | None = None
    literal: Any = None
    predicate: Callable[[Any], bool] | None = field(default=None, hash=False, compare=False)

    @classmethod
    def always(cls) -> ConditionalRequirement:
        return cls(RequirementKind.ALWAYS)

    @classmethod
    def equals_field(cls, field_name: str, literal: Any) -> ConditionalRequirement:
        return cls(RequirementKind.EQUALS_FIELD, field_name=field_name, literal=literal)

    @classmethod
    def when(cls, predicate: Callable[[Any], bool]) -> ConditionalRequirement:
        return cls(RequirementKind.PREDICATE, predicate=predicate)

    def applies(self, entity) -> bool:
        if self.kind == RequirementKind.ALWAYS:
            return True
        if self.kind == RequirementKind.EQUALS_FIELD:
            return entity.get(self.field_name) == self.literal
        return bool(self.predicate(entity))

    def describe(self) -> str:
        if self.kind == RequirementKind.ALWAYS:
            return "always required"
        if self.kind == RequirementKind.EQUALS_FIELD:
            return f"required when {self.field_name} == {self.literal!r}"
        return "required when predicate holds"

    def __repr__(self) -> str:
        return f"Requirement({self.describe()})"


# ---------------------------------------------------------------------------
# SerializableModel: what a relation target must offer
# ---------------------------------------------------------------------------

@runtime_checkable
class SerializableModel(Protocol):
    """Capability set shared by every entity type.

    Relation attributes only rely on these three operations, so any class
    providing them can be used as a relation target.
    """

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> SerializableModel: ...

    @classmethod
    def try_parse(cls, data: Mapping[str, Any]) -> SerializableModel | None: ...

    def json_serialize(self) -> dict[str, Any]: ...
