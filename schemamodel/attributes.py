"""Schema attributes: one class per value variant.

Every attribute shares the same constraint fields (nullable, hidden,
hidden_if, default, required, conditional requirements, visible name) and
the same parse contract:

  parse(None) on a nullable attribute  -> None, variant logic never runs
  parse(value) otherwise               -> variant-specific parse_value()

Variants are a closed set tagged by ``AttributeKind``. Array and Relation
attributes compose other attributes/models, so arrays of arrays and
relations of relations parse and serialize recursively.
"""

from __future__ import annotations

import copy as _copy
from datetime import date
from typing import Any, Callable, ClassVar, Iterable, Mapping

from .errors import ParseError, SchemaFrozenError, SerializeError
from .types import (
    MISSING,
    RFC3339,
    AttributeKind,
    Cardinality,
    ConditionalRequirement,
    RequirementKind,
)
from .utils import format_date, loose_equals, to_number, try_parse_date


HiddenCheck = Callable[[Any, Any], bool]


class SchemaAttribute:
    """Base attribute. Used directly for the ``Any`` variant (identity)."""

    kind: ClassVar[AttributeKind] = AttributeKind.ANY
    type_name: ClassVar[str] = "Any"

    def __init__(self, schema, name: str):
        self.schema = schema
        self.name = name
        self._visible_name: str | None = None
        self._nullable = False
        self._hidden = False
        self._hidden_check: HiddenCheck | None = None
        self._default: Any = MISSING
        self._required = False
        self._requirements: list[ConditionalRequirement] = []

    # -----------------------------------------------------------------------
    # Naming
    # -----------------------------------------------------------------------

    @property
    def visible_name(self) -> str:
        return self._visible_name or self.name

    @property
    def qualified_name(self) -> str:
        """``<schema name>.<visible name>``, embedded in every error message."""
        schema_name = getattr(self.schema, "name", None)
        if not schema_name:
            return self.visible_name
        return f"{schema_name}.{self.visible_name}"

    def visible_as(self, name: str) -> SchemaAttribute:
        self._check_mutable()
        self._visible_name = name
        return self

    def _check_mutable(self) -> None:
        if getattr(self.schema, "frozen", False):
            raise SchemaFrozenError(self.schema.name, self.name)

    # -----------------------------------------------------------------------
    # Constraint configuration (fluent)
    # -----------------------------------------------------------------------

    def nullable(self, value: bool = True) -> SchemaAttribute:
        self._check_mutable()
        self._nullable = value
        return self

    def hidden(self, value: bool = True) -> SchemaAttribute:
        self._check_mutable()
        self._hidden = value
        return self

    def hidden_if(self, check: HiddenCheck) -> SchemaAttribute:
        """Hide from JSON output when ``check(serialized_value, entity)`` holds."""
        self._check_mutable()
        self._hidden_check = check
        return self

    def hidden_if_null(self) -> SchemaAttribute:
        return self.hidden_if(lambda value, entity: value is None)

    def default(self, value: Any) -> SchemaAttribute:
        self._check_mutable()
        self._default = value
        return self

    def required(self, value: bool = True) -> SchemaAttribute:
        self._check_mutable()
        self._required = value
        return self

    def required_if(self, field_name: str, literal: Any) -> SchemaAttribute:
        """Required when attribute ``field_name`` currently equals ``literal``."""
        return self.requirement(ConditionalRequirement.equals_field(field_name, literal))

    def required_when(self, predicate: Callable[[Any], bool]) -> SchemaAttribute:
        """Required when ``predicate(entity)`` holds on the filled entity."""
        return self.requirement(ConditionalRequirement.when(predicate))

    def requirement(self, rule: ConditionalRequirement) -> SchemaAttribute:
        self._check_mutable()
        self._requirements.append(rule)
        return self

    def array(self) -> ArrayAttribute:
        """Re-declare this attribute as a list whose elements are parsed by it."""
        return self.schema.array(self.name, self)

    list = array

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def is_nullable(self) -> bool:
        return self._nullable

    def is_hidden(self) -> bool:
        return self._hidden

    def is_hidden_if(self, value: Any, entity) -> bool:
        if self._hidden_check is None:
            return False
        return bool(self._hidden_check(value, entity))

    def has_hidden_check(self) -> bool:
        return self._hidden_check is not None

    def has_default(self) -> bool:
        return self._default is not MISSING

    def get_default(self) -> Any:
        return None if self._default is MISSING else self._default

    @property
    def requirements(self) -> tuple[ConditionalRequirement, ...]:
        return tuple(self._requirements)

    def is_required(self, entity=None) -> bool:
        """Required flag, or any conditional requirement holding for ``entity``.

        Without an entity only unconditional rules are considered.
        """
        if self._required:
            return True
        for rule in self._requirements:
            if rule.kind == RequirementKind.ALWAYS:
                return True
            if entity is not None and rule.applies(entity):
                return True
        return False

    # -----------------------------------------------------------------------
    # Parse / serialize
    # -----------------------------------------------------------------------

    def parse(self, value: Any) -> Any:
        if value is None and self._nullable:
            return None
        return self.parse_value(value)

    def parse_value(self, value: Any) -> Any:
        return value

    def try_parse(self, value: Any) -> Any:
        try:
            return self.parse(value)
        except ParseError:
            return None

    def serialize(self, value: Any) -> Any:
        return value

    # -----------------------------------------------------------------------
    # Copying
    # -----------------------------------------------------------------------

    def copy(self, schema=None) -> SchemaAttribute:
        """Independent attribute with the same constraints, optionally
        bound to another schema."""
        clone = _copy.copy(self)
        clone._requirements = list(self._requirements)
        if schema is not None:
            clone.schema = schema
        return clone

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.qualified_name})"


AnyAttribute = SchemaAttribute


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------

class IntAttribute(SchemaAttribute):
    kind = AttributeKind.INT
    type_name = "Int"

    def parse_value(self, value: Any) -> int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise ParseError(self, f"Provided value '{value}' is not an integer")


class FloatAttribute(SchemaAttribute):
    """Numbers, including numeric strings, stored as ``float``."""

    kind = AttributeKind.FLOAT
    type_name = "Float"

    def __init__(self, schema, name: str):
        super().__init__(schema, name)
        self.minimum: float | None = None

    def min(self, value: float) -> FloatAttribute:
        self._check_mutable()
        self.minimum = value
        return self

    def parse_value(self, value: Any) -> float:
        number = to_number(value)
        if number is None:
            raise ParseError(self, f"Provided value '{value}' is not a number")

        if self.minimum is not None and number < self.minimum:
            raise ParseError(
                self, f"Provided value {number} is less than the minimum value of {self.minimum}"
            )
        return number


class StringAttribute(SchemaAttribute):
    """Strings with length rules.

    ``between`` sets a lower and upper bound, ``limit`` a hard upper bound.
    ``truncate`` cuts over-long values instead of failing and takes
    precedence over both upper bounds; the lower bound always applies.
    """

    kind = AttributeKind.STRING
    type_name = "String"

    def __init__(self, schema, name: str):
        super().__init__(schema, name)
        self.min_length: int | None = None
        self.max_length: int | None = None
        self.hard_limit: int | None = None
        self.truncate_at: int | None = None

    def between(self, minimum: int, maximum: int) -> StringAttribute:
        self._check_mutable()
        self.min_length = minimum
        self.max_length = maximum
        return self

    def limit(self, length: int) -> StringAttribute:
        self._check_mutable()
        self.hard_limit = length
        return self

    def truncate(self, length: int) -> StringAttribute:
        self._check_mutable()
        self.truncate_at = length
        return self

    @property
    def effective_max_length(self) -> int | None:
        bounds = [b for b in (self.max_length, self.hard_limit) if b is not None]
        return min(bounds) if bounds else None

    def parse_value(self, value: Any) -> str:
        if not isinstance(value, str):
            raise ParseError(self, f"Provided value '{value}' is not a string")

        if self.min_length is not None and len(value) < self.min_length:
            raise ParseError(
                self,
                f"Provided value '{value}' is shorter than the minimum of "
                f"{self.min_length} characters",
            )

        if self.truncate_at is not None:
            return value[: self.truncate_at]

        maximum = self.effective_max_length
        if maximum is not None and len(value) > maximum:
            raise ParseError(
                self,
                f"Provided value '{value}' is exceeding the limit of {maximum} character(s)",
            )
        return value


class BoolAttribute(SchemaAttribute):
    """Booleans with optional string matchers.

    Order: integers and booleans first, then negative matches, then
    positive matches.
    """

    kind = AttributeKind.BOOL
    type_name = "Bool"

    def __init__(self, schema, name: str):
        super().__init__(schema, name)
        self.positive_matches: list[Any] = []
        self.negative_matches: list[Any] = []

    def positives(self, matches: Iterable[Any]) -> BoolAttribute:
        self._check_mutable()
        self.positive_matches = list(matches)
        return self

    def negatives(self, matches: Iterable[Any]) -> BoolAttribute:
        self._check_mutable()
        self.negative_matches = list(matches)
        return self

    def parse_value(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return bool(value)
        if any(loose_equals(match, value) for match in self.negative_matches):
            return False
        if any(loose_equals(match, value) for match in self.positive_matches):
            return True
        raise ParseError(self, f"Provided value '{value}' is not a boolean")

    def copy(self, schema=None) -> BoolAttribute:
        clone = super().copy(schema)
        clone.positive_matches = list(self.positive_matches)
        clone.negative_matches = list(self.negative_matches)
        return clone


class DateAttribute(SchemaAttribute):
    """Dates parsed from and formatted to strings with ``strptime`` formats."""

    kind = AttributeKind.DATE
    type_name = "Date"

    def __init__(self, schema, name: str, fmt: str = RFC3339):
        super().__init__(schema, name)
        self.date_format = fmt

    def format(self, fmt: str) -> DateAttribute:
        self._check_mutable()
        self.date_format = fmt
        return self

    def parse_value(self, value: Any) -> date:
        parsed = try_parse_date(value, self.date_format)
        if parsed is None:
            raise ParseError(self, "Provided value is not a valid date")
        return parsed

    def serialize(self, value: Any) -> str | None:
        if value is None:
            return None
        if not isinstance(value, date):
            raise SerializeError(self, "Provided value is not a valid date to be serialized")
        return format_date(value, self.date_format)


class EnumAttribute(SchemaAttribute):
    """One of a declared set of values.

    Matching is loose and the first declared match is returned, so ``"2"``
    parses to ``2`` when ``2`` is declared.
    """

    kind = AttributeKind.ENUM
    type_name = "Enum"

    def __init__(self, schema, name: str, values: Iterable[Any] = ()):
        super().__init__(schema, name)
        self.allowed: list[Any] = list(values)

    def values(self, values: Iterable[Any]) -> EnumAttribute:
        self._check_mutable()
        self.allowed = list(values)
        return self

    def matches_loose(self, value: Any) -> Any:
        """First declared value loosely equal to ``value``, else ``MISSING``."""
        for candidate in self.allowed:
            if loose_equals(candidate, value):
                return candidate
        return MISSING

    def matches_strict(self, value: Any) -> Any:
        for candidate in self.allowed:
            if type(candidate) is type(value) and candidate == value:
                return candidate
        return MISSING

    def parse_value(self, value: Any) -> Any:
        match = self.matches_loose(value)
        if match is not MISSING:
            return match
        many = ", ".join(str(v) for v in self.allowed)
        raise ParseError(self, f"Provided value is not one of {many}")

    def copy(self, schema=None) -> EnumAttribute:
        clone = super().copy(schema)
        clone.allowed = list(self.allowed)
        return clone


# ---------------------------------------------------------------------------
# Composites
# ---------------------------------------------------------------------------

class ArrayAttribute(SchemaAttribute):
    """A list whose elements go through an element attribute, if any."""

    kind = AttributeKind.ARRAY

    def __init__(self, schema, name: str, element: SchemaAttribute | None = None):
        super().__init__(schema, name)
        self.element = element

    @property
    def type_name(self) -> str:
        inner = self.element.type_name if self.element is not None else "*"
        return f"array<{inner}>"

    @property
    def innermost(self) -> SchemaAttribute | None:
        element = self.element
        while isinstance(element, ArrayAttribute):
            element = element.element
        return element

    def parse_value(self, value: Any) -> list:
        if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
            raise ParseError(self, f"Provided value is not a valid {self.type_name}")
        if self.element is None:
            return list(value)
        return [self.element.parse(item) for item in value]

    def serialize(self, value: Any) -> list | None:
        if value is None:
            return None
        if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
            raise SerializeError(self, "Provided value is not a valid array to be serialized")
        if self.element is None:
            return list(value)
        return [self.element.serialize(item) for item in value]

    def copy(self, schema=None) -> ArrayAttribute:
        clone = super().copy(schema)
        if self.element is not None:
            clone.element = self.element.copy(schema)
        return clone


class RelationAttribute(SchemaAttribute):
    """One or many nested entities of a target model type."""

    kind = AttributeKind.RELATION

    def __init__(self, schema, name: str, target: type, cardinality: Cardinality = Cardinality.ONE):
        super().__init__(schema, name)
        self.target = target
        self.cardinality = cardinality

    @property
    def type_name(self) -> str:
        return getattr(self.target, "__name__", str(self.target))

    @property
    def is_many(self) -> bool:
        return self.cardinality == Cardinality.MANY

    def many(self, value: bool = True) -> RelationAttribute:
        self._check_mutable()
        self.cardinality = Cardinality.MANY if value else Cardinality.ONE
        return self

    def _parse_one(self, value: Any) -> Any:
        if isinstance(value, self.target):
            return value
        if isinstance(value, Mapping):
            return self.target.parse(value)
        raise ParseError(self, f"Provided value is not a valid {self.type_name}")

    def parse_value(self, value: Any) -> Any:
        if not self.is_many:
            return self._parse_one(value)
        if not isinstance(value, (list, tuple)):
            raise ParseError(self, "Provided value is not a list.")
        return [self._parse_one(item) for item in value]

    def serialize(self, value: Any) -> Any:
        if value is None:
            return None
        if not self.is_many:
            return value.json_serialize()
        return [item.json_serialize() for item in value]
