"""Schema: the ordered attribute map owned by one model type.

Declaration order is significant: defaults are applied, required rules
checked and JSON keys emitted in that order. Declaring a name twice
replaces the earlier attribute in place.

A schema also holds the mutator registry of its model type: attribute
name -> ``Mutator`` (or a zero-argument factory returning one).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator

from .attributes import (
    ArrayAttribute,
    BoolAttribute,
    DateAttribute,
    EnumAttribute,
    FloatAttribute,
    IntAttribute,
    RelationAttribute,
    SchemaAttribute,
    StringAttribute,
)
from .errors import SchemaFrozenError
from .mutators import Hook, Mutator
from .types import RFC3339, Cardinality

logger = logging.getLogger(__name__)


class Schema:

    def __init__(self, name: str | None = None):
        self.name = name
        self._attributes: dict[str, SchemaAttribute] = {}
        self._mutators: dict[str, Mutator | Callable[[], Mutator]] = {}
        self._frozen = False

    # -----------------------------------------------------------------------
    # Declaration API
    # -----------------------------------------------------------------------

    def any(self, name: str) -> SchemaAttribute:
        return self._declare(SchemaAttribute(self, name))

    def int(self, name: str) -> IntAttribute:
        return self._declare(IntAttribute(self, name))

    def float(self, name: str) -> FloatAttribute:
        return self._declare(FloatAttribute(self, name))

    def string(self, name: str) -> StringAttribute:
        return self._declare(StringAttribute(self, name))

    def bool(self, name: str) -> BoolAttribute:
        return self._declare(BoolAttribute(self, name))

    def date(self, name: str, fmt: str = RFC3339) -> DateAttribute:
        return self._declare(DateAttribute(self, name, fmt))

    def enum(self, name: str, values) -> EnumAttribute:
        return self._declare(EnumAttribute(self, name, values))

    def array(self, name: str, element: SchemaAttribute | None = None) -> ArrayAttribute:
        return self._declare(ArrayAttribute(self, name, element))

    list = array

    def has(self, name: str, target: type) -> RelationAttribute:
        return self._declare(RelationAttribute(self, name, target, Cardinality.ONE))

    def has_many(self, name: str, target: type) -> RelationAttribute:
        return self._declare(RelationAttribute(self, name, target, Cardinality.MANY))

    def mutator(
        self,
        name: str,
        mutator: Mutator | Callable[[], Mutator] | None = None,
        *,
        getter: Hook | None = None,
        setter: Hook | None = None,
    ) -> Mutator | Callable[[], Mutator]:
        """Register the mutator of attribute ``name``.

        Either pass a ``Mutator``, a zero-argument factory producing one
        (resolved lazily, once per entity), or the hooks themselves.
        """
        self._check_mutable(name)
        if mutator is None:
            mutator = Mutator(getter=getter, setter=setter)
        self._mutators[name] = mutator
        return mutator

    def remove(self, name: str) -> SchemaAttribute | None:
        self._check_mutable(name)
        return self._attributes.pop(name, None)

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def query(self, name: str) -> SchemaAttribute | None:
        """Attribute declared under ``name``; None means no validation contract."""
        return self._attributes.get(name)

    def query_mutator(self, name: str) -> Mutator | Callable[[], Mutator] | None:
        return self._mutators.get(name)

    def attributes(self) -> list[SchemaAttribute]:
        return list(self._attributes.values())

    def names(self) -> list[str]:
        return list(self._attributes)

    def __contains__(self, name: object) -> bool:
        return name in self._attributes

    def __iter__(self) -> Iterator[SchemaAttribute]:
        return iter(self.attributes())

    def __len__(self) -> int:
        return len(self._attributes)

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> Schema:
        self._frozen = True
        return self

    def copy(self) -> Schema:
        """Unfrozen clone; attributes are copied and re-bound to the clone,
        mutators are shared."""
        clone = Schema(self.name)
        for name, attribute in self._attributes.items():
            clone._attributes[name] = attribute.copy(clone)
        clone._mutators = dict(self._mutators)
        logger.debug("Cloned schema %s (%d attributes)", self.name, len(clone))
        return clone

    def _check_mutable(self, name: str) -> None:
        if self._frozen:
            raise SchemaFrozenError(self.name, name)

    def _declare(self, attribute: Any) -> Any:
        self._check_mutable(attribute.name)
        self._attributes[attribute.name] = attribute
        return attribute

    def __repr__(self) -> str:
        frozen = ", frozen" if self._frozen else ""
        return (
            f"Schema({self.name}: {len(self._attributes)} attributes, "
            f"{len(self._mutators)} mutators{frozen})"
        )
