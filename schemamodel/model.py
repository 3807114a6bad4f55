"""Model: the runtime entity built from a schema and stored values.

Read/write pipeline:

  set(name, value)  -> mutator setter -> attribute.parse -> data | relations
  get(name)         -> relation value, or raw value -> mutator getter
  fill(mapping)     -> set() per key, then required rules; all or nothing
  json_serialize()  -> attribute.serialize(get(name)) minus hidden attributes
  to_dict()         -> full internal dump, relations flattened recursively

Subclasses declare their attributes once in ``define_schema``; the schema
is built lazily by the registry and shared by every instance until an
instance asks for a private variant through ``schema_mutate``.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any, Callable, ClassVar, Mapping

from .attributes import RelationAttribute
from .errors import ModelError, MutatorContractError, ParseError
from .mutators import Mutator, MutatorContext
from .registry import SchemaRegistry, default_registry
from .schema import Schema

logger = logging.getLogger(__name__)


class Model:
    """Base class of every entity type."""

    default_name: ClassVar[str | None] = None
    registry: ClassVar[SchemaRegistry] = default_registry

    def __init__(self, name: str | None = None):
        self._name = name or self.default_model_name()
        self._data: dict[str, Any] = {}
        self._relations: dict[str, Any] = {}
        self._mutators: dict[str, Mutator | None] = {}
        self._schema = self.registry.resolve(type(self))
        self.owns_schema = False
        self._load_defaults()

    # -----------------------------------------------------------------------
    # Schema declaration
    # -----------------------------------------------------------------------

    @classmethod
    def define_schema(cls, schema: Schema) -> None:
        """Declare the attributes of this model type. Called once per type."""

    @classmethod
    def default_model_name(cls) -> str:
        return cls.default_name or cls.__name__

    @property
    def schema(self) -> Schema:
        return self._schema

    def schema_mutate(self, callback: Callable[[Schema], Any]) -> Model:
        """Apply ``callback`` to a schema private to this instance.

        The shared schema is cloned on the first call; later calls reuse
        the private copy.
        """
        if not self.owns_schema:
            self._schema = self._schema.copy()
            self.owns_schema = True
            logger.debug("%s: switched to a private schema", self._name)
        callback(self._schema)
        self._mutators.clear()
        return self

    def set_schema_name(self, name: str) -> Model:
        def rename(schema: Schema) -> None:
            schema.name = name

        return self.schema_mutate(rename)

    # -----------------------------------------------------------------------
    # Naming
    # -----------------------------------------------------------------------

    @property
    def model_name(self) -> str:
        return self._name

    def rename(self, name: str) -> Model:
        self._name = name
        return self

    # -----------------------------------------------------------------------
    # Read / write
    # -----------------------------------------------------------------------

    def set(self, name: str, value: Any) -> Model:
        """Store ``value`` under ``name`` after mutator and schema parsing.

        Names without a schema entry are stored unchanged.
        """
        attribute = self._schema.query(name)
        mutator = self._load_mutator(name)
        if mutator is not None and mutator.setter is not None:
            value = mutator.apply_setter(value, MutatorContext(self, name, attribute))

        if isinstance(attribute, RelationAttribute):
            self._relations[name] = attribute.parse(value)
        elif attribute is not None:
            self._data[name] = attribute.parse(value)
        else:
            self._data[name] = value
        return self

    def get(self, name: str, default: Any = None) -> Any:
        attribute = self._schema.query(name)
        if isinstance(attribute, RelationAttribute):
            return self._relations.get(name, default)

        value = self._data.get(name, default)
        mutator = self._load_mutator(name)
        if mutator is not None and mutator.getter is not None:
            value = mutator.apply_getter(value, MutatorContext(self, name, attribute))
        return value

    def fill(self, data: Mapping[str, Any]) -> Model:
        """Set every key of ``data``, then enforce required attributes.

        Required-ness is judged against the keys of ``data``: a value that
        only came from a default does not satisfy it. On any failure the
        entity is restored to its state before the call.
        """
        snapshot = (dict(self._data), dict(self._relations))
        try:
            for key, value in data.items():
                self.set(key, value)
            self._check_required(data)
        except Exception as exc:
            self._data, self._relations = snapshot
            logger.debug("%s: fill rolled back after %s: %s", self._name, type(exc).__name__, exc)
            raise
        return self

    def _check_required(self, data: Mapping[str, Any]) -> None:
        for attribute in self._schema.attributes():
            if attribute.name in data:
                continue
            if attribute.is_required(self):
                raise ParseError(attribute, "Missing required attribute")

    def __contains__(self, name: object) -> bool:
        return name in self._data or name in self._relations

    # -----------------------------------------------------------------------
    # Views
    # -----------------------------------------------------------------------

    def attributes(self) -> dict[str, Any]:
        return dict(self._data)

    def relations(self) -> dict[str, Any]:
        return dict(self._relations)

    def all_attributes(self) -> dict[str, Any]:
        return {**self._data, **self._relations}

    def json_serialize(self) -> dict[str, Any]:
        """External view keyed by visible name, in declaration order."""
        serialized: dict[str, Any] = {}
        for attribute in self._schema.attributes():
            if attribute.is_hidden():
                continue
            value = attribute.serialize(self.get(attribute.name))
            if attribute.is_hidden_if(value, self):
                continue
            serialized[attribute.visible_name] = value
        return serialized

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.json_serialize(), **kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Internal dump: every stored value, hidden ones included, with
        related entities expanded to their own ``to_dict``."""
        result = {name: _plain(value) for name, value in self._data.items()}
        for name, value in self._relations.items():
            result[name] = _plain(value)
        return result

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _load_defaults(self) -> None:
        for attribute in self._schema.attributes():
            if attribute.has_default():
                self.set(attribute.name, copy.deepcopy(attribute.get_default()))

    def _load_mutator(self, name: str) -> Mutator | None:
        if name in self._mutators:
            return self._mutators[name]

        registered = self._schema.query_mutator(name)
        if registered is None or isinstance(registered, Mutator):
            mutator = registered
        elif callable(registered):
            mutator = registered()
            if not isinstance(mutator, Mutator):
                raise MutatorContractError(
                    f"Expected mutator factory for '{self._name}.{name}' to return a "
                    f"Mutator, got {type(mutator).__name__}"
                )
            logger.debug("%s: resolved mutator factory for '%s'", self._name, name)
        else:
            raise MutatorContractError(
                f"Mutator registered for '{self._name}.{name}' is neither a Mutator "
                f"nor a factory: {registered!r}"
            )

        self._mutators[name] = mutator
        return mutator

    # -----------------------------------------------------------------------
    # Construction
    # -----------------------------------------------------------------------

    @classmethod
    def make(cls) -> Model:
        return cls()

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> Model:
        return cls.make().fill(data)

    @classmethod
    def try_parse(cls, data: Mapping[str, Any]) -> Model | None:
        """Like ``parse`` but returns None on parse or mutator errors."""
        try:
            return cls.parse(data)
        except ModelError:
            return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return (
            type(self) is type(other)
            and self._data == other._data
            and self._relations == other._relations
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self._name}: "
            f"{len(self._data)} attributes, {len(self._relations)} relations)"
        )


def _plain(value: Any) -> Any:
    if isinstance(value, Model):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    return value
