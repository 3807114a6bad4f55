"""schemamodel: declarative schemas for semi-structured data.

Consumers subclass ``Model`` and declare, once per type, a ``Schema`` of
named, typed attributes. The engine then turns raw mappings (parsed JSON
and the like) into validated entities and back:

  Model.parse(mapping)     -> validated entity (ParseError / MutatorError)
  Model.try_parse(mapping) -> entity or None
  entity.get / set / fill  -> typed access; fill is all-or-nothing
  entity.json_serialize()  -> external view, hidden attributes removed
  entity.to_dict()         -> internal view, relations expanded

Modules:

  types       MISSING, tags, ConditionalRequirement, SerializableModel
  attributes  the attribute variants and their parse/serialize rules
  schema      ordered attribute map and mutator registry of one type
  mutators    getter/setter hooks and their context
  registry    lazily built, shared schema per model type
  model       the entity base class
  errors      failure taxonomy
  utils       dotted paths, dates, loose equality

The SHACL bridge (schemamodel.shacl_bridge) exports schemas as SHACL shapes
and entities as RDF graphs for validation with pySHACL. Requires optional
dependencies: rdflib, pyshacl.
"""

import logging

from .errors import (
    ModelError,
    MutatorContractError,
    MutatorError,
    ParseError,
    SchemaError,
    SchemaFrozenError,
    SerializeError,
)
from .model import Model
from .mutators import Mutator, MutatorContext
from .registry import SchemaRegistry, default_registry
from .schema import Schema
from .types import ISO_DATE, RFC3339, Cardinality, ConditionalRequirement

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Cardinality",
    "ConditionalRequirement",
    "ISO_DATE",
    "Model",
    "ModelError",
    "Mutator",
    "MutatorContext",
    "MutatorContractError",
    "MutatorError",
    "ParseError",
    "RFC3339",
    "Schema",
    "SchemaError",
    "SchemaFrozenError",
    "SchemaRegistry",
    "SerializeError",
    "default_registry",
]
