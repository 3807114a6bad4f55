"""Failure taxonomy.

Data errors derive from ``ModelError`` and can be turned into an empty
result by the ``try_*`` variants. ``MutatorContractError`` is a
``TypeError``: it reports a broken schema declaration, not bad input, and
always propagates.
"""

from __future__ import annotations


class ModelError(Exception):
    """Base class for every data error raised while parsing or serializing."""

    def __init__(self, qualified_name: str, detail: str):
        self.qualified_name = qualified_name
        self.detail = detail
        super().__init__(f"'{qualified_name}' {detail}")


class SchemaError(ModelError):
    """A value violates the schema contract of an attribute."""

    default_detail = "Failed to process attribute {name}"

    def __init__(self, attribute, detail: str | None = None):
        self.attribute = attribute
        if detail is None:
            detail = self.default_detail.format(name=attribute.name)
        super().__init__(attribute.qualified_name, detail)


class ParseError(SchemaError):
    default_detail = "Failed to parse attribute {name}"


class SerializeError(SchemaError):
    default_detail = "Failed to serialize attribute {name}"


class MutatorError(ModelError):
    """Raised by user setter/getter logic through ``MutatorContext``."""

    def __init__(self, qualified_name: str, detail: str | None = None):
        super().__init__(qualified_name, detail or "Failed to validate/mutate attribute")


class SchemaFrozenError(RuntimeError):
    """Declaration attempted on a schema shared through the registry."""

    def __init__(self, schema_name: str | None, attribute: str):
        self.schema_name = schema_name
        self.attribute = attribute
        super().__init__(
            f"Schema '{schema_name}' is shared and frozen; cannot change '{attribute}' "
            f"(use schema_mutate for a per-instance variant)"
        )


class MutatorContractError(TypeError):
    """A registered mutator factory did not return a ``Mutator``."""
