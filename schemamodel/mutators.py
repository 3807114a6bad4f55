"""Mutators: user hooks around attribute storage.

A setter runs before schema parsing on ``Model.set``; a getter runs after
the raw read on ``Model.get``. Both receive a ``MutatorContext`` bound to
the entity and attribute being processed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from .errors import MutatorError


Hook = Callable[[Any, "MutatorContext"], Any]


@dataclass(frozen=True)
class Mutator:
    """A getter/setter pair scoped to one attribute of one model type."""
    getter: Hook | None = None
    setter: Hook | None = None

    def apply_setter(self, value: Any, context: MutatorContext) -> Any:
        if self.setter is None:
            return value
        return self.setter(value, context)

    def apply_getter(self, value: Any, context: MutatorContext) -> Any:
        if self.getter is None:
            return value
        return self.getter(value, context)


class MutatorContext:
    """What a hook sees: the entity, the attribute name and its schema entry."""

    def __init__(self, target, attribute: str, attribute_schema=None):
        self.target = target
        self.attribute = attribute
        self.attribute_schema = attribute_schema

    @property
    def relative_name(self) -> str:
        return f"{self.target.model_name}.{self.attribute}"

    @property
    def qualified_name(self) -> str:
        if self.attribute_schema is not None:
            return self.attribute_schema.qualified_name
        return self.relative_name

    def fail(self, message: str | None = None) -> None:
        raise MutatorError(self.qualified_name, message)

    def ensure(self, condition: Any, message: str | None = None) -> None:
        """Raise ``MutatorError`` with ``message`` unless ``condition`` holds."""
        if not condition:
            self.fail(message)

    def __repr__(self) -> str:
        return f"MutatorContext({self.qualified_name})"
