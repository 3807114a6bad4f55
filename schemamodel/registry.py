"""Schema registry: one built schema per model type.

The first entity of a type triggers the build: a fresh ``Schema`` named
after the type is populated by ``define_schema`` and frozen. Every later
instance shares that object. Builds run under a lock so two threads never
install competing schemas for the same type.
"""

from __future__ import annotations

import logging
import threading

from .schema import Schema

logger = logging.getLogger(__name__)


class SchemaRegistry:

    def __init__(self):
        self._schemas: dict[type, Schema] = {}
        self._lock = threading.RLock()

    def resolve(self, model_cls: type) -> Schema:
        """Return the shared schema of ``model_cls``, building it once."""
        schema = self._schemas.get(model_cls)
        if schema is not None:
            return schema

        with self._lock:
            schema = self._schemas.get(model_cls)
            if schema is None:
                schema = self._build(model_cls)
                self._schemas[model_cls] = schema
        return schema

    def _build(self, model_cls: type) -> Schema:
        schema = Schema(model_cls.default_model_name())
        model_cls.define_schema(schema)
        schema.freeze()
        logger.debug("Built schema for %s: %r", model_cls.__name__, schema)
        return schema

    def get(self, model_cls: type) -> Schema | None:
        return self._schemas.get(model_cls)

    def forget(self, model_cls: type) -> None:
        with self._lock:
            self._schemas.pop(model_cls, None)

    def clear(self) -> None:
        with self._lock:
            self._schemas.clear()

    def __contains__(self, model_cls: object) -> bool:
        return model_cls in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def __repr__(self) -> str:
        names = ", ".join(sorted(cls.__name__ for cls in self._schemas))
        return f"SchemaRegistry({names})"


default_registry = SchemaRegistry()
