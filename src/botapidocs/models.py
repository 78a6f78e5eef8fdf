"""Documentation entities decoded from the Bot API specification document.

The upstream document (``api.json``) looks like::

    {
      "version": "Bot API 7.10",
      "methods": {"sendMessage": {"name": ..., "href": ..., "description": [...],
                                  "returns": [...], "fields": [...]}},
      "types": {"Message": {"name": ..., "href": ..., "description": [...],
                            "fields": [...]}}
    }

Unknown keys are ignored at every level.  Missing ``methods`` / ``types``
yield empty mappings.  Anything else that does not match raises
``ValueError``; the fetcher turns that into a :class:`~botapidocs.errors.DecodeError`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


def _str_list(value: Any, what: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{what} must be a list of strings, got {type(value).__name__}")
    return tuple(value)


def _str(value: Any, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Field:
    """One parameter of a method or one attribute of a type."""

    name: str
    types: tuple[str, ...] = ()
    required: bool = False
    description: str = ""

    @classmethod
    def from_dict(cls, data: Any, owner: str) -> Field:
        if not isinstance(data, dict):
            raise ValueError(f"field of '{owner}' must be an object, got {type(data).__name__}")
        name = _str(data.get("name"), f"field name in '{owner}'")
        required = data.get("required", False)
        if not isinstance(required, bool):
            raise ValueError(f"'{owner}.{name}.required' must be a boolean")
        return cls(
            name=name,
            types=_str_list(data.get("types"), f"'{owner}.{name}.types'"),
            required=required,
            description=_str(data.get("description"), f"'{owner}.{name}.description'"),
        )


def _fields(data: dict, owner: str) -> tuple[Field, ...]:
    raw = data.get("fields")
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValueError(f"'{owner}.fields' must be a list, got {type(raw).__name__}")
    return tuple(Field.from_dict(f, owner) for f in raw)


@dataclass(frozen=True)
class Type:
    """A Bot API object type (``Message``, ``ChatMember``, ...)."""

    name: str
    href: str = ""
    description: tuple[str, ...] = ()
    fields: tuple[Field, ...] = ()

    @classmethod
    def from_dict(cls, key: str, data: Any) -> Type:
        if not isinstance(data, dict):
            raise ValueError(f"type '{key}' must be an object, got {type(data).__name__}")
        return cls(
            name=_str(data.get("name"), f"'{key}.name'") or key,
            href=_str(data.get("href"), f"'{key}.href'"),
            description=_str_list(data.get("description"), f"'{key}.description'"),
            fields=_fields(data, key),
        )


@dataclass(frozen=True)
class Method:
    """A Bot API method (``sendMessage``, ``getUpdates``, ...)."""

    name: str
    href: str = ""
    description: tuple[str, ...] = ()
    returns: tuple[str, ...] = ()
    fields: tuple[Field, ...] = ()

    @classmethod
    def from_dict(cls, key: str, data: Any) -> Method:
        if not isinstance(data, dict):
            raise ValueError(f"method '{key}' must be an object, got {type(data).__name__}")
        return cls(
            name=_str(data.get("name"), f"'{key}.name'") or key,
            href=_str(data.get("href"), f"'{key}.href'"),
            description=_str_list(data.get("description"), f"'{key}.description'"),
            returns=_str_list(data.get("returns"), f"'{key}.returns'"),
            fields=_fields(data, key),
        )


Entity = Method | Type


@dataclass(frozen=True)
class Snapshot:
    """One consistent version of the documentation: methods and types together.

    The mappings are read-only views; a snapshot is never mutated after
    construction.  ``generation`` is stamped by the store on install.
    """

    methods: Mapping[str, Method] = field(default_factory=lambda: MappingProxyType({}))
    types: Mapping[str, Type] = field(default_factory=lambda: MappingProxyType({}))
    generation: int = 0

    @classmethod
    def build(
        cls,
        methods: Mapping[str, Method] | None = None,
        types: Mapping[str, Type] | None = None,
        generation: int = 0,
    ) -> Snapshot:
        return cls(
            methods=MappingProxyType(dict(methods or {})),
            types=MappingProxyType(dict(types or {})),
            generation=generation,
        )

    @classmethod
    def from_document(cls, doc: Any) -> Snapshot:
        """Decode the top-level ``{"methods": ..., "types": ...}`` document."""
        if not isinstance(doc, dict):
            raise ValueError(f"top level must be an object, got {type(doc).__name__}")
        raw_methods = doc.get("methods")
        raw_types = doc.get("types")
        if raw_methods is None:
            raw_methods = {}
        if raw_types is None:
            raw_types = {}
        if not isinstance(raw_methods, dict):
            raise ValueError(f"'methods' must be an object, got {type(raw_methods).__name__}")
        if not isinstance(raw_types, dict):
            raise ValueError(f"'types' must be an object, got {type(raw_types).__name__}")
        return cls.build(
            methods={k: Method.from_dict(k, v) for k, v in raw_methods.items()},
            types={k: Type.from_dict(k, v) for k, v in raw_types.items()},
        )

    def with_generation(self, generation: int) -> Snapshot:
        return Snapshot(methods=self.methods, types=self.types, generation=generation)

    @property
    def size(self) -> int:
        return len(self.methods) + len(self.types)
