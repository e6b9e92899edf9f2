"""
Declared-field schema and the codec between declarations and API payloads.

Resource declarations are pydantic models. Defaults and allow-lists live on
the model fields, so a declaration is validated once when it is built and
used strongly typed afterwards. ``ResourceData`` pairs a declaration with the
attributes tracked for the instance and is what every adapter call receives.

Field flags are passed through ``json_schema_extra``:
- ``force_new``: changing the value requires destroying and recreating
- ``computed``: populated from the remote API, never declared
"""

import types
import typing
from typing import Any, ClassVar, Iterable

from pydantic import BaseModel, ValidationError

from vaultform.errors import ConfigError


def _annotation_origins(annotation: Any) -> set[Any]:
    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        found: set[Any] = set()
        for arg in typing.get_args(annotation):
            found |= _annotation_origins(arg)
        return found
    return {origin or annotation}


class ResourceModel(BaseModel):
    """
    Base class for resource declarations.

    Subclasses declare the user-facing fields. Anything the remote API
    computes (IDs, accessors) is listed in ``computed_attributes`` instead.
    """

    type_name: ClassVar[str] = ""
    computed_attributes: ClassVar[tuple[str, ...]] = ()

    class Config:
        extra = "forbid"

    @classmethod
    def declare(cls, values: dict[str, Any]) -> "ResourceModel":
        """Validate raw declared values, wrapping failures in ConfigError."""
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigError(f"invalid {cls.type_name or cls.__name__}: {e}") from e

    @classmethod
    def _flag(cls, name: str, flag: str) -> bool:
        extra = cls.model_fields[name].json_schema_extra
        return isinstance(extra, dict) and bool(extra.get(flag))

    @classmethod
    def force_new_fields(cls) -> frozenset[str]:
        return frozenset(n for n in cls.model_fields if cls._flag(n, "force_new"))

    @classmethod
    def set_fields(cls) -> frozenset[str]:
        return frozenset(
            name
            for name, info in cls.model_fields.items()
            if _annotation_origins(info.annotation) & {set, frozenset}
        )

    @classmethod
    def attribute_names(cls) -> tuple[str, ...]:
        return tuple(cls.model_fields) + tuple(cls.computed_attributes)


def to_wire(value: Any) -> Any:
    """Convert a declared value into the shape Vault expects."""
    if isinstance(value, (set, frozenset)):
        return sorted(str(v) for v in value)
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, dict):
        return {str(k): v for k, v in value.items()}
    return value


def _is_empty(value: Any) -> bool:
    return value is None or (
        isinstance(value, (str, list, tuple, set, frozenset, dict)) and len(value) == 0
    )


class ResourceData:
    """
    The view of one resource instance an adapter works with.

    ``config`` is the validated declaration (None when reading or deleting
    something known only from state); ``attributes`` is the tracked state the
    adapter populates. ``id`` is the remote identifier; an empty ID means the
    instance is not tracked.
    """

    def __init__(
        self,
        model: type[ResourceModel],
        config: ResourceModel | None = None,
        attributes: dict[str, Any] | None = None,
        id: str = "",
    ):
        self.model = model
        self.config = config
        self.attributes: dict[str, Any] = dict(attributes or {})
        self._id = id or ""

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, value: str | None) -> None:
        self._id = value or ""

    def get(self, key: str) -> Any:
        """Declared value when there is a declaration, tracked value otherwise."""
        if self.config is not None and key in self.model.model_fields:
            return getattr(self.config, key)
        return self.attributes.get(key)

    def get_ok(self, key: str) -> tuple[Any, bool]:
        """
        Return ``(value, ok)`` where ok means the field is present.

        A field is present when it was set explicitly or carries a non-null
        default, and its value is not empty.
        """
        value = self.get(key)
        if self.config is not None and key in self.model.model_fields:
            explicit = key in self.config.model_fields_set
            has_default = self.model.model_fields[key].get_default() is not None
            if not (explicit or has_default):
                return value, False
        return value, not _is_empty(value)

    def is_declared(self, key: str) -> bool:
        """Whether the declaration sets ``key`` explicitly, empty values included."""
        return (
            self.config is not None
            and key in self.model.model_fields
            and key in self.config.model_fields_set
            and getattr(self.config, key) is not None
        )

    def set(self, key: str, value: Any) -> None:
        if key in self.model.set_fields() and isinstance(value, (list, tuple, set, frozenset)):
            value = sorted(str(v) for v in value)
        else:
            value = to_wire(value)
        self.attributes[key] = value

    def __repr__(self) -> str:
        return f"ResourceData(type='{self.model.type_name}', id='{self.id}')"


def encode(
    data: ResourceData, keys: Iterable[str], *, always: Iterable[str] = ()
) -> dict[str, Any]:
    """
    Build the flat request payload from present fields.

    Fields declared explicitly empty are sent as empty, which clears them
    remotely.

    Args:
        data: Instance data carrying the declaration
        keys: Field names to consider
        always: Fields sent even when absent, for endpoints that replace the
            whole object on write

    Returns:
        Payload dict with sets turned into sorted string lists
    """
    always = set(always)
    payload: dict[str, Any] = {}
    for key in keys:
        value, ok = data.get_ok(key)
        if ok or data.is_declared(key):
            payload[key] = to_wire(value)
        elif key in always:
            payload[key] = to_wire(value) if value is not None else None
    return payload


def decode(data: ResourceData, payload: dict[str, Any], keys: Iterable[str]) -> None:
    """Copy ``keys`` from a response payload into tracked attributes verbatim."""
    for key in keys:
        data.set(key, payload.get(key))


def desired_attributes(config: ResourceModel) -> dict[str, Any]:
    """The present declared fields of ``config`` in wire shape, for diffing."""
    data = ResourceData(type(config), config=config)
    return encode(data, type(config).model_fields)
