"""
References between declared resources.

A value written as ``${<type>.<name>.<attribute>}`` refers to an attribute
of another resource. When the whole value is one reference the attribute is
substituted as-is (it may be a map or a list); references inside a longer
string are substituted as text.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable

REFERENCE_RE = re.compile(
    r"\$\{\s*(?P<type>[A-Za-z_][A-Za-z0-9_]*)\.(?P<name>[A-Za-z_][A-Za-z0-9_-]*)"
    r"\.(?P<attribute>[A-Za-z_][A-Za-z0-9_]*)\s*\}"
)


@dataclass(frozen=True)
class Reference:
    type: str
    name: str
    attribute: str

    @property
    def address(self) -> str:
        return f"{self.type}.{self.name}"

    def __str__(self) -> str:
        return f"{self.address}.{self.attribute}"


class _Unknown:
    """Placeholder for a value that is only known after apply."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "(known after apply)"


UNKNOWN = _Unknown()


def find_references(value: Any) -> list[Reference]:
    """All references in ``value``, in order of appearance, without duplicates."""
    found: list[Reference] = []

    def walk(item: Any) -> None:
        if isinstance(item, str):
            for match in REFERENCE_RE.finditer(item):
                ref = Reference(**match.groupdict())
                if ref not in found:
                    found.append(ref)
        elif isinstance(item, dict):
            for v in item.values():
                walk(v)
        elif isinstance(item, (list, tuple, set, frozenset)):
            for v in item:
                walk(v)

    walk(value)
    return found


def resolve(value: Any, lookup: Callable[[Reference], Any]) -> Any:
    """
    Substitute every reference in ``value`` using ``lookup``.

    An embedded reference whose value is UNKNOWN makes the whole string
    UNKNOWN.
    """
    if isinstance(value, str):
        whole = REFERENCE_RE.fullmatch(value.strip())
        if whole:
            return lookup(Reference(**whole.groupdict()))

        unknown = False

        def substitute(match: re.Match) -> str:
            nonlocal unknown
            resolved = lookup(Reference(**match.groupdict()))
            if resolved is UNKNOWN:
                unknown = True
                return ""
            return "" if resolved is None else str(resolved)

        text = REFERENCE_RE.sub(substitute, value)
        return UNKNOWN if unknown else text
    if isinstance(value, dict):
        return {k: resolve(v, lookup) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [resolve(v, lookup) for v in value]
    if isinstance(value, (set, frozenset)):
        return [resolve(v, lookup) for v in sorted(value, key=str)]
    return value


def contains_unknown(value: Any) -> bool:
    if value is UNKNOWN:
        return True
    if isinstance(value, dict):
        return any(contains_unknown(v) for v in value.values())
    if isinstance(value, (list, tuple)):
        return any(contains_unknown(v) for v in value)
    return False
