"""
Plan: what has to happen to each resource to reach the declared state.

The decision for one resource compares the present declared fields (in the
same wire shape the codec sends) against the tracked attributes. Fields the
declaration leaves out are not compared, so values Vault fills in on its own
never show up as drift.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from vaultform.core.interpolation import UNKNOWN, contains_unknown
from vaultform.schema import ResourceModel, desired_attributes, to_wire
from vaultform.state import ResourceState


class Action(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"
    NOOP = "noop"


SYMBOLS = {
    Action.CREATE: "+",
    Action.UPDATE: "~",
    Action.REPLACE: "-/+",
    Action.DELETE: "-",
    Action.NOOP: " ",
}


@dataclass
class Change:
    """Planned outcome for a single resource address."""

    address: str
    type: str
    action: Action
    reason: str = ""
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    changed: list[str] = field(default_factory=list)

    def describe(self) -> str:
        text = f"{SYMBOLS[self.action]} {self.address}"
        if self.reason:
            text += f" ({self.reason})"
        return text


@dataclass
class Plan:
    changes: list[Change] = field(default_factory=list)

    def __iter__(self):
        return iter(self.changes)

    def __len__(self) -> int:
        return len(self.changes)

    @property
    def has_changes(self) -> bool:
        return any(change.action is not Action.NOOP for change in self.changes)

    def get(self, address: str) -> Change | None:
        for change in self.changes:
            if change.address == address:
                return change
        return None

    def summary(self) -> dict[str, int]:
        counts = {action.value: 0 for action in Action}
        for change in self.changes:
            counts[change.action.value] += 1
        return counts


def _normalize(value: Any) -> Any:
    value = to_wire(value)
    if value in (None, "", [], {}):
        return None
    return value


def decide(
    address: str,
    model: type[ResourceModel],
    declared: dict[str, Any] | None,
    tracked: ResourceState | None,
) -> Change:
    """
    Decide the action for one address.

    Args:
        address: Resource address
        model: Declaration model of the resource type
        declared: Resolved declared values (may hold UNKNOWN), None when the
            resource is no longer declared
        tracked: Tracked state, None when not tracked

    Raises:
        ConfigError: The declared values do not validate
    """
    if declared is None:
        if tracked is None:
            return Change(address, model.type_name, Action.NOOP, reason="not declared")
        return Change(
            address,
            model.type_name,
            Action.DELETE,
            reason="no longer declared",
            before=tracked.attributes,
        )

    if contains_unknown(declared):
        return _decide_with_unknowns(address, model, declared, tracked)

    after = desired_attributes(model.declare(declared))
    if tracked is None:
        return Change(address, model.type_name, Action.CREATE, reason="not found", after=after)

    changed = [
        key
        for key, value in after.items()
        if _normalize(value) != _normalize(tracked.attributes.get(key))
    ]
    if not changed:
        return Change(
            address, model.type_name, Action.NOOP, before=tracked.attributes, after=after
        )
    replace = sorted(set(changed) & model.force_new_fields())
    action = Action.REPLACE if replace else Action.UPDATE
    reason = f"{', '.join(replace)} forces replacement" if replace else f"changed: {', '.join(changed)}"
    return Change(
        address,
        model.type_name,
        action,
        reason=reason,
        before=tracked.attributes,
        after=after,
        changed=changed,
    )


def _decide_with_unknowns(
    address: str,
    model: type[ResourceModel],
    declared: dict[str, Any],
    tracked: ResourceState | None,
) -> Change:
    after = {
        key: (UNKNOWN if contains_unknown(value) else to_wire(value))
        for key, value in declared.items()
    }
    if tracked is None:
        return Change(address, model.type_name, Action.CREATE, reason="not found", after=after)
    changed = [
        key
        for key, value in after.items()
        if value is UNKNOWN or _normalize(value) != _normalize(tracked.attributes.get(key))
    ]
    replace = sorted(set(changed) & model.force_new_fields())
    return Change(
        address,
        model.type_name,
        Action.REPLACE if replace else Action.UPDATE,
        reason="depends on values known after apply",
        before=tracked.attributes,
        after=after,
        changed=changed,
    )
