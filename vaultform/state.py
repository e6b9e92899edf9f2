"""
Tracked state: what vaultform last observed for every managed resource.

State is a JSON document keyed by resource address. It is written after
every resource operation so an interrupted apply keeps what succeeded.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from vaultform.errors import StateError

logger = logging.getLogger(__name__)

STATE_VERSION = 1
DEFAULT_STATE_FILE = "vaultform.state.json"


@dataclass
class ResourceState:
    """Last known remote state of one resource instance."""

    type: str
    """Resource type, e.g. vault_identity_entity"""

    id: str
    """Remote identifier (path or opaque ID)"""

    attributes: dict[str, Any] = field(default_factory=dict)
    """Observed attribute values"""

    dependencies: list[str] = field(default_factory=list)
    """Addresses this resource referenced when it was last applied"""

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "id": self.id,
            "attributes": self.attributes,
            "dependencies": self.dependencies,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResourceState":
        return cls(
            type=data["type"],
            id=data["id"],
            attributes=dict(data.get("attributes") or {}),
            dependencies=list(data.get("dependencies") or []),
        )


@dataclass
class State:
    """All tracked resources, keyed by address ("<type>.<name>")."""

    resources: dict[str, ResourceState] = field(default_factory=dict)
    serial: int = 0

    def get(self, address: str) -> ResourceState | None:
        return self.resources.get(address)

    def put(self, address: str, resource: ResourceState) -> None:
        self.resources[address] = resource
        self.serial += 1

    def remove(self, address: str) -> ResourceState | None:
        removed = self.resources.pop(address, None)
        if removed is not None:
            self.serial += 1
        return removed

    def addresses(self) -> list[str]:
        return list(self.resources)

    def attribute(self, address: str, key: str) -> Any:
        """Look up ``key`` on a tracked resource; ``id`` is always available."""
        resource = self.resources[address]
        if key == "id":
            return resource.id
        return resource.attributes.get(key)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": STATE_VERSION,
            "serial": self.serial,
            "resources": {
                address: resource.to_dict()
                for address, resource in sorted(self.resources.items())
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "State":
        version = data.get("version", STATE_VERSION)
        if version != STATE_VERSION:
            raise StateError(f"unsupported state version {version}")
        return cls(
            resources={
                address: ResourceState.from_dict(resource)
                for address, resource in (data.get("resources") or {}).items()
            },
            serial=int(data.get("serial", 0)),
        )

    def __len__(self) -> int:
        return len(self.resources)


class StateStore:
    """Load and save State as a JSON file."""

    def __init__(self, path: str | Path = DEFAULT_STATE_FILE):
        self.path = Path(path)

    def load(self) -> State:
        if not self.path.exists():
            return State()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StateError(f"cannot read state file {self.path}: {e}") from e
        return State.from_dict(data)

    def save(self, state: State) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(state.to_dict(), indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)
        logger.debug("Saved state serial %d to %s", state.serial, self.path)


class MemoryStateStore(StateStore):
    """StateStore that keeps the document in memory."""

    def __init__(self, state: State | None = None):
        self._data = state.to_dict() if state is not None else None

    def load(self) -> State:
        if self._data is None:
            return State()
        return State.from_dict(json.loads(json.dumps(self._data)))

    def save(self, state: State) -> None:
        self._data = json.loads(json.dumps(state.to_dict()))
