"""
Declarative document loader.

A document is YAML with a provider section and resources grouped by type:

    provider:
      address: http://127.0.0.1:8200

    resources:
      vault_identity_entity:
        entityA:
          name: my-entity-A
          policies: [test]
      vault_identity_entity_alias:
        entity-alias:
          name: ${vault_identity_entity.entityA.name}
          canonical_id: ${vault_identity_entity.entityA.id}
          mount_accessor: ${vault_auth_backend.githubA.accessor}
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from vaultform.config.provider import VaultConfig
from vaultform.errors import ConfigError

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


@dataclass(frozen=True)
class ResourceBlock:
    """One declared resource instance, before references are resolved."""

    type: str
    name: str
    config: dict[str, Any] = field(default_factory=dict)

    @property
    def address(self) -> str:
        return f"{self.type}.{self.name}"


@dataclass
class Document:
    provider: VaultConfig
    resources: list[ResourceBlock]

    def block(self, address: str) -> ResourceBlock:
        for block in self.resources:
            if block.address == address:
                return block
        raise KeyError(address)


def parse_blocks(resources: Mapping[str, Any] | None) -> list[ResourceBlock]:
    """Turn the ``resources`` mapping into blocks, validating names."""
    blocks: list[ResourceBlock] = []
    if not resources:
        return blocks
    if not isinstance(resources, Mapping):
        raise ConfigError("'resources' must be a mapping of type to named resources")
    for type_name, named in resources.items():
        if not isinstance(named, Mapping):
            raise ConfigError(f"resources of type {type_name!r} must be a mapping")
        for name, values in named.items():
            if not _NAME_RE.match(str(name)):
                raise ConfigError(f"invalid resource name {name!r} for type {type_name!r}")
            if values is None:
                values = {}
            if not isinstance(values, Mapping):
                raise ConfigError(f"{type_name}.{name} must be a mapping of fields")
            blocks.append(ResourceBlock(type=type_name, name=str(name), config=dict(values)))
    return blocks


def parse_document(
    data: Mapping[str, Any] | None, env: Mapping[str, str] | None = None
) -> Document:
    data = data or {}
    unknown = set(data) - {"provider", "resources"}
    if unknown:
        raise ConfigError(f"unknown top-level keys: {', '.join(sorted(unknown))}")
    provider = data.get("provider") or {}
    if not isinstance(provider, Mapping):
        raise ConfigError("'provider' must be a mapping")
    return Document(
        provider=VaultConfig.from_env(env, **provider),
        resources=parse_blocks(data.get("resources")),
    )


def loads(text: str, env: Mapping[str, str] | None = None) -> Document:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML document: {e}") from e
    if data is not None and not isinstance(data, Mapping):
        raise ConfigError("document must be a mapping")
    return parse_document(data, env)


def load_document(path: str | Path, env: Mapping[str, str] | None = None) -> Document:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    return loads(text, env)
