"""
Stack: the declared resources of one document plus their tracked state.

The stack decides when each adapter call happens. It never talks to Vault
itself: refresh, apply, destroy and import all go through the adapter of
each resource type, one resource at a time, in dependency order.
"""

import logging
from typing import Any, Iterable

from vaultform.config.loader import ResourceBlock
from vaultform.core.graph import ResourceGraph
from vaultform.core.interpolation import UNKNOWN, Reference, find_references, resolve
from vaultform.core.plan import Action, Change, Plan, decide
from vaultform.errors import PlanError, StateError, VaultformError
from vaultform.providers.base import Provider
from vaultform.schema import ResourceData
from vaultform.state import MemoryStateStore, ResourceState, State, StateStore

logger = logging.getLogger(__name__)


class Stack:
    """
    Reconciles declared resources against tracked state.

    Example:
        document = load_document("vault.yaml")
        stack = Stack(
            provider=VaultProvider(config=document.provider),
            blocks=document.resources,
            store=StateStore("vault.state.json"),
        )

        print(stack.plan().summary())
        stack.apply()
        stack.destroy()
    """

    def __init__(
        self,
        provider: Provider,
        blocks: Iterable[ResourceBlock] = (),
        store: StateStore | None = None,
    ):
        self.provider = provider
        self.store = store or MemoryStateStore()
        self.state: State = self.store.load()
        self.blocks: dict[str, ResourceBlock] = {}
        for block in blocks:
            if block.address in self.blocks:
                raise PlanError(f"resource {block.address} is declared more than once")
            self.provider.adapter(block.type)
            self.blocks[block.address] = block
        self._graph: ResourceGraph | None = None

    @property
    def client(self) -> Any:
        return self.provider.client

    # -------------------------------------------------------------------------
    # Graph and references
    # -------------------------------------------------------------------------

    def dependencies(self, address: str) -> list[str]:
        """Addresses ``address`` refers to, each listed once in first-seen order."""
        refs = find_references(self.blocks[address].config)
        return list(dict.fromkeys(ref.address for ref in refs))

    def graph(self) -> ResourceGraph:
        """Dependency graph of the declared resources."""
        if self._graph is None:
            graph = ResourceGraph()
            for address, block in self.blocks.items():
                graph.add_node(address, block)
            for address, block in self.blocks.items():
                for ref in find_references(block.config):
                    self._check_reference(address, ref)
                    graph.add_edge(ref.address, address)
            graph.topological_sort()
            self._graph = graph
        return self._graph

    def _check_reference(self, address: str, ref: Reference) -> None:
        target = self.blocks.get(ref.address)
        if target is None:
            raise PlanError(f"{address} references undeclared resource {ref.address}")
        model = self.provider.adapter(target.type).model
        if ref.attribute != "id" and ref.attribute not in model.attribute_names():
            raise PlanError(
                f"{address} references unknown attribute {ref.attribute!r} of {ref.address}"
            )

    def _lookup(self, ref: Reference) -> Any:
        if ref.address not in self.state.resources:
            raise PlanError(f"{ref} is not available: {ref.address} is not in state")
        return self.state.attribute(ref.address, ref.attribute)

    def resolved_config(self, address: str) -> dict[str, Any]:
        """Declared values of ``address`` with references filled from state."""
        return resolve(self.blocks[address].config, self._lookup)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def _data_for(self, address: str, tracked: ResourceState) -> ResourceData:
        adapter = self.provider.adapter(tracked.type)
        return adapter.new_data(attributes=tracked.attributes, id=tracked.id)

    def _track(self, address: str, type_name: str, data: ResourceData, deps: list[str]) -> None:
        self.state.put(
            address,
            ResourceState(type=type_name, id=data.id, attributes=data.attributes, dependencies=deps),
        )
        self.store.save(self.state)

    def _untrack(self, address: str) -> None:
        self.state.remove(address)
        self.store.save(self.state)

    def refresh(self) -> State:
        """
        Re-read every tracked resource.

        Resources that no longer exist remotely are dropped from state.
        """
        for address, tracked in list(self.state.resources.items()):
            adapter = self.provider.adapter(tracked.type)
            data = self._data_for(address, tracked)
            if address in self.blocks:
                data.config = self._declared_model(address, adapter)
            logger.debug("Refreshing %s (%s)", address, tracked.id)
            adapter.read(self.client, data)
            if not data.id:
                logger.warning("%s no longer exists remotely, removing it from state", address)
                self.state.remove(address)
                continue
            self.state.put(
                address,
                ResourceState(
                    type=tracked.type,
                    id=data.id,
                    attributes=data.attributes,
                    dependencies=tracked.dependencies,
                ),
            )
        self.store.save(self.state)
        return self.state

    def _declared_model(self, address: str, adapter):
        # A tracked resource may reference something not yet applied; its
        # declaration is only needed for flags such as external_policies.
        try:
            values = self.resolved_config(address)
        except PlanError:
            return None
        try:
            return adapter.model.declare(values)
        except VaultformError:
            return None

    def plan(self, refresh: bool = True) -> Plan:
        """Compute the changes apply would make, without making them."""
        if refresh:
            self.refresh()
        plan = Plan()
        order = self.graph().topological_sort()

        def lookup(ref: Reference) -> Any:
            change = plan.get(ref.address)
            if change is not None and change.action is Action.UPDATE:
                # an in-place update keeps computed and undeclared attributes
                if change.after and ref.attribute in change.after:
                    return change.after[ref.attribute]
            elif change is not None and change.action is not Action.NOOP:
                return UNKNOWN
            if ref.address not in self.state.resources:
                return UNKNOWN
            return self.state.attribute(ref.address, ref.attribute)

        for address in self._orphans():
            tracked = self.state.resources[address]
            model = self.provider.adapter(tracked.type).model
            plan.changes.append(decide(address, model, None, tracked))

        for address in order:
            block = self.blocks[address]
            model = self.provider.adapter(block.type).model
            declared = resolve(block.config, lookup)
            plan.changes.append(decide(address, model, declared, self.state.get(address)))
        return plan

    def _orphans(self) -> list[str]:
        tracked = {
            address: [d for d in state.dependencies if d in self.state.resources]
            for address, state in self.state.resources.items()
            if address not in self.blocks
        }
        graph = ResourceGraph.from_dependencies(tracked, ignore_missing=True)
        return graph.reverse_topological_sort()

    def apply(self) -> Plan:
        """
        Converge remote state on the declarations.

        Resources are processed one at a time in dependency order and state
        is saved after each one. The first failure stops the run; resources
        applied before it stay tracked.

        Returns:
            The changes that were carried out
        """
        self.refresh()
        applied = Plan()

        for address in self._orphans():
            tracked = self.state.resources[address]
            adapter = self.provider.adapter(tracked.type)
            logger.info("%s: destroying (no longer declared)", address)
            adapter.delete(self.client, self._data_for(address, tracked))
            self._untrack(address)
            applied.changes.append(
                Change(address, tracked.type, Action.DELETE, reason="no longer declared")
            )

        for address in self.graph().topological_sort():
            change = self._apply_one(address)
            applied.changes.append(change)
        return applied

    def _apply_one(self, address: str) -> Change:
        block = self.blocks[address]
        adapter = self.provider.adapter(block.type)
        declared = self.resolved_config(address)
        tracked = self.state.get(address)
        change = decide(address, adapter.model, declared, tracked)
        deps = self.dependencies(address)

        if change.action is Action.NOOP:
            if tracked is not None and tracked.dependencies != deps:
                tracked.dependencies = deps
                self.store.save(self.state)
            return change

        config = adapter.model.declare(declared)
        if change.action is Action.REPLACE:
            logger.info("%s: replacing (%s)", address, change.reason)
            adapter.delete(self.client, self._data_for(address, tracked))
            self._untrack(address)
            tracked = None

        if tracked is None:
            logger.info("%s: creating", address)
            data = adapter.new_data(config=config)
            adapter.create(self.client, data)
        else:
            logger.info("%s: updating (%s)", address, change.reason)
            data = adapter.new_data(config=config, attributes=tracked.attributes, id=tracked.id)
            adapter.update(self.client, data)

        if not data.id:
            raise StateError(f"{address} was written but could not be read back")
        self._track(address, block.type, data, deps)
        logger.info("%s: done (id=%s)", address, data.id)
        return change

    def destroy(self) -> list[str]:
        """
        Delete every tracked resource, dependents first.

        Returns:
            Addresses that were destroyed
        """
        dependencies = {
            address: tracked.dependencies for address, tracked in self.state.resources.items()
        }
        order = ResourceGraph.from_dependencies(dependencies, ignore_missing=True)
        destroyed: list[str] = []
        for address in order.reverse_topological_sort():
            tracked = self.state.resources[address]
            adapter = self.provider.adapter(tracked.type)
            logger.info("%s: destroying", address)
            adapter.delete(self.client, self._data_for(address, tracked))
            self._untrack(address)
            destroyed.append(address)
        return destroyed

    def import_resource(self, address: str, import_id: str) -> ResourceState:
        """
        Start tracking an existing remote object under ``address``.

        Args:
            address: "<type>.<name>"; need not be declared yet
            import_id: Remote identifier, e.g. a path or "<backend>/roles/<name>"

        Raises:
            StateError: The address is already tracked, or nothing exists
                remotely at ``import_id``
        """
        if address in self.state.resources:
            raise StateError(
                f"{address} is already managed; remove it from state before importing"
            )
        type_name, _, name = address.partition(".")
        if not name:
            raise StateError(f"invalid resource address {address!r}")
        adapter = self.provider.adapter(type_name)

        logger.info("%s: importing %r", address, import_id)
        data = adapter.import_state(self.client, import_id)
        if not data.id:
            raise StateError(f"cannot import non-existent remote object {import_id!r}")

        deps = self.dependencies(address) if address in self.blocks else []
        self._track(address, type_name, data, deps)
        return self.state.resources[address]
