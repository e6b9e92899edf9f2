"""
Reconciliation core: dependency graph, references, planning and the stack
that drives the adapters.
"""

from vaultform.core.graph import GraphNode, ResourceGraph
from vaultform.core.interpolation import UNKNOWN, Reference, find_references, resolve
from vaultform.core.plan import Action, Change, Plan, decide
from vaultform.core.stack import Stack

__all__ = [
    "GraphNode",
    "ResourceGraph",
    "UNKNOWN",
    "Reference",
    "find_references",
    "resolve",
    "Action",
    "Change",
    "Plan",
    "decide",
    "Stack",
]
