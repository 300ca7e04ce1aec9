"""Dependency graph and emission order for object types.

An edge ``B -> A`` means type ``A`` has a field of type ``B``, so ``B``'s
selection map has to be emitted first. Adjacency lists keep insertion
order so the resulting order is reproducible across runs.
"""

import logging
from collections import deque

from .ir import IRSchema

logger = logging.getLogger(__name__)


def collect_dependencies(ir: IRSchema) -> dict[str, list[str]]:
    """Map every object type to the object types that reference it.

    Every object type is a node, even one without object-typed fields.
    Self references produce a self-loop.
    """
    deps: dict[str, list[str]] = {}
    for ir_type in ir.object_types:
        if ir_type.name.startswith("__"):
            continue
        deps.setdefault(ir_type.name, [])
        for ir_field in ir_type.fields:
            target = ir.get_type_by_name(ir_field.type_name)
            if target is None or not target.is_object:
                continue
            dependents = deps.setdefault(target.name, [])
            if ir_type.name not in dependents:
                dependents.append(ir_type.name)
    return deps


def topological_order(deps: dict[str, list[str]]) -> list[str]:
    """Order nodes so that every node follows the nodes it depends on.

    Kahn's algorithm with FIFO tie-breaking. Nodes left over because of a
    cycle are appended in discovery order, so every node appears exactly
    once even though members of a cycle may precede their dependencies.
    """
    in_degree: dict[str, int] = {}
    for node, dependents in deps.items():
        in_degree.setdefault(node, 0)
        for dependent in dependents:
            in_degree[dependent] = in_degree.get(dependent, 0) + 1

    queue = deque(node for node, degree in in_degree.items() if degree == 0)
    order: list[str] = []
    while queue:
        node = queue.popleft()
        order.append(node)
        for dependent in deps.get(node, ()):
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(order) < len(in_degree):
        emitted = set(order)
        remaining = [node for node in in_degree if node not in emitted]
        logger.info(
            "Cyclic type references among %d types, falling back to discovery order: %s",
            len(remaining),
            ", ".join(remaining),
        )
        order.extend(remaining)
    return order


def emission_order(ir: IRSchema) -> list[str]:
    """Return the object type names of a schema in emission order."""
    return topological_order(collect_dependencies(ir))
