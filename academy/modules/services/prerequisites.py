"""
Module Prerequisite Graph

Prerequisites form a directed graph (module -> modules it requires). A new
or changed prerequisite list is only accepted when the department's graph
stays acyclic.

Author: Academy Development Team
Version: 1.0.0
"""

from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Set

from ..models import Module

Graph = Mapping[Hashable, Iterable[Hashable]]


def find_prerequisite_cycle(
    graph: Graph,
    start: Optional[Hashable] = None,
) -> Optional[List[Hashable]]:
    """
    Search a prerequisite graph for a cycle.

    Depth-first search with a visited set and a recursion stack. A node that
    is reached while it is still on the stack closes a cycle. The walk is
    iterative so long prerequisite chains cannot hit the recursion limit.

    Args:
        graph: Mapping of node to the nodes it depends on. Nodes that only
            appear as dependencies need no entry of their own.
        start: Restrict the search to nodes reachable from ``start``.

    Returns:
        The cycle as a list of nodes, first node repeated at the end
        (``[a, b, a]``), or None when the graph is acyclic.

    Example:
        >>> find_prerequisite_cycle({1: [2], 2: [3], 3: [1]})
        [1, 2, 3, 1]
        >>> find_prerequisite_cycle({1: [2], 2: [3]}) is None
        True
    """
    visited: Set[Hashable] = set()
    roots = [start] if start is not None else list(graph)

    for root in roots:
        if root in visited:
            continue

        path: List[Hashable] = [root]
        on_path: Set[Hashable] = {root}
        stack = [iter(graph.get(root, ()))]
        visited.add(root)

        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                on_path.discard(path.pop())
                continue
            if child in on_path:
                return path[path.index(child):] + [child]
            if child in visited:
                continue
            visited.add(child)
            path.append(child)
            on_path.add(child)
            stack.append(iter(graph.get(child, ())))

    return None


def build_prerequisite_graph(
    department_id: int,
    module_id: Optional[int] = None,
    prerequisite_ids: Iterable[int] = (),
) -> Dict[int, List[int]]:
    """
    Load the prerequisite graph of a department's active modules.

    When ``module_id`` is given its edges are replaced by
    ``prerequisite_ids``, so the graph reflects a pending change. New modules
    without an id yet can never be part of a cycle and need no entry.

    Returns:
        Mapping of module id to the ids of its prerequisites
    """
    through = Module.prerequisites.through
    graph: Dict[int, List[int]] = {}
    edges = through.objects.filter(
        from_module__department_id=department_id,
        from_module__is_active=True,
    ).values_list("from_module_id", "to_module_id")
    for source, target in edges:
        graph.setdefault(source, []).append(target)

    if module_id is not None:
        graph[module_id] = list(prerequisite_ids)
    return graph
