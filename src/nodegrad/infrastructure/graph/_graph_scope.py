"""
Current-graph tracking.

Leaves are recorded into the *current* graph unless one is passed
explicitly. By default this is a process-wide graph; `use_graph` temporarily
switches to another one:

    with use_graph() as g:
        x = leaf(2.0)
        ...
        backward(w)

Operations on existing nodes always build into the graph of their operands,
regardless of the current graph.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from ._graph import Graph

_default_graph = Graph()
_graph_stack: list[Graph] = []


def current_graph() -> Graph:
    """Return the graph new leaves are recorded into."""
    return _graph_stack[-1] if _graph_stack else _default_graph


def default_graph() -> Graph:
    """Return the process-wide default graph."""
    return _default_graph


@contextmanager
def use_graph(graph: Optional[Graph] = None) -> Iterator[Graph]:
    """
    Make `graph` (or a fresh `Graph`) current for the duration of the block.

    Parameters
    ----------
    graph : Optional[Graph], optional
        Graph to activate. A new one is created when omitted.

    Yields
    ------
    Graph
        The active graph.
    """
    g = graph if graph is not None else Graph()
    _graph_stack.append(g)
    try:
        yield g
    finally:
        _graph_stack.pop()
