from ._context import Context
from ._graph import Graph, NodeRecord
from ._graph_scope import current_graph, default_graph, use_graph
from ._node import Node

__all__ = [
    Context.__name__,
    Graph.__name__,
    NodeRecord.__name__,
    Node.__name__,
    current_graph.__name__,
    default_graph.__name__,
    use_graph.__name__,
]
