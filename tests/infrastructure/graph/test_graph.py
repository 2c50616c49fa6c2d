import unittest
import numpy as np

from src.nodegrad.domain._errors import DanglingReferenceError, GraphMismatchError
from src.nodegrad.domain._op_kind import OpKind
from src.nodegrad.infrastructure.graph._context import Context
from src.nodegrad.infrastructure.graph._graph import Graph
from src.nodegrad.infrastructure.graph._graph_scope import (
    current_graph,
    default_graph,
    use_graph,
)
from src.nodegrad.infrastructure.tensor._tensor import Tensor
from src.nodegrad.infrastructure._functions import add, leaf


def scalar(x: float) -> Tensor:
    return Tensor.from_numpy(np.array([x]))


class TestGraphArena(unittest.TestCase):
    def setUp(self):
        self.graph = Graph()

    def test_add_node_creates_leaf_with_zero_grad(self):
        n = self.graph.add_node(scalar(2.0))
        self.assertEqual(len(self.graph), 1)
        self.assertEqual(n.index, 0)
        r = self.graph.record(0)
        self.assertIs(r.kind, OpKind.LEAF)
        self.assertEqual(r.ctx.parents, ())
        np.testing.assert_array_equal(r.grad.to_numpy(), [0.0])

    def test_record_tensors_are_frozen_on_assignment(self):
        n = self.graph.add_node(scalar(2.0))
        r = self.graph.record(n.index)
        self.assertTrue(r.value.readonly)
        self.assertTrue(r.grad.readonly)
        r.grad = scalar(5.0)
        self.assertTrue(r.grad.readonly)
        self.graph.zero_grad()
        self.assertTrue(r.grad.readonly)

    def test_add_node_rejects_non_tensor(self):
        with self.assertRaises(TypeError):
            self.graph.add_node(np.array([1.0]))

    def test_leaf_with_parents_is_rejected(self):
        self.graph.add_node(scalar(1.0))
        with self.assertRaises(ValueError):
            self.graph.add_node(scalar(1.0), OpKind.LEAF, Context(parents=(0,)))

    def test_derived_node_without_parents_is_rejected(self):
        with self.assertRaises(ValueError):
            self.graph.add_node(scalar(1.0), OpKind.ADD, Context())

    def test_parent_must_precede_node(self):
        self.graph.add_node(scalar(1.0))
        with self.assertRaises(DanglingReferenceError):
            self.graph.add_node(scalar(1.0), OpKind.NEG, Context(parents=(1,)))
        with self.assertRaises(DanglingReferenceError):
            self.graph.add_node(scalar(1.0), OpKind.NEG, Context(parents=(-1,)))
        self.assertEqual(len(self.graph), 1)

    def test_record_out_of_range_raises(self):
        with self.assertRaises(DanglingReferenceError):
            self.graph.record(0)

    def test_nodes_iterates_in_creation_order(self):
        a = leaf(1.0, graph=self.graph)
        b = leaf(2.0, graph=self.graph)
        c = add(a, b)
        self.assertEqual(list(self.graph.nodes()), [a, b, c])
        self.assertEqual(self.graph.node(2), c)

    def test_zero_grad_resets_every_node(self):
        a = leaf([1.0, 2.0], graph=self.graph)
        b = leaf([3.0, 4.0], graph=self.graph)
        c = add(a, b)
        c.backward()
        self.graph.zero_grad()
        for n in (a, b, c):
            np.testing.assert_array_equal(n.grad.to_numpy(), [0.0, 0.0])

    def test_clear_invalidates_handles(self):
        a = leaf(1.0, graph=self.graph)
        self.graph.clear()
        self.assertEqual(len(self.graph), 0)
        self.assertEqual(self.graph.generation, 1)
        with self.assertRaises(DanglingReferenceError):
            _ = a.value

        # A new node reusing index 0 is not reachable through the old handle
        b = leaf(5.0, graph=self.graph)
        self.assertEqual(b.index, a.index)
        self.assertNotEqual(a, b)
        with self.assertRaises(DanglingReferenceError):
            _ = a.grad

    def test_resolve_rejects_foreign_node(self):
        other = Graph()
        n = leaf(1.0, graph=other)
        with self.assertRaises(GraphMismatchError):
            self.graph.resolve(n)

    def test_repr(self):
        leaf(1.0, graph=self.graph)
        self.assertEqual(repr(self.graph), "Graph(nodes=1, generation=0)")

    def test_dtype_config_applies_to_raw_leaves(self):
        g = Graph(dtype=np.float32)
        n = leaf(1.5, graph=g)
        self.assertEqual(n.value.dtype, np.float32)
        self.assertEqual(n.grad.dtype, np.float32)


class TestGraphScope(unittest.TestCase):
    def test_default_graph_is_current_outside_scope(self):
        self.assertIs(current_graph(), default_graph())

    def test_use_graph_switches_and_restores(self):
        g = Graph()
        with use_graph(g) as active:
            self.assertIs(active, g)
            self.assertIs(current_graph(), g)
            n = leaf(1.0)
            self.assertIs(n.graph, g)
        self.assertIs(current_graph(), default_graph())

    def test_use_graph_creates_fresh_graph_and_nests(self):
        with use_graph() as outer:
            self.assertIsNot(outer, default_graph())
            with use_graph() as inner:
                self.assertIsNot(inner, outer)
                self.assertIs(current_graph(), inner)
            self.assertIs(current_graph(), outer)

    def test_scope_is_restored_after_exception(self):
        with self.assertRaises(RuntimeError):
            with use_graph():
                raise RuntimeError("boom")
        self.assertIs(current_graph(), default_graph())


if __name__ == "__main__":
    unittest.main()
