import unittest
import numpy as np

from src.nodegrad.domain._errors import ShapeMismatchError
from src.nodegrad.domain._op_kind import OpKind
from src.nodegrad.infrastructure.graph._graph import Graph
from src.nodegrad.infrastructure.graph._node import Node
from src.nodegrad.infrastructure._functions import leaf


class TestNodeProperties(unittest.TestCase):
    def setUp(self):
        self.graph = Graph()

    def test_leaf_fields(self):
        x = leaf(2.0, graph=self.graph)
        self.assertIsInstance(x, Node)
        np.testing.assert_array_equal(x.value.to_numpy(), [2.0])
        np.testing.assert_array_equal(x.grad.to_numpy(), [0.0])
        self.assertEqual(x.predecessors, ())
        self.assertEqual(x.op_label, "")
        self.assertIs(x.kind, OpKind.LEAF)
        self.assertTrue(x.is_leaf)

    def test_leaf_backward_rule_is_noop(self):
        x = leaf([1.0, 2.0], graph=self.graph)
        x.backward_rule()
        np.testing.assert_array_equal(x.grad.to_numpy(), [0.0, 0.0])

    def test_grad_shape_matches_value_shape(self):
        x = leaf(np.ones((2, 3)), graph=self.graph)
        self.assertEqual(x.grad.shape, x.value.shape)

    def test_handles_compare_by_record(self):
        x = leaf(1.0, graph=self.graph)
        same = self.graph.node(x.index)
        self.assertEqual(x, same)
        self.assertEqual(hash(x), hash(same))
        self.assertEqual(len({x, same}), 1)

    def test_zero_grad(self):
        x = leaf(2.0, graph=self.graph)
        y = leaf(3.0, graph=self.graph)
        w = x * y
        w.backward()
        x.zero_grad()
        np.testing.assert_array_equal(x.grad.to_numpy(), [0.0])
        np.testing.assert_array_equal(y.grad.to_numpy(), [2.0])


class TestNodeOperators(unittest.TestCase):
    def setUp(self):
        self.graph = Graph()
        self.x = leaf(2.0, graph=self.graph)
        self.y = leaf(3.0, graph=self.graph)

    def test_add_and_mul(self):
        z = self.x + self.y
        w = z * self.x
        np.testing.assert_allclose(z.value.to_numpy(), [5.0])
        np.testing.assert_allclose(w.value.to_numpy(), [10.0])
        self.assertEqual(z.op_label, "+")
        self.assertEqual(w.op_label, "*")
        self.assertEqual(w.predecessors, (z, self.x))

    def test_add_number_on_either_side(self):
        a = self.x + 1.5
        b = 1.5 + self.x
        np.testing.assert_allclose(a.value.to_numpy(), [3.5])
        np.testing.assert_allclose(b.value.to_numpy(), [3.5])
        self.assertEqual(a.op_label, "+")
        self.assertTrue(a.predecessors[1].is_leaf)

    def test_neg(self):
        n = -self.x
        np.testing.assert_allclose(n.value.to_numpy(), [-2.0])

    def test_unsupported_operands(self):
        with self.assertRaises(TypeError):
            _ = self.x * 2.0
        with self.assertRaises(TypeError):
            _ = self.x + "a"

    def test_add_number_to_vector_raises(self):
        v = leaf([1.0, 2.0], graph=self.graph)
        with self.assertRaises(ShapeMismatchError):
            _ = v + 1.0


class TestNodeRendering(unittest.TestCase):
    def test_prints_value_grad_and_label_in_order(self):
        g = Graph()
        x = leaf(2.0, graph=g)
        y = leaf(3.0, graph=g)
        w = (x + y) * x
        w.backward()

        expected_x = f"Node(value={np.array([2.0])}, grad={np.array([7.0])}, op=)"
        expected_w = f"Node(value={np.array([10.0])}, grad={np.array([1.0])}, op=*)"
        self.assertEqual(repr(x), expected_x)
        self.assertEqual(str(w), expected_w)


if __name__ == "__main__":
    unittest.main()
