import unittest

import numpy as np

from stridelite.domain._errors import ShapeError
from stridelite.domain._function import OpKind
from stridelite.infrastructure.tensor._tensor import Tensor


class TestTensorAdd(unittest.TestCase):
    def test_add_self_doubles(self):
        a = Tensor.arange_multi_dim([2, 2])
        out = a.add(a)
        for i in range(2):
            for j in range(2):
                self.assertEqual(out.get_item([i, j]), 2 * a.get_item([i, j]))

    def test_result_has_fresh_storage(self):
        a = Tensor.arange(3)
        b = Tensor.full([3], 1.0)
        out = a.add(b)
        self.assertIsNot(out.storage, a.storage)
        self.assertIsNot(out.storage, b.storage)
        self.assertEqual(out.storage.refcount, 1)
        self.assertEqual(out.to_list(), [1.0, 2.0, 3.0])
        self.assertEqual(a.to_list(), [0.0, 1.0, 2.0])

    def test_shape_mismatch_raises(self):
        a = Tensor.zeros([2, 2])
        with self.assertRaises(ShapeError):
            a.add(Tensor.zeros([4]))
        with self.assertRaises(ShapeError):
            Tensor.zeros([2, 3]).add(Tensor.zeros([3, 2]))

    def test_shape_error_names_operation_and_shapes(self):
        with self.assertRaises(ShapeError) as cm:
            Tensor.zeros([2, 3]).add(Tensor.zeros([3, 2]))
        self.assertEqual(cm.exception.op, "add")
        self.assertEqual(cm.exception.shapes, ((2, 3), (3, 2)))

    def test_strided_operands_use_logical_order(self):
        m = Tensor.arange_multi_dim([4, 4])
        a = m.slice([0, 0], [4, 4], [2, 2])
        b = m.slice([1, 1], [3, 3], [1, 1])
        self.assertEqual(a.to_list(), [[0.0, 2.0], [8.0, 10.0]])
        self.assertEqual(b.to_list(), [[5.0, 6.0], [9.0, 10.0]])
        out = a.add(b)
        self.assertEqual(out.to_list(), [[5.0, 8.0], [17.0, 20.0]])
        self.assertEqual(out.offset, 0)
        self.assertTrue(out.is_contiguous())

    def test_offset_contiguous_operand(self):
        x = Tensor.arange(10)
        tail = x.slice([5], [10], [1])
        out = tail.add(Tensor.zeros([5]))
        self.assertEqual(out.to_list(), [5.0, 6.0, 7.0, 8.0, 9.0])

    def test_operator_sugar(self):
        a = Tensor.arange(3)
        np.testing.assert_allclose((a + a).to_numpy(), [0.0, 2.0, 4.0])
        np.testing.assert_allclose((a + 1).to_numpy(), [1.0, 2.0, 3.0])
        np.testing.assert_allclose((1.5 + a).to_numpy(), [1.5, 2.5, 3.5])

    def test_non_tensor_operand_raises(self):
        a = Tensor.arange(3)
        with self.assertRaises(TypeError):
            a + "x"
        with self.assertRaises(TypeError):
            a.add(3)


class TestTensorAddScalar(unittest.TestCase):
    def test_stores_result(self):
        a = Tensor.arange(4)
        out = a.add_scalar(1.5)
        self.assertEqual(out.to_list(), [1.5, 2.5, 3.5, 4.5])
        self.assertEqual(a.to_list(), [0.0, 1.0, 2.0, 3.0])

    def test_on_strided_view(self):
        m = Tensor.arange_multi_dim([3, 3])
        diag_ish = m.slice([0, 0], [3, 3], [2, 2])
        out = diag_ish.add_scalar(-1)
        self.assertEqual(out.to_list(), [[-1.0, 1.0], [5.0, 7.0]])

    def test_rejects_non_numbers(self):
        a = Tensor.arange(2)
        with self.assertRaises(TypeError):
            a.add_scalar("1")
        with self.assertRaises(TypeError):
            a.add_scalar(True)


class TestTensorAddGradHook(unittest.TestCase):
    def test_no_record_without_requires_grad(self):
        out = Tensor.arange(2).add(Tensor.arange(2))
        self.assertIsNone(out.grad_fn)
        self.assertTrue(out.is_leaf)
        self.assertFalse(out.requires_grad)

    def test_add_attaches_node(self):
        a = Tensor.arange(2, requires_grad=True)
        b = Tensor.arange(2)
        out = a + b
        self.assertTrue(out.requires_grad)
        self.assertFalse(out.is_leaf)
        node = out.grad_fn
        self.assertIs(node.kind, OpKind.ADD)
        self.assertEqual(len(node.inputs), 2)
        self.assertIs(node.inputs[0], a)
        self.assertIs(node.inputs[1], b)
        self.assertIs(node.output, out)

    def test_add_scalar_attaches_node(self):
        a = Tensor.arange(2, requires_grad=True)
        out = a.add_scalar(3)
        self.assertIs(out.grad_fn.kind, OpKind.ADD_SCALAR)
        self.assertEqual(out.grad_fn.saved_meta["scalar"], 3.0)

    def test_labels_are_generated_and_owned(self):
        a = Tensor.arange(2, label="a")
        b = Tensor.arange(2, label="b")
        out = a + b
        self.assertEqual(out.label, "(a + b)")
        self.assertTrue(out.owns_label)
        self.assertFalse(a.owns_label)
        self.assertEqual(a.add_scalar(2).label, "(a + 2)")


if __name__ == "__main__":
    unittest.main()
