import unittest
from types import SimpleNamespace

from stridelite.domain._errors import ShapeError, TensorIndexError
from stridelite.infrastructure.tensor._strides import (
    compute_strides,
    is_contiguous,
    iter_indices,
    logical_to_physical,
    numel,
)


class TestComputeStrides(unittest.TestCase):
    def test_row_major(self):
        self.assertEqual(compute_strides((2, 3, 4)), (12, 4, 1))
        self.assertEqual(compute_strides([3, 3]), (3, 1))
        self.assertEqual(compute_strides((7,)), (1,))

    def test_numel(self):
        self.assertEqual(numel((2, 3, 4)), 24)
        self.assertEqual(numel((5, 0)), 0)


class TestIsContiguous(unittest.TestCase):
    def test_row_major_is_contiguous(self):
        self.assertTrue(is_contiguous((2, 3), (3, 1)))

    def test_stepped_is_not_contiguous(self):
        self.assertFalse(is_contiguous((3,), (2,)))
        self.assertFalse(is_contiguous((2, 2), (5, 1)))

    def test_unit_extent_stride_is_ignored(self):
        self.assertTrue(is_contiguous((1, 4), (100, 1)))

    def test_zero_element_view_is_contiguous(self):
        self.assertTrue(is_contiguous((3, 0), (3, 1)))
        self.assertTrue(is_contiguous((0,), (7,)))


class TestLogicalToPhysical(unittest.TestCase):
    def setUp(self):
        self.view = SimpleNamespace(dims=(3, 4), strides=(4, 1), offset=2)

    def test_translation_includes_offset(self):
        self.assertEqual(logical_to_physical(self.view, (0, 0)), 2)
        self.assertEqual(logical_to_physical(self.view, (1, 2)), 2 + 4 + 2)

    def test_negative_indices_normalize(self):
        self.assertEqual(
            logical_to_physical(self.view, (-1, -1)),
            logical_to_physical(self.view, (2, 3)),
        )

    def test_out_of_range_raises_index_error(self):
        with self.assertRaises(TensorIndexError) as cm:
            logical_to_physical(self.view, (3, 0))
        err = cm.exception
        self.assertIsInstance(err, IndexError)
        self.assertEqual((err.dim, err.index, err.extent), (0, 3, 3))

        with self.assertRaises(IndexError):
            logical_to_physical(self.view, (0, -5))

    def test_wrong_number_of_indices_raises(self):
        for bad in ((2,), (1, 1, 99), ()):
            with self.subTest(indices=bad):
                with self.assertRaises(ShapeError) as cm:
                    logical_to_physical(self.view, bad, op="lookup")
                self.assertEqual(cm.exception.op, "lookup")
                self.assertEqual(cm.exception.shapes, ((3, 4),))


class TestIterIndices(unittest.TestCase):
    def test_row_major_order(self):
        self.assertEqual(
            list(iter_indices((2, 2))),
            [(0, 0), (0, 1), (1, 0), (1, 1)],
        )


if __name__ == "__main__":
    unittest.main()
