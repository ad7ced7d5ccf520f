import unittest

from stridelite.domain._errors import (
    AllocationFailure,
    InvalidStepError,
    ShapeError,
    StorageReleasedError,
    StrideliteError,
    TensorFreedError,
    TensorIndexError,
)


class TestErrorTaxonomy(unittest.TestCase):
    def test_builtin_bases(self):
        cases = [
            (AllocationFailure("empty", 10), MemoryError),
            (TensorIndexError("get_item", 0, 5, 3), IndexError),
            (ShapeError("reshape", "bad"), ValueError),
            (InvalidStepError("slice", 0, 0), ValueError),
            (TensorFreedError("add"), RuntimeError),
            (StorageReleasedError("release"), RuntimeError),
        ]
        for err, base in cases:
            with self.subTest(err=type(err).__name__):
                self.assertIsInstance(err, StrideliteError)
                self.assertIsInstance(err, base)

    def test_messages_are_prefixed_with_operation(self):
        err = TensorIndexError("get_item", 1, 7, 3)
        self.assertEqual(err.op, "get_item")
        self.assertTrue(str(err).startswith("get_item: "))
        self.assertIn("7", str(err))
        self.assertIn("size 3", str(err))

    def test_allocation_failure_keeps_requested_size(self):
        err = AllocationFailure("arange", 1 << 40)
        self.assertEqual(err.requested_size, 1 << 40)

    def test_shape_error_shapes(self):
        self.assertEqual(ShapeError("add", "x").shapes, ())
        err = ShapeError("add", "x", shapes=[[2, 3], (3, 2)])
        self.assertEqual(err.shapes, ((2, 3), (3, 2)))


if __name__ == "__main__":
    unittest.main()
