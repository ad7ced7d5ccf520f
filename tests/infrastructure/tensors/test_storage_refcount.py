import gc
import unittest

import numpy as np

from stridelite.domain._errors import StorageReleasedError
from stridelite.infrastructure._allocation import use_allocator
from stridelite.infrastructure.tensor._storage import Storage


class TrackingAllocator:
    """Allocation-tracking test double recording every allocate/free call."""

    def __init__(self):
        self.allocated = []
        self.freed = []

    def allocate(self, size):
        buf = np.empty(size, dtype=np.float32)
        self.allocated.append(buf)
        return buf

    def free(self, buffer):
        self.freed.append(buffer)


class TestStorageAllocate(unittest.TestCase):
    def test_allocate_sets_size_and_refcount(self):
        s = Storage.allocate(4)
        self.assertEqual(s.size, 4)
        self.assertEqual(s.refcount, 1)
        self.assertFalse(s.released)
        self.assertEqual(s.as_array().dtype, np.float32)

    def test_allocate_zero_elements(self):
        s = Storage.allocate(0)
        self.assertEqual(s.size, 0)
        s.release()
        self.assertTrue(s.released)

    def test_allocate_negative_size_raises(self):
        with self.assertRaises(ValueError):
            Storage.allocate(-1)


class TestStorageReadWrite(unittest.TestCase):
    def test_write_then_read(self):
        s = Storage.allocate(3)
        s.write(0, 1.5)
        s.write(2, -4.0)
        self.assertEqual(s.read(0), 1.5)
        self.assertEqual(s.read(2), -4.0)
        self.assertIsInstance(s.read(0), float)

    def test_out_of_range_is_assertion_error(self):
        s = Storage.allocate(3)
        for bad in (-1, 3, 100):
            with self.assertRaises(AssertionError):
                s.read(bad)
            with self.assertRaises(AssertionError):
                s.write(bad, 0.0)

    def test_access_after_release_is_assertion_error(self):
        s = Storage.allocate(2)
        s.release()
        with self.assertRaises(AssertionError):
            s.read(0)
        with self.assertRaises(AssertionError):
            s.write(0, 1.0)


class TestStorageRefcount(unittest.TestCase):
    def test_acquire_release_counts(self):
        s = Storage.allocate(2)
        s.acquire()
        s.acquire()
        self.assertEqual(s.refcount, 3)
        s.release()
        self.assertEqual(s.refcount, 2)
        self.assertFalse(s.released)
        s.release()
        s.release()
        self.assertEqual(s.refcount, 0)
        self.assertTrue(s.released)

    def test_use_after_zero_raises(self):
        s = Storage.allocate(2)
        s.release()
        with self.assertRaises(StorageReleasedError):
            s.acquire()
        with self.assertRaises(StorageReleasedError):
            s.release()

    def test_buffer_freed_exactly_once_at_zero(self):
        alloc = TrackingAllocator()
        with use_allocator(alloc):
            s = Storage.allocate(5)
        s.acquire()
        s.release()
        self.assertEqual(alloc.freed, [])
        s.release()
        self.assertEqual(len(alloc.freed), 1)
        self.assertIs(alloc.freed[0], alloc.allocated[0])

        del s
        gc.collect()
        self.assertEqual(len(alloc.freed), 1)

    def test_orphaned_storage_is_returned_on_collection(self):
        alloc = TrackingAllocator()
        with use_allocator(alloc):
            s = Storage.allocate(3)
        s.acquire()
        del s
        gc.collect()
        self.assertEqual(len(alloc.freed), 1)

    def test_buffer_returns_to_allocator_that_produced_it(self):
        first = TrackingAllocator()
        second = TrackingAllocator()
        with use_allocator(first):
            s = Storage.allocate(2)
        with use_allocator(second):
            s.release()
        self.assertEqual(len(first.freed), 1)
        self.assertEqual(second.freed, [])


if __name__ == "__main__":
    unittest.main()
