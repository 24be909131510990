import unittest

import numpy as np

from detect_kit.errors import IndexOutOfBounds, ShapeMismatch
from detect_kit.tensor import RawTensor, TensorReader, as_raw_tensor


class TestRawTensor(unittest.TestCase):
    def test_from_bytes(self) -> None:
        buf = np.array([0.1, 0.2, 0.3, 0.4], dtype=np.float64).tobytes()
        t = RawTensor.from_buffer(buf, (2, 2))
        self.assertEqual(t.shape, (2, 2))
        self.assertEqual(t.ndim, 2)
        self.assertTrue(np.allclose(t.data, [0.1, 0.2, 0.3, 0.4]))

    def test_from_array_keeps_shape(self) -> None:
        t = RawTensor.from_array(np.ones((3, 4), dtype=np.float32))
        self.assertEqual(t.shape, (3, 4))
        self.assertEqual(t.data.dtype, np.float64)

    def test_data_is_read_only_copy(self) -> None:
        src = np.zeros(4)
        t = RawTensor.from_buffer(src, (1, 4))
        src[0] = 5.0
        self.assertEqual(float(t.data[0]), 0.0)
        with self.assertRaises(ValueError):
            t.data[0] = 1.0

    def test_size_mismatch(self) -> None:
        with self.assertRaises(ShapeMismatch):
            RawTensor.from_buffer([0.1, 0.2, 0.3], (2, 2))

    def test_bad_byte_length(self) -> None:
        with self.assertRaises(ShapeMismatch):
            RawTensor.from_buffer(b"\x00" * 12, (1, 1))

    def test_zero_class_dimension_rejected(self) -> None:
        with self.assertRaises(ShapeMismatch):
            RawTensor.from_buffer([], (2, 0))

    def test_zero_boxes_allowed(self) -> None:
        t = RawTensor.from_buffer([], (0, 4))
        self.assertEqual(t.shape, (0, 4))

    def test_direct_constructor_copies_and_freezes(self) -> None:
        src = np.array([0.9])
        t = RawTensor(data=src, shape=(1, 1))
        self.assertFalse(t.data.flags.writeable)
        src[0] = 0.1
        self.assertEqual(float(t.data[0]), 0.9)
        with self.assertRaises(ValueError):
            t.data[0] = 0.1

    def test_direct_constructor_casts_to_float64(self) -> None:
        t = RawTensor(data=np.array([1, 0], dtype=np.int64), shape=(1, 2))
        self.assertEqual(t.data.dtype, np.float64)

    def test_non_integer_shape_rejected(self) -> None:
        with self.assertRaises(ShapeMismatch):
            RawTensor.from_buffer([0.9, 0.8], (2.7, 1))
        with self.assertRaises(ShapeMismatch):
            RawTensor(data=np.array([0.9, 0.8]), shape=(2.0, 1))

    def test_typed_memoryview_converted_by_value(self) -> None:
        values = np.array([0.9, 0.0, 0.0, 0.0, 0.5, 0.5, 0.2, 0.2], dtype=np.float32)
        t = RawTensor.from_buffer(memoryview(values), (2, 4))
        self.assertTrue(np.allclose(t.data, values))

    def test_float64_memoryview_read_raw(self) -> None:
        values = np.array([0.25, 0.75])
        t = RawTensor.from_buffer(memoryview(values), (1, 2))
        self.assertTrue(np.array_equal(t.data, values))
        t = RawTensor.from_buffer(memoryview(values.tobytes()), (1, 2))
        self.assertTrue(np.array_equal(t.data, values))

    def test_as_raw_tensor_passthrough(self) -> None:
        t = RawTensor.from_buffer([1.0], (1,))
        self.assertIs(as_raw_tensor(t), t)


class TestTensorReader(unittest.TestCase):
    def setUp(self) -> None:
        # 2 boxes x 3 classes
        self.conf = RawTensor.from_buffer([0.1, 0.2, 0.3, 0.4, 0.5, 0.6], (2, 3))
        self.coords = RawTensor.from_buffer([1, 2, 3, 4, 5, 6, 7, 8], (2, 4))
        self.reader = TensorReader(self.conf, self.coords)

    def test_dimensions(self) -> None:
        self.assertEqual(self.reader.num_boxes, 2)
        self.assertEqual(self.reader.num_classes, 3)

    def test_row_major_access(self) -> None:
        self.assertAlmostEqual(self.reader.confidence(1, 0), 0.4)
        self.assertAlmostEqual(self.reader.confidence(0, 2), 0.3)
        self.assertEqual(self.reader.coordinate(1, 2), 7.0)
        self.assertTrue(np.allclose(self.reader.confidence_row(1), [0.4, 0.5, 0.6]))
        self.assertTrue(np.allclose(self.reader.coordinate_row(0), [1, 2, 3, 4]))

    def test_matrix_views_match_scalar_access(self) -> None:
        conf = self.reader.confidence_matrix()
        coords = self.reader.coordinate_matrix()
        self.assertEqual(conf.shape, (2, 3))
        self.assertEqual(coords.shape, (2, 4))
        for b in range(2):
            for c in range(3):
                self.assertEqual(conf[b, c], self.reader.confidence(b, c))
            for k in range(4):
                self.assertEqual(coords[b, k], self.reader.coordinate(b, k))

    def test_out_of_range(self) -> None:
        with self.assertRaises(IndexOutOfBounds):
            self.reader.confidence(2, 0)
        with self.assertRaises(IndexOutOfBounds):
            self.reader.confidence(0, 3)
        with self.assertRaises(IndexOutOfBounds):
            self.reader.coordinate(-1, 0)
        with self.assertRaises(IndexError):
            self.reader.coordinate(0, 4)

    def test_box_count_mismatch(self) -> None:
        coords = RawTensor.from_buffer([0.0] * 12, (3, 4))
        with self.assertRaises(ShapeMismatch):
            TensorReader(self.conf, coords)

    def test_coordinates_need_four_columns(self) -> None:
        coords = RawTensor.from_buffer([0.0] * 6, (2, 3))
        with self.assertRaises(ShapeMismatch):
            TensorReader(self.conf, coords)

    def test_confidence_must_be_2d(self) -> None:
        conf = RawTensor.from_buffer([0.0] * 2, (2,))
        with self.assertRaises(ShapeMismatch):
            TensorReader(conf, self.coords)


if __name__ == "__main__":
    unittest.main()
