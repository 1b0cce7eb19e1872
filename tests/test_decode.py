import unittest

import numpy as np

from yolo_counter.decode import Layout, decode, resolve_layout
from yolo_counter.errors import ShapeError


def _rows(dets):
    # dets: list of (cx, cy, w, h, conf) -> (N, 5) float32
    return np.array(dets, dtype=np.float32).reshape(-1, 5)


def _channel_major(rows: np.ndarray) -> np.ndarray:
    return np.ascontiguousarray(rows.T[None, ...])


def _anchor_major(rows: np.ndarray) -> np.ndarray:
    return np.ascontiguousarray(rows[None, ...])


class TestResolveLayout(unittest.TestCase):
    def test_channel_major(self) -> None:
        self.assertIs(resolve_layout((1, 5, 8400)), Layout.CHANNEL_MAJOR)

    def test_anchor_major(self) -> None:
        self.assertIs(resolve_layout((1, 8400, 5)), Layout.ANCHOR_MAJOR)

    def test_square_five_reads_anchor_major(self) -> None:
        self.assertIs(resolve_layout((1, 5, 5)), Layout.ANCHOR_MAJOR)

    def test_fewer_than_five_anchors_uses_axis_of_five(self) -> None:
        self.assertIs(resolve_layout((1, 5, 3)), Layout.CHANNEL_MAJOR)
        self.assertIs(resolve_layout((1, 3, 5)), Layout.ANCHOR_MAJOR)

    def test_rejects_missing_channel_axis(self) -> None:
        with self.assertRaises(ShapeError):
            resolve_layout((1, 4, 8400))

    def test_rejects_wrong_rank(self) -> None:
        with self.assertRaises(ShapeError):
            resolve_layout((5, 8400))
        with self.assertRaises(ShapeError):
            resolve_layout((1, 1, 5, 8400))

    def test_rejects_batch(self) -> None:
        with self.assertRaises(ShapeError):
            resolve_layout((2, 5, 8400))

    def test_shape_error_is_value_error(self) -> None:
        self.assertTrue(issubclass(ShapeError, ValueError))

    def test_anchor_rows_is_a_view(self) -> None:
        t = _channel_major(_rows([(1, 2, 3, 4, 0.9)] * 7))
        rows = Layout.CHANNEL_MAJOR.anchor_rows(t)
        self.assertEqual(rows.shape, (7, 5))
        self.assertTrue(np.shares_memory(rows, t))


class TestDecode(unittest.TestCase):
    def setUp(self) -> None:
        self.rows = _rows(
            [
                (10, 20, 30, 40, 0.95),
                (50, 60, 70, 80, 0.10),
                (11, 21, 31, 41, 0.91),
                (12, 22, 32, 42, 0.99),
                (13, 23, 33, 43, 0.20),
                (14, 24, 34, 44, 0.97),
                (15, 25, 35, 45, 0.93),
            ]
        )

    def test_layouts_decode_identically(self) -> None:
        a = decode(_channel_major(self.rows), 0.5)
        b = decode(_anchor_major(self.rows), 0.5)
        self.assertEqual(len(a), 5)
        self.assertEqual(a, b)

    def test_ascending_anchor_order(self) -> None:
        dets = decode(_anchor_major(self.rows), 0.5)
        self.assertEqual([d.cx for d in dets], [10.0, 11.0, 12.0, 14.0, 15.0])

    def test_geometry_is_carried_through(self) -> None:
        d = decode(_channel_major(self.rows), 0.5)[0]
        self.assertEqual(d.as_cxcywh(), (10.0, 20.0, 30.0, 40.0))
        self.assertAlmostEqual(d.confidence, 0.95, places=6)

    def test_confidence_filter_float32_boundary(self) -> None:
        confs = [0.5, 0.89, 0.90, 0.91, 0.99]
        rows = _rows([(i, i, 10, 10, c) for i, c in enumerate(confs)])
        dets = decode(_anchor_major(rows), 0.90)
        self.assertEqual(len(dets), 3)
        self.assertEqual([d.cx for d in dets], [2.0, 3.0, 4.0])

    def test_confidence_filter_channel_major(self) -> None:
        confs = [0.5, 0.89, 0.90, 0.91, 0.99, 0.1, 0.2, 0.3]
        rows = _rows([(i, i, 10, 10, c) for i, c in enumerate(confs)])
        dets = decode(_channel_major(rows), 0.90)
        self.assertEqual([d.cx for d in dets], [2.0, 3.0, 4.0])

    def test_float64_tensor(self) -> None:
        rows = self.rows.astype(np.float64)
        self.assertEqual(len(decode(_channel_major(rows), 0.9)), 5)

    def test_all_below_threshold(self) -> None:
        self.assertEqual(decode(_channel_major(self.rows), 0.999), [])

    def test_nan_confidence_is_dropped(self) -> None:
        rows = self.rows.copy()
        rows[0, 4] = np.nan
        dets = decode(_anchor_major(rows), 0.5)
        self.assertEqual(len(dets), 4)
        self.assertNotIn(10.0, [d.cx for d in dets])

    def test_few_anchors(self) -> None:
        rows = self.rows[:3]
        self.assertEqual(decode(_channel_major(rows), 0.5), decode(_anchor_major(rows), 0.5))

    def test_accepts_nested_lists(self) -> None:
        dets = decode(_anchor_major(self.rows).tolist(), 0.9)
        self.assertEqual(len(dets), 5)

    def test_rejects_bad_shape(self) -> None:
        with self.assertRaises(ShapeError):
            decode(np.zeros((1, 4, 100), dtype=np.float32), 0.5)


if __name__ == "__main__":
    unittest.main()
