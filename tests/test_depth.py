"""
Unit tests for the depth aggregator.
"""
import unittest
from src.core.types import BookLevel, BookSnapshot, PriceLevel
from src.harness.depth import accumulate, render

def _snapshot(bids, asks):
    return BookSnapshot(
        bids=[PriceLevel(price=p, qty=q) for p, q in bids],
        asks=[PriceLevel(price=p, qty=q) for p, q in asks],
    )

class TestAccumulate(unittest.TestCase):
    def test_running_total(self):
        rows = accumulate([PriceLevel(price=100, qty=2), PriceLevel(price=99, qty=3)])
        self.assertEqual([r.total for r in rows], [2, 5])

class TestRender(unittest.TestCase):
    def setUp(self):
        self.snapshot = _snapshot(
            bids=[(100, 5), (99, 3), (98, 1)],
            asks=[(101, 2), (102, 4)],
        )

    def test_spread(self):
        self.assertEqual(render(self.snapshot).spread, 1)

    def test_spread_zero_when_side_empty(self):
        self.assertEqual(render(_snapshot(bids=[(100, 5)], asks=[])).spread, 0)
        self.assertEqual(render(_snapshot(bids=[], asks=[(101, 5)])).spread, 0)
        self.assertEqual(render(BookSnapshot()).spread, 0)

    def test_padding_to_minimum(self):
        view = render(self.snapshot)
        self.assertEqual(len(view.bids), 30)
        self.assertEqual(len(view.asks), 30)

    def test_padding_follows_deeper_side(self):
        deep = _snapshot(bids=[(1000 - i, 1) for i in range(45)], asks=[(1001, 1)])
        view = render(deep)
        self.assertEqual(len(view.bids), 45)
        self.assertEqual(len(view.asks), 45)

    def test_custom_minimum(self):
        view = render(self.snapshot, min_rows=3)
        self.assertEqual(len(view.bids), 3)
        self.assertEqual(len(view.asks), 3)

    def test_bids_best_first_with_totals(self):
        bids = render(self.snapshot).bids
        self.assertEqual(bids[0], BookLevel(price=100, qty=5, total=5))
        self.assertEqual(bids[1], BookLevel(price=99, qty=3, total=8))
        self.assertEqual(bids[2], BookLevel(price=98, qty=1, total=9))
        self.assertTrue(bids[3].is_blank)

    def test_asks_worst_first_best_next_to_spread(self):
        asks = render(self.snapshot, min_rows=4).asks
        self.assertTrue(asks[0].is_blank)
        self.assertTrue(asks[1].is_blank)
        self.assertEqual(asks[2], BookLevel(price=102, qty=4, total=6))
        self.assertEqual(asks[3], BookLevel(price=101, qty=2, total=2))

    def test_blank_rows_are_fully_empty(self):
        row = render(BookSnapshot()).bids[0]
        self.assertIsNone(row.price)
        self.assertIsNone(row.qty)
        self.assertIsNone(row.total)

    def test_idempotent(self):
        self.assertEqual(render(self.snapshot), render(self.snapshot))

if __name__ == '__main__':
    unittest.main()
