"""
Unit tests for the event classifier.
"""
import unittest
from src.core.errors import UnrecognizedEventError
from src.core.types import Cancelled, Filled, Open, PartiallyFilled, Quote, QuoteAssertion, Rejected
from src.harness.classifier import (
    BBO_MATCHED,
    BBO_MISMATCH,
    classify,
    classify_malformed,
    classify_quote,
    outcome_string,
)

class TestOutcomeString(unittest.TestCase):
    def test_simple_variants(self):
        self.assertEqual(outcome_string(Open(id=3)), "open,3")
        self.assertEqual(outcome_string(Cancelled(id=3)), "cancelled,3")
        self.assertEqual(outcome_string(Rejected(id=3, message="LIQUIDITY_NOT_AVAILABLE")), "rejected,3")

    def test_fill_variants_carry_quantity(self):
        self.assertEqual(outcome_string(Filled(id=7, filled_qty=3)), "filled,7,3")
        self.assertEqual(outcome_string(PartiallyFilled(id=7, filled_qty=2)), "partiallyfilled,7,2")

    def test_unknown_event(self):
        with self.assertRaises(UnrecognizedEventError):
            outcome_string({"Open": {"id": 1}})

class TestClassify(unittest.TestCase):
    def test_filled_match(self):
        record = classify(Filled(id=7, filled_qty=3), "filled,7,3")
        self.assertTrue(record.success)
        self.assertEqual(record.type, "filled")
        self.assertEqual(record.id, 7)
        self.assertEqual(record.filled_qty, 3)

    def test_filled_mismatch(self):
        record = classify(Filled(id=7, filled_qty=3), "filled,7,4")
        self.assertFalse(record.success)
        self.assertEqual(record.actual, "filled,7,3")
        self.assertEqual(record.expected, "filled,7,4")

    def test_containment_allows_prefix(self):
        self.assertTrue(classify(Open(id=12), "open").success)
        self.assertTrue(classify(Open(id=12), "12").success)

    def test_partially_filled_contains_filled(self):
        # 'filled,7,2' is a substring of 'partiallyfilled,7,2'
        self.assertTrue(classify(PartiallyFilled(id=7, filled_qty=2), "filled,7,2").success)

    def test_missing_expectation_is_unverified_failure(self):
        record = classify(Open(id=1))
        self.assertFalse(record.success)
        self.assertIsNotNone(record.message)

    def test_rejected_keeps_reason(self):
        record = classify(Rejected(id=4, message="LIQUIDITY_NOT_AVAILABLE"), "rejected,4")
        self.assertTrue(record.success)
        self.assertEqual(record.message, "LIQUIDITY_NOT_AVAILABLE")
        self.assertIsNone(record.filled_qty)

    def test_line_is_recorded(self):
        self.assertEqual(classify(Open(id=1), "open,1", line=9).line, 9)

class TestClassifyQuote(unittest.TestCase):
    def test_match(self):
        record = classify_quote((1, 100, 2, 101), (1, 100, 2, 101))
        self.assertTrue(record.success)
        self.assertEqual(record.message, BBO_MATCHED)
        self.assertIsNone(record.id)

    def test_any_field_differs(self):
        expected = (1, 100, 2, 101)
        for i in range(4):
            actual = list(expected)
            actual[i] += 1
            record = classify_quote(tuple(actual), expected)
            self.assertFalse(record.success)
            self.assertEqual(record.message, BBO_MISMATCH)

    def test_accepts_quote_tuples(self):
        self.assertTrue(classify_quote(Quote(0, 0, 0, 0), (0, 0, 0, 0)).success)

    def test_malformed_assertion(self):
        directive = QuoteAssertion(line=3, offset=0, length=8, error="bad tokens")
        record = classify_malformed(directive)
        self.assertFalse(record.success)
        self.assertEqual(record.message, "bad tokens")
        self.assertEqual(record.line, 3)

if __name__ == '__main__':
    unittest.main()
