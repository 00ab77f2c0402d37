import io
import unittest

from flowwatch.data.records import Transaction
from flowwatch.detection.evaluation import evaluate_flags, fraud_labels, print_evaluation
from flowwatch.graph.builder import build_money_flow_graph


class TestEvaluation(unittest.TestCase):

    def setUp(self):
        self.graph = build_money_flow_graph([
            Transaction(1, "TRANSFER", 100.0, "A", "B", 1),
            Transaction(1, "PAYMENT", 50.0, "C", "D", 0),
            Transaction(2, "CASH_OUT", 75.0, "E", "F", 0),
        ])
        self.labels = fraud_labels(self.graph)

    def test_fraud_labels(self):
        self.assertEqual(self.labels, {"A": 1, "B": 1, "C": 0, "D": 0, "E": 0, "F": 0})

    def test_precision_and_recall(self):
        result = evaluate_flags(["A", "C"], self.labels)

        self.assertEqual(result["flagged"], 2)
        self.assertEqual(result["true_positives"], 1)
        self.assertEqual(result["labelled_fraud"], 2)
        self.assertAlmostEqual(result["precision"], 0.5)
        self.assertAlmostEqual(result["recall"], 0.5)

    def test_nothing_flagged(self):
        result = evaluate_flags([], self.labels)

        self.assertEqual(result["flagged"], 0)
        self.assertEqual(result["precision"], 0.0)
        self.assertEqual(result["recall"], 0.0)

    def test_unknown_account_counts_as_benign(self):
        result = evaluate_flags(["Z"], self.labels)

        self.assertEqual(result["flagged"], 1)
        self.assertEqual(result["true_positives"], 0)
        self.assertEqual(result["precision"], 0.0)

    def test_empty_inputs(self):
        result = evaluate_flags([], {})

        self.assertEqual(result["flagged"], 0)
        self.assertEqual(result["labelled_fraud"], 0)

    def test_print_evaluation(self):
        out = io.StringIO()
        print_evaluation("collector", evaluate_flags(["A", "B"], self.labels), file=out)

        self.assertIn("[collector] flagged=2 true_positives=2", out.getvalue())
        self.assertIn("precision=1.0000 recall=1.0000", out.getvalue())


if __name__ == '__main__':
    unittest.main()
