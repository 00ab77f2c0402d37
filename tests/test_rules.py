import unittest

from flowwatch.data.records import Transaction
from flowwatch.features.metrics import AccountMetrics, calculate_account_metrics
from flowwatch.features.rules import (
    CollectorRule,
    MoneyMuleRule,
    is_collector,
    is_money_mule,
)
from flowwatch.graph.builder import build_money_flow_graph


def _tx(amount, source, destination):
    return Transaction(step=1, type="TRANSFER", amount=amount, source=source, destination=destination)


def _metrics(transactions):
    return calculate_account_metrics(build_money_flow_graph(transactions))


class TestCollectorPredicate(unittest.TestCase):

    def test_collector_scenario(self):
        """Six inbound transfers of 1000 and one outbound of 500."""
        transactions = [_tx(1000.0, f"User{i}", "Collector") for i in range(1, 7)]
        transactions.append(_tx(500.0, "Collector", "User7"))
        m = _metrics(transactions)["Collector"]

        self.assertEqual(m.incoming_count, 6)
        self.assertAlmostEqual(m.retention_rate, 5500.0 / 6000.0)
        self.assertTrue(is_collector(m))
        self.assertFalse(is_money_mule(m))

    def test_normal_sender_is_not_collector(self):
        m = _metrics([_tx(1000.0, "Normal", "User8"), _tx(800.0, "Normal", "User9")])["Normal"]
        self.assertFalse(is_collector(m))

    def test_minimum_inbound_count_is_strict(self):
        m = AccountMetrics(incoming_count=5, incoming_volume=5000.0, retention_rate=1.0)
        self.assertFalse(is_collector(m))

    def test_count_ratio_is_strict(self):
        m = AccountMetrics(incoming_count=6, outgoing_count=2, retention_rate=0.9)
        self.assertFalse(is_collector(m))
        m.outgoing_count = 1
        self.assertTrue(is_collector(m))

    def test_retention_threshold_is_strict(self):
        m = AccountMetrics(incoming_count=10, outgoing_count=0, retention_rate=0.7)
        self.assertFalse(is_collector(m))

    def test_custom_thresholds(self):
        m = AccountMetrics(incoming_count=3, outgoing_count=0, retention_rate=0.8)
        self.assertFalse(is_collector(m))
        self.assertTrue(is_collector(m, min_incoming_count=2))


class TestMoneyMulePredicate(unittest.TestCase):

    def test_money_mule_scenario(self):
        """20000 in, 19000 forwarded across two transfers."""
        m = _metrics([
            _tx(20000.0, "Source", "Mule"),
            _tx(9000.0, "Mule", "Dest1"),
            _tx(10000.0, "Mule", "Dest2"),
        ])["Mule"]

        self.assertAlmostEqual(m.retention_rate, 0.05)
        self.assertTrue(is_money_mule(m))
        self.assertFalse(is_collector(m))

    def test_high_retention_account_is_not_mule(self):
        m = _metrics([_tx(20000.0, "Investor", "Normal"), _tx(5000.0, "Normal", "Expense1")])["Normal"]
        self.assertFalse(is_money_mule(m))

    def test_no_inbound_is_neither(self):
        m = _metrics([_tx(50000.0, "Origin", "X"), _tx(50000.0, "Origin", "Y")])["Origin"]

        self.assertEqual(m.incoming_count, 0)
        self.assertFalse(is_collector(m))
        self.assertFalse(is_money_mule(m))

    def test_pure_sink_is_not_mule(self):
        m = AccountMetrics(incoming_count=1, incoming_volume=50000.0, retention_rate=1.0)
        self.assertFalse(is_money_mule(m))

    def test_volume_floor_is_strict(self):
        m = AccountMetrics(
            incoming_count=1,
            outgoing_count=1,
            incoming_volume=10000.0,
            outgoing_volume=9500.0,
        )
        m.calculate_retention_rate()
        self.assertFalse(is_money_mule(m))
        self.assertTrue(is_money_mule(m, min_incoming_volume=5000.0))

    def test_negative_retention_still_qualifies(self):
        m = AccountMetrics(
            incoming_count=1,
            outgoing_count=3,
            incoming_volume=20000.0,
            outgoing_volume=30000.0,
        )
        m.calculate_retention_rate()
        self.assertLess(m.retention_rate, 0)
        self.assertTrue(is_money_mule(m))


class TestRuleStrategies(unittest.TestCase):

    def test_collector_rule(self):
        rule = CollectorRule(display_limit=10)
        m = AccountMetrics(incoming_count=8, incoming_volume=800.0, retention_rate=1.0)

        self.assertTrue(rule.matches(m))
        self.assertEqual(rule.rank_key(m), 800.0)
        self.assertEqual(rule.label, "collector")
        self.assertEqual(rule.display_limit, 10)

    def test_money_mule_rule(self):
        rule = MoneyMuleRule(min_incoming_volume=100.0)
        m = AccountMetrics(
            incoming_count=1,
            outgoing_count=1,
            incoming_volume=200.0,
            outgoing_volume=190.0,
        )
        m.calculate_retention_rate()

        self.assertTrue(rule.matches(m))
        self.assertFalse(MoneyMuleRule().matches(m))
        self.assertEqual(rule.rank_key(m), 190.0)
        self.assertEqual(rule.label, "money mule")

    def test_default_display_limits(self):
        self.assertEqual(CollectorRule().display_limit, 1000)
        self.assertEqual(MoneyMuleRule().display_limit, 500)

    def test_negative_display_limit_rejected(self):
        with self.assertRaises(ValueError):
            CollectorRule(display_limit=-1)

    def test_repr(self):
        self.assertEqual(repr(MoneyMuleRule(display_limit=3)), "MoneyMuleRule(display_limit=3)")


if __name__ == '__main__':
    unittest.main()
