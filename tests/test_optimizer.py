"""
Test: End-to-End Optimization Runs

Small hand-checked batches, each exercising one path through
rank -> generate -> select -> commit, plus the run-wide invariants:
- totals never exceed original limits
- every order is paid to the cent
- failures return a typed result and no partial totals
"""

from decimal import Decimal

import pytest

from payment_optimizer.domain.errors import (
    InputShapeError,
    LedgerInconsistencyError,
    UnpayableOrderError,
)
from payment_optimizer.domain.options import PaymentOption, PaymentStrategy
from payment_optimizer.domain.results import (
    InvalidInput,
    LedgerInconsistency,
    Success,
    UnpayableOrder,
)
from payment_optimizer.domain.selection import OptionSelector
from payment_optimizer.domain.value_objects import POINTS_METHOD_ID as PUNKTY
from payment_optimizer.optimizer import PaymentOptimizer, optimize_payments


def bd(value: str) -> Decimal:
    return Decimal(value)


@pytest.fixture
def optimizer():
    return PaymentOptimizer()


class TestScenarios:
    """Single- and multi-order batches with known totals."""

    def test_points_then_card_for_remainder(self, optimizer, make_order, make_method):
        """10.00 order, 5.00 points: partial points + CARD_X pays 4.00."""
        result = optimizer.optimize(
            [make_order("ORDER1", "10.00")],
            [make_method("CARD_X", 0, "20.00"), make_method(PUNKTY, 0, "5.00")],
        )

        assert isinstance(result, Success)
        assert result.totals == {PUNKTY: bd("5.00"), "CARD_X": bd("4.00")}

    def test_equal_discount_prefers_points(self, optimizer, make_order, make_method):
        """Card and points both give 10.00 off: points win."""
        result = optimizer.optimize(
            [make_order("ORDER1", "100.00", ["CARD_A"])],
            [make_method("CARD_A", 10, "100.00"), make_method(PUNKTY, 10, "100.00")],
        )

        assert result.totals == {PUNKTY: bd("90.00")}

    def test_partial_points_path(self, optimizer, make_order, make_method):
        result = optimizer.optimize(
            [make_order("ORDER1", "100.00")],
            [make_method("CARD_A", 0, "100.00"), make_method(PUNKTY, 0, "40.00")],
        )

        assert result.totals == {PUNKTY: bd("40.00"), "CARD_A": bd("50.00")}
        assert result.allocations[0].option.strategy == PaymentStrategy.PARTIAL_POINTS

    def test_unpayable_order(self, optimizer, make_order, make_method):
        result = optimizer.optimize(
            [make_order("ORDER1", "1000.00")],
            [make_method(PUNKTY, 10, "10.00")],
        )

        assert result == UnpayableOrder(order_id="ORDER1")
        assert not result.ok

    def test_shared_capacity_batch(self, optimizer, batch_orders, batch_methods):
        """
        Ranked ORDER2, ORDER1, ORDER3, ORDER4:
        - ORDER2: 100.00 points + 80.00 mZysk (partial points, 20.00 off)
        - ORDER1: 90.00 mZysk (promotion, 10.00 off)
        - ORDER3: 142.50 BosBankrut (mZysk has only 10.00 left)
        - ORDER4: 50.00 BosBankrut (no points left, no discount)
        """
        result = optimizer.optimize(batch_orders, batch_methods)

        assert result.ok
        assert result.totals == {
            PUNKTY: bd("100.00"),
            "mZysk": bd("170.00"),
            "BosBankrut": bd("192.50"),
        }
        assert [a.order_id for a in result.allocations] == ["ORDER2", "ORDER1", "ORDER3", "ORDER4"]
        assert result.total_discount == bd("37.50")

    def test_promotion_beats_points(self, optimizer, make_order, make_method):
        result = optimizer.optimize(
            [make_order("ORDER_SORT", "100.00", ["CARD_C"])],
            [
                make_method(PUNKTY, 10, "100.00"),
                make_method("CARD_C", 12, "100.00"),
                make_method("CARD_X", 0, "40.00"),
            ],
        )

        assert result.totals == {"CARD_C": bd("88.00")}

    def test_plain_card_only_option(self, optimizer, make_order, make_method):
        result = optimizer.optimize(
            [make_order("ORDER1", "100.00")],
            [make_method("CARD_A", 0, "100.00")],
        )

        assert result.totals == {"CARD_A": bd("100.00")}

    def test_zero_value_order(self, optimizer, make_order, make_method):
        """The zero order is ranked last and charges 0.00 to points."""
        result = optimizer.optimize(
            [make_order("ORDER_ZERO", "0.00"), make_order("ORDER_NORMAL", "50.00")],
            [make_method("CARD_A", 0, "50.00"), make_method(PUNKTY, 10, "10.00")],
        )

        assert result.totals == {PUNKTY: bd("10.00"), "CARD_A": bd("35.00")}

    def test_empty_batch(self, optimizer, make_method):
        result = optimizer.optimize([], [make_method("CARD_A", 0, "10.00")])

        assert result == Success(totals={}, allocations=[])

    def test_unused_methods_absent(self, optimizer, make_order, make_method):
        result = optimizer.optimize(
            [make_order("ORDER1", "10.00", ["CARD_A"])],
            [make_method("CARD_A", 10, "100.00"), make_method("CARD_B", 0, "100.00")],
        )

        assert "CARD_B" not in result.totals

    def test_no_payment_methods(self, optimizer, make_order):
        result = optimizer.optimize([make_order("ORDER1", "10.00")], [])

        assert result == UnpayableOrder(order_id="ORDER1")

    def test_unpayable_later_order_discards_earlier_totals(self, optimizer, make_order, make_method):
        result = optimizer.optimize(
            [make_order("ORDER1", "60.00"), make_order("ORDER2", "60.00")],
            [make_method("CARD_A", 0, "100.00")],
        )

        assert result == UnpayableOrder(order_id="ORDER2")


class TestInvariants:
    def test_limits_respected_and_orders_paid(self, optimizer, batch_orders, batch_methods):
        result = optimizer.optimize(batch_orders, batch_methods)
        values = {o.id: o.value for o in batch_orders}

        for method in batch_methods:
            assert result.totals.get(method.id, bd("0.00")) <= method.limit

        for allocation in result.allocations:
            option = allocation.option
            assert option.total_charged + option.discount == values[allocation.order_id]
            assert len([m for m in option.charges if m != PUNKTY]) <= 1

    def test_amounts_have_two_decimal_places(self, optimizer, make_order, make_method):
        result = optimizer.optimize(
            [
                make_order("ORDER1", "99.99", ["CARD_A"]),
                make_order("ORDER2", "33.33"),
                make_order("ORDER3", "12.35"),
            ],
            [
                make_method(PUNKTY, 15, "20.00"),
                make_method("CARD_A", 15, "200.00"),
                make_method("CARD_B", 3, "200.00"),
            ],
        )

        assert result.ok
        for amount in result.totals.values():
            assert amount.as_tuple().exponent == -2
        for allocation in result.allocations:
            assert allocation.option.discount.as_tuple().exponent == -2

    def test_runs_are_independent(self, optimizer, batch_orders, batch_methods):
        """One optimizer, two runs: no state carried over."""
        first = optimizer.optimize(batch_orders, batch_methods)
        second = optimizer.optimize(batch_orders, batch_methods)

        assert first == second


class TestFailureResults:
    """Typed results instead of exceptions, and the raising variant."""

    def test_optimize_or_raise_unpayable(self, optimizer, make_order, make_method):
        with pytest.raises(UnpayableOrderError) as exc_info:
            optimizer.optimize_or_raise(
                [make_order("ORDER1", "100.00")], [make_method("CARD_A", 0, "10.00")]
            )

        assert "No possible payment option found for order ORDER1" in str(exc_info.value)

    def test_ledger_inconsistency_is_distinct(self, make_order, make_method):
        """A broken selector that overdraws is reported as a ledger fault, not unpayable."""

        class OverdrawingSelector(OptionSelector):
            def select(self, order, options):
                return PaymentOption(
                    discount=bd("0.00"),
                    points_used=bd("0.00"),
                    charges={"CARD_A": bd("999.00")},
                )

        optimizer = PaymentOptimizer(selector=OverdrawingSelector())

        result = optimizer.optimize(
            [make_order("ORDER1", "10.00")], [make_method("CARD_A", 0, "100.00")]
        )

        assert isinstance(result, LedgerInconsistency)
        assert result.method_id == "CARD_A"
        assert isinstance(result.to_error(), LedgerInconsistencyError)

        with pytest.raises(LedgerInconsistencyError):
            optimizer.optimize_or_raise(
                [make_order("ORDER1", "10.00")], [make_method("CARD_A", 0, "100.00")]
            )

    def test_plain_mappings_accepted(self, optimizer):
        result = optimizer.optimize(
            [{"id": "ORDER1", "value": "100.00", "promotions": None}],
            [{"id": PUNKTY, "discount": 0, "limit": "40.00"}, {"id": "CARD_A", "discount": 0, "limit": "100.00"}],
        )

        assert result.totals == {PUNKTY: bd("40.00"), "CARD_A": bd("50.00")}

    def test_missing_order_value(self, optimizer):
        result = optimizer.optimize(
            [{"id": "ORDER1", "promotions": []}],
            [{"id": "CARD_A", "discount": 0, "limit": "100.00"}],
        )

        assert isinstance(result, InvalidInput)
        assert result.field == "value"
        assert result.entity_id == "ORDER1"

    def test_null_method_limit(self, optimizer):
        result = optimizer.optimize(
            [{"id": "ORDER1", "value": "10.00"}],
            [{"id": "CARD_A", "discount": 0, "limit": None}],
        )

        assert isinstance(result, InvalidInput)
        assert result.field == "limit"
        assert result.entity_id == "CARD_A"

    def test_sub_cent_limit_is_invalid_input(self, optimizer):
        """A 5.005 points limit is not rounded up to 5.01 and overdrawn."""
        result = optimizer.optimize(
            [{"id": "O1", "value": "10.00"}],
            [
                {"id": "CARD_X", "discount": 0, "limit": "20.00"},
                {"id": PUNKTY, "discount": 0, "limit": "5.005"},
            ],
        )

        assert isinstance(result, InvalidInput)
        assert result.field == "limit"
        assert result.entity_id == PUNKTY

    def test_sub_cent_value_is_invalid_input(self, optimizer):
        result = optimizer.optimize(
            [{"id": "O1", "value": "10.005"}],
            [{"id": "CARD_X", "discount": 0, "limit": "20.00"}],
        )

        assert isinstance(result, InvalidInput)
        assert result.field == "value"
        assert result.entity_id == "O1"
        assert "decimal places" in result.reason

    def test_invalid_input_raises_shape_error(self, optimizer):
        with pytest.raises(InputShapeError) as exc_info:
            optimizer.optimize_or_raise([{"id": "ORDER1"}], [])

        assert exc_info.value.error_code == "invalid_input"

    def test_module_level_helper(self, batch_orders, batch_methods):
        assert optimize_payments(batch_orders, batch_methods).totals["BosBankrut"] == bd("192.50")
