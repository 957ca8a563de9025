"""
Pytest configuration and fixtures for payment optimizer tests.
"""

from decimal import Decimal

import pytest

from payment_optimizer.domain.ledger import Ledger
from payment_optimizer.domain.value_objects import (
    POINTS_METHOD_ID,
    Order,
    PaymentMethod,
    build_method_registry,
)


@pytest.fixture
def make_order():
    """Factory for orders: make_order("ORDER1", "100.00", ["CARD_A"])."""

    def _make(order_id: str, value: str, promotions=None) -> Order:
        return Order(id=order_id, value=Decimal(value), promotions=promotions)

    return _make


@pytest.fixture
def make_method():
    """Factory for payment methods: make_method("CARD_A", 10, "100.00")."""

    def _make(method_id: str, discount: int, limit: str) -> PaymentMethod:
        return PaymentMethod(id=method_id, discount=discount, limit=Decimal(limit))

    return _make


@pytest.fixture
def make_context(make_method):
    """
    Build (registry, ledger) from method tuples.

    remaining: optional overrides of the ledger's remaining limits, to put the
    ledger in a mid-run state without running earlier orders.
    """

    def _make(*methods, remaining=None):
        method_list = [make_method(*m) for m in methods]
        registry = build_method_registry(method_list)
        ledger = Ledger.from_methods(method_list)
        if remaining:
            overrides = {k: Decimal(v) for k, v in remaining.items()}
            ledger = Ledger({**ledger.snapshot(), **overrides})
        return registry, ledger

    return _make


@pytest.fixture
def batch_orders(make_order):
    """Four-order batch sharing PUNKTY, mZysk and BosBankrut capacity."""
    return [
        make_order("ORDER1", "100.00", ["mZysk"]),
        make_order("ORDER2", "200.00", ["BosBankrut"]),
        make_order("ORDER3", "150.00", ["mZysk", "BosBankrut"]),
        make_order("ORDER4", "50.00"),
    ]


@pytest.fixture
def batch_methods(make_method):
    """Payment methods for the four-order batch."""
    return [
        make_method(POINTS_METHOD_ID, 15, "100.00"),
        make_method("mZysk", 10, "180.00"),
        make_method("BosBankrut", 5, "200.00"),
    ]
