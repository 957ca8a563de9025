"""
Order Ranking - Decide Processing Order Once, Up Front

Capacity is shared and scarce, so orders with the biggest discount
opportunity are paid first.

The score ("theoretical discount") is computed against ORIGINAL limits, not
the draining ledger. Ranking is a cheap O(n log n) heuristic; once capacity
starts draining, a lower-ranked order may have been the better use of it.
That divergence is accepted, not corrected mid-run.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

import structlog

from payment_optimizer.domain.value_objects import (
    MIN_PARTIAL_POINTS_SHARE,
    PARTIAL_POINTS_DISCOUNT_RATE,
    POINTS_METHOD_ID,
    ZERO,
    MethodRegistry,
    Order,
    to_money,
)

logger = structlog.get_logger()


class OrderRanker:
    """Scores orders by best-case discount and sorts them descending."""

    def __init__(self, registry: MethodRegistry):
        self.registry = registry

    def theoretical_discount(self, order: Order) -> Decimal:
        """
        Best discount this order could get if it had every limit to itself.

        Candidates (each only if the method's ORIGINAL limit covers it):
        1. Full points: value * points rate
        2. Full card: value * card rate, per promotion naming a card
        3. Partial points: flat 10% of value, if points limit >= 10% of value

        Intermediate amounts are not rounded; only the final score is.
        """
        value = order.value
        candidates: list[Decimal] = [ZERO]

        points = self.registry.get(POINTS_METHOD_ID)
        if points is not None:
            discount = value * points.rate
            if points.limit >= value - discount:
                candidates.append(discount)

        for promotion_id in order.promotions:
            card = self.registry.get(promotion_id)
            if card is None or card.is_points:
                continue
            discount = value * card.rate
            if card.limit >= value - discount:
                candidates.append(discount)

        if points is not None and points.limit >= value * MIN_PARTIAL_POINTS_SHARE:
            candidates.append(value * PARTIAL_POINTS_DISCOUNT_RATE)

        return to_money(max(candidates))

    def rank(self, orders: Iterable[Order]) -> list[Order]:
        """Descending by score. Ties keep input order (sorted() is stable)."""
        scored = [(order, self.theoretical_discount(order)) for order in orders]
        ranked = sorted(scored, key=lambda pair: pair[1], reverse=True)

        logger.debug(
            "ranking.completed",
            order=[(order.id, str(score)) for order, score in ranked],
        )
        return [order for order, _ in ranked]
