"""Option selection: biggest discount, then most points used."""

from __future__ import annotations

from typing import Sequence

from payment_optimizer.domain.errors import UnpayableOrderError
from payment_optimizer.domain.options import PaymentOption
from payment_optimizer.domain.value_objects import Order


class OptionSelector:
    def select(self, order: Order, options: Sequence[PaymentOption]) -> PaymentOption:
        """
        Pick the best option for an order.

        1. Maximum discount
        2. Maximum points used (points are worth nothing once the batch ends)
        3. Earliest generated (max() returns the first maximal element)

        Raises:
            UnpayableOrderError: no option at all
        """
        if not options:
            raise UnpayableOrderError(order.id)

        return max(options, key=lambda o: (o.discount, o.points_used))
