"""
Option Generation - Candidate Ways to Pay One Order

Four independent strategies, each a pure function of
(order, method registry, current ledger):

    full_card       one promotional card pays everything, card discount
    full_points     points pay everything, points discount
    partial_points  >= 10% of the order in points, flat 10% discount,
                    rest on exactly one card
    plain_card      any card pays full value, no discount (last resort)

Options are mutually exclusive proposals. Nothing here touches the ledger;
the selector picks one and LedgerApplier commits it.

Money: every discount/charge is rounded half-up to 2 places where it is
computed, so charges always sum to value - discount to the cent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Callable

from payment_optimizer.domain.ledger import Ledger
from payment_optimizer.domain.value_objects import (
    MIN_PARTIAL_POINTS_SHARE,
    PARTIAL_POINTS_DISCOUNT_RATE,
    POINTS_METHOD_ID,
    ZERO,
    MethodRegistry,
    Order,
    PaymentMethod,
    to_money,
)


class PaymentStrategy(str, Enum):
    """Which generator produced an option (for logs and audit)."""

    FULL_CARD = "full_card"
    FULL_POINTS = "full_points"
    PARTIAL_POINTS = "partial_points"
    PLAIN_CARD = "plain_card"


@dataclass(frozen=True)
class PaymentOption:
    """
    One complete proposal to pay a single order.

    charges: method id -> amount. At most one card, optionally points.
    """

    discount: Decimal
    points_used: Decimal
    charges: dict[str, Decimal] = field(default_factory=dict)
    strategy: PaymentStrategy = PaymentStrategy.PLAIN_CARD

    @property
    def total_charged(self) -> Decimal:
        return sum(self.charges.values(), ZERO)


def _cards(registry: MethodRegistry) -> list[PaymentMethod]:
    return [m for m in registry.values() if not m.is_points]


def full_card_options(
    order: Order, registry: MethodRegistry, ledger: Ledger
) -> list[PaymentOption]:
    """One card-only option per promotional card that can cover the order."""
    options: list[PaymentOption] = []

    for promotion_id in order.promotions:
        card = registry.get(promotion_id)
        if card is None or card.is_points:
            continue

        discount = to_money(order.value * card.rate)
        amount_to_pay = order.value - discount

        if ledger.remaining(card.id) >= amount_to_pay:
            options.append(
                PaymentOption(
                    discount=discount,
                    points_used=ZERO,
                    charges={card.id: amount_to_pay},
                    strategy=PaymentStrategy.FULL_CARD,
                )
            )

    return options


def full_points_options(
    order: Order, registry: MethodRegistry, ledger: Ledger
) -> list[PaymentOption]:
    """Points pay the whole order with the points method's own discount."""
    points = registry.get(POINTS_METHOD_ID)
    if points is None:
        return []

    discount = to_money(order.value * points.rate)
    amount_to_pay = order.value - discount

    if ledger.remaining(POINTS_METHOD_ID) < amount_to_pay:
        return []

    return [
        PaymentOption(
            discount=discount,
            points_used=amount_to_pay,
            charges={POINTS_METHOD_ID: amount_to_pay},
            strategy=PaymentStrategy.FULL_POINTS,
        )
    ]


def select_remainder_card(
    order: Order,
    registry: MethodRegistry,
    ledger: Ledger,
    remainder: Decimal,
) -> PaymentMethod | None:
    """
    Pick the card that pays what points could not.

    Preference:
    1. Cards NOT promoted on this order, smallest sufficient remaining limit
       (their discount does not apply here anyway, so keep big limits free)
    2. Promoted cards, lowest discount first, then smallest remaining limit
       (burn the least valuable promotion)
    """
    non_promotional: list[PaymentMethod] = []
    promotional: list[PaymentMethod] = []

    for card in _cards(registry):
        if ledger.remaining(card.id) < remainder:
            continue
        if order.has_promotion(card.id):
            promotional.append(card)
        else:
            non_promotional.append(card)

    if non_promotional:
        return min(non_promotional, key=lambda c: ledger.remaining(c.id))

    if promotional:
        return min(promotional, key=lambda c: (c.discount, ledger.remaining(c.id)))

    return None


def partial_points_options(
    order: Order, registry: MethodRegistry, ledger: Ledger
) -> list[PaymentOption]:
    """
    Pay at least 10% with points for a flat 10% discount.

    The points method's own discount rate is irrelevant on this path.
    Points are spent as far as they go; a single card covers the rest.
    """
    if POINTS_METHOD_ID not in registry:
        return []

    min_points_required = to_money(order.value * MIN_PARTIAL_POINTS_SHARE)
    points_available = ledger.remaining(POINTS_METHOD_ID)

    if points_available < min_points_required:
        return []

    discount = to_money(order.value * PARTIAL_POINTS_DISCOUNT_RATE)
    discounted_value = order.value - discount

    points_to_spend = min(points_available, discounted_value)
    remainder = max(discounted_value - points_to_spend, ZERO)

    if remainder == ZERO:
        return [
            PaymentOption(
                discount=discount,
                points_used=points_to_spend,
                charges={POINTS_METHOD_ID: points_to_spend},
                strategy=PaymentStrategy.PARTIAL_POINTS,
            )
        ]

    card = select_remainder_card(order, registry, ledger, remainder)
    if card is None:
        return []

    return [
        PaymentOption(
            discount=discount,
            points_used=points_to_spend,
            charges={POINTS_METHOD_ID: points_to_spend, card.id: remainder},
            strategy=PaymentStrategy.PARTIAL_POINTS,
        )
    ]


def plain_card_options(
    order: Order, registry: MethodRegistry, ledger: Ledger
) -> list[PaymentOption]:
    """Every card able to take the full value, no discount."""
    return [
        PaymentOption(
            discount=ZERO,
            points_used=ZERO,
            charges={card.id: order.value},
            strategy=PaymentStrategy.PLAIN_CARD,
        )
        for card in _cards(registry)
        if ledger.remaining(card.id) >= order.value
    ]


OptionGenerator = Callable[[Order, MethodRegistry, Ledger], list[PaymentOption]]

# Generation order matters: it is the final tie-breaker in selection.
GENERATORS: tuple[OptionGenerator, ...] = (
    full_card_options,
    full_points_options,
    partial_points_options,
    plain_card_options,
)


def generate_options(
    order: Order, registry: MethodRegistry, ledger: Ledger
) -> list[PaymentOption]:
    """Run all generators against the current ledger, in order."""
    options: list[PaymentOption] = []
    for generator in GENERATORS:
        options.extend(generator(order, registry, ledger))
    return options
