"""
Value Objects - Immutable Inputs of an Optimization Run

Orders and payment methods are owned by the caller and never change during a
run. Everything that changes (remaining limits, totals) lives in the ledger.

Money rules (apply everywhere):
- Decimal only, never float
- Discount rates keep 6 fractional digits: 15% -> Decimal("0.150000")
- Input amounts (order value, method limit) must already be whole cents
- Every computed money amount is rounded half-up to 2 places AT THE POINT it is
  computed, never deferred to the end of the run

Example:
    99.99 * 0.15 = 14.9985 -> 15.00 discount, 84.99 to pay
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from pydantic import BaseModel, Field, field_validator

# Reserved identifier of the loyalty-points method (exact, case-sensitive).
POINTS_METHOD_ID = "PUNKTY"

# Paying at least 10% of an order with points earns a flat 10% order discount.
PARTIAL_POINTS_DISCOUNT_RATE = Decimal("0.10")
MIN_PARTIAL_POINTS_SHARE = Decimal("0.10")

CENT = Decimal("0.01")
RATE_PRECISION = Decimal("0.000001")
ZERO = Decimal("0.00")


def to_money(amount: Decimal | int | str) -> Decimal:
    """Round to 2 decimal places, half-up."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def exact_cents(amount: Decimal) -> Decimal:
    """
    Normalize an input amount to 2 decimal places without rounding it.

    Raises:
        ValueError: the amount has a non-zero sub-cent part (10.005)
    """
    money = to_money(amount)
    if money != amount:
        raise ValueError(f"{amount} has more than 2 decimal places")
    return money


def discount_rate(percent: int) -> Decimal:
    """
    Convert integer percent to a rate with 6 fractional digits.

    discount_rate(15) == Decimal("0.150000")
    """
    return (Decimal(percent) / Decimal(100)).quantize(
        RATE_PRECISION, rounding=ROUND_HALF_UP
    )


class Order(BaseModel):
    """
    One order to be paid in full.

    promotions: ids of methods granting their card discount on this order.
    Order matters (it decides the order of full-card candidates). A JSON null
    or a missing key means "no promotions".

    value has NO default: an order without a value is an input-shape fault,
    not a free order. Sub-cent values are rejected, never rounded.
    """

    id: str
    value: Decimal = Field(ge=0)
    promotions: tuple[str, ...] = ()

    class Config:
        frozen = True

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: Decimal) -> Decimal:
        return exact_cents(v)

    @field_validator("promotions", mode="before")
    @classmethod
    def normalize_promotions(cls, v: Iterable[str] | None) -> Iterable[str]:
        return () if v is None else v

    def has_promotion(self, method_id: str) -> bool:
        return method_id in self.promotions


class PaymentMethod(BaseModel):
    """
    A card or the points pseudo-method.

    limit is the capacity for the WHOLE batch, not per order. A sub-cent
    limit is rejected: rounding it up would let a run overdraw the method.
    """

    id: str
    discount: int = Field(ge=0, le=100)
    limit: Decimal = Field(ge=0)

    class Config:
        frozen = True

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v: Decimal) -> Decimal:
        return exact_cents(v)

    @property
    def is_points(self) -> bool:
        return self.id == POINTS_METHOD_ID

    @property
    def rate(self) -> Decimal:
        return discount_rate(self.discount)


MethodRegistry = dict[str, PaymentMethod]


def build_method_registry(methods: Iterable[PaymentMethod]) -> MethodRegistry:
    """
    Index methods by id, keeping input order.

    Duplicate ids are not rejected here: the last one wins (its limit is the
    one the ledger is seeded with, and it keeps the first one's position).
    """
    registry: MethodRegistry = {}
    for method in methods:
        registry[method.id] = method
    return registry
