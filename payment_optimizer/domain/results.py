"""
Typed results of an optimization run.

A run either succeeds completely or fails without any partial totals:

    Success(totals, allocations)
    UnpayableOrder(order_id)
    LedgerInconsistency(method_id)
    InvalidInput(field, entity_id)

Callers pattern-match on the type instead of catching exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from payment_optimizer.domain.errors import (
    InputShapeError,
    LedgerInconsistencyError,
    OptimizationError,
    UnpayableOrderError,
)
from payment_optimizer.domain.options import PaymentOption


@dataclass(frozen=True)
class OrderAllocation:
    """Which option paid which order (in processing order)."""

    order_id: str
    option: PaymentOption


@dataclass(frozen=True)
class Success:
    totals: dict[str, Decimal]
    allocations: list[OrderAllocation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True

    @property
    def total_discount(self) -> Decimal:
        return sum((a.option.discount for a in self.allocations), Decimal("0.00"))


@dataclass(frozen=True)
class UnpayableOrder:
    order_id: str

    @property
    def ok(self) -> bool:
        return False

    def to_error(self) -> OptimizationError:
        return UnpayableOrderError(self.order_id)


@dataclass(frozen=True)
class LedgerInconsistency:
    method_id: str
    requested: Decimal
    available: Decimal | None = None

    @property
    def ok(self) -> bool:
        return False

    def to_error(self) -> OptimizationError:
        return LedgerInconsistencyError(self.method_id, self.requested, self.available)


@dataclass(frozen=True)
class InvalidInput:
    field: str
    entity_id: str | None = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return False

    def to_error(self) -> OptimizationError:
        return InputShapeError(self.field, self.entity_id, self.reason)


OptimizationResult = Success | UnpayableOrder | LedgerInconsistency | InvalidInput


def result_from_error(error: OptimizationError) -> OptimizationResult:
    """Map a raised domain error to its failure result."""
    if isinstance(error, UnpayableOrderError):
        return UnpayableOrder(order_id=error.order_id)
    if isinstance(error, LedgerInconsistencyError):
        return LedgerInconsistency(
            method_id=error.method_id,
            requested=error.requested,
            available=error.available,
        )
    if isinstance(error, InputShapeError):
        return InvalidInput(
            field=error.field, entity_id=error.entity_id, reason=error.reason
        )
    raise error
