"""
Ledger - Remaining Capacity and Cumulative Totals

Two mappings, both keyed by method id:

    Ledger        remaining capacity, seeded from limits, only ever drained
    TotalsLedger  amount charged so far, only ever grows (the run's output)

Invariants:
- remaining[m] >= 0 at all times
- totals[m] + remaining[m] == original limit of m

Both are owned by a single run. LedgerApplier.commit() is the only place
that moves money between them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable

import structlog

from payment_optimizer.domain.errors import LedgerInconsistencyError
from payment_optimizer.domain.value_objects import ZERO, PaymentMethod

if TYPE_CHECKING:
    from payment_optimizer.domain.options import PaymentOption

logger = structlog.get_logger()


@dataclass
class Ledger:
    """Remaining capacity per method for one run."""

    _remaining: dict[str, Decimal] = field(default_factory=dict)

    @classmethod
    def from_methods(cls, methods: Iterable[PaymentMethod]) -> Ledger:
        """Seed from limits. Duplicate ids: last write wins."""
        ledger = cls()
        for method in methods:
            ledger._remaining[method.id] = method.limit
        return ledger

    def remaining(self, method_id: str) -> Decimal:
        """Remaining capacity; unknown methods have none."""
        return self._remaining.get(method_id, ZERO)

    def has_method(self, method_id: str) -> bool:
        return method_id in self._remaining

    def snapshot(self) -> dict[str, Decimal]:
        return dict(self._remaining)

    def debit(self, method_id: str, amount: Decimal) -> None:
        """
        Drain capacity.

        CRITICAL: never lets remaining go negative. An overdraw is a bug in
        whoever built the charge, not a recoverable condition.
        """
        available = self._remaining.get(method_id)
        if available is None or available < amount:
            raise LedgerInconsistencyError(method_id, amount, available)
        self._remaining[method_id] = available - amount


@dataclass
class TotalsLedger:
    """Cumulative charged amount per method. Unused methods are absent."""

    _totals: dict[str, Decimal] = field(default_factory=dict)

    def credit(self, method_id: str, amount: Decimal) -> None:
        self._totals[method_id] = self._totals.get(method_id, ZERO) + amount

    def get(self, method_id: str) -> Decimal | None:
        return self._totals.get(method_id)

    def as_dict(self) -> dict[str, Decimal]:
        return dict(self._totals)


class LedgerApplier:
    """Commits a selected option into the ledger and the totals."""

    def commit(
        self,
        option: PaymentOption,
        ledger: Ledger,
        totals: TotalsLedger,
    ) -> None:
        """
        Apply every charge of the option.

        All charges are checked before anything is debited, so a failing
        commit leaves both ledgers exactly as they were.

        Raises:
            LedgerInconsistencyError: a charged method is unknown or does not
                have enough remaining capacity
        """
        for method_id, amount in option.charges.items():
            available = ledger.remaining(method_id) if ledger.has_method(method_id) else None
            if available is None or available < amount:
                logger.error(
                    "ledger.inconsistent_commit",
                    method_id=method_id,
                    requested=str(amount),
                    available=None if available is None else str(available),
                )
                raise LedgerInconsistencyError(method_id, amount, available)

        for method_id, amount in option.charges.items():
            ledger.debit(method_id, amount)
            totals.credit(method_id, amount)
