"""
Payment Optimizer - Orchestrates One Allocation Run

Flow:
1. Build method registry + ledger from the payment methods
2. Rank orders by theoretical discount (original limits)
3. For each ranked order: generate options -> select best -> commit
4. Return per-method totals

Single linear pass: no retries, no rollback, no re-ranking. Any unpayable
order aborts the whole run and NO partial totals are returned.

State (ledger, totals) is local to one optimize() call, so one optimizer
instance can serve many batches, but concurrent batches need nothing more
than separate calls: nothing is shared between runs.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from payment_optimizer.domain.errors import InputShapeError, OptimizationError
from payment_optimizer.domain.ledger import Ledger, LedgerApplier, TotalsLedger
from payment_optimizer.domain.options import generate_options
from payment_optimizer.domain.ranking import OrderRanker
from payment_optimizer.domain.results import (
    OptimizationResult,
    OrderAllocation,
    Success,
    result_from_error,
)
from payment_optimizer.domain.selection import OptionSelector
from payment_optimizer.domain.value_objects import (
    Order,
    PaymentMethod,
    build_method_registry,
)

logger = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)


def _coerce(items: Iterable[Any], model: type[M]) -> list[M]:
    """
    Accept models or plain mappings; fail fast on missing/invalid fields.

    CRITICAL: an absent value or limit is never defaulted to zero. A silent
    zero-limit card or zero-value order would produce a plausible but wrong
    allocation.
    """
    coerced: list[M] = []
    for item in items:
        if isinstance(item, model):
            coerced.append(item)
            continue
        if not isinstance(item, Mapping):
            raise InputShapeError(
                model.__name__.lower(), reason=f"expected a mapping, got {type(item).__name__}"
            )
        try:
            coerced.append(model.model_validate(item))
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or model.__name__.lower()
            entity_id = item.get("id")
            raise InputShapeError(
                field,
                entity_id=None if entity_id is None else str(entity_id),
                reason=first["msg"],
            ) from e
    return coerced


class PaymentOptimizer:
    """Greedy rank-then-allocate optimizer."""

    def __init__(
        self,
        selector: OptionSelector | None = None,
        applier: LedgerApplier | None = None,
    ):
        self.selector = selector or OptionSelector()
        self.applier = applier or LedgerApplier()

    def optimize(
        self,
        orders: Iterable[Order | Mapping[str, Any]],
        methods: Iterable[PaymentMethod | Mapping[str, Any]],
    ) -> OptimizationResult:
        """
        Run the allocation and return a typed result instead of raising.

        Returns:
            Success(totals, allocations) | UnpayableOrder(order_id) |
            LedgerInconsistency(method_id) | InvalidInput(field, entity_id)
        """
        try:
            return self.optimize_or_raise(orders, methods)
        except OptimizationError as e:
            return result_from_error(e)

    def optimize_or_raise(
        self,
        orders: Iterable[Order | Mapping[str, Any]],
        methods: Iterable[PaymentMethod | Mapping[str, Any]],
    ) -> Success:
        """
        Same as optimize(), but failures are raised as domain errors.

        Raises:
            UnpayableOrderError: an order has no payment option
            LedgerInconsistencyError: a commit overdrew a method (bug)
            InputShapeError: malformed order or payment method
        """
        order_list = _coerce(orders, Order)
        method_list = _coerce(methods, PaymentMethod)

        registry = build_method_registry(method_list)
        ledger = Ledger.from_methods(method_list)
        totals = TotalsLedger()
        allocations: list[OrderAllocation] = []

        logger.info(
            "optimizer.started",
            orders=len(order_list),
            methods=list(registry),
        )

        ranked = OrderRanker(registry).rank(order_list)

        for order in ranked:
            options = generate_options(order, registry, ledger)
            try:
                best = self.selector.select(order, options)
            except OptimizationError:
                logger.warning(
                    "optimizer.unpayable_order",
                    order_id=order.id,
                    value=str(order.value),
                    remaining=_as_str(ledger.snapshot()),
                )
                raise

            self.applier.commit(best, ledger, totals)
            allocations.append(OrderAllocation(order_id=order.id, option=best))

            logger.info(
                "optimizer.option_committed",
                order_id=order.id,
                strategy=best.strategy.value,
                discount=str(best.discount),
                charges=_as_str(best.charges),
                candidates=len(options),
            )

        result = Success(totals=totals.as_dict(), allocations=allocations)
        logger.info(
            "optimizer.completed",
            totals=_as_str(result.totals),
            total_discount=str(result.total_discount),
        )
        return result


def _as_str(amounts: Mapping[str, Any]) -> dict[str, str]:
    return {k: str(v) for k, v in amounts.items()}


def optimize_payments(
    orders: Iterable[Order | Mapping[str, Any]],
    methods: Iterable[PaymentMethod | Mapping[str, Any]],
) -> OptimizationResult:
    """Convenience wrapper around PaymentOptimizer().optimize()."""
    return PaymentOptimizer().optimize(orders, methods)
