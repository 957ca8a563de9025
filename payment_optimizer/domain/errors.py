"""
Domain errors for payment optimization.

Error taxonomy:
- UnpayableOrderError: no candidate option can pay an order (bad input
  capacities, expected in practice)
- LedgerInconsistencyError: a selected option overdraws a method at commit
  time (generator bug, should never happen)
- InputShapeError: an order/method reached the core without a required field
- InputFileError: CLI/file level problem before the core is even called

Every error carries a stable error_code so the CLI (and tests) can tell the
kinds apart without parsing messages.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any


class OptimizationError(Exception):
    """Base exception for all payment optimizer errors."""

    error_code = "optimization_error"

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(message)
        self.message = message
        self.metadata = kwargs

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "type": self.__class__.__name__,
                **self.metadata,
            }
        }


class UnpayableOrderError(OptimizationError):
    """No option covers the order under current capacities. Aborts the run."""

    error_code = "unpayable_order"

    def __init__(self, order_id: str):
        super().__init__(
            f"No possible payment option found for order {order_id}. "
            "All orders must be fully paid.",
            order_id=order_id,
        )
        self.order_id = order_id


class LedgerInconsistencyError(OptimizationError):
    """
    Selected option charges more than the ledger has left.

    Option generators only emit options that fit the current ledger, so
    reaching this means a generator is broken.
    """

    error_code = "ledger_inconsistency"

    def __init__(
        self,
        method_id: str,
        requested: Decimal,
        available: Decimal | None,
    ):
        if available is None:
            detail = "method is not registered in the ledger"
        else:
            detail = f"requested {requested}, remaining {available}"
        super().__init__(
            f"Error while applying payment limit for {method_id}: {detail}",
            method_id=method_id,
        )
        self.method_id = method_id
        self.requested = requested
        self.available = available


class InputShapeError(OptimizationError):
    """A required order/method field is missing or malformed."""

    error_code = "invalid_input"

    def __init__(self, field: str, entity_id: str | None = None, reason: str = ""):
        where = f" of {entity_id}" if entity_id else ""
        message = f"Invalid field '{field}'{where}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, field=field, entity_id=entity_id)
        self.field = field
        self.entity_id = entity_id
        self.reason = reason


class InputFileError(OptimizationError):
    """Input file missing, unreadable, not JSON, or holding no records."""

    error_code = "invalid_input_file"

    def __init__(self, path: str, reason: str):
        super().__init__(reason, path=path)
        self.path = path
