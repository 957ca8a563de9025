"""
JSON loading for orders and payment methods.

Expected file shapes:

    orders.json          [{"id": "ORDER1", "value": "150.00", "promotions": ["mZysk"]}, ...]
    paymentmethods.json  [{"id": "PUNKTY", "discount": "15", "limit": "100.00"}, ...]

Numbers may be JSON numbers or strings. JSON floats are parsed straight to
Decimal so 0.1 never becomes 0.1000000000000000055511151231257827.
Unknown keys are ignored.
"""

from __future__ import annotations

import json
import os
from decimal import Decimal
from pathlib import Path
from typing import Any, TypeVar

import structlog
from pydantic import TypeAdapter, ValidationError

from payment_optimizer.domain.errors import InputFileError
from payment_optimizer.domain.value_objects import Order, PaymentMethod

logger = structlog.get_logger()

T = TypeVar("T")

_ORDERS_ADAPTER = TypeAdapter(list[Order])
_METHODS_ADAPTER = TypeAdapter(list[PaymentMethod])


def validate_input_file(file_path: str | Path | None, description: str) -> Path:
    """
    Check a CLI-supplied path before reading it.

    Raises:
        InputFileError: empty path, missing, not a regular file, unreadable,
            or not a .json file
    """
    if file_path is None or not str(file_path).strip():
        raise InputFileError(str(file_path), f"{description} file path cannot be empty.")

    path = Path(file_path)

    if not path.exists():
        raise InputFileError(str(path), f"{description} file not found at: {path}")
    if not path.is_file():
        raise InputFileError(
            str(path), f"{description} path does not point to a regular file: {path}"
        )
    if not os.access(path, os.R_OK):
        raise InputFileError(str(path), f"{description} file is not readable: {path}")
    if path.suffix.lower() != ".json":
        raise InputFileError(
            str(path), f"{description} file is expected to have a .json extension: {path}"
        )

    return path


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise InputFileError(str(path), f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise InputFileError(str(path), f"Cannot read {path}: {e}") from e


def _parse(path: Path, adapter: TypeAdapter[list[T]], description: str) -> list[T]:
    data = _read_json(path)
    try:
        items = adapter.validate_python(data)
    except ValidationError as e:
        raise InputFileError(
            str(path),
            f"{description} file {path} has invalid content: "
            f"{e.error_count()} error(s), first: {e.errors()[0]['msg']} "
            f"at {list(e.errors()[0]['loc'])}",
        ) from e

    logger.debug("json_loader.loaded", path=str(path), kind=description, count=len(items))
    return items


def load_orders(file_path: str | Path) -> list[Order]:
    """Parse a JSON array of orders."""
    return _parse(Path(file_path), _ORDERS_ADAPTER, "Orders")


def load_payment_methods(file_path: str | Path) -> list[PaymentMethod]:
    """Parse a JSON array of payment methods."""
    return _parse(Path(file_path), _METHODS_ADAPTER, "Payment methods")
