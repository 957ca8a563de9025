"""CLI for Payment Optimizer.

Usage:
    payment-optimizer optimize orders.json paymentmethods.json

Prints one "<method id> <amount>" line per payment method used.
Any failure prints an error on stderr and exits with code 1.
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from payment_optimizer.config import Config
from payment_optimizer.domain.errors import InputFileError, OptimizationError
from payment_optimizer.infrastructure.json_loader import (
    load_orders,
    load_payment_methods,
    validate_input_file,
)
from payment_optimizer.logging_config import get_logger, setup_logging
from payment_optimizer.optimizer import PaymentOptimizer

# Initialize Typer app
app = typer.Typer(
    name="payment-optimizer",
    help="Payment Optimizer - maximize discounts across a batch of orders",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True, soft_wrap=True)

logger = get_logger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else Config.LOG_LEVEL
    setup_logging(level=level, json_format=Config.LOG_JSON)


@app.command()
def optimize(
    orders_file: Path = typer.Argument(..., help="Path to orders JSON file"),
    methods_file: Path = typer.Argument(..., help="Path to payment methods JSON file"),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print totals as a JSON object",
    ),
    show_allocations: bool = typer.Option(
        False,
        "--allocations",
        "-a",
        help="Show which option paid each order (on stderr)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
) -> None:
    """Allocate payment methods to orders and print totals per method."""
    _configure_logging(verbose)

    try:
        orders_path = validate_input_file(orders_file, "Orders")
        methods_path = validate_input_file(methods_file, "Payment methods")

        orders = load_orders(orders_path)
        methods = load_payment_methods(methods_path)

        if not orders:
            raise InputFileError(
                str(orders_path),
                f"No orders were loaded from the file '{orders_path}' or the file was empty. "
                "Cannot proceed with payment optimization.",
            )
        if not methods:
            raise InputFileError(
                str(methods_path),
                f"No payment methods were loaded from the file '{methods_path}'. "
                "Cannot pay for orders.",
            )

        result = PaymentOptimizer().optimize_or_raise(orders, methods)

    except InputFileError as e:
        err_console.print(f"[red]Configuration error:[/red] {escape(e.message)}")
        raise typer.Exit(1)
    except OptimizationError as e:
        logger.error("cli.optimization_failed", error=e.to_dict())
        err_console.print(f"[red]Processing error:[/red] {escape(e.message)}")
        raise typer.Exit(1)

    if show_allocations:
        table = Table(title="Allocations")
        table.add_column("Order", style="cyan")
        table.add_column("Strategy")
        table.add_column("Discount", style="green", justify="right")
        table.add_column("Charges")
        for allocation in result.allocations:
            option = allocation.option
            table.add_row(
                allocation.order_id,
                option.strategy.value,
                str(option.discount),
                ", ".join(f"{k}={v}" for k, v in option.charges.items()),
            )
        err_console.print(table)
        err_console.print(f"Total discount: [green]{result.total_discount}[/green]")

    if as_json:
        typer.echo(json.dumps({k: str(v) for k, v in result.totals.items()}))
        return

    for method_id, amount in result.totals.items():
        typer.echo(f"{method_id}{Config.OUTPUT_SEPARATOR}{amount}")


@app.command()
def config() -> None:
    """Show current configuration."""
    table = Table(title="Payment Optimizer Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for name, value in Config.get_summary().items():
        table.add_row(name, repr(value) if name == "output_separator" else str(value))

    console.print(table)


@app.callback(invoke_without_command=True)
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Payment Optimizer - maximize discounts across a batch of orders."""
    if version:
        from payment_optimizer import __version__
        console.print(f"Payment Optimizer v{__version__}")
        raise typer.Exit()


if __name__ == "__main__":
    app()
