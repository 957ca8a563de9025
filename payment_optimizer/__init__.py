"""
Payment Optimizer - Discount-Maximizing Payment Allocation

Splits a batch of orders across a fixed set of payment methods:
1. Promotional cards (card-specific discount on eligible orders)
2. Loyalty points (one reserved pseudo-method, "PUNKTY")

Every order is paid in full, no method goes over its limit, and the total
discount is maximized with a greedy rank-then-allocate heuristic.
"""

__version__ = "1.0.0"

# Configures structlog defaults on import
from payment_optimizer import logging_config  # noqa: F401,E402
