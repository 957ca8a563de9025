"""
Domain Layer - Pure Allocation Logic

This layer contains:
- Value objects (orders, payment methods, money rounding)
- The ledger (remaining capacity + cumulative totals)
- Ranking, option generation and option selection
- Typed run results and domain errors

Key principle: ZERO I/O.
Everything here is a function of in-memory inputs, so it can be tested
without files, terminals or environment variables.
"""
