"""
Infrastructure Layer - Getting Data In

This layer contains:
- JSON file validation and parsing (orders, payment methods)

Key principle: the domain knows nothing about files.
Loaders hand the optimizer fully materialized, validated lists.
"""
