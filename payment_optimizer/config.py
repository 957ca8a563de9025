"""Configuration management for Payment Optimizer.

Loads settings from environment variables with sensible defaults.
Domain constants (the points method id, the 10% partial-points rule) are
NOT configurable; they live in payment_optimizer.domain.value_objects.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Central configuration for Payment Optimizer."""

    # Logging
    LOG_LEVEL: str = os.getenv("PAYMENT_OPTIMIZER_LOG_LEVEL", "WARNING")
    LOG_JSON: bool = os.getenv("PAYMENT_OPTIMIZER_LOG_JSON", "false").lower() == "true"

    # Output
    OUTPUT_SEPARATOR: str = os.getenv("PAYMENT_OPTIMIZER_OUTPUT_SEPARATOR", " ")

    @classmethod
    def get_summary(cls) -> dict:
        """Return a summary of current configuration for logging."""
        return {
            "log_level": cls.LOG_LEVEL,
            "log_json": cls.LOG_JSON,
            "output_separator": cls.OUTPUT_SEPARATOR,
        }


# Singleton instance
config = Config()


def get_config() -> Config:
    """Get the configuration instance."""
    return config
