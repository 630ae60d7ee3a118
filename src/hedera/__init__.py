"""hedera: HEDERA schedule client: request capacity schedules and await the verdict."""

__version__ = "0.1.0"
