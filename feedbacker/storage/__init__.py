"""Storage layer for database access."""

from feedbacker.storage.database import Database

__all__ = ["Database"]
