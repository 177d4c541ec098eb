"""Persistence for enabled two-factor configurations."""

from .base import TwoFactorStore
from .memory import InMemoryTwoFactorStore
from .sql import SQLAlchemyTwoFactorStore

__all__ = [
    "TwoFactorStore",
    "InMemoryTwoFactorStore",
    "SQLAlchemyTwoFactorStore",
]
