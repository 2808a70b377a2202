"""Ledger module for swap audit records."""

from agenpay.ledger.database import close_db, get_db, get_session_factory, init_db
from agenpay.ledger.models import Transaction, TransactionStatus, TransactionType
from agenpay.ledger.repository import TransactionRepository

__all__ = [
    # Models
    "Transaction",
    # Enums
    "TransactionStatus",
    "TransactionType",
    # Database
    "get_db",
    "get_session_factory",
    "init_db",
    "close_db",
    "TransactionRepository",
]
