"""Record repositories for customers, payments and expenses."""

from gym_tracker.repositories.base import BaseRepository, decimal_or_zero
from gym_tracker.repositories.customers import CustomerRepository
from gym_tracker.repositories.expenses import ExpenseRepository
from gym_tracker.repositories.payments import PaymentRepository

__all__ = [
    "BaseRepository",
    "CustomerRepository",
    "ExpenseRepository",
    "PaymentRepository",
    "decimal_or_zero",
]
