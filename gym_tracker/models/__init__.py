"""
Data Models Package

Pydantic models for the records stored by the gym tracker and the
monthly report derived from them.
"""

from gym_tracker.models.records import (
    MONTH_NAMES,
    Customer,
    Expense,
    ExpenseCategory,
    MonthlyReport,
    Payment,
    StoredRecord,
    month_name,
    normalize_month,
    to_sql_value,
)

__all__ = [
    "MONTH_NAMES",
    "Customer",
    "Expense",
    "ExpenseCategory",
    "MonthlyReport",
    "Payment",
    "StoredRecord",
    "month_name",
    "normalize_month",
    "to_sql_value",
]
