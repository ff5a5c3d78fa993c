"""
Gym Tracker - Data Layer

Members, monthly fee payments, operating expenses and the monthly
profit/loss report for a single gym, stored locally in SQLite.

DESIGN PRINCIPLES:
1. One async API, whichever storage engine is underneath
2. Startup must not be blocked by schema drift
3. Reads degrade to empty results; writes fail loudly
4. Report figures come from SQL aggregates, never estimates
"""

from gym_tracker.models import (
    Customer,
    Expense,
    ExpenseCategory,
    MonthlyReport,
    Payment,
)
from gym_tracker.service import GymDataService, create_service
from gym_tracker.services.storage import (
    InitState,
    StorageError,
    UninitializedStorageError,
)

__version__ = "1.0.0"

__all__ = [
    "Customer",
    "Expense",
    "ExpenseCategory",
    "GymDataService",
    "InitState",
    "MonthlyReport",
    "Payment",
    "StorageError",
    "UninitializedStorageError",
    "create_service",
]
