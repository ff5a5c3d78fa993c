"""Expense repository."""

from decimal import Decimal

from gym_tracker.logger import get_logger
from gym_tracker.models import Expense, normalize_month
from gym_tracker.repositories.base import BaseRepository, decimal_or_zero


logger = get_logger(__name__)


class ExpenseRepository(BaseRepository[Expense]):
    """Operating expenses, newest first."""

    table = "expenses"
    model = Expense
    order_by = "expenseDate DESC"
    entity = "expense"

    async def get_monthly_total(self, year: int, month: str) -> Decimal:
        """
        Sum of expenses for a month.

        The month name is matched case-insensitively. 0 when there are
        none, the month is not a month name, or the query fails.
        """
        backend = self._storage.available_backend()
        if backend is None:
            return decimal_or_zero(None)

        period_month = normalize_month(month)
        if period_month is None:
            logger.warning("monthly_expenses_invalid_month", month=month)
            return decimal_or_zero(None)

        try:
            rows = await backend.query(
                "SELECT SUM(amount) AS total FROM expenses "
                "WHERE year = ? AND month = ?",
                [year, period_month],
            )
        except Exception as e:
            logger.error(
                "monthly_expenses_failed", year=year, month=month, error=str(e)
            )
            return decimal_or_zero(None)

        return decimal_or_zero(rows[0]["total"] if rows else None)
