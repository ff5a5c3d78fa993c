"""
Report Aggregator

DESIGN DECISION: Every figure in the monthly report comes straight from
SQL aggregates over the stored rows. Nothing is estimated or patched up.

Known inconsistency, kept on purpose until the product owner decides:
total_income sums every payment row for the month, while paid_customers
counts distinct members. Two payments from one member in the same month
double that member's contribution to income but count them once as
paid.
"""

from typing import Any

from gym_tracker.logger import get_logger
from gym_tracker.models import MonthlyReport, normalize_month
from gym_tracker.repositories.base import decimal_or_zero
from gym_tracker.services.storage.interface import StorageBackend
from gym_tracker.services.storage.state import StorageState


logger = get_logger(__name__)


INCOME_SQL = "SELECT SUM(amount) AS total FROM payments WHERE year = ? AND month = ?"
EXPENSES_SQL = "SELECT SUM(amount) AS total FROM expenses WHERE year = ? AND month = ?"
ACTIVE_CUSTOMERS_SQL = "SELECT COUNT(*) AS total FROM customers WHERE isActive = 1"
PAID_CUSTOMERS_SQL = (
    "SELECT COUNT(DISTINCT customerId) AS count FROM payments "
    "WHERE year = ? AND month = ?"
)
PAYMENT_EXISTS_SQL = (
    "SELECT COUNT(*) AS count FROM payments "
    "WHERE customerId = ? AND month = ? AND year = ?"
)


async def _scalar(
    backend: StorageBackend,
    statement: str,
    params: list[Any],
    column: str,
) -> Any:
    rows = await backend.query(statement, params)
    if not rows:
        return None
    return rows[0].get(column)


class ReportAggregator:
    """Monthly profit/loss and payment status queries."""

    def __init__(self, storage: StorageState):
        self._storage = storage

    async def get_monthly_report(self, year: int, month: str) -> MonthlyReport:
        """
        Income, expenses and collection counts for one month.

        The month name is matched case-insensitively; a value that is not
        a month name gives the all-zero report.

        Raises:
            UninitializedStorageError: Storage not initialized

        SQL failures are logged and produce an all-zero report.
        """
        backend = self._storage.require_backend()

        period_month = normalize_month(month)
        if period_month is None:
            logger.warning("monthly_report_invalid_month", year=year, month=month)
            return MonthlyReport.empty()
        period = [year, period_month]

        try:
            income = decimal_or_zero(
                await _scalar(backend, INCOME_SQL, period, "total")
            )
            expenses = decimal_or_zero(
                await _scalar(backend, EXPENSES_SQL, period, "total")
            )
            total_customers = int(
                await _scalar(backend, ACTIVE_CUSTOMERS_SQL, [], "total") or 0
            )
            paid_customers = int(
                await _scalar(backend, PAID_CUSTOMERS_SQL, period, "count") or 0
            )
        except Exception as e:
            logger.error("monthly_report_failed", year=year, month=month, error=str(e))
            return MonthlyReport.empty()

        return MonthlyReport(
            total_income=income,
            total_expenses=expenses,
            net_profit=income - expenses,
            total_customers=total_customers,
            paid_customers=paid_customers,
            unpaid_customers=total_customers - paid_customers,
        )

    async def has_payment_for_month(
        self,
        customer_id: Any,
        month: Any,
        year: Any,
    ) -> bool:
        """
        True iff the member has at least one payment for month/year.

        Never raises. Invalid input, uninitialized storage and backend
        errors all answer False.
        """
        if (
            isinstance(customer_id, bool)
            or not isinstance(customer_id, int)
            or customer_id <= 0
        ):
            logger.warning("payment_check_invalid_customer", customer_id=customer_id)
            return False

        period_month = normalize_month(month)
        if period_month is None or not year:
            logger.warning("payment_check_invalid_period", month=month, year=year)
            return False

        backend = self._storage.available_backend()
        if backend is None:
            logger.warning("payment_check_storage_unavailable")
            return False

        try:
            count = await _scalar(
                backend, PAYMENT_EXISTS_SQL, [customer_id, period_month, year], "count"
            )
        except Exception as e:
            logger.error(
                "payment_check_failed",
                customer_id=customer_id,
                error=str(e),
            )
            return False

        return int(count or 0) > 0

