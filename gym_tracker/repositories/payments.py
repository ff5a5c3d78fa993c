"""Payment repository."""

from gym_tracker.logger import get_logger
from gym_tracker.models import Payment
from gym_tracker.repositories.base import BaseRepository


logger = get_logger(__name__)


class PaymentRepository(BaseRepository[Payment]):
    """Fee payments, newest first."""

    table = "payments"
    model = Payment
    order_by = "paymentDate DESC"
    entity = "payment"

    async def get_for_customer(self, customer_id: int) -> list[Payment]:
        """One member's payments, newest first. Empty when unavailable."""
        backend = self._storage.available_backend()
        if backend is None:
            return []

        try:
            rows = await backend.query(
                "SELECT * FROM payments WHERE customerId = ? "
                "ORDER BY paymentDate DESC",
                [customer_id],
            )
        except Exception as e:
            logger.error(
                "customer_payments_list_failed",
                customer_id=customer_id,
                error=str(e),
            )
            return []

        return self._to_records(rows)
