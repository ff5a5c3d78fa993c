"""Customer (member) repository."""

from typing import Optional

from gym_tracker.logger import get_logger
from gym_tracker.models import Customer
from gym_tracker.repositories.base import BaseRepository
from gym_tracker.services.storage.interface import StorageError


logger = get_logger(__name__)


class CustomerRepository(BaseRepository[Customer]):
    """Members, listed by name."""

    table = "customers"
    model = Customer
    order_by = "name ASC"
    entity = "customer"

    async def get_one(self, customer_id: int) -> Optional[Customer]:
        """
        Look up one member.

        Returns None when no such member exists or the lookup fails.

        Raises:
            UninitializedStorageError: Storage not initialized
        """
        return await self._get_by_id(customer_id)

    async def delete(self, customer_id: int) -> bool:
        """
        Delete a member and all their payments.

        The engine does not cascade, so payments are deleted first. Both
        statements run in one transaction; a failure leaves neither
        applied rather than stranding orphaned payments.

        Returns:
            True if the member row existed

        Raises:
            UninitializedStorageError: Storage not initialized
            StorageError: If the delete fails
        """
        backend = self._storage.require_backend()

        try:
            payments_result, customer_result = await backend.run_batch([
                ("DELETE FROM payments WHERE customerId = ?", [customer_id]),
                ("DELETE FROM customers WHERE id = ?", [customer_id]),
            ])
        except Exception as e:
            logger.error("customer_delete_failed", id=customer_id, error=str(e))
            raise StorageError(f"Failed to delete customer: {e}") from e

        logger.info(
            "customer_deleted",
            id=customer_id,
            payments_deleted=payments_result.rows_changed,
        )
        return customer_result.rows_changed > 0
