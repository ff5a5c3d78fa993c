"""
Gym Data Service

The single entry point for UI code. It owns the storage backend and the
initialization lifecycle:

    UNINITIALIZED → INITIALIZING → READY
                                 ↘ FAILED

DESIGN DECISION: The service is an ordinary object the application
constructs once and passes around. There is no module-level instance;
tests build as many as they like, each with its own backend.

Callers are expected to:
- await initialize_database() once at startup, and show a blocking
  error if it raises (do not retry in a loop)
- null-check nothing on read paths: reads return [], 0 or False when
  storage is unavailable
- handle StorageError on write paths
"""

import asyncio
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from gym_tracker.config import Settings, get_settings
from gym_tracker.logger import configure_logging, get_logger
from gym_tracker.models import Customer, Expense, MonthlyReport, Payment
from gym_tracker.reports import ReportAggregator
from gym_tracker.repositories import (
    CustomerRepository,
    ExpenseRepository,
    PaymentRepository,
)
from gym_tracker.schema import SchemaManager
from gym_tracker.services.storage import (
    InitState,
    StorageBackend,
    StorageState,
    create_backend,
)


logger = get_logger(__name__)


class GymDataService:
    """
    Facade over backend selection, schema setup, repositories and reports.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        backend: Optional[StorageBackend] = None,
    ):
        """
        Args:
            settings: Application settings. Defaults to get_settings().
            backend: Backend to use instead of selecting one from settings.
                    It is opened by initialize_database().
        """
        self._settings = settings or get_settings()
        self._injected_backend = backend
        self._storage = StorageState()
        self._init_lock = asyncio.Lock()

        self.customers = CustomerRepository(self._storage)
        self.payments = PaymentRepository(self._storage)
        self.expenses = ExpenseRepository(self._storage)
        self.reports = ReportAggregator(self._storage)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def state(self) -> InitState:
        return self._storage.state

    @property
    def is_initialized(self) -> bool:
        return self._storage.is_ready

    @property
    def backend_name(self) -> Optional[str]:
        backend = self._storage.backend
        return backend.name if backend else None

    async def initialize_database(self) -> None:
        """
        Select and open the backend, then bring the schema up to date.

        A no-op when already initialized.

        Raises:
            ConnectionError: If the backend cannot be opened
            SchemaError: If the tables cannot be created
        """
        async with self._init_lock:
            if self._storage.is_ready:
                logger.debug("database_already_initialized")
                return

            self._storage.state = InitState.INITIALIZING
            logger.info("database_initialization_started")

            try:
                backend = self._injected_backend or create_backend(
                    self._settings.storage
                )
                self._storage.backend = backend
                await backend.open()
                await SchemaManager(backend).apply()
            except Exception as e:
                logger.error("database_initialization_failed", error=str(e))
                await self._release_backend()
                self._storage.state = InitState.FAILED
                raise

            self._storage.state = InitState.READY
            logger.info(
                "database_initialization_completed",
                backend=self._storage.backend.name,
            )

    async def close(self) -> None:
        """Release the backend. The service can be initialized again."""
        async with self._init_lock:
            await self._release_backend()
            self._storage.state = InitState.UNINITIALIZED

    async def _release_backend(self) -> None:
        backend = self._storage.backend
        self._storage.backend = None
        if backend is None:
            return
        try:
            await backend.close()
        except Exception as e:
            logger.warning("backend_close_failed", error=str(e))

    # -------------------------------------------------------------------------
    # Customers
    # -------------------------------------------------------------------------

    async def add_customer(
        self, customer: Union[Customer, Mapping[str, Any]]
    ) -> int:
        return await self.customers.add(customer)

    async def get_customers(self) -> list[Customer]:
        return await self.customers.get_all()

    async def get_customer(self, customer_id: int) -> Optional[Customer]:
        return await self.customers.get_one(customer_id)

    async def update_customer(
        self, customer_id: int, fields: Mapping[str, Any]
    ) -> bool:
        return await self.customers.update(customer_id, fields)

    async def delete_customer(self, customer_id: int) -> bool:
        return await self.customers.delete(customer_id)

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    async def add_payment(
        self, payment: Union[Payment, Mapping[str, Any]]
    ) -> int:
        return await self.payments.add(payment)

    async def get_payments(self) -> list[Payment]:
        return await self.payments.get_all()

    async def get_customer_payments(self, customer_id: int) -> list[Payment]:
        return await self.payments.get_for_customer(customer_id)

    async def update_payment(
        self, payment_id: int, fields: Mapping[str, Any]
    ) -> bool:
        return await self.payments.update(payment_id, fields)

    async def has_payment_for_month(
        self, customer_id: Any, month: Any, year: Any
    ) -> bool:
        return await self.reports.has_payment_for_month(customer_id, month, year)

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    async def add_expense(
        self, expense: Union[Expense, Mapping[str, Any]]
    ) -> int:
        return await self.expenses.add(expense)

    async def get_expenses(self) -> list[Expense]:
        return await self.expenses.get_all()

    async def update_expense(
        self, expense_id: int, fields: Mapping[str, Any]
    ) -> bool:
        return await self.expenses.update(expense_id, fields)

    async def get_monthly_expenses(self, year: int, month: str) -> Decimal:
        return await self.expenses.get_monthly_total(year, month)

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    async def get_monthly_report(self, year: int, month: str) -> MonthlyReport:
        return await self.reports.get_monthly_report(year, month)


def create_service(settings: Optional[Settings] = None) -> GymDataService:
    """
    Factory for the application's service.

    Applies the logging settings and returns an uninitialized service;
    the caller awaits initialize_database().
    """
    settings = settings or get_settings()
    configure_logging(settings.logging)
    return GymDataService(settings=settings)
