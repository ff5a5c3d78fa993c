"""
Tests for the customer, payment and expense repositories.

Every test runs against both backends through the service fixture.
"""

from decimal import Decimal

import pytest

from gym_tracker.models import Customer, Expense, Payment
from gym_tracker.services.storage import StorageError, UninitializedStorageError


def make_customer(name="Asha", fee=50, **overrides):
    fields = dict(
        name=name,
        phone="555-0100",
        email=f"{name.lower()}@example.com",
        monthly_fee=fee,
        blood_group="B+",
        join_date="2024-01-10T08:00:00",
        image="data:image/png;base64,iVBORw0KGgo=",
        is_active=True,
    )
    fields.update(overrides)
    return Customer(**fields)


def make_payment(customer_id, amount=50, month="March", year=2024, day=1):
    return Payment(
        customer_id=customer_id,
        amount=amount,
        payment_date=f"{year}-03-{day:02d}T10:00:00",
        month=month,
        year=year,
    )


class TestCustomerRepository:
    """Tests for customer CRUD."""

    def test_add_assigns_identity(self, service, run):
        """Test insert returns a positive id and the record reads back."""
        customer = make_customer()

        async def scenario():
            await service.initialize_database()
            customer_id = await service.add_customer(customer)
            return customer_id, await service.get_customer(customer_id)

        customer_id, loaded = run(scenario())
        assert isinstance(customer_id, int)
        assert customer_id > 0
        assert loaded.id == customer_id
        assert loaded.model_dump(exclude={"id"}) == customer.model_dump(exclude={"id"})

    def test_add_accepts_mapping_with_column_names(self, service, run):
        """Test plain dicts using column names are accepted."""
        async def scenario():
            await service.initialize_database()
            customer_id = await service.add_customer({
                "name": "Ravi",
                "phone": "1",
                "monthlyFee": 60,
                "isActive": False,
            })
            return await service.get_customer(customer_id)

        loaded = run(scenario())
        assert loaded.monthly_fee == Decimal("60")
        assert loaded.is_active is False
        assert loaded.email is None

    def test_get_all_ordered_by_name(self, service, run):
        """Test members are listed alphabetically."""
        async def scenario():
            await service.initialize_database()
            for name in ("Zara", "Asha", "Meera"):
                await service.add_customer(make_customer(name))
            return await service.get_customers()

        assert [c.name for c in run(scenario())] == ["Asha", "Meera", "Zara"]

    def test_get_one_missing_returns_none(self, service, run):
        """Test looking up an unknown id gives None."""
        async def scenario():
            await service.initialize_database()
            return await service.get_customer(999)

        assert run(scenario()) is None

    def test_update_rewrites_only_supplied_fields(self, service, run):
        """Test partial update leaves other fields alone."""
        async def scenario():
            await service.initialize_database()
            customer_id = await service.add_customer(make_customer())
            changed = await service.update_customer(
                customer_id, {"phone": "555-9999", "isActive": False}
            )
            return changed, await service.get_customer(customer_id)

        changed, loaded = run(scenario())
        assert changed is True
        assert loaded.phone == "555-9999"
        assert loaded.is_active is False
        assert loaded.name == "Asha"
        assert loaded.monthly_fee == Decimal("50")

    def test_update_accepts_attribute_names(self, service, run):
        """Test snake_case names map onto columns."""
        async def scenario():
            await service.initialize_database()
            customer_id = await service.add_customer(make_customer())
            await service.update_customer(customer_id, {"monthly_fee": Decimal("75.5")})
            return await service.get_customer(customer_id)

        assert run(scenario()).monthly_fee == Decimal("75.5")

    def test_update_rejects_unknown_field(self, service, run):
        """Test unknown field names never reach SQL."""
        async def scenario():
            await service.initialize_database()
            customer_id = await service.add_customer(make_customer())
            with pytest.raises(ValueError):
                await service.update_customer(customer_id, {"nickname": "A"})

        run(scenario())

    def test_update_breaking_field_rules_is_rejected(self, service, run):
        """Test an invalid update raises and leaves the member readable."""
        async def scenario():
            await service.initialize_database()
            customer_id = await service.add_customer(make_customer())
            with pytest.raises(ValueError):
                await service.update_customer(customer_id, {"monthly_fee": -5})
            with pytest.raises(ValueError):
                await service.update_customer(customer_id, {"name": "   "})
            return (
                await service.get_customers(),
                await service.get_customer(customer_id),
            )

        customers, loaded = run(scenario())
        assert [c.name for c in customers] == ["Asha"]
        assert loaded.monthly_fee == Decimal("50")
        assert loaded.name == "Asha"

    def test_update_missing_customer(self, service, run):
        """Test updating an unknown id reports nothing changed."""
        async def scenario():
            await service.initialize_database()
            return await service.update_customer(404, {"phone": "1"})

        assert run(scenario()) is False

    def test_update_with_no_fields_is_noop(self, service, run):
        """Test an empty update changes nothing."""
        async def scenario():
            await service.initialize_database()
            customer_id = await service.add_customer(make_customer())
            return await service.update_customer(customer_id, {"id": 42})

        assert run(scenario()) is False

    def test_delete_cascades_to_payments(self, service, run):
        """Test deleting a member removes all their payments."""
        async def scenario():
            await service.initialize_database()
            keep_id = await service.add_customer(make_customer("Keep"))
            drop_id = await service.add_customer(make_customer("Drop"))
            await service.add_payment(make_payment(drop_id, day=1))
            await service.add_payment(make_payment(drop_id, month="April", day=2))
            await service.add_payment(make_payment(keep_id, day=3))

            deleted = await service.delete_customer(drop_id)
            return (
                deleted,
                drop_id,
                await service.get_customer(drop_id),
                await service.get_payments(),
            )

        deleted, drop_id, loaded, payments = run(scenario())
        assert deleted is True
        assert loaded is None
        assert len(payments) == 1
        assert all(p.customer_id != drop_id for p in payments)

    def test_delete_unknown_customer(self, service, run):
        """Test deleting a missing id reports nothing deleted."""
        async def scenario():
            await service.initialize_database()
            return await service.delete_customer(404)

        assert run(scenario()) is False


class TestPaymentRepository:
    """Tests for payment storage."""

    def test_payments_newest_first(self, service, run):
        """Test payments are ordered by payment date descending."""
        async def scenario():
            await service.initialize_database()
            customer_id = await service.add_customer(make_customer())
            for day in (5, 20, 12):
                await service.add_payment(make_payment(customer_id, day=day))
            return await service.get_payments()

        dates = [p.payment_date for p in run(scenario())]
        assert dates == sorted(dates, reverse=True)

    def test_payment_round_trip_types(self, service, run):
        """Test identity and amount types after reading back."""
        async def scenario():
            await service.initialize_database()
            customer_id = await service.add_customer(make_customer())
            await service.add_payment(make_payment(customer_id, amount=Decimal("49.99")))
            return customer_id, await service.get_payments()

        customer_id, payments = run(scenario())
        payment = payments[0]
        assert isinstance(payment.id, int)
        assert payment.customer_id == customer_id
        assert payment.amount == Decimal("49.99")
        assert payment.month == "March"
        assert payment.year == 2024

    def test_customer_payments(self, service, run):
        """Test listing one member's payments."""
        async def scenario():
            await service.initialize_database()
            first = await service.add_customer(make_customer("A"))
            second = await service.add_customer(make_customer("B"))
            await service.add_payment(make_payment(first, day=1))
            await service.add_payment(make_payment(second, day=2))
            await service.add_payment(make_payment(first, day=3))
            return first, await service.get_customer_payments(first)

        first, payments = run(scenario())
        assert len(payments) == 2
        assert {p.customer_id for p in payments} == {first}

    def test_update_payment(self, service, run):
        """Test a payment amount can be corrected."""
        async def scenario():
            await service.initialize_database()
            customer_id = await service.add_customer(make_customer())
            payment_id = await service.add_payment(make_payment(customer_id))
            await service.update_payment(payment_id, {"amount": 55})
            return await service.get_payments()

        assert run(scenario())[0].amount == Decimal("55")

    def test_update_normalizes_month(self, service, run):
        """Test updated month names are stored in canonical form."""
        async def scenario():
            await service.initialize_database()
            customer_id = await service.add_customer(make_customer())
            payment_id = await service.add_payment(make_payment(customer_id))
            await service.update_payment(payment_id, {"month": "april"})
            with pytest.raises(ValueError):
                await service.update_payment(payment_id, {"month": "Smarch"})
            return (
                await service.get_payments(),
                await service.has_payment_for_month(customer_id, "April", 2024),
            )

        payments, paid = run(scenario())
        assert [p.month for p in payments] == ["April"]
        assert paid is True

    def test_malformed_rows_are_skipped(self, service, run):
        """Test a row that fails validation does not hide the others."""
        async def scenario():
            await service.initialize_database()
            customer_id = await service.add_customer(make_customer())
            await service.add_payment(make_payment(customer_id))
            await service._storage.backend.run(
                "INSERT INTO payments (customerId, amount, paymentDate, month, year) "
                "VALUES (?, ?, ?, ?, ?)",
                [customer_id, 10, "2024-03-09", "Smarch", 2024],
            )
            return await service.get_payments()

        payments = run(scenario())
        assert len(payments) == 1
        assert payments[0].month == "March"


class TestExpenseRepository:
    """Tests for expense storage."""

    def test_expenses_newest_first(self, service, run):
        """Test expenses are ordered by expense date descending."""
        async def scenario():
            await service.initialize_database()
            for day, amount in ((3, 10), (28, 20), (14, 30)):
                await service.add_expense(Expense(
                    description="Cleaning",
                    amount=amount,
                    category="maintenance",
                    expense_date=f"2024-03-{day:02d}",
                    month="March",
                    year=2024,
                ))
            return await service.get_expenses()

        assert [e.amount for e in run(scenario())] == [20, 30, 10]

    def test_monthly_total(self, service, run):
        """Test expenses are summed per month."""
        async def scenario():
            await service.initialize_database()
            await service.add_expense(Expense(
                description="Rent", amount=300, category="rent",
                expense_date="2024-03-01", month="March", year=2024,
            ))
            await service.add_expense(Expense(
                description="Power", amount="45.5", category="utilities",
                expense_date="2024-03-15", month="March", year=2024,
            ))
            await service.add_expense(Expense(
                description="Rent", amount=300, category="rent",
                expense_date="2024-04-01", month="April", year=2024,
            ))
            return (
                await service.get_monthly_expenses(2024, "March"),
                await service.get_monthly_expenses(2023, "March"),
            )

        march, empty = run(scenario())
        assert march == Decimal("345.5")
        assert empty == 0


class TestErrorPolicy:
    """Tests for uninitialized and failing storage."""

    def test_writes_fail_before_initialization(self, service, run):
        """Test writes raise until initialization completes."""
        async def scenario():
            with pytest.raises(UninitializedStorageError):
                await service.add_customer(make_customer())
            with pytest.raises(UninitializedStorageError):
                await service.update_customer(1, {"name": "X"})
            with pytest.raises(UninitializedStorageError):
                await service.delete_customer(1)
            with pytest.raises(UninitializedStorageError):
                await service.get_customer(1)

        run(scenario())

    def test_reads_degrade_before_initialization(self, service, run):
        """Test reads return empty results until initialization completes."""
        async def scenario():
            return (
                await service.get_customers(),
                await service.get_payments(),
                await service.get_expenses(),
                await service.get_customer_payments(1),
                await service.get_monthly_expenses(2024, "March"),
            )

        assert run(scenario()) == ([], [], [], [], 0)

    def test_sql_failure_on_read_returns_empty(self, service, run):
        """Test a failing SELECT degrades to an empty list."""
        async def scenario():
            await service.initialize_database()
            await service._storage.backend.execute("DROP TABLE payments")
            return await service.get_payments()

        assert run(scenario()) == []

    def test_sql_failure_on_write_raises(self, service, run):
        """Test a failing INSERT is surfaced as StorageError."""
        async def scenario():
            await service.initialize_database()
            await service._storage.backend.execute("DROP TABLE expenses")
            with pytest.raises(StorageError, match="Failed to add expense"):
                await service.add_expense(Expense(
                    description="Rent", amount=300, category="rent",
                    expense_date="2024-03-01", month="March", year=2024,
                ))

        run(scenario())
