"""
Core Data Models for Gym Tracker

These models define the records flowing between callers and storage.
They are designed to:
1. Validate input before anything reaches SQL
2. Map snake_case attributes to the persisted camelCase column names
3. Coerce engine values (0/1 flags, float amounts, numeric ids) back
   into proper Python types on read

DESIGN DECISION: Column names are field aliases. The same model
validates a caller's keyword arguments and a raw database row, so
there is one place that knows how a row maps to a record.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def month_name(value: Union[date, datetime]) -> str:
    """Full English month name for a date ("January" ... "December")."""
    return MONTH_NAMES[value.month - 1]


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _to_decimal(v: Any) -> Any:
    # Engines hand back floats; go through str so 0.1 stays 0.1
    if isinstance(v, float):
        return Decimal(str(v))
    return v


def normalize_month(value: Any) -> Optional[str]:
    """Canonical month name ("march" -> "March"), or None if not a month."""
    if not isinstance(value, str):
        return None
    name = value.strip().capitalize()
    return name if name in MONTH_NAMES else None


def _validate_month(v: str) -> str:
    name = normalize_month(v)
    if name is None:
        raise ValueError(f"Unknown month name: {v!r}")
    return name


# =============================================================================
# ENUMS
# =============================================================================

class ExpenseCategory(str, Enum):
    """Fixed set of expense categories."""
    RENT = "rent"
    UTILITIES = "utilities"
    EQUIPMENT = "equipment"
    MAINTENANCE = "maintenance"
    STAFF = "staff"
    OTHER = "other"


# =============================================================================
# RECORDS
# =============================================================================

class StoredRecord(BaseModel):
    """
    Base for all persisted records.

    `id` is None until the record has been inserted; after that it is
    the engine-assigned integer and never changes.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: Optional[int] = Field(
        default=None,
        description="Engine-assigned identity, None while unpersisted"
    )

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    @classmethod
    def column_for(cls, field_name: str) -> str:
        """
        Resolve a field name or column alias to its column name.

        Raises:
            ValueError: If the name is not a field of this record
        """
        for name, info in cls.model_fields.items():
            column = info.alias or name
            if field_name in (name, column):
                return column
        raise ValueError(f"{cls.__name__} has no field {field_name!r}")

    def to_row(self) -> dict[str, Any]:
        """Column→value mapping for INSERT, without the id."""
        row = self.model_dump(by_alias=True, exclude={"id"}, mode="python")
        return {column: to_sql_value(value) for column, value in row.items()}


class Customer(StoredRecord):
    """A gym member."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Member name"
    )
    phone: str = Field(
        default="",
        max_length=50,
        description="Contact number"
    )
    email: Optional[str] = Field(
        default=None,
        max_length=200,
    )
    monthly_fee: Decimal = Field(
        ...,
        ge=0,
        alias="monthlyFee",
        description="Recurring monthly membership fee"
    )
    blood_group: Optional[str] = Field(
        default=None,
        max_length=10,
        alias="bloodGroup",
    )
    join_date: str = Field(
        default_factory=lambda: datetime.now().isoformat(),
        alias="joinDate",
        description="ISO-8601 date-time the member joined"
    )
    image: Optional[str] = Field(
        default=None,
        description="Photo as a data URI or an opaque reference"
    )
    is_active: bool = Field(
        default=True,
        alias="isActive",
    )

    @field_validator("email", "blood_group", "image", mode="before")
    @classmethod
    def validate_optional_text(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("monthly_fee", mode="before")
    @classmethod
    def validate_monthly_fee(cls, v: Any) -> Any:
        return _to_decimal(v)

    @field_validator("join_date", mode="before")
    @classmethod
    def validate_join_date(cls, v: Any) -> Any:
        if isinstance(v, (date, datetime)):
            return v.isoformat()
        return v


class Payment(StoredRecord):
    """
    A monthly fee payment by a member.

    Nothing stops two payments for the same member and month; reports
    count every row toward income but each member once toward the
    paid count.
    """

    customer_id: int = Field(
        ...,
        gt=0,
        alias="customerId",
    )
    amount: Decimal = Field(
        ...,
        description="Amount paid"
    )
    payment_date: str = Field(
        default_factory=lambda: datetime.now().isoformat(),
        alias="paymentDate",
    )
    month: str = Field(
        ...,
        description="Full month name the payment covers"
    )
    year: int = Field(
        ...,
        gt=0,
    )

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Any:
        return _to_decimal(v)

    @field_validator("month")
    @classmethod
    def validate_month(cls, v: str) -> str:
        return _validate_month(v)

    @field_validator("payment_date", mode="before")
    @classmethod
    def validate_payment_date(cls, v: Any) -> Any:
        if isinstance(v, (date, datetime)):
            return v.isoformat()
        return v


class Expense(StoredRecord):
    """An operating expense. month/year duplicate the expense date for aggregation."""

    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
    )
    amount: Decimal = Field(...)
    category: ExpenseCategory = Field(
        default=ExpenseCategory.OTHER,
    )
    expense_date: str = Field(
        ...,
        alias="expenseDate",
    )
    month: str = Field(...)
    year: int = Field(..., gt=0)

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Any:
        return _to_decimal(v)

    @field_validator("month")
    @classmethod
    def validate_month(cls, v: str) -> str:
        return _validate_month(v)

    @field_validator("expense_date", mode="before")
    @classmethod
    def validate_expense_date(cls, v: Any) -> Any:
        if isinstance(v, (date, datetime)):
            return v.isoformat()
        return v

    @classmethod
    def for_date(
        cls,
        description: str,
        amount: Union[Decimal, float, int, str],
        category: Union[ExpenseCategory, str],
        expense_date: Union[date, datetime],
    ) -> "Expense":
        """Build an expense whose month and year come from its date."""
        return cls(
            description=description,
            amount=amount,
            category=category,
            expense_date=expense_date,
            month=month_name(expense_date),
            year=expense_date.year,
        )


# =============================================================================
# REPORTS
# =============================================================================

class MonthlyReport(BaseModel):
    """
    Profit/loss and collection summary for one month.

    total_income is a raw sum over payment rows while paid_customers
    counts distinct members, so duplicate payments raise income without
    raising the paid count. unpaid_customers is not clamped and goes
    negative when payments exist for inactive or removed members.
    """
    model_config = ConfigDict(frozen=True)

    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    net_profit: Decimal = Decimal("0")
    total_customers: int = 0
    paid_customers: int = 0
    unpaid_customers: int = 0

    @classmethod
    def empty(cls) -> "MonthlyReport":
        return cls()


def to_sql_value(value: Any) -> Any:
    """Convert a Python value into something sqlite3 can bind."""
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value
