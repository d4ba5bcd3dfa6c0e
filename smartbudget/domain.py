from dataclasses import dataclass, asdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict

INCOME = "income"
EXPENSE = "expense"
TransactionType = str  # INCOME or EXPENSE

CATEGORIES = (
    "Housing",
    "Food",
    "Transportation",
    "Utilities",
    "Entertainment",
    "Healthcare",
    "Shopping",
    "Personal",
    "Education",
    "Savings",
    "Income",
    "Other",
)

FALLBACK_CATEGORY = "Other"


@dataclass(frozen=True)
class Transaction:
    id: str
    date: date           # calendar date, no time component
    amount: Decimal      # always >= 0, direction comes from type
    category: str
    description: str
    type: TransactionType

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "amount": str(self.amount),
            "category": self.category,
            "description": self.description,
            "type": self.type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        return cls(
            id=str(data["id"]),
            date=to_date(data["date"]),
            amount=to_amount(data["amount"]),
            category=data["category"],
            description=data["description"],
            type=data["type"],
        )


# A monthly spending ceiling for one category
@dataclass(frozen=True)
class BudgetGoal:
    category: str
    limit: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "limit": str(self.limit)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BudgetGoal":
        return cls(category=data["category"], limit=to_amount(data["limit"]))


@dataclass(frozen=True)
class Summary:
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal


@dataclass(frozen=True)
class BudgetStatus:
    category: str
    limit: Decimal
    spent: Decimal
    percentage: Decimal  # clamped to [0, 100]
    is_over_budget: bool


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    total: Decimal


@dataclass(frozen=True)
class DailyTotals:
    date: date
    income: Decimal
    expense: Decimal

    @property
    def label(self) -> str:
        return self.date.strftime("%m-%d")


def to_date(value: Any) -> date:
    """Normalise a date or a ``YYYY-MM-DD`` string to a plain calendar date.

    Only the calendar fields are read, so no timezone conversion can move
    the value to a neighbouring day.
    """
    if isinstance(value, date):
        return date(value.year, value.month, value.day)
    return date.fromisoformat(str(value).strip()[:10])


def to_amount(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.1 as Decimal("0.1") instead of its binary expansion
    return Decimal(str(value))


def as_plain(obj: Any) -> Dict[str, Any]:
    """Dataclass to dict with floats, for pandas / plotly consumers."""
    row = asdict(obj)
    return {k: float(v) if isinstance(v, Decimal) else v for k, v in row.items()}
