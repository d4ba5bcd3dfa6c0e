from decimal import Decimal, InvalidOperation
from functools import reduce
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple
from uuid import uuid4

from smartbudget.domain import (
    EXPENSE,
    INCOME,
    BudgetGoal,
    Summary,
    Transaction,
    to_amount,
    to_date,
)
from smartbudget.filters import iter_transactions, matches_text
from smartbudget.functional import Either, Left, Right

ZERO = Decimal("0")


def summarize(trans: Iterable[Transaction]) -> Summary:
    """Fold transactions into income and expense totals.

    The balance is derived after the fold so that
    ``balance == total_income - total_expense`` always holds exactly.
    """
    income, expense = reduce(
        lambda acc, t: (acc[0] + t.amount, acc[1]) if t.type == INCOME else (acc[0], acc[1] + t.amount),
        trans,
        (ZERO, ZERO),
    )
    return Summary(total_income=income, total_expense=expense, balance=income - expense)


def new_transaction_id() -> str:
    return uuid4().hex[:9]


def add_transaction(trans: Tuple[Transaction, ...], t: Transaction) -> Tuple[Transaction, ...]:
    # newest first
    return (t,) + trans


def update_transaction(trans: Tuple[Transaction, ...], t: Transaction) -> Tuple[Transaction, ...]:
    return tuple(t if old.id == t.id else old for old in trans)


def delete_transaction(trans: Tuple[Transaction, ...], tid: str) -> Tuple[Transaction, ...]:
    return tuple(t for t in trans if t.id != tid)


def search_transactions(trans: Tuple[Transaction, ...], query: str) -> Tuple[Transaction, ...]:
    if not query:
        return trans
    return tuple(iter_transactions(trans, matches_text(query)))


def recent_transactions(trans: Tuple[Transaction, ...], n: int = 5) -> Tuple[Transaction, ...]:
    return trans[: max(0, n)]


def default_category(kind: str) -> str:
    return "Income" if kind == INCOME else "Food"


def validate_transaction(form: Mapping[str, Any], tid: Optional[str] = None) -> Either[Dict[str, Any], Transaction]:
    """Turn raw form input into a Transaction, or explain why it can't be one.

    ``tid`` keeps the id of the record being edited; a fresh id is issued
    otherwise.
    """

    def check_type(f: Dict[str, Any]) -> Either[Dict[str, Any], Dict[str, Any]]:
        if f.get("type") not in (INCOME, EXPENSE):
            return Left({
                "error": "invalid_type",
                "message": f"Transaction type must be '{INCOME}' or '{EXPENSE}'",
                "type": f.get("type"),
            })
        return Right(f)

    def check_amount(f: Dict[str, Any]) -> Either[Dict[str, Any], Dict[str, Any]]:
        raw = f.get("amount")
        try:
            amount = to_amount(raw) if raw not in (None, "") else None
        except (InvalidOperation, ValueError):
            amount = None
        if amount is None or not amount.is_finite() or amount < 0:
            return Left({
                "error": "invalid_amount",
                "message": "Amount must be a non-negative number",
                "amount": raw,
            })
        return Right({**f, "amount": amount})

    def check_description(f: Dict[str, Any]) -> Either[Dict[str, Any], Dict[str, Any]]:
        text = (f.get("description") or "").strip()
        if not text:
            return Left({"error": "missing_description", "message": "Description is required"})
        return Right({**f, "description": text})

    def check_date(f: Dict[str, Any]) -> Either[Dict[str, Any], Dict[str, Any]]:
        try:
            day = to_date(f.get("date"))
        except (TypeError, ValueError):
            return Left({
                "error": "invalid_date",
                "message": "Date must be a calendar date (YYYY-MM-DD)",
                "date": f.get("date"),
            })
        return Right({**f, "date": day})

    def build(f: Dict[str, Any]) -> Either[Dict[str, Any], Transaction]:
        return Right(Transaction(
            id=tid or new_transaction_id(),
            date=f["date"],
            amount=f["amount"],
            category=f.get("category") or default_category(f["type"]),
            description=f["description"],
            type=f["type"],
        ))

    return (
        Right(dict(form))
        .bind(check_type)
        .bind(check_amount)
        .bind(check_description)
        .bind(check_date)
        .bind(build)
    )


def normalize_goals(goals: Iterable[BudgetGoal]) -> Tuple[BudgetGoal, ...]:
    """One goal per category, later entries win; non-positive or non-numeric limits are dropped."""
    latest: Dict[str, BudgetGoal] = {}
    for g in goals:
        latest[g.category] = g
    return tuple(g for g in latest.values() if g.limit.is_finite() and g.limit > 0)


def goals_from_form(values: Mapping[str, Any]) -> Tuple[BudgetGoal, ...]:
    """Parse ``{category: limit}`` form input; blank or unparsable limits mean no goal."""
    goals = []
    for category, raw in values.items():
        try:
            limit = to_amount(raw) if raw not in (None, "") else ZERO
        except (InvalidOperation, ValueError):
            limit = ZERO
        if limit.is_finite():
            goals.append(BudgetGoal(category=category, limit=limit))
    return normalize_goals(goals)
