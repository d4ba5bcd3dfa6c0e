from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Tuple

from smartbudget.domain import EXPENSE, INCOME, CategoryTotal, DailyTotals, Transaction
from smartbudget.filters import by_type, iter_transactions
from smartbudget.functional import Maybe, Nothing, Some

TREND_DAYS = 7


def category_distribution(trans: Iterable[Transaction]) -> Maybe[Tuple[CategoryTotal, ...]]:
    """Expense totals per category, largest first.

    ``Nothing()`` when there are no expenses at all.
    """
    totals: Dict[str, Decimal] = defaultdict(Decimal)
    for t in iter_transactions(trans, by_type(EXPENSE)):
        totals[t.category] += t.amount

    if not totals:
        return Nothing()

    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return Some(tuple(CategoryTotal(category=c, total=v) for c, v in ordered))


def daily_trend(trans: Iterable[Transaction], days: int = TREND_DAYS) -> Tuple[DailyTotals, ...]:
    """Income and expense per active day, oldest first, last ``days`` active days only.

    Days without activity produce no bucket. Zero-amount records are not
    activity either.
    """
    income: Dict[date, Decimal] = defaultdict(Decimal)
    expense: Dict[date, Decimal] = defaultdict(Decimal)
    for t in trans:
        if t.amount == 0:
            continue
        if t.type == INCOME:
            income[t.date] += t.amount
        else:
            expense[t.date] += t.amount

    active = sorted(set(income) | set(expense))
    window = active[-days:] if days > 0 else []
    return tuple(
        DailyTotals(date=d, income=income.get(d, Decimal("0")), expense=expense.get(d, Decimal("0")))
        for d in window
    )
