from datetime import date
from typing import Callable, Iterable, Iterator

from smartbudget.domain import Transaction

Predicate = Callable[[Transaction], bool]


def iter_transactions(trans: Iterable[Transaction], *preds: Predicate) -> Iterator[Transaction]:
    """Yield the transactions that satisfy every predicate."""
    for t in trans:
        if all(p(t) for p in preds):
            yield t


def by_type(kind: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.type == kind

    return _filter


def in_month(year: int, month: int) -> Predicate:
    # compares calendar fields, month is 1-based like date.month
    def _filter(t: Transaction) -> bool:
        return t.date.year == year and t.date.month == month

    return _filter


def in_month_of(day: date) -> Predicate:
    return in_month(day.year, day.month)


def matches_text(query: str) -> Predicate:
    needle = query.lower()

    def _filter(t: Transaction) -> bool:
        return needle in t.description.lower() or needle in t.category.lower()

    return _filter
