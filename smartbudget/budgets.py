"""Current-month spending against per-category budget goals."""
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Tuple

from smartbudget.domain import CATEGORIES, EXPENSE, BudgetGoal, BudgetStatus, Transaction
from smartbudget.filters import by_type, in_month_of, iter_transactions

# Income is never budgeted
BUDGET_CATEGORIES = tuple(c for c in CATEGORIES if c != "Income")

WARNING_THRESHOLD = Decimal("75")
CRITICAL_THRESHOLD = Decimal("90")

NORMAL = "normal"
WARNING = "warning"
CRITICAL = "critical"
OVER_BUDGET = "over_budget"

LEVEL_RANK = {NORMAL: 0, WARNING: 1, CRITICAL: 2, OVER_BUDGET: 3}

HUNDRED = Decimal("100")


def status_level(percentage: Decimal) -> str:
    """Three-tier presentation policy for a usage percentage."""
    if percentage >= CRITICAL_THRESHOLD:
        return CRITICAL
    if percentage >= WARNING_THRESHOLD:
        return WARNING
    return NORMAL


def monthly_spend(trans: Iterable[Transaction], today: date) -> Dict[str, Decimal]:
    """Expense totals per category for the calendar month containing ``today``."""
    spent: Dict[str, Decimal] = {}
    for t in iter_transactions(trans, by_type(EXPENSE), in_month_of(today)):
        spent[t.category] = spent.get(t.category, Decimal("0")) + t.amount
    return spent


def evaluate_goal(goal: BudgetGoal, spent: Decimal) -> BudgetStatus:
    # goal.limit > 0 is the caller's job
    return BudgetStatus(
        category=goal.category,
        limit=goal.limit,
        spent=spent,
        percentage=min(HUNDRED, spent / goal.limit * HUNDRED),
        is_over_budget=spent > goal.limit,
    )


def evaluate_budgets(
    trans: Iterable[Transaction], goals: Iterable[BudgetGoal], today: date
) -> Tuple[BudgetStatus, ...]:
    """One status per goal, highest usage first.

    ``today`` fixes the month being evaluated; production callers pass
    ``date.today()``. A repeated category reassigns the earlier goal's limit.
    sorted() is stable, so equal percentages keep goal order.
    """
    spent = monthly_spend(trans, today)
    latest: Dict[str, BudgetGoal] = {}
    for g in goals:
        latest[g.category] = g
    statuses = [evaluate_goal(g, spent.get(g.category, Decimal("0"))) for g in latest.values()]
    return tuple(sorted(statuses, key=lambda s: s.percentage, reverse=True))


def alert_level(status: BudgetStatus) -> str:
    # the clamped percentage can't tell "at the limit" from "over it"
    return OVER_BUDGET if status.is_over_budget else status_level(status.percentage)


def threshold_crossings(
    before: Iterable[BudgetStatus], after: Iterable[BudgetStatus]
) -> Tuple[Tuple[BudgetStatus, str], ...]:
    """Statuses in ``after`` whose alert level rose above their level in ``before``.

    A category missing from ``before`` starts at ``normal``.
    """
    previous = {s.category: LEVEL_RANK[alert_level(s)] for s in before}
    crossed = []
    for s in after:
        level = alert_level(s)
        if LEVEL_RANK[level] > previous.get(s.category, LEVEL_RANK[NORMAL]):
            crossed.append((s, level))
    return tuple(crossed)
