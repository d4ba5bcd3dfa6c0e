from datetime import date
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from smartbudget.budgets import evaluate_budgets
from smartbudget.domain import BudgetGoal, Transaction
from smartbudget.series import category_distribution, daily_trend
from smartbudget.transforms import summarize

Calculator = Callable[[Tuple[Transaction, ...], Tuple[BudgetGoal, ...], date], Dict[str, Any]]


def summary_calculator(trans, goals, today) -> Dict[str, Any]:
    return {"summary": summarize(trans)}


def budget_calculator(trans, goals, today) -> Dict[str, Any]:
    return {"budgets": evaluate_budgets(trans, goals, today)}


def distribution_calculator(trans, goals, today) -> Dict[str, Any]:
    return {"distribution": category_distribution(trans)}


def trend_calculator(trans, goals, today) -> Dict[str, Any]:
    return {"trend": daily_trend(trans)}


DEFAULT_CALCULATORS: Tuple[Calculator, ...] = (
    summary_calculator,
    budget_calculator,
    distribution_calculator,
    trend_calculator,
)


class DashboardService:
    """Facade running every dashboard calculation over one snapshot.

    calculators: functions taking (transactions, goals, today) -> dict (partial results).
    Each call recomputes from scratch; nothing is cached between calls.
    """

    def __init__(self, calculators: Optional[Sequence[Calculator]] = None):
        self.calculators = tuple(calculators) if calculators is not None else DEFAULT_CALCULATORS

    def snapshot(self, transactions, goals, today: date) -> Dict[str, Any]:
        """Return the combined result plus each calculator's own output."""
        trans = tuple(transactions)
        goal_list = tuple(goals)
        report: Dict[str, Any] = {"as_of": today, "steps": [], "result": {}}

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            out = calc(trans, goal_list, today)
            report["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
            acc.update(out)

        report["result"] = acc
        return report
