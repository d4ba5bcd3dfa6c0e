import logging
from datetime import date, datetime
from typing import Callable, Dict, List, NamedTuple

from smartbudget.budgets import OVER_BUDGET, evaluate_budgets, threshold_crossings
from smartbudget.domain import BudgetStatus
from smartbudget.storage import KeyValueStore, save_goals, save_transactions

logger = logging.getLogger(__name__)

__all__ = [
    'TRANSACTIONS_CHANGED', 'GOALS_CHANGED', 'BUDGET_ALERT', 'Event', 'EventBus',
    'register_default_handlers',
]

TRANSACTIONS_CHANGED = "TRANSACTIONS_CHANGED"
GOALS_CHANGED = "GOALS_CHANGED"
BUDGET_ALERT = "BUDGET_ALERT"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        """Run every handler for ``name``; a failing handler yields ``{"error": ...}``."""
        handlers = self._subscribers.get(name, [])
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)

        results = []
        for handler in handlers:
            try:
                results.append(handler(event, payload))
            except Exception as e:
                logger.exception(f"Handler {getattr(handler, '__name__', handler)} failed for {name}")
                results.append({"error": str(e)})
        return results


def persist_transactions_handler(store: KeyValueStore) -> Handler:
    def _handle(event: Event, payload: dict) -> dict:
        trans = tuple(payload.get("transactions", ()))
        save_transactions(store, trans)
        return {"saved": len(trans)}

    return _handle


def persist_goals_handler(store: KeyValueStore) -> Handler:
    def _handle(event: Event, payload: dict) -> dict:
        goals = tuple(payload.get("goals", ()))
        save_goals(store, goals)
        return {"saved": len(goals)}

    return _handle


def alert_message(status: BudgetStatus, level: str) -> str:
    if level == OVER_BUDGET:
        return f"Budget exceeded for {status.category}: {status.spent:.2f} / {status.limit:.2f}"
    return f"{status.category} budget at {status.percentage:.0f}%: {status.spent:.2f} / {status.limit:.2f}"


def budget_alerts(payload: dict) -> List[dict]:
    """Alerts for goals whose level rose between the previous and current lists.

    Levels go normal -> warning (75%) -> critical (90%) -> over budget, so a
    goal that stays where it was does not alert again.
    """
    goals = payload.get("goals") or ()
    if not goals:
        return []
    today = payload.get("today") or date.today()
    before = evaluate_budgets(payload.get("previous_transactions", ()), goals, today)
    after = evaluate_budgets(payload.get("transactions", ()), goals, today)
    return [
        {
            "category": s.category,
            "level": level,
            "spent": s.spent,
            "limit": s.limit,
            "percentage": s.percentage,
            "message": alert_message(s, level),
        }
        for s, level in threshold_crossings(before, after)
    ]


def check_budget_handler(bus: EventBus) -> Handler:
    """Publish one BUDGET_ALERT per crossed threshold."""
    def _handle(event: Event, payload: dict) -> dict:
        alerts = budget_alerts(payload)
        for alert in alerts:
            bus.publish(BUDGET_ALERT, alert)
        if not alerts:
            return {}
        return {"alerts": [a["message"] for a in alerts]}

    return _handle


def log_budget_alert_handler(event: Event, payload: dict) -> dict:
    logger.warning(payload["message"])
    return {"logged": payload["category"]}


def register_default_handlers(bus: EventBus, store: KeyValueStore) -> EventBus:
    bus.subscribe(TRANSACTIONS_CHANGED, persist_transactions_handler(store))
    bus.subscribe(TRANSACTIONS_CHANGED, check_budget_handler(bus))
    bus.subscribe(BUDGET_ALERT, log_budget_alert_handler)
    bus.subscribe(GOALS_CHANGED, persist_goals_handler(store))
    return bus
