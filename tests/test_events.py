from datetime import date
from decimal import Decimal

from smartbudget.domain import BudgetGoal, Transaction
from smartbudget.events import (
    BUDGET_ALERT,
    GOALS_CHANGED,
    TRANSACTIONS_CHANGED,
    EventBus,
    budget_alerts,
    check_budget_handler,
    register_default_handlers,
)
from smartbudget.storage import MemoryStore, load_goals, load_transactions

TX = Transaction("t1", date(2024, 5, 2), Decimal("300"), "Food", "Groceries", "expense")


def test_publish_without_subscribers():
    assert EventBus().publish("NOTHING", {}) == []


def test_subscribe_and_unsubscribe():
    bus = EventBus()
    seen = []

    def handler(event, payload):
        seen.append(event.name)
        return {"ok": True}

    bus.subscribe("PING", handler)
    assert bus.publish("PING", {}) == [{"ok": True}]
    bus.unsubscribe("PING", handler)
    assert bus.publish("PING", {}) == []
    assert seen == ["PING"]


def test_failing_handler_does_not_stop_others():
    bus = EventBus()

    def broken(event, payload):
        raise RuntimeError("disk full")

    bus.subscribe("PING", broken)
    bus.subscribe("PING", lambda event, payload: {"ok": True})

    assert bus.publish("PING", {}) == [{"error": "disk full"}, {"ok": True}]


def test_default_handlers_persist_changes():
    store = MemoryStore()
    bus = register_default_handlers(EventBus(), store)

    bus.publish(TRANSACTIONS_CHANGED, {"transactions": (TX,), "goals": (), "today": date(2024, 5, 3)})
    bus.publish(GOALS_CHANGED, {"goals": (BudgetGoal("Food", Decimal("250")),)})

    assert load_transactions(store) == (TX,)
    assert load_goals(store) == (BudgetGoal("Food", Decimal("250")),)


def make_tx(id, amount, category="Food", day="2024-05-02"):
    return Transaction(id, date.fromisoformat(day), Decimal(str(amount)), category, id, "expense")


FOOD_GOAL = (BudgetGoal("Food", Decimal("100")),)
MAY = date(2024, 5, 20)


def test_alert_when_goal_becomes_over_budget():
    alerts = budget_alerts({
        "previous_transactions": (make_tx("a", 50),),
        "transactions": (make_tx("a", 50), make_tx("b", 60)),
        "goals": FOOD_GOAL + (BudgetGoal("Housing", Decimal("900")),),
        "today": MAY,
    })

    assert [(a["category"], a["level"]) for a in alerts] == [("Food", "over_budget")]
    assert alerts[0]["message"] == "Budget exceeded for Food: 110.00 / 100.00"


def test_warning_and_critical_thresholds_alert():
    warning = budget_alerts({"previous_transactions": (), "transactions": (make_tx("a", 80),),
                             "goals": FOOD_GOAL, "today": MAY})
    critical = budget_alerts({"previous_transactions": (make_tx("a", 80),),
                              "transactions": (make_tx("a", 80), make_tx("b", 15)),
                              "goals": FOOD_GOAL, "today": MAY})

    assert [a["level"] for a in warning] == ["warning"]
    assert warning[0]["message"] == "Food budget at 80%: 80.00 / 100.00"
    assert [a["level"] for a in critical] == ["critical"]


def test_no_repeat_alert_for_unrelated_change():
    over = (make_tx("a", 150), make_tx("b", 5, "Housing"))
    payload = {"previous_transactions": over, "transactions": over[:1], "goals": FOOD_GOAL, "today": MAY}

    assert budget_alerts(payload) == []


def test_no_alert_when_usage_drops_or_in_other_month():
    assert budget_alerts({"previous_transactions": (make_tx("a", 150),), "transactions": (),
                          "goals": FOOD_GOAL, "today": MAY}) == []
    assert budget_alerts({"previous_transactions": (), "transactions": (make_tx("a", 150),),
                          "goals": FOOD_GOAL, "today": date(2024, 6, 1)}) == []
    assert budget_alerts({"transactions": (make_tx("a", 150),)}) == []


def test_check_budget_handler_publishes_budget_alert():
    bus = EventBus()
    published = []
    bus.subscribe(BUDGET_ALERT, lambda event, payload: published.append(payload) or {})
    handler = check_budget_handler(bus)

    result = handler(None, {"previous_transactions": (), "transactions": (make_tx("a", 150),),
                            "goals": FOOD_GOAL, "today": MAY})

    assert result == {"alerts": ["Budget exceeded for Food: 150.00 / 100.00"]}
    assert [p["category"] for p in published] == ["Food"]
    assert handler(None, {"previous_transactions": (), "transactions": (), "goals": FOOD_GOAL, "today": MAY}) == {}


def test_default_handlers_log_budget_alerts(caplog):
    bus = register_default_handlers(EventBus(), MemoryStore())

    results = bus.publish(TRANSACTIONS_CHANGED, {
        "previous_transactions": (),
        "transactions": (make_tx("a", 150),),
        "goals": FOOD_GOAL,
        "today": MAY,
    })

    assert {"alerts": ["Budget exceeded for Food: 150.00 / 100.00"]} in results
    assert "Budget exceeded for Food" in caplog.text
