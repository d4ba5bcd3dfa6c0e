from datetime import date, timedelta
from decimal import Decimal

from smartbudget.domain import CategoryTotal, DailyTotals, Transaction
from smartbudget.functional import Nothing
from smartbudget.series import category_distribution, daily_trend
from smartbudget.transforms import summarize


def make_tx(id, type, amount, day, category="Food"):
    return Transaction(
        id=id,
        date=day if isinstance(day, date) else date.fromisoformat(day),
        amount=Decimal(str(amount)),
        category=category,
        description=id,
        type=type,
    )


def sample():
    return (
        make_tx("t1", "income", 1000, "2024-05-01", "Income"),
        make_tx("t2", "expense", 200, "2024-05-02", "Food"),
        make_tx("t3", "expense", 100, "2024-05-03", "Food"),
    )


def test_distribution_example_excludes_income():
    result = category_distribution(sample())

    assert result.is_some()
    assert result.get_or_else(()) == (CategoryTotal("Food", Decimal("300")),)


def test_distribution_sorted_descending():
    trans = sample() + (
        make_tx("h", "expense", 900, "2024-05-04", "Housing"),
        make_tx("s", "expense", 50, "2024-05-04", "Shopping"),
    )
    totals = category_distribution(trans).get_or_else(())

    assert [c.category for c in totals] == ["Housing", "Food", "Shopping"]


def test_distribution_sums_to_total_expense():
    trans = sample() + (
        make_tx("h", "expense", "12.34", "2024-05-04", "Housing"),
        make_tx("s", "expense", "0.66", "2023-01-04", "Shopping"),
    )
    totals = category_distribution(trans).get_or_else(())

    assert sum(c.total for c in totals) == summarize(trans).total_expense


def test_distribution_without_expenses_is_nothing():
    assert category_distribution(()) == Nothing()
    assert category_distribution(sample()[:1]).is_none()


def test_trend_groups_by_date_and_type():
    trans = (
        make_tx("a", "expense", 10, "2024-05-02"),
        make_tx("b", "income", 100, "2024-05-01"),
        make_tx("c", "expense", 5, "2024-05-02"),
        make_tx("d", "income", 1, "2024-05-02"),
    )
    result = daily_trend(trans)

    assert result == (
        DailyTotals(date(2024, 5, 1), Decimal("100"), Decimal("0")),
        DailyTotals(date(2024, 5, 2), Decimal("1"), Decimal("15")),
    )


def test_trend_two_active_days_gives_two_buckets():
    trans = (
        make_tx("a", "expense", 10, "2024-01-01"),
        make_tx("b", "expense", 10, "2024-03-15"),
    )

    assert len(daily_trend(trans)) == 2


def test_trend_keeps_last_seven_active_days():
    start = date(2024, 1, 1)
    # every other day, so gaps must not count toward the window
    trans = tuple(make_tx(f"t{i}", "expense", i + 1, start + timedelta(days=2 * i)) for i in range(10))
    result = daily_trend(trans)

    assert len(result) == 7
    assert [b.date for b in result] == [start + timedelta(days=2 * i) for i in range(3, 10)]
    assert all(b.income + b.expense > 0 for b in result)


def test_trend_ignores_zero_amount_records():
    trans = (
        make_tx("z", "expense", 0, "2024-05-01"),
        make_tx("a", "income", 5, "2024-05-02"),
    )

    assert [b.date for b in daily_trend(trans)] == [date(2024, 5, 2)]


def test_trend_empty():
    assert daily_trend(()) == ()


def test_trend_label():
    assert DailyTotals(date(2024, 5, 3), Decimal("0"), Decimal("1")).label == "05-03"


def test_series_are_idempotent():
    trans = sample()

    assert daily_trend(trans) == daily_trend(trans)
    assert category_distribution(trans) == category_distribution(trans)


def test_distribution_maps_to_rows_only_when_present():
    def to_rows(totals):
        return [(c.category, float(c.total)) for c in totals]

    assert category_distribution(sample()).map(to_rows).get_or_else([]) == [("Food", 300.0)]
    assert category_distribution(()).map(to_rows).get_or_else([]) == []
