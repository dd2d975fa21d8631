from datetime import date

from renewal_backend.repository import build_update, to_db
from renewal_backend.services.utils import add_months, display_date, month_bounds, month_label


def test_add_months_clamps_day():
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2026, 10, 17), 12) == date(2027, 10, 17)
    assert add_months(date(2026, 1, 15), -1) == date(2025, 12, 15)


def test_month_bounds_and_label():
    assert month_bounds(date(2026, 2, 10)) == (date(2026, 2, 1), date(2026, 2, 28))
    assert month_label(date(2026, 10, 1)) == "Oct 2026"


def test_display_date_is_us_short_form():
    assert display_date("2026-03-05") == "3/5/2026"
    assert display_date(date(2026, 12, 31)) == "12/31/2026"


def test_build_update_only_allowed_columns():
    sql, params = build_update("renewals", {"is_paid": True, "end_date": date(2026, 1, 2), "bogus": 1},
                               ("end_date", "is_paid"))
    assert sql == "UPDATE renewals SET is_paid=?, end_date=? WHERE id=?"
    assert params == [1, "2026-01-02"]
    assert to_db(False) == 0
