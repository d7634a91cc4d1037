from datetime import date

from smartwater.domain.maintenance.recurrence import generate_recurring_dates, sunday_based_weekday


def test_sunday_based_weekday():
    assert sunday_based_weekday(date(2025, 6, 1)) == 0  # Sunday
    assert sunday_based_weekday(date(2025, 6, 7)) == 6  # Saturday


def test_weekly_aligns_to_requested_day():
    # 2025-06-02 is a Monday; ask for Wednesdays
    dates = generate_recurring_dates(date(2025, 6, 2), date(2025, 6, 30), "weekly", day_of_week=3)
    assert dates == [date(2025, 6, 4), date(2025, 6, 11), date(2025, 6, 18), date(2025, 6, 25)]


def test_bi_weekly_includes_end_date():
    dates = generate_recurring_dates(date(2025, 6, 1), date(2025, 6, 29), "bi_weekly")
    assert dates == [date(2025, 6, 1), date(2025, 6, 15), date(2025, 6, 29)]


def test_monthly_does_not_drift_after_short_months():
    dates = generate_recurring_dates(date(2025, 1, 31), date(2025, 5, 31), "monthly")
    assert dates == [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31), date(2025, 4, 30), date(2025, 5, 31)]


def test_quarterly():
    dates = generate_recurring_dates(date(2025, 1, 15), date(2025, 12, 31), "quarterly")
    assert dates == [date(2025, 1, 15), date(2025, 4, 15), date(2025, 7, 15), date(2025, 10, 15)]


def test_unknown_frequency_falls_back_to_weekly():
    dates = generate_recurring_dates(date(2025, 6, 1), date(2025, 6, 10), "whenever")
    assert dates == [date(2025, 6, 1), date(2025, 6, 8)]


def test_empty_when_window_ends_before_first_visit():
    assert generate_recurring_dates(date(2025, 6, 2), date(2025, 6, 3), "weekly", day_of_week=5) == []
