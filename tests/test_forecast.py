from datetime import date

from expense_tracker.forecast import (
    Forecast,
    forecast_confidence,
    generate_forecast,
    predict_next_month_change,
    weighted_average,
    year_end_projection,
)
from expense_tracker.storage import EntryStore

TODAY = date(2024, 3, 15)


def _history_store():
    store = EntryStore()
    store.add(1000, 'income', 'FutureGoals', '2024-01-01')
    store.add(100, 'expense', 'Meals', '2024-01-05')
    store.add(1000, 'income', 'FutureGoals', '2024-02-01')
    store.add(200, 'expense', 'Meals', '2024-02-05')
    # Current month never feeds the forecast
    store.add(50, 'expense', 'Meals', '2024-03-05')
    return store


def test_weighted_average_weights_recent_values_more():
    assert weighted_average([]) == 0
    assert weighted_average([100]) == 100
    assert weighted_average([200, 100]) == 167
    assert weighted_average([300, 200, 100]) == 233


def test_confidence_levels():
    assert forecast_confidence([]) == 'low'
    assert forecast_confidence([100]) == 'low'
    assert forecast_confidence([100, 200]) == 'medium'
    assert forecast_confidence([100, 200, 300]) == 'medium'
    assert forecast_confidence([100, 100, 100, 100]) == 'high'
    assert forecast_confidence([100, 300, 100, 300]) == 'low'
    assert forecast_confidence([100, 0, 0, 0]) == 'low'


def test_forecast_without_history_is_all_zero():
    assert generate_forecast(EntryStore(), TODAY) == Forecast(
        predicted_expenses=0,
        predicted_savings=0,
        predicted_income=0,
        confidence='low',
        based_on_months=0,
    )


def test_forecast_from_previous_months():
    forecast = generate_forecast(_history_store(), TODAY)
    assert forecast.predicted_income == 1000
    assert forecast.predicted_expenses == 167
    assert forecast.predicted_savings == 833
    assert forecast.confidence == 'medium'
    assert forecast.based_on_months == 2


def test_year_end_projection_adds_forecast_for_remaining_months():
    projection = year_end_projection(_history_store(), TODAY)
    assert projection.months_remaining == 9
    assert projection.projected_yearly_income == 2000 + 1000 * 9
    assert projection.projected_yearly_expenses == 350 + 167 * 9
    assert projection.projected_yearly_savings == (
        projection.projected_yearly_income - projection.projected_yearly_expenses
    )


def test_year_end_projection_in_december():
    projection = year_end_projection(EntryStore(), date(2024, 12, 31))
    assert projection.months_remaining == 0
    assert projection.projected_yearly_income == 0


def test_predict_next_month_change_rising():
    store = EntryStore()
    store.add(100, 'expense', 'Meals', '2023-12-05')
    store.add(200, 'expense', 'Meals', '2024-01-05')
    store.add(300, 'expense', 'Meals', '2024-02-05')
    change = predict_next_month_change(store, TODAY)
    assert change.expense_change == 100
    assert change.direction == 'up'
    assert change.percent_change == 33


def test_predict_next_month_change_falling_and_flat():
    store = EntryStore()
    store.add(300, 'expense', 'Meals', '2023-12-05')
    store.add(200, 'expense', 'Meals', '2024-01-05')
    store.add(100, 'expense', 'Meals', '2024-02-05')
    change = predict_next_month_change(store, TODAY)
    assert change.direction == 'down'
    assert change.percent_change == -100

    flat = predict_next_month_change(EntryStore(), TODAY)
    assert (flat.expense_change, flat.direction, flat.percent_change) == (0, 'stable', 0)
