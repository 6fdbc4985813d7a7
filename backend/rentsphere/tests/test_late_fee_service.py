from datetime import datetime, timedelta

from rentsphere.services.late_fee_service import (
	calculate_late_fee,
	get_return_window_remaining,
	is_return_window_open,
)

END = datetime(2026, 3, 1, 12, 0, 0)


def test_within_window_has_no_fee():
	result = calculate_late_fee(END, END + timedelta(hours=20), 100)
	assert result["late_fee"] == 0
	assert result["is_late"] is False


def test_grace_period_charges_half_day():
	result = calculate_late_fee(END, END + timedelta(hours=40), 100)
	assert result["late_fee"] == 50
	assert result["days_late"] == 0.5
	assert result["hours_late"] == 4
	assert result["is_late"] is True


def test_partial_day_after_grace_rounds_up():
	result = calculate_late_fee(END, END + timedelta(hours=50), 100)
	assert result["late_fee"] == 150
	assert result["days_late"] == 1.5


def test_full_days_after_grace():
	# 36h window + 12h grace + exactly 48h
	result = calculate_late_fee(END, END + timedelta(hours=96), 100)
	assert result["late_fee"] == 250
	assert result["days_late"] == 2.5


def test_exactly_at_window_edge_is_free():
	result = calculate_late_fee(END, END + timedelta(hours=36), 100)
	assert result["is_late"] is False


def test_invalid_inputs_coerce_to_zero():
	nan_rate = calculate_late_fee(END, END + timedelta(hours=50), float("nan"))
	assert nan_rate["late_fee"] == 0
	assert nan_rate["is_late"] is True

	assert calculate_late_fee(END, END + timedelta(hours=50), None)["late_fee"] == 0
	assert calculate_late_fee(END, END + timedelta(hours=50), "abc")["late_fee"] == 0
	assert calculate_late_fee(None, END, 100) == {"late_fee": 0.0, "hours_late": 0.0, "days_late": 0.0, "is_late": False}


def test_return_window_states():
	assert get_return_window_remaining(END, END - timedelta(hours=1))["status"] == "not_started"

	open_window = get_return_window_remaining(END, END + timedelta(hours=10))
	assert open_window["status"] == "open"
	assert open_window["hours_remaining"] == 26

	overdue = get_return_window_remaining(END, END + timedelta(hours=40))
	assert overdue["status"] == "overdue"
	assert overdue["hours_overdue"] == 4


def test_is_return_window_open():
	assert is_return_window_open(END, END + timedelta(hours=35)) is True
	assert is_return_window_open(END, END + timedelta(hours=37)) is False
