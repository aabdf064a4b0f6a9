"""Tests for the threshold policy — candidates, severities, messages."""

from types import SimpleNamespace

import pytest

from powerwatch.models.alert import AlertSeverity, AlertType
from powerwatch.services.threshold_policy import PHASE_CHECKS, evaluate_reading

CONFIG = SimpleNamespace(voltage_max=250.0, voltage_min=200.0, current_max=30.0, pf_min=0.9)


def _types(candidates):
    return sorted((c.alert_type.value, c.phase) for c in candidates)


def test_nominal_reading_yields_nothing():
    reading = {"r_voltage": 230.0, "y_voltage": 231.0, "b_voltage": 229.5,
               "r_current": 10.0, "r_power_factor": 0.95}
    assert evaluate_reading(reading, CONFIG, "Meter") == []


def test_over_voltage_is_critical_with_message():
    [candidate] = evaluate_reading({"r_voltage": 260.0}, CONFIG, "Meter")
    assert candidate.alert_type == AlertType.OVER_VOLTAGE
    assert candidate.severity == AlertSeverity.CRITICAL
    assert candidate.phase == "R"
    assert candidate.value == 260.0
    assert candidate.threshold == 250.0
    assert candidate.message == "Meter: Phase R voltage exceeded maximum limit (260.0V > 250V)"


def test_under_voltage_is_warning():
    [candidate] = evaluate_reading({"b_voltage": 190.0}, CONFIG, "Meter")
    assert candidate.alert_type == AlertType.UNDER_VOLTAGE
    assert candidate.severity == AlertSeverity.WARNING
    assert candidate.message == "Meter: Phase B voltage below minimum limit (190.0V < 200V)"


def test_over_current_two_decimals():
    [candidate] = evaluate_reading({"y_current": 31.5}, CONFIG, "Pump")
    assert candidate.alert_type == AlertType.OVER_CURRENT
    assert candidate.severity == AlertSeverity.CRITICAL
    assert candidate.message == "Pump: Phase Y current exceeded maximum limit (31.50A > 30A)"


def test_low_power_factor_three_decimals():
    [candidate] = evaluate_reading({"r_power_factor": 0.85}, CONFIG, "Meter")
    assert candidate.alert_type == AlertType.LOW_POWER_FACTOR
    assert candidate.severity == AlertSeverity.WARNING
    assert candidate.message == "Meter: Phase R power factor below minimum (0.850 < 0.9)"


def test_boundaries_are_not_breaches():
    reading = {"r_voltage": 250.0, "y_voltage": 200.0, "b_current": 30.0, "r_power_factor": 0.9}
    assert evaluate_reading(reading, CONFIG, "Meter") == []


def test_missing_values_are_skipped_not_zero():
    # A missing power factor must not read as 0 < pf_min
    reading = {"r_voltage": None, "r_power_factor": None, "y_current": "n/a"}
    assert evaluate_reading(reading, CONFIG, "Meter") == []


def test_each_phase_evaluated_independently():
    reading = {"r_voltage": 260.0, "y_voltage": 190.0, "b_voltage": 255.0}
    assert _types(evaluate_reading(reading, CONFIG, "Meter")) == [
        ("over_voltage", "B"),
        ("over_voltage", "R"),
        ("under_voltage", "Y"),
    ]


def test_attribute_objects_are_accepted():
    reading = SimpleNamespace(r_voltage=None, y_voltage=None, b_voltage=None,
                              r_current=40.0, y_current=None, b_current=None)
    [candidate] = evaluate_reading(reading, CONFIG, "Meter")
    assert candidate.field == "r_current"


@pytest.mark.parametrize("threshold_attr", ["voltage_max", "voltage_min", "current_max", "pf_min"])
def test_every_threshold_is_used(threshold_attr):
    used = {rule.threshold_attr for check in PHASE_CHECKS for rule in check.rules}
    assert threshold_attr in used


def test_phase_table_covers_three_phases():
    assert {check.phase for check in PHASE_CHECKS} == {"R", "Y", "B"}
    assert len(PHASE_CHECKS) == 9
