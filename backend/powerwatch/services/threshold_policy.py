"""Threshold policy — pure mapping from one reading to alert candidates.

Every check is a row in ``PHASE_CHECKS``: a reading field, its phase label and
the rule that applies. Evaluation walks the table; nothing here touches the
database, so the same function serves the generator and tests.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Any, Callable

from powerwatch.models.alert import AlertSeverity, AlertType


@dataclass(frozen=True)
class ThresholdRule:
    alert_type: AlertType
    severity: AlertSeverity
    breached: Callable[[float, float], bool]
    threshold_attr: str  # attribute on the config snapshot
    quantity: str
    direction: str  # "exceeded maximum limit" / "below minimum limit"
    symbol: str  # ">" or "<"
    unit: str
    precision: int


@dataclass(frozen=True)
class PhaseCheck:
    field: str
    phase: str
    rules: tuple[ThresholdRule, ...]


@dataclass(frozen=True)
class AlertCandidate:
    alert_type: AlertType
    severity: AlertSeverity
    field: str
    phase: str
    value: float
    threshold: float
    message: str


OVER_VOLTAGE = ThresholdRule(
    AlertType.OVER_VOLTAGE, AlertSeverity.CRITICAL, operator.gt,
    "voltage_max", "voltage", "exceeded maximum limit", ">", "V", 1,
)
UNDER_VOLTAGE = ThresholdRule(
    AlertType.UNDER_VOLTAGE, AlertSeverity.WARNING, operator.lt,
    "voltage_min", "voltage", "below minimum limit", "<", "V", 1,
)
OVER_CURRENT = ThresholdRule(
    AlertType.OVER_CURRENT, AlertSeverity.CRITICAL, operator.gt,
    "current_max", "current", "exceeded maximum limit", ">", "A", 2,
)
LOW_POWER_FACTOR = ThresholdRule(
    AlertType.LOW_POWER_FACTOR, AlertSeverity.WARNING, operator.lt,
    "pf_min", "power factor", "below minimum", "<", "", 3,
)

PHASE_LABELS = {"r": "R", "y": "Y", "b": "B"}

PHASE_CHECKS: tuple[PhaseCheck, ...] = tuple(
    PhaseCheck(f"{prefix}_{suffix}", label, rules)
    for suffix, rules in (
        ("voltage", (OVER_VOLTAGE, UNDER_VOLTAGE)),
        ("current", (OVER_CURRENT,)),
        ("power_factor", (LOW_POWER_FACTOR,)),
    )
    for prefix, label in PHASE_LABELS.items()
)


def evaluate_reading(reading: Any, config: Any, device_name: str) -> list[AlertCandidate]:
    """
    Check one reading against the configured thresholds.

    ``reading`` may be a Reading row or any object exposing the phase fields
    as attributes (a mapping is accepted too). Missing values are skipped,
    never read as zero. ``config`` needs voltage_max, voltage_min,
    current_max and pf_min.
    """
    candidates: list[AlertCandidate] = []
    for check in PHASE_CHECKS:
        value = _field_value(reading, check.field)
        if value is None:
            continue
        for rule in check.rules:
            threshold = float(getattr(config, rule.threshold_attr))
            if rule.breached(value, threshold):
                candidates.append(AlertCandidate(
                    alert_type=rule.alert_type,
                    severity=rule.severity,
                    field=check.field,
                    phase=check.phase,
                    value=value,
                    threshold=threshold,
                    message=render_message(rule, device_name, check.phase, value, threshold),
                ))
    return candidates


def render_message(
    rule: ThresholdRule, device_name: str, phase: str, value: float, threshold: float
) -> str:
    return (
        f"{device_name}: Phase {phase} {rule.quantity} {rule.direction} "
        f"({value:.{rule.precision}f}{rule.unit} {rule.symbol} {threshold:g}{rule.unit})"
    )


def _field_value(reading: Any, field: str) -> float | None:
    if isinstance(reading, dict):
        raw = reading.get(field)
    else:
        raw = getattr(reading, field, None)
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None
