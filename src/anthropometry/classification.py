"""
Status classification of growth z-scores.

Each indicator has a threshold ladder evaluated top-down: the first rule
whose comparison holds gives the label, otherwise the indicator's normal
label applies. The overall severity escalates on any single severe
indicator so one abnormal measurement is never masked by the others.
"""

from enum import Enum
from typing import Callable, Dict, Mapping, Tuple
import operator

import numpy as np

from .standards import Metric


class Severity(str, Enum):
    GREEN = "Green"
    YELLOW = "Yellow"
    RED = "Red"


Rule = Tuple[Callable, float, str]

LADDERS: Dict[Metric, Tuple[Rule, ...]] = {
    Metric.WEIGHT_FOR_AGE: (
        (operator.lt, -3.0, "Severely Underweight"),
        (operator.lt, -2.0, "Underweight"),
        (operator.gt, 1.0, "At risk of overweight"),
    ),
    Metric.HEIGHT_FOR_AGE: (
        (operator.lt, -3.0, "Severely Stunted"),
        (operator.lt, -2.0, "Stunted"),
        (operator.gt, 3.0, "Tall"),
    ),
    Metric.WEIGHT_FOR_HEIGHT: (
        (operator.lt, -3.0, "Severe Wasting"),
        (operator.lt, -2.0, "Wasting"),
        (operator.gt, 3.0, "Obese"),
        (operator.gt, 2.0, "Overweight"),
        (operator.gt, 1.0, "At risk of overweight"),
    ),
    Metric.HEAD_CIRCUMFERENCE: (
        (operator.lt, -2.0, "Microcephaly"),
        (operator.gt, 2.0, "Macrocephaly"),
    ),
    Metric.ARM_CIRCUMFERENCE: (
        (operator.lt, -3.0, "Severe malnutrition"),
        (operator.lt, -2.0, "Malnutrition"),
        (operator.gt, 2.0, "Overnutrition"),
    ),
    Metric.BMI_FOR_AGE: (
        (operator.lt, -3.0, "Severely thin"),
        (operator.lt, -2.0, "Thin"),
        (operator.gt, 3.0, "Obese"),
        (operator.gt, 2.0, "Overweight"),
        (operator.gt, 1.0, "At risk of overweight"),
    ),
}

NORMAL_LABELS: Dict[Metric, str] = {
    Metric.WEIGHT_FOR_AGE: "Normal",
    Metric.HEIGHT_FOR_AGE: "Normal",
    Metric.WEIGHT_FOR_HEIGHT: "Normal",
    Metric.HEAD_CIRCUMFERENCE: "Normal",
    Metric.ARM_CIRCUMFERENCE: "Good",
    Metric.BMI_FOR_AGE: "Good",
}

# Symmetric |z| bounds for the overall severity
RED_BOUND = 3.0
YELLOW_BOUND = 2.0
HEAD_CIRCUMFERENCE_RED_BOUND = 2.0


def classify(metric: Metric, z: float) -> str:
    """Label a single z-score with the metric's ladder."""
    for compare, bound, label in LADDERS[metric]:
        if compare(z, bound):
            return label
    return NORMAL_LABELS[metric]


def _red_bound(metric: Metric) -> float:
    if metric is Metric.HEAD_CIRCUMFERENCE:
        return HEAD_CIRCUMFERENCE_RED_BOUND
    return RED_BOUND


def overall_severity(z_scores: Mapping[Metric, float]) -> Severity:
    """
    Combine per-metric z-scores into one triage severity.

    Red if any z is outside ±3 (±2 for head circumference), otherwise Yellow
    if any z is outside ±2, otherwise Green. Red is checked across every
    metric before Yellow.
    """
    if any(abs(z) > _red_bound(metric) for metric, z in z_scores.items()):
        return Severity.RED
    if any(abs(z) > YELLOW_BOUND for z in z_scores.values()):
        return Severity.YELLOW
    return Severity.GREEN


def classify_array(metric: Metric, z: np.ndarray) -> np.ndarray:
    """Vectorized classify()."""
    z = np.asarray(z, dtype=np.float64)
    conditions = [compare(z, bound) for compare, bound, _ in LADDERS[metric]]
    choices = [label for _, _, label in LADDERS[metric]]
    return np.select(conditions, choices, default=NORMAL_LABELS[metric]).astype(object)


def severity_array(z_scores: Mapping[Metric, np.ndarray]) -> np.ndarray:
    """Vectorized overall_severity() over equally sized z-score arrays."""
    arrays = {metric: np.abs(np.asarray(z, dtype=np.float64)) for metric, z in z_scores.items()}
    n = len(next(iter(arrays.values()))) if arrays else 0

    red = np.zeros(n, dtype=bool)
    yellow = np.zeros(n, dtype=bool)
    for metric, abs_z in arrays.items():
        red |= abs_z > _red_bound(metric)
        yellow |= abs_z > YELLOW_BOUND

    return np.select(
        [red, yellow],
        [Severity.RED.value, Severity.YELLOW.value],
        default=Severity.GREEN.value,
    ).astype(object)
