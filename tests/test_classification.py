import numpy as np
import pytest
from hypothesis import given, strategies as st, settings

from anthropometry.classification import (
    LADDERS,
    NORMAL_LABELS,
    Severity,
    classify,
    classify_array,
    overall_severity,
    severity_array,
)
from anthropometry.standards import Metric


@pytest.mark.parametrize(
    "metric,z,expected",
    [
        (Metric.WEIGHT_FOR_AGE, -3.5, "Severely Underweight"),
        (Metric.WEIGHT_FOR_AGE, -3.0, "Underweight"),
        (Metric.WEIGHT_FOR_AGE, -2.0, "Normal"),
        (Metric.WEIGHT_FOR_AGE, 1.0, "Normal"),
        (Metric.WEIGHT_FOR_AGE, 1.2, "At risk of overweight"),
        (Metric.HEIGHT_FOR_AGE, -3.01, "Severely Stunted"),
        (Metric.HEIGHT_FOR_AGE, -2.5, "Stunted"),
        (Metric.HEIGHT_FOR_AGE, 2.9, "Normal"),
        (Metric.HEIGHT_FOR_AGE, 3.1, "Tall"),
        (Metric.WEIGHT_FOR_HEIGHT, -3.2, "Severe Wasting"),
        (Metric.WEIGHT_FOR_HEIGHT, -2.1, "Wasting"),
        (Metric.WEIGHT_FOR_HEIGHT, 0.0, "Normal"),
        (Metric.WEIGHT_FOR_HEIGHT, 1.5, "At risk of overweight"),
        (Metric.WEIGHT_FOR_HEIGHT, 2.5, "Overweight"),
        (Metric.WEIGHT_FOR_HEIGHT, 3.5, "Obese"),
        (Metric.HEAD_CIRCUMFERENCE, -2.1, "Microcephaly"),
        (Metric.HEAD_CIRCUMFERENCE, 2.0, "Normal"),
        (Metric.HEAD_CIRCUMFERENCE, 2.1, "Macrocephaly"),
        (Metric.ARM_CIRCUMFERENCE, -3.1, "Severe malnutrition"),
        (Metric.ARM_CIRCUMFERENCE, -2.1, "Malnutrition"),
        (Metric.ARM_CIRCUMFERENCE, 0.5, "Good"),
        (Metric.ARM_CIRCUMFERENCE, 2.1, "Overnutrition"),
        (Metric.BMI_FOR_AGE, -3.1, "Severely thin"),
        (Metric.BMI_FOR_AGE, -2.1, "Thin"),
        (Metric.BMI_FOR_AGE, 1.0, "Good"),
        (Metric.BMI_FOR_AGE, 1.1, "At risk of overweight"),
        (Metric.BMI_FOR_AGE, 2.1, "Overweight"),
        (Metric.BMI_FOR_AGE, 3.1, "Obese"),
    ],
)
def test_tc001_classify_ladders(metric: Metric, z: float, expected: str) -> None:
    """Each ladder labels its thresholds top-down"""
    assert classify(metric, z) == expected


def test_tc002_every_metric_has_a_ladder() -> None:
    """All metrics are classifiable and z = 0 is the normal label"""
    for metric in Metric:
        assert metric in LADDERS
        assert classify(metric, 0.0) == NORMAL_LABELS[metric]


@pytest.mark.parametrize(
    "z_scores,expected",
    [
        ({Metric.WEIGHT_FOR_AGE: -3.5}, Severity.RED),
        ({Metric.WEIGHT_FOR_AGE: 3.01}, Severity.RED),
        ({Metric.WEIGHT_FOR_AGE: -3.0}, Severity.YELLOW),
        ({Metric.WEIGHT_FOR_AGE: 3.0}, Severity.YELLOW),
        ({Metric.WEIGHT_FOR_AGE: -2.5}, Severity.YELLOW),
        ({Metric.WEIGHT_FOR_AGE: -2.0}, Severity.GREEN),
        ({Metric.WEIGHT_FOR_AGE: 2.0}, Severity.GREEN),
        ({Metric.HEAD_CIRCUMFERENCE: -2.1}, Severity.RED),
        ({Metric.HEAD_CIRCUMFERENCE: 2.1}, Severity.RED),
        ({Metric.HEAD_CIRCUMFERENCE: 2.0}, Severity.GREEN),
        ({Metric.WEIGHT_FOR_AGE: -2.5, Metric.HEIGHT_FOR_AGE: -3.5}, Severity.RED),
        ({Metric.WEIGHT_FOR_HEIGHT: 2.5, Metric.BMI_FOR_AGE: 0.0}, Severity.YELLOW),
        ({metric: 0.0 for metric in Metric}, Severity.GREEN),
    ],
)
def test_tc003_overall_severity(z_scores, expected) -> None:
    """Red dominates Yellow dominates Green"""
    assert overall_severity(z_scores) is expected


z_value = st.floats(min_value=-6.0, max_value=6.0, allow_nan=False)


@settings(max_examples=300)
@given(st.fixed_dictionaries({metric: z_value for metric in Metric}))
def test_tc004_severity_dominance_property(z_scores) -> None:
    """Severity follows the triage rule for any combination of z-scores"""
    red = any(z < -3 or z > 3 for z in z_scores.values()) or not (
        -2 <= z_scores[Metric.HEAD_CIRCUMFERENCE] <= 2
    )
    yellow = any(-3 <= z < -2 or 2 < z <= 3 for z in z_scores.values())

    severity = overall_severity(z_scores)
    if red:
        assert severity is Severity.RED
    elif yellow:
        assert severity is Severity.YELLOW
    else:
        assert severity is Severity.GREEN


def test_tc005_classify_array_matches_scalar() -> None:
    """Vectorized labels equal scalar labels"""
    z = np.array([-3.5, -3.0, -2.5, -2.0, 0.0, 1.0, 1.5, 2.0, 2.5, 3.0, 3.5])
    for metric in Metric:
        labels = classify_array(metric, z)
        assert list(labels) == [classify(metric, v) for v in z]


def test_tc006_severity_array_matches_scalar() -> None:
    """Vectorized severity equals scalar severity row by row"""
    rng = np.random.default_rng(7)
    arrays = {metric: rng.uniform(-4, 4, size=50) for metric in Metric}
    result = severity_array(arrays)
    for i in range(50):
        row = {metric: float(values[i]) for metric, values in arrays.items()}
        assert result[i] == overall_severity(row).value


def test_tc007_severity_values_are_strings() -> None:
    """Severity persists as its plain string value"""
    assert Severity.RED.value == "Red"
    assert Severity("Yellow") is Severity.YELLOW
