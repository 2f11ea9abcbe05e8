"""
Anthropometric status calculation for children under five.

calculate_anthropometry() is the single entry point used by the measurement
service: it resolves LMS parameters for every growth indicator, computes
z-scores, labels each indicator and combines them into one triage severity.
calculate_anthropometry_frame() does the same for a batch of measurement
rows (offline sync uploads).
"""

from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional
import logging

import numpy as np
import pandas as pd
from pydantic import ValidationError

from .classification import (
    Severity,
    classify,
    classify_array,
    overall_severity,
    severity_array,
)
from .config import MAX_WEIGHT_KG, MIN_MEAN_HEIGHT_CM, FrameConfig
from .interpolation import interpolate_lms, interpolate_lms_array
from .standards import Metric, ReferenceStore, Sex, default_store
from .zscores import lms_zscore, zscore, zscore_to_percentile

WIRE_KEYS = {
    Metric.WEIGHT_FOR_AGE: "weightForAge",
    Metric.HEIGHT_FOR_AGE: "heightForAge",
    Metric.WEIGHT_FOR_HEIGHT: "weightForHeight",
    Metric.HEAD_CIRCUMFERENCE: "headCircumference",
    Metric.ARM_CIRCUMFERENCE: "armCircumference",
    Metric.BMI_FOR_AGE: "bmiForAge",
}


@dataclass(frozen=True)
class AnthropometryResult:
    """
    Z-scores, labels and overall severity for one measurement.

    The per-metric mappings are read-only views; equal results hash alike
    on severity and not_computed.

    Attributes:
        z_scores: Z-score per metric (0.0 for metrics without a reference table)
        labels: Status label per metric
        percentiles: Percentile per metric under the standard normal
        severity: Combined triage severity
        not_computed: Metrics that had no reference table
    """

    z_scores: Mapping[Metric, float] = field(hash=False)
    labels: Mapping[Metric, str] = field(hash=False)
    percentiles: Mapping[Metric, float] = field(hash=False)
    severity: Severity
    not_computed: FrozenSet[Metric] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        for name in ("z_scores", "labels", "percentiles"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        object.__setattr__(self, "not_computed", frozenset(self.not_computed))

    def to_dict(self) -> dict:
        """Wire shape persisted by the measurement service."""
        return {
            "perMetricLabel": {WIRE_KEYS[m]: label for m, label in self.labels.items()},
            "perMetricZScore": {WIRE_KEYS[m]: z for m, z in self.z_scores.items()},
            "overallSeverity": self.severity.value,
        }


def compute_bmi(weight_kg: float, height_cm: float) -> float:
    """BMI in kg/m² from weight in kg and height in cm."""
    return weight_kg / (height_cm / 100.0) ** 2


def calculate_anthropometry(
    age_months: float,
    weight_kg: float,
    height_cm: float,
    head_circ_cm: float,
    arm_circ_cm: float,
    sex: "Sex | str",
    store: Optional[ReferenceStore] = None,
) -> AnthropometryResult:
    """
    Calculate growth z-scores and status for one child measurement.

    Weight-for-height is resolved at the child's height; every other metric
    at the child's age. A metric without a reference table for this sex
    scores 0.0 and is reported in `not_computed`. Inputs are not validated:
    non-positive measurements give meaningless or non-finite z-scores.

    Args:
        age_months: Age in months (see calculate_age_in_months)
        weight_kg: Weight in kg
        height_cm: Length/height in cm
        head_circ_cm: Head circumference in cm
        arm_circ_cm: Mid-upper-arm circumference in cm
        sex: Sex or one of its accepted codes
        store: Reference store; the packaged WHO/Kemenkes tables by default

    Returns:
        AnthropometryResult for the measurement

    Raises:
        ValueError: If sex is not a recognized value
    """
    sex = Sex.parse(sex)
    if store is None:
        store = default_store()

    values = {
        Metric.WEIGHT_FOR_AGE: weight_kg,
        Metric.HEIGHT_FOR_AGE: height_cm,
        Metric.WEIGHT_FOR_HEIGHT: weight_kg,
        Metric.HEAD_CIRCUMFERENCE: head_circ_cm,
        Metric.ARM_CIRCUMFERENCE: arm_circ_cm,
        Metric.BMI_FOR_AGE: compute_bmi(weight_kg, height_cm),
    }

    z_scores: Dict[Metric, float] = {}
    not_computed = set()
    for metric, value in values.items():
        standard = store.lookup(sex, metric)
        if standard is None:
            logging.warning(
                f"Reference data not found for {metric.code}_{sex.code}; "
                f"{metric.value} z-score set to 0"
            )
            z_scores[metric] = 0.0
            not_computed.add(metric)
            continue
        x = height_cm if metric.indexed_by_height else age_months
        record = interpolate_lms(standard, x)
        z_scores[metric] = zscore(value, record.L, record.M, record.S)

    return AnthropometryResult(
        z_scores=z_scores,
        labels={metric: classify(metric, z) for metric, z in z_scores.items()},
        percentiles={metric: zscore_to_percentile(z) for metric, z in z_scores.items()},
        severity=overall_severity(z_scores),
        not_computed=frozenset(not_computed),
    )


def calculate_age_in_months(birth_date: date, on: Optional[date] = None) -> int:
    """
    Whole calendar months between birth_date and `on` (today by default).

    A month counts only once its day-of-month has been reached; the result
    is never negative.
    """
    if on is None:
        on = date.today()
    months = (on.year - birth_date.year) * 12 + (on.month - birth_date.month)
    if on.day < birth_date.day:
        months -= 1
    return max(0, months)


def _log_unit_warnings(
    age: np.ndarray, height: np.ndarray, weight: np.ndarray, store: ReferenceStore
) -> None:
    """Log warnings for potential unit mismatches and out-of-range ages."""
    if height.size and np.nanmean(height) < MIN_MEAN_HEIGHT_CM:
        logging.warning(
            "Height values have mean <20 - heights may be in metres instead of cm"
        )
    if weight.size and np.nanmax(weight) > MAX_WEIGHT_KG:
        logging.warning(
            f"Weight values >{MAX_WEIGHT_KG:.0f} kg detected - may be grams or lbs instead of kg"
        )

    max_ages = [s.x[-1] for s in store if not s.metric.indexed_by_height]
    if max_ages and age.size and np.nanmax(age) > min(max_ages):
        logging.warning(
            f"Age values beyond {min(max_ages):.0f} months detected - "
            "LMS parameters clamp to the last tabulated age"
        )


def _validate_frame(df: pd.DataFrame, config: FrameConfig) -> None:
    duplicate = config.duplicate_column()
    if duplicate is not None:
        raise ValueError(
            f"Configuration must specify unique column names ('{duplicate}' repeated)"
        )
    for col in config.columns():
        if col not in df.columns:
            raise ValueError(f"Column '{col}' does not exist in DataFrame")


def _validate_measurements(df: pd.DataFrame, config: FrameConfig) -> None:
    """Reject rows whose measurements would give non-finite or meaningless z-scores."""
    age = pd.to_numeric(df[config.age_col], errors="coerce")
    bad = ~np.isfinite(age) | (age < 0)
    if bad.any():
        raise ValueError(
            f"Column '{config.age_col}' has missing, non-finite or negative values "
            f"at index {df.index[bad.to_numpy()].tolist()}"
        )
    for col in config.measurement_columns():
        values = pd.to_numeric(df[col], errors="coerce")
        bad = ~np.isfinite(values) | (values <= 0)
        if bad.any():
            raise ValueError(
                f"Column '{col}' has missing, non-finite or non-positive values "
                f"at index {df.index[bad.to_numpy()].tolist()}"
            )


def calculate_anthropometry_frame(
    df: pd.DataFrame,
    config: Optional[FrameConfig] = None,
    store: Optional[ReferenceStore] = None,
    **column_overrides: str,
) -> pd.DataFrame:
    """
    Calculate growth z-scores and statuses for many measurement rows.

    Row results match calculate_anthropometry() on the same values.

    Usage:
        statuses = calculate_anthropometry_frame(df, sex_col="jenis_kelamin")

    Args:
        df: Measurement rows
        config: Column mapping; built from column_overrides when omitted
        store: Reference store; the packaged tables by default
        **column_overrides: FrameConfig fields, e.g. age_col="umur_bulan"

    Returns:
        DataFrame with the input index and columns `<metric>_z`,
        `<metric>_status` per metric plus `status`

    Raises:
        ValueError: If the configuration is invalid, a mapped column is
            missing, a measurement is missing, non-finite or non-positive,
            or a sex value is not recognized
    """
    if config is None:
        try:
            config = FrameConfig(**column_overrides)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e}") from e
    if store is None:
        store = default_store()

    _validate_frame(df, config)
    _validate_measurements(df, config)

    n = len(df)
    sex = np.array([Sex.parse(s).code for s in df[config.sex_col]], dtype=object)
    age = np.asarray(df[config.age_col], dtype=np.float64)
    weight = np.asarray(df[config.weight_col], dtype=np.float64)
    height = np.asarray(df[config.height_col], dtype=np.float64)
    values = {
        Metric.WEIGHT_FOR_AGE: weight,
        Metric.HEIGHT_FOR_AGE: height,
        Metric.WEIGHT_FOR_HEIGHT: weight,
        Metric.HEAD_CIRCUMFERENCE: np.asarray(df[config.head_circ_col], dtype=np.float64),
        Metric.ARM_CIRCUMFERENCE: np.asarray(df[config.arm_circ_col], dtype=np.float64),
        Metric.BMI_FOR_AGE: compute_bmi(weight, height),
    }

    if config.validate_units:
        _log_unit_warnings(age, height, weight, store)

    z_scores: Dict[Metric, np.ndarray] = {}
    for metric, measured in values.items():
        z = np.zeros(n, dtype=np.float64)
        for sex_value in Sex:
            sex_mask = sex == sex_value.code
            if not np.any(sex_mask):
                continue
            standard = store.lookup(sex_value, metric)
            if standard is None:
                logging.warning(
                    f"Reference data not found for {metric.code}_{sex_value.code}; "
                    f"{metric.value} z-scores set to 0"
                )
                continue
            x = height[sex_mask] if metric.indexed_by_height else age[sex_mask]
            L, M, S = interpolate_lms_array(standard, x)
            z[sex_mask] = lms_zscore(
                np.ascontiguousarray(measured[sex_mask]), L, M, S
            )
        z_scores[metric] = z

    result = pd.DataFrame(index=df.index)
    for metric, z in z_scores.items():
        result[f"{metric.value}_z"] = z
        result[f"{metric.value}_status"] = classify_array(metric, z)
    result["status"] = severity_array(z_scores)
    return result
