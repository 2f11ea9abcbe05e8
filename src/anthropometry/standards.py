"""
Growth Reference Store for WHO/Kemenkes child growth standards.

Holds LMS (Lambda-Mu-Sigma) calibration points per sex and growth indicator.
Age-indexed curves are sampled at a sparse set of ages in months; the
weight-for-height curve is sampled by length/height in cm. Tables are loaded
once from the packaged CSV and never mutated afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from importlib import resources
from typing import Dict, Iterable, List, Optional, Tuple
import functools
import logging

import numpy as np
import pandas as pd

from .config import REFERENCE_COLUMNS, REFERENCE_DATA_FILE, REFERENCE_DATA_PACKAGE


class Sex(str, Enum):
    MALE = "Male"
    FEMALE = "Female"

    @property
    def code(self) -> str:
        """Single-letter code used in the reference tables."""
        return "M" if self is Sex.MALE else "F"

    @classmethod
    def parse(cls, value: "Sex | str") -> "Sex":
        """
        Normalize a sex value from any of the field conventions.

        Accepts 'Male'/'Female', 'M'/'F' and the Indonesian registry codes
        'L' (laki-laki) / 'P' (perempuan), case-insensitive.

        Raises:
            ValueError: If the value is not recognized.
        """
        if isinstance(value, Sex):
            return value
        key = str(value).strip().upper()
        if key in _SEX_ALIASES:
            return _SEX_ALIASES[key]
        raise ValueError(
            f"Sex value {value!r} not recognized; expected Male/Female, M/F or L/P"
        )


_SEX_ALIASES = {
    "MALE": Sex.MALE,
    "M": Sex.MALE,
    "L": Sex.MALE,
    "FEMALE": Sex.FEMALE,
    "F": Sex.FEMALE,
    "P": Sex.FEMALE,
}


class Metric(str, Enum):
    WEIGHT_FOR_AGE = "weight_for_age"
    HEIGHT_FOR_AGE = "height_for_age"
    WEIGHT_FOR_HEIGHT = "weight_for_height"
    HEAD_CIRCUMFERENCE = "head_circumference"
    ARM_CIRCUMFERENCE = "arm_circumference"
    BMI_FOR_AGE = "bmi_for_age"

    @property
    def code(self) -> str:
        """Short table code (wfa, hfa, wfh, hcfa, acfa, bfa)."""
        return _METRIC_CODES[self]

    @property
    def independent_variable(self) -> str:
        """Axis the reference curve is sampled on: 'height' (cm) or 'age' (months)."""
        return "height" if self is Metric.WEIGHT_FOR_HEIGHT else "age"

    @property
    def indexed_by_height(self) -> bool:
        """True when the curve is looked up by height rather than age."""
        return self.independent_variable == "height"

    @classmethod
    def from_code(cls, code: str) -> "Metric":
        for metric, metric_code in _METRIC_CODES.items():
            if metric_code == code:
                return metric
        raise ValueError(f"Unknown metric code {code!r}")


_METRIC_CODES = {
    Metric.WEIGHT_FOR_AGE: "wfa",
    Metric.HEIGHT_FOR_AGE: "hfa",
    Metric.WEIGHT_FOR_HEIGHT: "wfh",
    Metric.HEAD_CIRCUMFERENCE: "hcfa",
    Metric.ARM_CIRCUMFERENCE: "acfa",
    Metric.BMI_FOR_AGE: "bfa",
}


@dataclass(frozen=True)
class LMSRecord:
    """
    One calibration point of a reference curve.

    Attributes:
        x: Independent variable (age in months, or height in cm for weight-for-height)
        L: Box-Cox power
        M: Median
        S: Coefficient of variation
    """

    x: float
    L: float
    M: float
    S: float


@dataclass(frozen=True)
class GrowthStandard:
    """
    A single (sex, metric) reference curve.

    Points are sorted strictly ascending on `x`. Spacing is not uniform, so
    consumers must search rather than index by age.

    Raises:
        ValueError: If points are empty, unsorted, duplicated, or have M/S <= 0.
    """

    sex: Sex
    metric: Metric
    points: Tuple[LMSRecord, ...]
    x: np.ndarray = field(init=False, repr=False, compare=False)
    L: np.ndarray = field(init=False, repr=False, compare=False)
    M: np.ndarray = field(init=False, repr=False, compare=False)
    S: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sex", Sex.parse(self.sex))
        object.__setattr__(self, "metric", Metric(self.metric))
        points = tuple(self.points)
        if not points:
            raise ValueError(f"Reference curve {self.key} has no points")

        columns = {
            name: np.array([getattr(p, name) for p in points], dtype=np.float64)
            for name in ("x", "L", "M", "S")
        }
        if np.any(np.diff(columns["x"]) <= 0):
            raise ValueError(
                f"Reference curve {self.key} must be sorted ascending with unique x"
            )
        if np.any(columns["M"] <= 0) or np.any(columns["S"] <= 0):
            raise ValueError(f"Non-positive M or S values in reference curve {self.key}")

        object.__setattr__(self, "points", points)
        for name, values in columns.items():
            values.setflags(write=False)
            object.__setattr__(self, name, values)

    @property
    def key(self) -> str:
        return f"{self.metric.code}_{self.sex.value.lower()}"


class ReferenceStore:
    """
    Read-only collection of growth standards keyed by (sex, metric).

    Lookup of a pair with no table returns None; the calculator treats that
    metric as not computed.
    """

    def __init__(self, standards: Iterable[GrowthStandard]) -> None:
        self._standards: Dict[Tuple[Sex, Metric], GrowthStandard] = {}
        for standard in standards:
            pair = (standard.sex, standard.metric)
            if pair in self._standards:
                raise ValueError(f"Duplicate reference curve {standard.key}")
            self._standards[pair] = standard

    def lookup(self, sex: Sex, metric: Metric) -> Optional[GrowthStandard]:
        return self._standards.get((sex, metric))

    def __contains__(self, pair: Tuple[Sex, Metric]) -> bool:
        return pair in self._standards

    def __iter__(self):
        return iter(self._standards.values())

    def __len__(self) -> int:
        return len(self._standards)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "ReferenceStore":
        """Build a store from a frame with columns sex, metric, x, L, M, S."""
        standards: List[GrowthStandard] = []
        for (sex_code, metric_code), group in df.groupby(["sex", "metric"], sort=False):
            group = group.sort_values("x")
            points = tuple(
                LMSRecord(x=float(row.x), L=float(row.L), M=float(row.M), S=float(row.S))
                for row in group.itertuples(index=False)
            )
            standards.append(
                GrowthStandard(
                    sex=Sex.parse(sex_code),
                    metric=Metric.from_code(metric_code),
                    points=points,
                )
            )
        return cls(standards)


def load_reference_data() -> pd.DataFrame:
    """
    Load the packaged LMS reference tables.

    Returns:
        DataFrame with columns sex, metric, x, L, M, S.

    Raises:
        FileNotFoundError: If the packaged CSV cannot be located.
        ValueError: If the file cannot be parsed.
    """
    try:
        with (
            resources.files(REFERENCE_DATA_PACKAGE)
            .joinpath(REFERENCE_DATA_FILE)
            .open("rb") as f
        ):
            return pd.read_csv(f)
    except FileNotFoundError:
        raise FileNotFoundError(
            "Growth reference data file not found. "
            "Ensure the anthropometry package is properly installed with its data files."
        ) from None
    except Exception as e:
        raise ValueError(
            f"Failed to load growth reference data: {e}. "
            "The reference data file may be corrupted or incompatible."
        ) from e


def validate_reference_frame(df: pd.DataFrame) -> bool:
    """
    Validate structure and ranges of reference data.

    Logs a warning for every problem found but doesn't raise. Missing
    (sex, metric) pairs are reported without failing validation, since the
    calculator degrades those metrics to "not computed".

    Args:
        df: Reference data frame

    Returns:
        True if the frame can be used to build a store, False otherwise
    """
    if df.empty:
        logging.warning("Loaded reference data is empty")
        return False

    missing_columns = [col for col in REFERENCE_COLUMNS if col not in df.columns]
    if missing_columns:
        logging.warning(f"Missing reference data columns: {missing_columns}")
        return False

    valid = True
    unknown_sex = sorted(set(df["sex"]) - {"M", "F"})
    if unknown_sex:
        logging.warning(f"Unknown sex codes in reference data: {unknown_sex}")
        valid = False

    known_metrics = {metric.code for metric in Metric}
    unknown_metrics = sorted(set(df["metric"]) - known_metrics)
    if unknown_metrics:
        logging.warning(f"Unknown metric codes in reference data: {unknown_metrics}")
        valid = False

    if np.any(df["x"] < 0):
        logging.warning("Negative independent-variable values found in reference data")
        valid = False
    if np.any(df["M"] <= 0):
        logging.warning("Non-positive M values in reference data")
        valid = False
    if np.any(df["S"] <= 0):
        logging.warning("Non-positive S values in reference data")
        valid = False

    present = set(zip(df["sex"], df["metric"]))
    missing_pairs = [
        f"{metric.code}_{sex.code}"
        for sex in Sex
        for metric in Metric
        if (sex.code, metric.code) not in present
    ]
    if missing_pairs:
        logging.warning(f"Missing expected reference curves: {missing_pairs}")

    return valid


def load_reference_store(df: Optional[pd.DataFrame] = None) -> ReferenceStore:
    """
    Build a validated ReferenceStore.

    Args:
        df: Reference frame; the packaged tables are loaded when omitted.

    Raises:
        ValueError: If the reference data fails validation.
    """
    if df is None:
        df = load_reference_data()
    if not validate_reference_frame(df):
        raise ValueError("Growth reference data failed integrity validation")
    return ReferenceStore.from_frame(df)


@functools.lru_cache(maxsize=1)
def default_store() -> ReferenceStore:
    """Packaged reference store, loaded once per process."""
    return load_reference_store()
