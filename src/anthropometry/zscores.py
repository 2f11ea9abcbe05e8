"""
Z-Score Calculation Utilities for Growth Metrics

This module converts raw anthropometric measurements into age- and
sex-specific z-scores using the LMS method, and back again. Scalar
functions serve single measurements; lms_zscore is the compiled,
vectorized form used for batches.
"""

from typing import Dict, Iterable
import math

import numpy as np
from numba import jit
from scipy import stats

from .config import L_ZERO_THRESHOLD, Z_SCORE_BOUNDS
from .interpolation import interpolate_lms
from .standards import GrowthStandard


def zscore(y: float, L: float, M: float, S: float) -> float:
    """
    Calculate the LMS z-score of a single measurement.

    Implements the LMS method from Cole (1990) as adopted by the WHO Child
    Growth Standards (2006):

    For L ≠ 0: z = ((y/M)^L - 1) / (L * S)
    For L ≈ 0: z = ln(y/M) / S

    The caller is responsible for y > 0; M > 0 is guaranteed by the
    reference data.

    Args:
        y: Observed value (kg, cm or kg/m²)
        L: Box-Cox power
        M: Median
        S: Coefficient of variation

    Returns:
        Z-score (0 at the median)
    """
    if abs(L) < L_ZERO_THRESHOLD:
        return math.log(y / M) / S
    return ((y / M) ** L - 1.0) / (L * S)


@jit(nopython=True, cache=True)
def lms_zscore(
    X: np.ndarray, L: np.ndarray, M: np.ndarray, S: np.ndarray
) -> np.ndarray:
    """
    Calculate LMS z-scores over 1D float64 arrays.

    Same transform as zscore(); non-finite inputs propagate as NaN.

    Args:
        X: Observed values
        L: Box-Cox power per observation
        M: Median per observation
        S: Coefficient of variation per observation

    Returns:
        Z-scores, one per observation
    """
    n = X.shape[0]
    z = np.empty(n, dtype=np.float64)
    for i in range(n):
        if not (np.isfinite(X[i]) and np.isfinite(M[i]) and S[i] > 0):
            z[i] = np.nan
        elif abs(L[i]) < L_ZERO_THRESHOLD:
            z[i] = np.log(X[i] / M[i]) / S[i]
        else:
            z[i] = ((X[i] / M[i]) ** L[i] - 1.0) / (L[i] * S[i])
    return z


def lms_value(L: float, M: float, S: float, z: float) -> float:
    """
    Measurement value at a given z-score (inverse LMS).

    Formula: M * (1 + L*S*z)^(1/L), or M * exp(S*z) when L ≈ 0.
    """
    if abs(L) < L_ZERO_THRESHOLD:
        return M * math.exp(S * z)
    return M * ((1 + L * S * z) ** (1 / L))


def zscore_to_percentile(z: float) -> float:
    """Percentile (0-100) of a z-score under the standard normal."""
    return float(stats.norm.cdf(z) * 100)


def sd_cutoffs(
    standard: GrowthStandard, x: float, z_values: Iterable[float] = Z_SCORE_BOUNDS
) -> Dict[float, float]:
    """
    Measurement values on each SD line of a reference curve at `x`.

    Used to show field workers the -3SD/-2SD thresholds for a child's age
    (or height) next to the computed status.

    Args:
        standard: Reference curve
        x: Age in months (height in cm for weight-for-height)
        z_values: SD lines to evaluate

    Returns:
        Dict mapping each z value to the measurement at that line
    """
    record = interpolate_lms(standard, x)
    return {z: lms_value(record.L, record.M, record.S, z) for z in z_values}
