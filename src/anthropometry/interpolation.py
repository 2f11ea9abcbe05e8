"""
LMS parameter interpolation over sparse reference curves.
"""

from typing import Tuple

import numpy as np

from .standards import GrowthStandard, LMSRecord


def interpolate_lms(standard: GrowthStandard, x: float) -> LMSRecord:
    """
    Resolve LMS parameters at exactly `x` on a reference curve.

    Tabulated points are returned unmodified. Values outside the tabulated
    range clamp to the first/last point (no extrapolation). Between points,
    L, M and S are each interpolated linearly from the bracketing pair.

    Args:
        standard: Reference curve
        x: Age in months (height in cm for weight-for-height)

    Returns:
        LMSRecord at `x`
    """
    points = standard.points
    xs = standard.x

    idx = int(np.searchsorted(xs, x, side="left"))
    if idx < len(points) and xs[idx] == x:
        return points[idx]
    if idx == 0:
        return points[0]
    if idx == len(points):
        return points[-1]

    prev, nxt = points[idx - 1], points[idx]
    fraction = (x - prev.x) / (nxt.x - prev.x)
    return LMSRecord(
        x=float(x),
        L=prev.L + (nxt.L - prev.L) * fraction,
        M=prev.M + (nxt.M - prev.M) * fraction,
        S=prev.S + (nxt.S - prev.S) * fraction,
    )


def interpolate_lms_array(
    standard: GrowthStandard, x: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Vectorized interpolation of LMS parameters at many points.

    Same clamping and linear rule as interpolate_lms; np.interp holds the
    end values outside the tabulated range.

    Args:
        standard: Reference curve
        x: Ages in months (heights in cm for weight-for-height)

    Returns:
        Tuple of (L, M, S) arrays matching the input shape
    """
    x = np.asarray(x, dtype=np.float64)
    L = np.interp(x, standard.x, standard.L)
    M = np.interp(x, standard.x, standard.M)
    S = np.interp(x, standard.x, standard.S)
    return L, M, S
