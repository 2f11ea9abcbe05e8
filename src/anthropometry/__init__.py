"""
Anthropometric status calculator for child-nutrition field data.

Computes WHO/Kemenkes LMS z-scores for six growth indicators and a combined
triage severity.
"""

from .calculator import (
    AnthropometryResult,
    calculate_age_in_months,
    calculate_anthropometry,
    calculate_anthropometry_frame,
)
from .classification import Severity, classify, overall_severity
from .standards import (
    GrowthStandard,
    LMSRecord,
    Metric,
    ReferenceStore,
    Sex,
    default_store,
)

__all__ = [
    "AnthropometryResult",
    "GrowthStandard",
    "LMSRecord",
    "Metric",
    "ReferenceStore",
    "Severity",
    "Sex",
    "calculate_age_in_months",
    "calculate_anthropometry",
    "calculate_anthropometry_frame",
    "classify",
    "default_store",
    "overall_severity",
]
