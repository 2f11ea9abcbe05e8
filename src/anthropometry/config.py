"""
Configuration constants for the anthropometric status calculator.
"""

from typing import Optional

from pydantic import BaseModel, field_validator

# LMS transform
L_ZERO_THRESHOLD = 1e-7

# Packaged reference data
REFERENCE_DATA_PACKAGE = "anthropometry.data"
REFERENCE_DATA_FILE = "lms_tables.csv"
REFERENCE_COLUMNS = ("sex", "metric", "x", "L", "M", "S")

# SD lines reported alongside a reference point
Z_SCORE_BOUNDS = [-3, -2, -1, 0, 1, 2, 3]

# Batch unit sanity checks (children under five)
MIN_MEAN_HEIGHT_CM = 20.0
MAX_WEIGHT_KG = 60.0


class FrameConfig(BaseModel):
    """
    Column mapping for batch evaluation of measurement rows.

    Attributes:
        age_col (str): Age in whole months ('age_months' by default).
        sex_col (str): Sex column. Accepted values: Male/Female, M/F, L/P.
        weight_col (str): Weight in kg.
        height_col (str): Length/height in cm.
        head_circ_col (str): Head circumference in cm.
        arm_circ_col (str): Mid-upper-arm circumference in cm.
        validate_units (bool): Log warnings for values that look like the wrong unit.
    """

    age_col: str = "age_months"
    sex_col: str = "sex"
    weight_col: str = "weight_kg"
    height_col: str = "height_cm"
    head_circ_col: str = "head_circ_cm"
    arm_circ_col: str = "arm_circ_cm"
    validate_units: bool = True

    @field_validator(
        "age_col", "sex_col", "weight_col", "height_col", "head_circ_col", "arm_circ_col"
    )
    @classmethod
    def validate_column_names(cls, v: str) -> str:
        """Ensure column names are valid string identifiers."""
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Column name must be a non-empty string")
        return v

    def columns(self) -> list[str]:
        """All mapped column names, in input order."""
        return [
            self.age_col,
            self.sex_col,
            self.weight_col,
            self.height_col,
            self.head_circ_col,
            self.arm_circ_col,
        ]

    def measurement_columns(self) -> list[str]:
        """Columns holding body measurements, which must be positive."""
        return [self.weight_col, self.height_col, self.head_circ_col, self.arm_circ_col]

    def duplicate_column(self) -> Optional[str]:
        """Return the first column name mapped twice, if any."""
        seen: set[str] = set()
        for col in self.columns():
            if col in seen:
                return col
            seen.add(col)
        return None
