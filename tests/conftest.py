import pytest
import pandas as pd

from anthropometry.standards import Metric, ReferenceStore, default_store


@pytest.fixture
def store() -> ReferenceStore:
    """Packaged WHO/Kemenkes reference store."""
    return default_store()


@pytest.fixture
def store_without_wfh(store: ReferenceStore) -> ReferenceStore:
    """Reference store with the weight-for-height curves left out."""
    return ReferenceStore(
        s for s in store if s.metric is not Metric.WEIGHT_FOR_HEIGHT
    )


@pytest.fixture
def median_boy_12mo() -> dict:
    """A 12-month-old boy measured exactly on the age-indexed medians."""
    return {
        "age_months": 12,
        "weight_kg": 9.648,
        "height_cm": 75.7477,
        "head_circ_cm": 46.0661,
        "arm_circ_cm": 14.9,
        "sex": "Male",
    }


@pytest.fixture
def sample_frame() -> pd.DataFrame:
    """Measurement rows as uploaded by the offline sync."""
    return pd.DataFrame(
        {
            "age_months": [12, 6, 3, 30],
            "sex": ["L", "P", "Male", "F"],
            "weight_kg": [11.0, 7.297, 5.8515, 9.0],
            "height_cm": [68.0, 65.7311, 60.0, 84.0],
            "head_circ_cm": [46.0, 42.2, 40.5, 44.0],
            "arm_circ_cm": [15.0, 13.8, 13.5, 11.5],
        },
        index=[101, 102, 103, 104],
    )
