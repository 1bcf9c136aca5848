"""Pytest configuration and fixtures."""
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add backend to path
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

from hearcare.domain import FrequencyPoint, TestResult  # noqa: E402
from hearcare.store import TestResultStore  # noqa: E402


@pytest.fixture
def fixed_date():
    """Fixed, timezone-aware test timestamp."""
    return datetime(2025, 3, 5, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def sample_result(fixed_date):
    """Result with a mild right ear and a normal left ear."""
    return TestResult(
        id="result-1",
        test_date=fixed_date,
        right_ear_classification="Mild Hearing Loss",
        left_ear_classification="Normal Hearing",
        right_ear_data=(
            FrequencyPoint(500, 25),
            FrequencyPoint(1000, 30),
            FrequencyPoint(2000, 35),
        ),
        left_ear_data=(
            FrequencyPoint(500, 10),
            FrequencyPoint(1000, 15),
            FrequencyPoint(2000, 20),
        ),
    )


@pytest.fixture
def sample_record(fixed_date):
    """Record as returned by the document store client."""
    return {
        "testDate": fixed_date,
        "rightEarClassification": "Mild Hearing Loss",
        "leftEarClassification": "Normal Hearing",
        "rightEarData": [
            {"frequency": 500, "hearingLevel": 25},
            {"frequency": 1000, "hearingLevel": 30},
        ],
        "leftEarData": [
            {"frequency": 500, "hearingLevel": 10.5},
        ],
    }


@pytest.fixture
def result_store(tmp_path):
    """Store writing into a per-test directory."""
    return TestResultStore(storage_dir=tmp_path / "results")
