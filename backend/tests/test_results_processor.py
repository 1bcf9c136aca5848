"""Tests for the results processor."""
import math
from datetime import datetime, timezone

import pytest

from hearcare.analyzers.results_processor import (
    ASYMMETRY_NOTE,
    GENERIC_RECOMMENDATIONS,
    RETEST_NOTE,
    ResultsProcessor,
    TestResponse,
    frequency_breakdown,
    generate_recommendations,
    recommendations_for,
    volume_to_db,
)
from hearcare.domain import Ear, FrequencyPoint, HearingClassification, TestResult


def _responses(ear, volume, frequencies=(250, 500, 1000, 2000, 4000, 8000)):
    return [TestResponse(frequency=f, volume_heard=volume, ear=ear) for f in frequencies]


class TestVolumeToDb:
    """Test suite for volume_to_db."""

    def test_range_end_points(self):
        assert volume_to_db(0.05) == pytest.approx(0.0)
        assert volume_to_db(0.9) == pytest.approx(80.0)

    def test_not_heard(self):
        assert volume_to_db(math.inf) == 90.0


class TestResultsProcessor:
    """Test suite for ResultsProcessor."""

    def test_uses_lowest_volume_per_frequency(self):
        responses = [
            TestResponse(1000, 0.5, Ear.RIGHT),
            TestResponse(1000, 0.05, Ear.RIGHT),
            TestResponse(1000, 0.9, Ear.LEFT),
        ]
        result = ResultsProcessor().process(responses)

        assert result.right_ear_levels == {1000: pytest.approx(0.0)}
        assert result.left_ear_levels == {1000: pytest.approx(80.0)}

    def test_ignores_non_standard_frequencies(self):
        responses = [TestResponse(3000, 0.05, Ear.RIGHT), TestResponse(500, 0.05, Ear.RIGHT)]
        result = ResultsProcessor().process(responses)

        assert list(result.right_ear_levels) == [500]

    def test_classifies_each_ear(self):
        responses = _responses(Ear.RIGHT, 0.05) + _responses(Ear.LEFT, math.inf)
        result = ResultsProcessor().process(responses)

        assert result.right_ear_classification is HearingClassification.NORMAL
        assert result.left_ear_classification is HearingClassification.PROFOUND
        assert ASYMMETRY_NOTE in result.recommendations
        assert result.recommendations[0] == HearingClassification.PROFOUND.recommendations[0]

    def test_to_test_result(self):
        responses = [
            TestResponse(2000, 0.05, Ear.LEFT),
            TestResponse(500, 0.05, Ear.LEFT),
            TestResponse(1000, 0.05, Ear.RIGHT),
        ]
        date = datetime(2025, 3, 5, tzinfo=timezone.utc)
        processor = ResultsProcessor()
        result = processor.to_test_result(processor.process(responses), date)

        assert result.id == ""
        assert result.test_date == date
        assert result.right_ear_classification == "Normal Hearing"
        assert [p.frequency for p in result.left_ear_data] == [500, 2000]


class TestRecommendations:
    """Test suite for recommendation helpers."""

    def test_same_classification_has_no_asymmetry_note(self):
        items = generate_recommendations(HearingClassification.MILD, HearingClassification.MILD)

        assert ASYMMETRY_NOTE not in items
        assert items[-1] == RETEST_NOTE

    def test_recommendations_for_stored_result(self, sample_result):
        assert recommendations_for(sample_result) == HearingClassification.MILD.recommendations

    def test_recommendations_for_unknown_labels(self, sample_result):
        result = TestResult(
            id="x",
            test_date=sample_result.test_date,
            right_ear_classification="Unknown",
            left_ear_classification="???",
        )
        assert recommendations_for(result) == GENERIC_RECOMMENDATIONS


class TestFrequencyBreakdown:
    """Test suite for frequency_breakdown."""

    def test_rows_for_standard_frequencies(self, sample_result):
        rows = frequency_breakdown(sample_result)

        assert [row.frequency_label for row in rows] == [
            "250 Hz",
            "500 Hz",
            "1k Hz",
            "2k Hz",
            "4k Hz",
            "8k Hz",
        ]
        assert rows[0].right_level == 0
        assert rows[2].right_level == 30
        assert rows[2].left_level == 15

    def test_requires_exact_frequency(self, sample_result):
        result = TestResult(
            id="x",
            test_date=sample_result.test_date,
            right_ear_classification="Normal Hearing",
            left_ear_classification="Normal Hearing",
            right_ear_data=(FrequencyPoint(1005, 50),),
        )
        assert frequency_breakdown(result)[2].right_level == 0
