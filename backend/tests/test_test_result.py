"""Tests for TestResult record conversion and derived values."""
from datetime import datetime

import pytest

from hearcare.domain import Ear, FrequencyPoint, TestResult


def _result(right=(), left=(), right_label="Normal Hearing", left_label="Normal Hearing"):
    return TestResult(
        id="r",
        test_date=datetime(2025, 1, 1),
        right_ear_classification=right_label,
        left_ear_classification=left_label,
        right_ear_data=right,
        left_ear_data=left,
    )


def _levels(*levels):
    return tuple(FrequencyPoint(250 * (idx + 1), level) for idx, level in enumerate(levels))


class TestFromRecord:
    """Test suite for TestResult.from_record."""

    def test_parses_complete_record(self, sample_record, fixed_date):
        """All fields are carried over and points keep their order."""
        result = TestResult.from_record("abc", sample_record)

        assert result is not None
        assert result.id == "abc"
        assert result.test_date == fixed_date
        assert result.right_ear_classification == "Mild Hearing Loss"
        assert result.left_ear_classification == "Normal Hearing"
        assert result.right_ear_data == (FrequencyPoint(500, 25), FrequencyPoint(1000, 30))
        assert result.left_ear_data == (FrequencyPoint(500, 10.5),)

    @pytest.mark.parametrize(
        "missing",
        [
            "testDate",
            "rightEarClassification",
            "leftEarClassification",
            "rightEarData",
            "leftEarData",
        ],
    )
    def test_missing_field_returns_none(self, sample_record, missing):
        """Every top-level field is required."""
        del sample_record[missing]
        assert TestResult.from_record("abc", sample_record) is None

    @pytest.mark.parametrize(
        "key, value",
        [
            ("testDate", "2025-03-05T09:30:00+00:00"),
            ("rightEarClassification", 3),
            ("leftEarClassification", None),
            ("rightEarData", {"frequency": 1000, "hearingLevel": 20}),
            ("leftEarData", ["not a record"]),
        ],
    )
    def test_mistyped_field_returns_none(self, sample_record, key, value):
        """Wrongly shaped top-level fields reject the whole record."""
        sample_record[key] = value
        assert TestResult.from_record("abc", sample_record) is None

    def test_malformed_points_are_dropped(self, sample_record):
        """Points without numeric fields are skipped, the parse succeeds."""
        sample_record["rightEarData"] = [
            {"frequency": 1000, "hearingLevel": 20},
            {"frequency": "bad"},
            {"frequency": 2000},
            {"frequency": True, "hearingLevel": 10},
        ]
        result = TestResult.from_record("abc", sample_record)

        assert result is not None
        assert result.right_ear_data == (FrequencyPoint(1000, 20),)

    def test_empty_ear_lists_are_accepted(self, sample_record):
        sample_record["rightEarData"] = []
        sample_record["leftEarData"] = []
        result = TestResult.from_record("abc", sample_record)

        assert result is not None
        assert result.right_ear_data == ()
        assert result.left_ear_data == ()

    def test_non_mapping_record_raises(self):
        """Passing something other than a mapping is a caller error."""
        with pytest.raises(TypeError):
            TestResult.from_record("abc", ["testDate"])


class TestToRecord:
    """Test suite for TestResult.to_record."""

    def test_record_layout(self, sample_result, fixed_date):
        record = sample_result.to_record()

        assert record["testDate"] is fixed_date
        assert record["rightEarClassification"] == "Mild Hearing Loss"
        assert record["leftEarClassification"] == "Normal Hearing"
        assert record["rightEarData"][0] == {"frequency": 500, "hearingLevel": 25}
        assert [p["frequency"] for p in record["leftEarData"]] == [500, 1000, 2000]

    def test_round_trip(self, sample_result):
        """Parsing a serialized result reproduces it exactly."""
        restored = TestResult.from_record(sample_result.id, sample_result.to_record())
        assert restored == sample_result

    def test_round_trip_loses_only_dropped_points(self, sample_record):
        sample_record["leftEarData"].append({"hearingLevel": 40})
        parsed = TestResult.from_record("abc", sample_record)

        assert parsed.to_record()["leftEarData"] == [{"frequency": 500, "hearingLevel": 10.5}]


class TestDerivedValues:
    """Test suite for averages, lookups and status helpers."""

    def test_average_of_empty_ear_is_zero(self):
        result = _result()
        assert result.right_ear_average_level == 0
        assert result.left_ear_average_level == 0

    def test_average_level(self):
        result = _result(right=_levels(10, 20, 30), left=_levels(5, 10))
        assert result.right_ear_average_level == pytest.approx(20)
        assert result.left_ear_average_level == pytest.approx(7.5)

    def test_average_of_integer_levels_is_float(self):
        result = _result(right=_levels(10, 20), left=_levels(5))
        assert isinstance(result.right_ear_average_level, float)
        assert isinstance(result.left_ear_average_level, float)
        assert result.right_ear_average_level == 15.0

    def test_get_data_point_within_tolerance(self):
        result = _result(right=(FrequencyPoint(1000, 20),))
        assert result.get_data_point(1005, Ear.RIGHT) == FrequencyPoint(1000, 20)
        assert result.get_data_point(1005, Ear.LEFT) is None

    def test_get_data_point_tolerance_boundary(self):
        """The 10 Hz window includes its edge."""
        result = _result(right=(FrequencyPoint(1000, 20),))
        assert result.get_data_point(1010, Ear.RIGHT) is not None
        assert result.get_data_point(990, Ear.RIGHT) is not None
        assert result.get_data_point(1011, Ear.RIGHT) is None

    def test_get_data_point_first_match_wins(self):
        """Sequence order decides, not distance."""
        first = FrequencyPoint(992, 40)
        closer = FrequencyPoint(1000, 20)
        result = _result(left=(first, closer))
        assert result.get_data_point(1000, Ear.LEFT) is first

    def test_overall_status_picks_more_severe(self):
        result = _result(right_label="Mild Hearing Loss", left_label="Severe Hearing Loss")
        assert result.overall_hearing_status == "Severe Hearing Loss"

        result = _result(right_label="Profound Hearing Loss", left_label="Moderate Hearing Loss")
        assert result.overall_hearing_status == "Profound Hearing Loss"

    def test_overall_status_equal_classifications(self):
        result = _result(right_label="Moderate Hearing Loss", left_label="Moderate Hearing Loss")
        assert result.overall_hearing_status == "Moderate Hearing Loss"

    def test_overall_status_tie_prefers_right_ear(self):
        """Unknown labels rank as normal, so the right ear wins the tie."""
        result = _result(right_label="Unknown", left_label="Normal Hearing")
        assert result.overall_hearing_status == "Unknown"

        result = _result(right_label="Normal Hearing", left_label="Something else")
        assert result.overall_hearing_status == "Normal Hearing"

    def test_unknown_label_loses_to_any_loss(self):
        result = _result(right_label="Unknown", left_label="Mild Hearing Loss")
        assert result.overall_hearing_status == "Mild Hearing Loss"

    def test_asymmetric_hearing(self):
        result = _result(right=_levels(10), left=_levels(30))
        assert result.has_asymmetric_hearing is True

    def test_asymmetry_boundary_is_exclusive(self, sample_result):
        """A difference of exactly 15 dB is not asymmetric."""
        assert sample_result.right_ear_average_level - sample_result.left_ear_average_level == 15
        assert sample_result.has_asymmetric_hearing is False

    def test_lists_are_stored_as_tuples(self):
        result = _result(right=[FrequencyPoint(1000, 10)])
        assert result.right_ear_data == (FrequencyPoint(1000, 10),)
