"""Turn raw test responses into classified results and recommendations."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from hearcare.domain.classification import (
    HearingClassification,
    classify_levels,
    worst_classification,
)
from hearcare.domain.ear import Ear
from hearcare.domain.frequency_point import FrequencyPoint
from hearcare.domain.test_result import TestResult


logger = logging.getLogger(__name__)

STANDARD_FREQUENCIES = (250.0, 500.0, 1000.0, 2000.0, 4000.0, 8000.0)

# Range of playback volumes used by the test, mapped onto 0-80 dB HL.
MIN_TEST_VOLUME = 0.05
MAX_TEST_VOLUME = 0.9
VOLUME_DB_SPAN = 80.0
NOT_HEARD_LEVEL_DB = 90.0

ASYMMETRY_NOTE = (
    "Your hearing levels differ between ears. "
    "This asymmetry should be evaluated by a professional."
)
RETEST_NOTE = "Remember to retest your hearing periodically to track any changes."
GENERIC_RECOMMENDATIONS = [
    "Based on your test results, we recommend consulting with a hearing specialist.",
    "Regular hearing tests can help monitor changes in your hearing health.",
]


@dataclass(frozen=True)
class TestResponse:
    """Lowest volume a listener reported hearing for one tone."""

    __test__ = False

    frequency: float
    volume_heard: float
    ear: Ear
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class HearingResult:
    right_ear_levels: Dict[float, float]
    left_ear_levels: Dict[float, float]
    right_ear_classification: HearingClassification
    left_ear_classification: HearingClassification
    recommendations: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class FrequencyBreakdownItem:
    frequency: float
    frequency_label: str
    right_level: float
    left_level: float


def volume_to_db(volume: float) -> float:
    """Map a playback volume to a hearing level, unheard tones to 90 dB."""
    if math.isinf(volume):
        return NOT_HEARD_LEVEL_DB
    normalized = (volume - MIN_TEST_VOLUME) / (MAX_TEST_VOLUME - MIN_TEST_VOLUME)
    return normalized * VOLUME_DB_SPAN


def generate_recommendations(
    right: HearingClassification, left: HearingClassification
) -> List[str]:
    recommendations = worst_classification(right, left).recommendations
    if right is not left:
        recommendations.append(ASYMMETRY_NOTE)
    recommendations.append(RETEST_NOTE)
    return recommendations


def recommendations_for(result: TestResult) -> List[str]:
    """Recommendations for a stored result, based on its worse ear."""
    right = HearingClassification.from_display_name(result.right_ear_classification)
    left = HearingClassification.from_display_name(result.left_ear_classification)
    known = [item for item in (right, left) if item is not None]
    if not known:
        return list(GENERIC_RECOMMENDATIONS)
    worst = max(known, key=lambda item: item.rank)
    return worst.recommendations


def _breakdown_label(frequency: float) -> str:
    if frequency >= 1000:
        return f"{int(frequency / 1000)}k Hz"
    return f"{int(frequency)} Hz"


def _exact_level(points: Iterable[FrequencyPoint], frequency: float) -> float:
    for point in points:
        if point.frequency == frequency:
            return point.hearing_level
    return 0.0


def frequency_breakdown(result: TestResult) -> List[FrequencyBreakdownItem]:
    """One row per standard frequency, 0 dB where an ear has no reading."""
    return [
        FrequencyBreakdownItem(
            frequency=frequency,
            frequency_label=_breakdown_label(frequency),
            right_level=_exact_level(result.right_ear_data, frequency),
            left_level=_exact_level(result.left_ear_data, frequency),
        )
        for frequency in STANDARD_FREQUENCIES
    ]


class ResultsProcessor:
    """Convert the responses collected during a test into a hearing result."""

    def __init__(self, frequencies: Iterable[float] = STANDARD_FREQUENCIES) -> None:
        self.frequencies = tuple(frequencies)

    def _levels_for(self, responses: List[TestResponse], ear: Ear) -> Dict[float, float]:
        levels: Dict[float, float] = {}
        for frequency in self.frequencies:
            volumes = [
                response.volume_heard
                for response in responses
                if response.ear == ear and response.frequency == frequency
            ]
            if volumes:
                levels[frequency] = volume_to_db(min(volumes))
        return levels

    def process(self, responses: Iterable[TestResponse]) -> HearingResult:
        collected = list(responses)
        right_levels = self._levels_for(collected, Ear.RIGHT)
        left_levels = self._levels_for(collected, Ear.LEFT)

        right_classification = classify_levels(right_levels.values())
        left_classification = classify_levels(left_levels.values())
        logger.debug(
            "Processed %d responses: right=%s left=%s",
            len(collected),
            right_classification.value,
            left_classification.value,
        )

        return HearingResult(
            right_ear_levels=right_levels,
            left_ear_levels=left_levels,
            right_ear_classification=right_classification,
            left_ear_classification=left_classification,
            recommendations=generate_recommendations(
                right_classification, left_classification
            ),
        )

    @staticmethod
    def to_test_result(hearing_result: HearingResult, test_date: datetime) -> TestResult:
        """Build an unsaved result, the store assigns its id."""

        def _points(levels: Dict[float, float]) -> List[FrequencyPoint]:
            return [
                FrequencyPoint(frequency=frequency, hearing_level=level)
                for frequency, level in sorted(levels.items())
            ]

        return TestResult(
            id="",
            test_date=test_date,
            right_ear_classification=hearing_result.right_ear_classification.display_name,
            left_ear_classification=hearing_result.left_ear_classification.display_name,
            right_ear_data=_points(hearing_result.right_ear_levels),
            left_ear_data=_points(hearing_result.left_ear_levels),
        )
