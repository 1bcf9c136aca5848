"""Trend and status summaries over a user's test history."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from statistics import mean
from typing import Dict, List, Optional, Sequence

from hearcare.domain.classification import (
    HearingClassification,
    classify_levels,
    worst_classification,
)
from hearcare.domain.ear import Ear
from hearcare.domain.test_result import TestResult


TREND_RESULT_LIMIT = 6
STABLE_CHANGE_DB = 5.0
NOTCH_DEPTH_DB = 10.0
ASYMMETRY_DB = 15.0
PROGRESSION_DB = 10.0
IMPROVEMENT_DB = 5.0


@dataclass(frozen=True)
class TrendPoint:
    date: datetime
    frequency: int
    level: float
    ear: Ear


@dataclass(frozen=True)
class FrequencyResponse:
    frequency: int
    level: float


@dataclass(frozen=True)
class StatusInfo:
    title: str
    description: str
    score: float


_OVERALL_STATUS: Dict[HearingClassification, StatusInfo] = {
    HearingClassification.NORMAL: StatusInfo(
        "Excellent",
        "Your hearing is within normal ranges across all frequencies.",
        90,
    ),
    HearingClassification.MILD: StatusInfo(
        "Good",
        "You have mild hearing loss. You may have some difficulty hearing soft "
        "sounds or understanding speech in noisy environments.",
        75,
    ),
    HearingClassification.MODERATE: StatusInfo(
        "Fair",
        "You have moderate hearing loss that may impact your daily communication. "
        "Consider consulting with a hearing specialist.",
        60,
    ),
    HearingClassification.MODERATELY_SEVERE: StatusInfo(
        "Concerning",
        "Your hearing loss is significant and likely affects your quality of life. "
        "Please consult with an audiologist.",
        45,
    ),
}
_POOR_STATUS = StatusInfo(
    "Poor",
    "You have severe hearing loss that requires professional attention. "
    "Please consult with an audiologist as soon as possible.",
    25,
)


def trend_data(results: Sequence[TestResult], limit: int = TREND_RESULT_LIMIT) -> List[TrendPoint]:
    """Flatten the ``limit`` most recent results into per-ear trend points.

    ``results`` is expected newest first, as returned by the store.
    """

    points: List[TrendPoint] = []
    for result in results[:limit]:
        for ear in (Ear.RIGHT, Ear.LEFT):
            for point in result.ear_data(ear):
                points.append(
                    TrendPoint(
                        date=result.test_date,
                        frequency=int(point.frequency),
                        level=point.hearing_level,
                        ear=ear,
                    )
                )
    return points


def _describe_ear_trend(readings: List[TrendPoint], ear: Ear, frequency: int) -> str:
    change = readings[-1].level - readings[0].level
    if abs(change) < STABLE_CHANGE_DB:
        return f"Your {ear.value} ear hearing at {frequency} Hz has been stable."
    if change > 0:
        return f"Your {ear.value} ear shows a decline of {int(change)} dB at {frequency} Hz."
    return f"Your {ear.value} ear shows an improvement of {int(abs(change))} dB at {frequency} Hz."


def trend_analysis(results: Sequence[TestResult], frequency: int) -> str:
    """Summarize how hearing at ``frequency`` changed, oldest to newest."""
    selected = [point for point in trend_data(results) if point.frequency == frequency]
    by_ear = {
        ear: sorted(
            (point for point in selected if point.ear is ear),
            key=lambda point: point.date,
        )
        for ear in (Ear.RIGHT, Ear.LEFT)
    }

    sentences = [
        _describe_ear_trend(readings, ear, frequency)
        for ear, readings in by_ear.items()
        if len(readings) >= 2
    ]
    if not sentences:
        return f"Complete more tests to see hearing trends at {frequency} Hz."
    return " ".join(sentences)


def frequency_response(result: TestResult) -> List[FrequencyResponse]:
    """Average both ears per whole-Hz frequency, sorted by frequency."""
    levels: Dict[int, List[float]] = defaultdict(list)
    for point in result.right_ear_data + result.left_ear_data:
        levels[int(point.frequency)].append(point.hearing_level)
    return [
        FrequencyResponse(frequency=frequency, level=mean(values))
        for frequency, values in sorted(levels.items())
    ]


def overall_status(result: TestResult) -> StatusInfo:
    """Headline status for the worse ear, unknown labels count as normal."""
    right = (
        HearingClassification.from_display_name(result.right_ear_classification)
        or HearingClassification.NORMAL
    )
    left = (
        HearingClassification.from_display_name(result.left_ear_classification)
        or HearingClassification.NORMAL
    )
    return _OVERALL_STATUS.get(worst_classification(right, left), _POOR_STATUS)


# Title, description template and score for one frequency range.
_RANGE_STATUS: Dict[HearingClassification, tuple] = {
    HearingClassification.NORMAL: ("Normal", "Good response to {}.", 90),
    HearingClassification.MILD: ("Mild Loss", "Slight difficulty with {}.", 70),
    HearingClassification.MODERATE: ("Moderate Loss", "Noticeable difficulty with {}.", 50),
    HearingClassification.MODERATELY_SEVERE: (
        "Moderate-Severe Loss",
        "Significant difficulty with {}.",
        35,
    ),
    HearingClassification.SEVERE: ("Severe Loss", "Major difficulty with {}.", 20),
    HearingClassification.PROFOUND: ("Profound Loss", "Extreme difficulty with {}.", 10),
}

NOISE_EXPOSURE = "Potential Noise Exposure"
ASYMMETRIC_HEARING = "Asymmetric Hearing"
PROGRESSIVE_LOSS = "Progressive Hearing Loss"
HEARING_IMPROVEMENT = "Hearing Improvement"
STABLE_HEARING = "Stable Hearing"
AGE_RELATED_PATTERN = "Age-Related Pattern"

_INSIGHT_DESCRIPTIONS = {
    NOISE_EXPOSURE: (
        "Your high-frequency hearing loss pattern is consistent with noise exposure. "
        "Consider using hearing protection."
    ),
    ASYMMETRIC_HEARING: (
        "There's a significant difference between your ears. "
        "This should be evaluated by a professional."
    ),
    PROGRESSIVE_LOSS: (
        "Your hearing shows a decline over time. Schedule a professional evaluation."
    ),
    HEARING_IMPROVEMENT: (
        "Your hearing shows improvement over time. This could be due to resolved "
        "conditions or better testing environment."
    ),
    STABLE_HEARING: (
        "Your hearing has remained relatively stable over time. Continue regular monitoring."
    ),
    AGE_RELATED_PATTERN: (
        "Your hearing pattern shows typical age-related changes, with high "
        "frequencies affected first."
    ),
}

HIGH_FREQUENCY_NOTE = (
    "Your high-frequency hearing loss may affect your ability to hear certain "
    "consonants. Consider speech reading techniques to improve understanding."
)
LOW_FREQUENCY_NOTE = (
    "Your low-frequency hearing loss may affect your ability to hear vowel sounds "
    "and deeper voices. Position yourself to better see speakers' faces."
)
_INSIGHT_ADVICE = {
    NOISE_EXPOSURE: "Avoid loud noise exposure and always use hearing protection in noisy environments.",
    ASYMMETRIC_HEARING: (
        "Consult with an ENT specialist to evaluate the asymmetric hearing pattern "
        "between your ears."
    ),
    PROGRESSIVE_LOSS: (
        "Track your hearing more frequently, such as every 3-6 months, to monitor progression."
    ),
}
DEFAULT_PROFILE_RECOMMENDATIONS = [
    "Complete a hearing test to get personalized recommendations.",
    "Protect your hearing by avoiding prolonged exposure to loud noises.",
    "Consider using hearing protection in noisy environments.",
]


@dataclass(frozen=True)
class FrequencyRangeStatus:
    """Status of the low, mid and high bands; ``None`` where a band has no data."""

    low: Optional[StatusInfo] = None
    mid: Optional[StatusInfo] = None
    high: Optional[StatusInfo] = None


@dataclass(frozen=True)
class Insight:
    title: str
    description: str


@dataclass(frozen=True)
class HealthProfile:
    status: Optional[StatusInfo]
    ranges: FrequencyRangeStatus
    insights: List[Insight]
    recommendations: List[str]


def range_status(level: float, range_name: str) -> StatusInfo:
    title, description, score = _RANGE_STATUS[classify_levels([level])]
    return StatusInfo(title, description.format(range_name), score)


def _band_status(
    response: Sequence[FrequencyResponse], band, range_name: str
) -> Optional[StatusInfo]:
    levels = [item.level for item in response if band(item.frequency)]
    if not levels:
        return None
    return range_status(mean(levels), range_name)


def frequency_range_status(response: Sequence[FrequencyResponse]) -> FrequencyRangeStatus:
    """Classify the averaged response over 500-1000, 1000-4000 and 4000-8000 Hz.

    The low band includes both of its bounds, the others exclude their lower one.
    """

    return FrequencyRangeStatus(
        low=_band_status(
            response, lambda f: 500 <= f <= 1000, "low frequencies (500-1000 Hz)"
        ),
        mid=_band_status(
            response, lambda f: 1000 < f <= 4000, "mid frequencies (1000-4000 Hz)"
        ),
        high=_band_status(response, lambda f: f > 4000, "high frequencies (4000-8000 Hz)"),
    )


def _title(status: Optional[StatusInfo]) -> str:
    return status.title if status is not None else "Normal"


def _ear_average(result: TestResult, ear: Ear) -> Optional[float]:
    points = result.ear_data(ear)
    if not points:
        return None
    return mean(point.hearing_level for point in points)


def _level_at(result: TestResult, frequency: int) -> Optional[float]:
    for point in result.right_ear_data:
        if int(point.frequency) == frequency:
            return point.hearing_level
    return None


def _has_noise_notch(result: TestResult) -> bool:
    """4 kHz right-ear level more than 10 dB below the 2 and 8 kHz average."""
    levels = [_level_at(result, frequency) for frequency in (2000, 4000, 8000)]
    if any(level is None for level in levels):
        return False
    at_2k, at_4k, at_8k = levels
    return at_4k - (at_2k + at_8k) / 2 > NOTCH_DEPTH_DB


def _ear_changes(oldest: TestResult, newest: TestResult) -> List[float]:
    changes = []
    for ear in (Ear.RIGHT, Ear.LEFT):
        before = _ear_average(oldest, ear)
        after = _ear_average(newest, ear)
        if before is not None and after is not None:
            changes.append(after - before)
    return changes


def _insight(title: str) -> Insight:
    return Insight(title, _INSIGHT_DESCRIPTIONS[title])


def generate_insights(
    results: Sequence[TestResult], ranges: Optional[FrequencyRangeStatus] = None
) -> List[Insight]:
    """Pattern observations over a newest-first history.

    Noise, asymmetry and progression insights need at least two results,
    progression three. Ears without readings are left out of the comparisons.
    """

    if ranges is None:
        ranges = (
            frequency_range_status(frequency_response(results[0]))
            if results
            else FrequencyRangeStatus()
        )

    insights: List[Insight] = []
    if len(results) >= 2:
        latest = results[0]
        high_moderate = _title(ranges.high) in ("Moderate Loss", "Moderate-Severe Loss")
        if high_moderate and _has_noise_notch(latest):
            insights.append(_insight(NOISE_EXPOSURE))

        right = _ear_average(latest, Ear.RIGHT)
        left = _ear_average(latest, Ear.LEFT)
        if right is not None and left is not None and abs(right - left) > ASYMMETRY_DB:
            insights.append(_insight(ASYMMETRIC_HEARING))

        if len(results) >= 3:
            changes = _ear_changes(results[-1], latest)
            if any(change > PROGRESSION_DB for change in changes):
                insights.append(_insight(PROGRESSIVE_LOSS))
            elif any(change < -IMPROVEMENT_DB for change in changes):
                insights.append(_insight(HEARING_IMPROVEMENT))
            else:
                insights.append(_insight(STABLE_HEARING))

    if _title(ranges.high) != "Normal" and _title(ranges.mid) == "Normal":
        insights.append(_insight(AGE_RELATED_PATTERN))
    return insights


def profile_recommendations(
    results: Sequence[TestResult],
    ranges: Optional[FrequencyRangeStatus] = None,
    insights: Optional[Sequence[Insight]] = None,
) -> List[str]:
    """Advice for the latest result, refined by band status and insights."""
    if not results:
        return list(DEFAULT_PROFILE_RECOMMENDATIONS)

    latest = results[0]
    if ranges is None:
        ranges = frequency_range_status(frequency_response(latest))
    if insights is None:
        insights = generate_insights(results, ranges)

    right = (
        HearingClassification.from_display_name(latest.right_ear_classification)
        or HearingClassification.NORMAL
    )
    left = (
        HearingClassification.from_display_name(latest.left_ear_classification)
        or HearingClassification.NORMAL
    )
    recommendations = worst_classification(right, left).recommendations
    if _title(ranges.high) not in ("Normal", "Mild Loss"):
        recommendations.append(HIGH_FREQUENCY_NOTE)
    if _title(ranges.low) not in ("Normal", "Mild Loss"):
        recommendations.append(LOW_FREQUENCY_NOTE)
    for insight in insights:
        advice = _INSIGHT_ADVICE.get(insight.title)
        if advice is not None:
            recommendations.append(advice)
    return list(dict.fromkeys(recommendations))


def build_health_profile(results: Sequence[TestResult]) -> HealthProfile:
    """Status, band breakdown, insights and advice for a newest-first history."""
    if not results:
        return HealthProfile(
            status=None,
            ranges=FrequencyRangeStatus(),
            insights=[],
            recommendations=list(DEFAULT_PROFILE_RECOMMENDATIONS),
        )

    latest = results[0]
    ranges = frequency_range_status(frequency_response(latest))
    insights = generate_insights(results, ranges)
    return HealthProfile(
        status=overall_status(latest),
        ranges=ranges,
        insights=insights,
        recommendations=profile_recommendations(results, ranges, insights),
    )
