"""Pydantic schemas for the results API."""

from __future__ import annotations

import math
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from hearcare.analyzers.history import HealthProfile, StatusInfo, TrendPoint
from hearcare.analyzers.results_processor import FrequencyBreakdownItem, TestResponse
from hearcare.domain.ear import Ear
from hearcare.domain.frequency_point import FrequencyPoint
from hearcare.domain.test_result import TestResult


class FrequencyPointPayload(BaseModel):
    """One audiogram point as sent by the client."""

    model_config = ConfigDict(allow_inf_nan=False)

    frequency: float
    hearing_level: float


class TestResultPayload(BaseModel):
    """Schema describing a finished test to be stored."""

    __test__ = False

    test_date: datetime
    right_ear_classification: str
    left_ear_classification: str
    right_ear_data: List[FrequencyPointPayload] = Field(default_factory=list)
    left_ear_data: List[FrequencyPointPayload] = Field(default_factory=list)

    def to_domain(self, result_id: str = "") -> TestResult:
        return TestResult(
            id=result_id,
            test_date=self.test_date,
            right_ear_classification=self.right_ear_classification,
            left_ear_classification=self.left_ear_classification,
            right_ear_data=[FrequencyPoint(p.frequency, p.hearing_level) for p in self.right_ear_data],
            left_ear_data=[FrequencyPoint(p.frequency, p.hearing_level) for p in self.left_ear_data],
        )


class TestResponsePayload(BaseModel):
    """A tone response, ``volume_heard`` is null when the tone was never heard."""

    __test__ = False

    model_config = ConfigDict(allow_inf_nan=False)

    frequency: float
    ear: Ear
    volume_heard: Optional[float] = None
    timestamp: Optional[datetime] = None

    def to_domain(self) -> TestResponse:
        volume = math.inf if self.volume_heard is None else self.volume_heard
        return TestResponse(
            frequency=self.frequency,
            volume_heard=volume,
            ear=self.ear,
            timestamp=self.timestamp,
        )


class ProcessRequest(BaseModel):
    responses: List[TestResponsePayload]
    test_date: Optional[datetime] = None


class FrequencyPointView(BaseModel):
    frequency: float
    hearing_level: float
    frequency_label: str

    @classmethod
    def from_domain(cls, point: FrequencyPoint) -> "FrequencyPointView":
        return cls(
            frequency=point.frequency,
            hearing_level=point.hearing_level,
            frequency_label=point.frequency_label,
        )


class TestResultView(BaseModel):
    """Stored result together with its derived statistics."""

    __test__ = False

    id: str
    test_date: datetime
    right_ear_classification: str
    left_ear_classification: str
    right_ear_data: List[FrequencyPointView]
    left_ear_data: List[FrequencyPointView]
    right_ear_average_level: float
    left_ear_average_level: float
    overall_hearing_status: str
    has_asymmetric_hearing: bool

    @classmethod
    def from_domain(cls, result: TestResult) -> "TestResultView":
        return cls(**_result_fields(result))


class FrequencyBreakdownView(BaseModel):
    frequency: float
    frequency_label: str
    right_level: float
    left_level: float

    @classmethod
    def from_domain(cls, item: FrequencyBreakdownItem) -> "FrequencyBreakdownView":
        return cls(
            frequency=item.frequency,
            frequency_label=item.frequency_label,
            right_level=item.right_level,
            left_level=item.left_level,
        )


class StatusView(BaseModel):
    title: str
    description: str
    score: float

    @classmethod
    def from_domain(cls, status: StatusInfo) -> "StatusView":
        return cls(title=status.title, description=status.description, score=status.score)


class TestResultDetail(TestResultView):
    """Full result view used by the results screen and exports."""

    recommendations: List[str]
    frequency_breakdown: List[FrequencyBreakdownView]
    status: StatusView


class HistoryResponse(BaseModel):
    user_id: str
    results: List[TestResultView]


class TrendPointView(BaseModel):
    date: datetime
    frequency: int
    level: float
    ear: Ear

    @classmethod
    def from_domain(cls, point: TrendPoint) -> "TrendPointView":
        return cls(date=point.date, frequency=point.frequency, level=point.level, ear=point.ear)


class TrendResponse(BaseModel):
    user_id: str
    frequency: int
    analysis: str
    points: List[TrendPointView]


class InsightView(BaseModel):
    title: str
    description: str


class HealthProfileResponse(BaseModel):
    """Hearing health summary built from the whole history."""

    user_id: str
    test_count: int
    status: Optional[StatusView] = None
    low_frequency_status: Optional[StatusView] = None
    mid_frequency_status: Optional[StatusView] = None
    high_frequency_status: Optional[StatusView] = None
    insights: List[InsightView]
    recommendations: List[str]

    @classmethod
    def from_domain(
        cls, user_id: str, test_count: int, profile: HealthProfile
    ) -> "HealthProfileResponse":
        def _status(info: Optional[StatusInfo]) -> Optional[StatusView]:
            return StatusView.from_domain(info) if info is not None else None

        return cls(
            user_id=user_id,
            test_count=test_count,
            status=_status(profile.status),
            low_frequency_status=_status(profile.ranges.low),
            mid_frequency_status=_status(profile.ranges.mid),
            high_frequency_status=_status(profile.ranges.high),
            insights=[InsightView(title=i.title, description=i.description) for i in profile.insights],
            recommendations=profile.recommendations,
        )


def _result_fields(result: TestResult) -> dict:
    return {
        "id": result.id,
        "test_date": result.test_date,
        "right_ear_classification": result.right_ear_classification,
        "left_ear_classification": result.left_ear_classification,
        "right_ear_data": [FrequencyPointView.from_domain(p) for p in result.right_ear_data],
        "left_ear_data": [FrequencyPointView.from_domain(p) for p in result.left_ear_data],
        "right_ear_average_level": result.right_ear_average_level,
        "left_ear_average_level": result.left_ear_average_level,
        "overall_hearing_status": result.overall_hearing_status,
        "has_asymmetric_hearing": result.has_asymmetric_hearing,
    }


def build_detail(
    result: TestResult,
    recommendations: List[str],
    breakdown: List[FrequencyBreakdownItem],
    status: StatusInfo,
) -> TestResultDetail:
    return TestResultDetail(
        **_result_fields(result),
        recommendations=recommendations,
        frequency_breakdown=[FrequencyBreakdownView.from_domain(item) for item in breakdown],
        status=StatusView.from_domain(status),
    )
