"""Hearing test domain models."""

from .classification import HearingClassification, classify_levels, severity_rank
from .ear import Ear
from .frequency_point import FrequencyPoint
from .test_result import TestResult

__all__ = [
    "Ear",
    "FrequencyPoint",
    "HearingClassification",
    "TestResult",
    "classify_levels",
    "severity_rank",
]
