"""Analysis helpers built on top of stored test results."""

from .history import (
    build_health_profile,
    frequency_range_status,
    frequency_response,
    generate_insights,
    overall_status,
    profile_recommendations,
    trend_analysis,
    trend_data,
)
from .results_processor import (
    ResultsProcessor,
    TestResponse,
    frequency_breakdown,
    recommendations_for,
)

__all__ = [
    "ResultsProcessor",
    "TestResponse",
    "build_health_profile",
    "frequency_breakdown",
    "frequency_range_status",
    "frequency_response",
    "generate_insights",
    "overall_status",
    "profile_recommendations",
    "recommendations_for",
    "trend_analysis",
    "trend_data",
]
