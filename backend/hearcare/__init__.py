"""HearCare hearing test results backend."""

__version__ = "1.0.0"
