"""Ear selector shared by the audiogram models and analyzers."""

from enum import Enum


class Ear(str, Enum):
    """Which ear a measurement or audiogram belongs to."""

    RIGHT = "right"
    LEFT = "left"
