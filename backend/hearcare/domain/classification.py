"""Hearing loss classification labels and severity helpers."""

from __future__ import annotations

import logging
from enum import Enum
from statistics import mean
from typing import Dict, Iterable, List, Optional


logger = logging.getLogger(__name__)


_DISPLAY_NAMES: Dict[str, str] = {
    "normal": "Normal Hearing",
    "mild": "Mild Hearing Loss",
    "moderate": "Moderate Hearing Loss",
    "moderatelySevere": "Moderately Severe Hearing Loss",
    "severe": "Severe Hearing Loss",
    "profound": "Profound Hearing Loss",
}

_DESCRIPTIONS: Dict[str, str] = {
    "normal": "You can hear soft sounds across most frequencies.",
    "mild": (
        "You may have difficulty hearing soft sounds and understanding speech "
        "in noisy environments."
    ),
    "moderate": "You likely have difficulty following conversations without hearing aids.",
    "moderatelySevere": (
        "You have difficulty with normal conversations and may miss significant "
        "speech elements without amplification."
    ),
    "severe": "You may hear almost no speech when a person talks at a normal level.",
    "profound": (
        "You may not hear loud speech or sounds without powerful hearing aids "
        "or a cochlear implant."
    ),
}

_SIGNIFICANT_LOSS_RECOMMENDATIONS = [
    "You have significant hearing loss that requires professional attention.",
    "Please consult with an audiologist as soon as possible.",
    "Hearing aids or other assistive devices may significantly improve your quality of life.",
    "Consider learning about additional communication strategies like speech reading.",
]

_RECOMMENDATIONS: Dict[str, List[str]] = {
    "normal": [
        "Your hearing appears to be within normal range.",
        "Continue to protect your hearing by avoiding prolonged exposure to loud noises.",
        "Get your hearing checked annually as part of your health routine.",
    ],
    "mild": [
        "You have mild hearing loss in one or both ears.",
        "Consider scheduling a follow-up appointment with an audiologist.",
        "Avoid noisy environments when possible.",
        "Consider using assistive listening devices in challenging situations.",
    ],
    "moderate": [
        "You have moderate hearing loss that may impact your daily communication.",
        "We recommend consulting with an audiologist to discuss hearing aid options.",
        "Consider strategies for better communication in noisy environments.",
        "Look into hearing assistive technologies for phones and other devices.",
    ],
    "moderatelySevere": [
        "You have moderately severe hearing loss that significantly impacts daily communication.",
        "Hearing aids are strongly recommended for this level of hearing loss.",
        "Consider additional assistive listening devices for specific situations.",
        "Learn communication strategies to maximize understanding in conversations.",
    ],
    "severe": _SIGNIFICANT_LOSS_RECOMMENDATIONS,
    "profound": _SIGNIFICANT_LOSS_RECOMMENDATIONS,
}


class HearingClassification(str, Enum):
    """Audiometric severity buckets, ordered from best to worst."""

    NORMAL = "normal"
    MILD = "mild"
    MODERATE = "moderate"
    MODERATELY_SEVERE = "moderatelySevere"
    SEVERE = "severe"
    PROFOUND = "profound"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self.value]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self.value]

    @property
    def recommendations(self) -> List[str]:
        return list(_RECOMMENDATIONS[self.value])

    @property
    def rank(self) -> int:
        return list(HearingClassification).index(self)

    @classmethod
    def from_display_name(cls, name: str) -> Optional["HearingClassification"]:
        for member in cls:
            if member.display_name == name:
                return member
        return None


# Labels as persisted on test results.
SEVERITY_ORDER: Dict[str, int] = {
    member.display_name: member.rank for member in HearingClassification
}


def severity_rank(label: str) -> int:
    """Rank a stored classification label, unknown labels rank as normal."""
    rank = SEVERITY_ORDER.get(label)
    if rank is None:
        logger.debug("Unknown hearing classification %r ranked as normal", label)
        return 0
    return rank


def worst_classification(
    first: HearingClassification, second: HearingClassification
) -> HearingClassification:
    """Return the more severe classification, ``first`` on a tie."""
    return first if first.rank >= second.rank else second


def classify_levels(levels: Iterable[float]) -> HearingClassification:
    """Bucket the mean hearing level into a classification.

    Normal covers -10 up to 25 dB. Means outside every range, including
    those below -10 dB and an empty set of levels, classify as profound.
    """

    values = list(levels)
    if not values:
        return HearingClassification.PROFOUND

    average = mean(values)
    if -10 <= average < 25:
        return HearingClassification.NORMAL
    if 25 <= average < 40:
        return HearingClassification.MILD
    if 40 <= average < 55:
        return HearingClassification.MODERATE
    if 55 <= average < 70:
        return HearingClassification.MODERATELY_SEVERE
    if 70 <= average < 90:
        return HearingClassification.SEVERE
    return HearingClassification.PROFOUND
