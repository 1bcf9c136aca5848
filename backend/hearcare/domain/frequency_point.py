"""Single audiometric measurement."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FrequencyPoint:
    """One measured (frequency, hearing level) pair of an audiogram.

    ``frequency`` is in Hz and ``hearing_level`` in dB HL. Neither value is
    range checked here.
    """

    frequency: float
    hearing_level: float

    @property
    def frequency_label(self) -> str:
        """Short axis label, ``"2k"`` for 2000 Hz and ``"500"`` for 500 Hz."""
        if self.frequency >= 1000:
            return f"{int(self.frequency / 1000)}k"
        return str(int(self.frequency))
