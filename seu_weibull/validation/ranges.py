"""Typical and tolerable ranges for fitted Weibull shape and width.

Width is in LET units (MeV*cm^2/mg). Values outside the typical band warn;
values outside the tolerable band fail.
"""

from __future__ import annotations

from dataclasses import dataclass

from seu_weibull.models import VerdictStatus


@dataclass(frozen=True)
class PlausibilityRange:
    typical: tuple[float, float]
    tolerable: tuple[float, float]

    def classify(self, value: float) -> VerdictStatus:
        lo, hi = self.typical
        if lo <= value <= hi:
            return VerdictStatus.PASS
        lo, hi = self.tolerable
        if lo <= value <= hi:
            return VerdictStatus.WARNING
        return VerdictStatus.FAIL


SHAPE_RANGE = PlausibilityRange(typical=(1.0, 5.0), tolerable=(0.5, 8.0))
WIDTH_RANGE = PlausibilityRange(typical=(1.0, 100.0), tolerable=(0.2, 250.0))

__all__ = ["PlausibilityRange", "SHAPE_RANGE", "WIDTH_RANGE"]
