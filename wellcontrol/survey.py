"""
MD → TVD mapping from survey stations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np


@dataclass(frozen=True)
class SurveyStation:
    """Survey station: measured depth and true vertical depth [m]."""

    md: float
    tvd: float


class TvdMapper:
    """
    Piecewise-linear MD → TVD mapping.

    Stations are sorted by MD and duplicate MDs dropped (first kept).
    Below the first station the first TVD is returned, above the last
    station the last TVD; with fewer than two stations MD is treated as
    TVD.

    Examples
    --------
    >>> m = TvdMapper([SurveyStation(0, 0), SurveyStation(1000, 950), SurveyStation(2000, 1800)])
    >>> m.md_to_tvd(500.0)
    475.0
    """

    def __init__(self, stations: Optional[Iterable[SurveyStation]] = None):
        md, tvd = [], []
        for s in sorted(stations or (), key=lambda s: s.md):
            if md and s.md == md[-1]:
                continue
            md.append(float(s.md))
            tvd.append(float(s.tvd))
        self._md = np.asarray(md, dtype=float)
        self._tvd = np.asarray(tvd, dtype=float)

    @property
    def is_identity(self) -> bool:
        return self._md.size < 2

    def md_to_tvd(self, md: float) -> float:
        if self.is_identity:
            return float(md)
        # np.interp clamps to the end values outside the station range
        return float(np.interp(md, self._md, self._tvd))

    def __call__(self, md: float) -> float:
        return self.md_to_tvd(md)


def identity_mapper() -> TvdMapper:
    return TvdMapper()
