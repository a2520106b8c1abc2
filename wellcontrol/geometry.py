"""
Wellbore geometry records.

Annulus sections (casing or open hole) and drill-string sections are plain
depth-interval records in measured depth [m]. Records are not validated on
construction: a section with bottom <= top is degenerate and simply never
covers positive length.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np


@dataclass
class DepthInterval:
    """
    Depth interval [top_m, bottom_m] in measured depth.

    Attributes
    ----------
    top_m, bottom_m : float
        Interval bounds [m MD].
    """

    top_m: float
    bottom_m: float

    @property
    def length_m(self) -> float:
        """Interval length [m], 0 for degenerate intervals."""
        return max(0.0, self.bottom_m - self.top_m)

    @property
    def is_degenerate(self) -> bool:
        return self.bottom_m <= self.top_m

    def covers(self, top: float, bottom: float, tol: float = 1e-6) -> bool:
        """Return True when [top, bottom] lies inside this interval (within tol)."""
        return self.top_m <= top + tol and self.bottom_m >= bottom - tol

    def overlaps(self, top: float, bottom: float) -> bool:
        """Return True when this interval shares positive length with [top, bottom]."""
        return self.bottom_m > top and self.top_m < bottom


@dataclass
class AnnulusSection(DepthInterval):
    """
    Casing or open-hole section.

    Attributes
    ----------
    inner_diameter_m : float
        Hole or casing inner diameter [m].
    outer_diameter_m : float
        Effective pipe OD inside the section [m]. Derived from the drill
        string and zeroed by normalization; never read as authoritative.
    name : str
        Display name.
    section_id : str, optional
        Stable identifier.
    """

    inner_diameter_m: float = 0.0
    outer_diameter_m: float = 0.0
    name: str = ""
    section_id: Optional[str] = None


@dataclass
class DrillStringSection(DepthInterval):
    """
    Drill-string component (drill pipe, HWDP, collars, ...).

    Attributes
    ----------
    inner_diameter_m, outer_diameter_m : float
        Pipe bore and body diameters [m].
    name : str
        Display name.
    section_id : str, optional
        Stable identifier.
    """

    inner_diameter_m: float = 0.0
    outer_diameter_m: float = 0.0
    name: str = ""
    section_id: Optional[str] = None


@dataclass
class GeometryModel:
    """
    Ordered annulus and drill-string sections for one well.

    Attributes
    ----------
    annulus : list of AnnulusSection
    drill_string : list of DrillStringSection
    """

    annulus: List[AnnulusSection] = field(default_factory=list)
    drill_string: List[DrillStringSection] = field(default_factory=list)

    @property
    def total_depth_m(self) -> float:
        """Deepest bottom across both section sets (0 when empty)."""
        bottoms = [s.bottom_m for s in self.annulus] + [s.bottom_m for s in self.drill_string]
        return max(bottoms) if bottoms else 0.0

    @property
    def bit_md(self) -> float:
        """Bit depth used by the displacement simulator, same as total depth."""
        return self.total_depth_m

    def annulus_at(self, md: float) -> Optional[AnnulusSection]:
        return covering_section(self.annulus, md)

    def string_at(self, md: float) -> Optional[DrillStringSection]:
        """Covering drill-string section at md; the larger OD wins ties."""
        best = None
        for s in self.drill_string:
            if s.top_m <= md <= s.bottom_m:
                if best is None or s.outer_diameter_m > best.outer_diameter_m:
                    best = s
        return best

    def hole_id_at(self, md: float) -> float:
        """Annulus inner diameter at md [m], 0 where nothing covers."""
        s = self.annulus_at(md)
        return s.inner_diameter_m if s is not None else 0.0

    def pipe_od_at(self, md: float) -> float:
        """Largest drill-string OD covering md [m], 0 where no string."""
        s = self.string_at(md)
        return s.outer_diameter_m if s is not None else 0.0

    def pipe_id_at(self, md: float) -> float:
        """Inner diameter of the drill string at md [m], 0 where no string."""
        s = self.string_at(md)
        return s.inner_diameter_m if s is not None else 0.0


def covering_section(sections: Sequence[DepthInterval], md: float):
    """Return the first section with top <= md <= bottom, or None."""
    for s in sections:
        if s.top_m <= md <= s.bottom_m:
            return s
    return None


def circle_area(diameter: float) -> float:
    """π/4·D² [m²]."""
    return float(np.pi / 4.0 * diameter * diameter)
