"""
Surge and swab pressures while tripping.

Moving pipe displaces mud up (running in) or draws mud down (pulling out)
the annulus above the bit. The induced annular velocity is

    Va = |v_trip| · (1 + Kc) · (A_disp / A_ann) · ecc

with Kc the Burkhardt clinging constant, A_disp the pipe displacement area
(closed end: full OD disk; open end: pipe wall only) and ecc an
eccentricity multiplier. Friction along the annulus above the bit uses the
same power-law gradient as circulating hydraulics, with a Fanning
turbulent branch when the generalized Reynolds number exceeds the laminar
limit.

References
----------
Burkhardt, J. A. (1961): Wellbore Pressure Surges Produced by Pipe Movement
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from .config import Config, DEFAULT_CONFIG
from .fluids import ANNULUS, FluidSpec, resolve_density
from .geometry import GeometryModel, circle_area
from .intervals import decompose
from .rheology import power_law_for, regime_gradient
from .survey import TvdMapper

logger = logging.getLogger(__name__)

CLOSED = "closed"
OPEN = "open"
NO_STRING = "No DS"


def clinging_constant(pipe_od: float, hole_id: float, config: Optional[Config] = None) -> float:
    """
    Burkhardt clinging constant Kc = 0.45 + 0.45·(Dp/Dh)².

    Returns the base value 0.45 for invalid geometry.
    """
    cfg = config or DEFAULT_CONFIG
    base = cfg.CLINGING_BASE
    if not (hole_id > pipe_od > 0):
        return base
    ratio = pipe_od / hole_id
    return base + base * ratio * ratio


def displacement_area(pipe_od: float, pipe_id: float, pipe_end: str = CLOSED) -> float:
    """Pipe displacement area [m²]: OD disk when closed, wall only when open."""
    if pipe_end == OPEN:
        return max(0.0, circle_area(pipe_od) - circle_area(pipe_id))
    return circle_area(pipe_od)


@dataclass(frozen=True)
class DepthResult:
    """Surge and swab at one bit depth. Swab values are negative."""

    bit_md: float
    bit_tvd: float
    surge_kpa: float
    swab_kpa: float
    surge_ecd_kgm3: float
    swab_ecd_kgm3: float
    annular_velocity_m_per_s: float
    reynolds: float
    flow_regime: str
    clinging_constant: float


@dataclass(frozen=True)
class SurgeSwabSummary:
    max_surge_kpa: float
    max_swab_kpa: float
    max_surge_ecd_kgm3: float
    max_swab_ecd_kgm3: float
    depth_of_max_surge_m: float
    depth_of_max_swab_m: float
    average_clinging_constant: float
    displacement_area_m2: float
    pipe_end: str
    pipe_od_m: float
    pipe_id_m: float
    has_missing_pipe_id: bool
    recommended_sabp_kpa: float


@dataclass
class SurgeSwabResult:
    """Depth profile of a trip with its summary."""

    rows: List[DepthResult]
    summary: SurgeSwabSummary

    def to_dataframe(self) -> pd.DataFrame:
        """Profile as a DataFrame, one row per depth."""
        return pd.DataFrame([asdict(r) for r in self.rows])


class SurgeSwabCalculator:
    """
    Per-depth surge/swab sweep.

    Parameters
    ----------
    geometry : GeometryModel
    fluid : FluidSpec, optional
        Mud in the annulus; supplies density and rheology.
    mapper : TvdMapper, optional
    clinging_override : float, optional
        Fixed clinging constant instead of the Burkhardt estimate.
    pipe_end : str
        'closed' (float/bit closed) or 'open'.
    eccentricity : float
        Velocity multiplier for off-centre pipe (1.0 = concentric).
    config : Config, optional
    """

    def __init__(
        self,
        geometry: GeometryModel,
        fluid: Optional[FluidSpec] = None,
        mapper: Optional[TvdMapper] = None,
        clinging_override: Optional[float] = None,
        pipe_end: str = CLOSED,
        eccentricity: float = 1.0,
        config: Optional[Config] = None,
    ):
        self.geometry = geometry
        self.fluid = fluid
        self.mapper = mapper or TvdMapper()
        self.clinging_override = clinging_override
        self.pipe_end = pipe_end
        self.eccentricity = eccentricity
        self.config = config or DEFAULT_CONFIG

    def at_depth(self, bit_md: float, trip_speed_m_per_min: float) -> DepthResult:
        cfg = self.config
        bit_tvd = self.mapper.md_to_tvd(bit_md)
        v_trip = abs(trip_speed_m_per_min) / 60.0
        kc_bit = self.clinging_override if self.clinging_override is not None else cfg.CLINGING_BASE

        at_bit = self.geometry.string_at(bit_md)
        if at_bit is None:
            return DepthResult(bit_md, bit_tvd, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, NO_STRING, kc_bit)

        a_disp = displacement_area(at_bit.outer_diameter_m, at_bit.inner_diameter_m, self.pipe_end)
        rho = resolve_density(self.fluid, config=cfg).value
        law = power_law_for(self.fluid, ANNULUS, cfg)
        if law is None:
            logger.warning("No rheology for surge/swab fluid; friction taken as 0")

        dp_pa = 0.0
        va_bit = re_bit = 0.0
        regime_bit = "N/A"
        for sub in decompose(0.0, bit_md, self.geometry.annulus, self.geometry.drill_string, cfg):
            if sub.annulus is None:
                continue
            hole = sub.annulus.inner_diameter_m
            od = sub.string.outer_diameter_m if sub.string is not None else at_bit.outer_diameter_m
            a_ann = circle_area(hole) - circle_area(od)
            if a_ann <= 0:
                continue
            d_h = hole - od
            kc = self.clinging_override if self.clinging_override is not None else clinging_constant(od, hole, cfg)
            va = v_trip * (1.0 + kc) * (a_disp / a_ann) * self.eccentricity

            if law is not None:
                grad, regime, re = regime_gradient(rho, va, d_h, law, cfg)
            else:
                grad, regime, re = 0.0, "N/A", 0.0
            dp_pa += grad * sub.length_m

            # the deepest sub-interval reports the conditions at the bit
            va_bit, re_bit, regime_bit, kc_bit = va, re, regime, kc

        dp_kpa = dp_pa / 1000.0
        ecd = dp_kpa / (cfg.KPA_PER_M_PER_KGM3 * bit_tvd) if bit_tvd > 0 else 0.0
        return DepthResult(
            bit_md=bit_md,
            bit_tvd=bit_tvd,
            surge_kpa=dp_kpa,
            swab_kpa=-dp_kpa,
            surge_ecd_kgm3=ecd,
            swab_ecd_kgm3=-ecd,
            annular_velocity_m_per_s=va_bit,
            reynolds=re_bit,
            flow_regime=regime_bit,
            clinging_constant=kc_bit,
        )

    @staticmethod
    def depths(start_md: float, end_md: float, step_m: float) -> np.ndarray:
        """Depths from start toward end in steps of ``step_m``, end included."""
        step = abs(step_m) if step_m else abs(end_md - start_md) or 1.0
        n = int(np.floor(abs(end_md - start_md) / step + 1e-9))
        direction = 1.0 if end_md >= start_md else -1.0
        out = start_md + direction * step * np.arange(n + 1)
        if abs(out[-1] - end_md) > 1e-6:
            out = np.append(out, end_md)
        return out

    def calculate(
        self,
        trip_speed_m_per_min: float,
        start_md: float,
        end_md: float,
        step_m: float = 100.0,
    ) -> SurgeSwabResult:
        """
        Sweep bit depth from ``start_md`` to ``end_md``.

        Returns
        -------
        SurgeSwabResult
        """
        rows = [self.at_depth(float(d), trip_speed_m_per_min) for d in self.depths(start_md, end_md, step_m)]
        return SurgeSwabResult(rows=rows, summary=self.summarize(rows))

    def summarize(self, rows: List[DepthResult]) -> SurgeSwabSummary:
        cfg = self.config
        deepest = max(self.geometry.drill_string, key=lambda s: s.bottom_m, default=None)
        pipe_od = deepest.outer_diameter_m if deepest is not None else 0.0
        pipe_id = deepest.inner_diameter_m if deepest is not None else 0.0

        if rows:
            surge = max(rows, key=lambda r: r.surge_kpa)
            swab = min(rows, key=lambda r: r.swab_kpa)
            avg_kc = float(np.mean([r.clinging_constant for r in rows]))
        else:
            surge = swab = None
            avg_kc = cfg.CLINGING_BASE

        max_swab = abs(swab.swab_kpa) if swab is not None else 0.0
        return SurgeSwabSummary(
            max_surge_kpa=surge.surge_kpa if surge is not None else 0.0,
            max_swab_kpa=max_swab,
            max_surge_ecd_kgm3=surge.surge_ecd_kgm3 if surge is not None else 0.0,
            max_swab_ecd_kgm3=abs(swab.swab_ecd_kgm3) if swab is not None else 0.0,
            depth_of_max_surge_m=surge.bit_md if surge is not None else 0.0,
            depth_of_max_swab_m=swab.bit_md if swab is not None else 0.0,
            average_clinging_constant=avg_kc,
            displacement_area_m2=displacement_area(pipe_od, pipe_id, self.pipe_end),
            pipe_end=self.pipe_end,
            pipe_od_m=pipe_od,
            pipe_id_m=pipe_id,
            has_missing_pipe_id=pipe_id < 0.001,
            recommended_sabp_kpa=max_swab * cfg.SWAB_SAFETY_FACTOR,
        )
