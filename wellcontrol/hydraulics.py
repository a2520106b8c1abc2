"""
Circulating hydraulics for a displacement snapshot.

For the current fluid stacks, evaluates at a control depth:

- hydrostatic pressure of the annulus and string columns (TVD-exact,
  through :func:`~wellcontrol.hydrostatic.hydrostatic_kpa`)
- laminar power-law friction along each flow path (MD)
- surface back-pressure (SBP) for managed-pressure drilling
- bottom-hole pressure, ECD and total circulating pressure

BHP is the static value (annulus hydrostatic + SBP). ECD includes
annulus friction. TCP is the total friction plus SBP.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import numpy as np

from .config import Config, DEFAULT_CONFIG
from .fluids import ANNULUS, STRING, FluidSpec
from .geometry import GeometryModel
from .hydrostatic import hydrostatic_kpa
from .rheology import friction_gradient, power_law_for
from .survey import TvdMapper

logger = logging.getLogger(__name__)

MIN_DIAMETER = 0.001      # m
MIN_CLEARANCE = 0.0001    # m
MIN_HYDRAULIC_D = 1e-6    # m
MIN_AREA = 1e-12          # m²


@dataclass(frozen=True)
class HydraulicsResult:
    """
    Hydraulics readout at the control depth. Pressures in kPa, ECD in kg/m³.
    """

    control_md: float
    control_tvd: float
    annulus_hydrostatic_kpa: float
    string_hydrostatic_kpa: float
    annulus_friction_kpa: float
    string_friction_kpa: float
    sbp_kpa: float
    bhp_kpa: float
    ecd_kgm3: float
    tcp_kpa: float
    annulus_at_control_kpa: float
    string_at_control_kpa: float
    missing_rheology_segments: int = 0

    @property
    def total_friction_kpa(self) -> float:
        return self.annulus_friction_kpa + self.string_friction_kpa

    @property
    def string_minus_annulus_kpa(self) -> float:
        """Pressure difference across the bit at control depth."""
        return self.string_at_control_kpa - self.annulus_at_control_kpa


class HydraulicsEngine:
    """
    Friction and pressure evaluation over a fixed geometry and survey.

    Parameters
    ----------
    geometry : GeometryModel
    mapper : TvdMapper, optional
        MD → TVD mapping, identity when omitted.
    config : Config, optional
    """

    def __init__(
        self,
        geometry: GeometryModel,
        mapper: Optional[TvdMapper] = None,
        config: Optional[Config] = None,
    ):
        self.geometry = geometry
        self.mapper = mapper or TvdMapper()
        self.config = config or DEFAULT_CONFIG

    def flow_geometry(self, domain: str, md: float) -> Tuple[float, float]:
        """
        Hydraulic diameter and flow area at ``md`` for ``domain``.

        Annulus: Dh = hole ID − pipe OD; string: Dh = pipe ID. Diameters
        are floored so the area stays positive.
        """
        if domain == ANNULUS:
            d_o = max(self.geometry.pipe_od_at(md), MIN_DIAMETER)
            d_hole = max(self.geometry.hole_id_at(md), d_o + MIN_CLEARANCE)
            d_h = max(d_hole - d_o, MIN_HYDRAULIC_D)
            area = np.pi * (d_hole ** 2 - d_o ** 2) / 4.0
        else:
            d_h = max(self.geometry.pipe_id_at(md), MIN_DIAMETER)
            area = np.pi * d_h ** 2 / 4.0
        return float(d_h), float(max(area, MIN_AREA))

    def _friction(
        self,
        domain: str,
        segments: Iterable,
        control_md: float,
        q_m3s: float,
    ) -> Tuple[float, int]:
        """
        Friction [Pa] along a flow path and the count of segments without rheology.

        Only a lab fit or dial readings give friction here; PV/YP alone
        counts as missing rheology.
        """
        friction = 0.0
        missing = 0
        if q_m3s <= 0:
            return friction, missing
        for seg in segments:
            top = max(0.0, min(seg.top_m, control_md))
            bottom = max(0.0, min(seg.bottom_m, control_md))
            if bottom <= top:
                continue
            law = power_law_for(seg.fluid, domain, self.config, allow_pv_yp=False)
            if law is None:
                missing += 1
                continue
            d_h, area = self.flow_geometry(domain, 0.5 * (top + bottom))
            friction += friction_gradient(q_m3s / area, d_h, law) * (bottom - top)
        return friction, missing

    def evaluate(
        self,
        annulus: Iterable,
        string: Iterable,
        pump_rate_m3_per_min: Optional[float] = None,
        control_md: Optional[float] = None,
        mpd_enabled: bool = False,
        target_ecd_kgm3: Optional[float] = None,
        active_fluid: Optional[FluidSpec] = None,
    ) -> HydraulicsResult:
        """
        Evaluate hydraulics for annulus and string segments.

        Parameters
        ----------
        annulus, string : iterable
            Segments with ``top_m``, ``bottom_m`` and ``fluid``.
        pump_rate_m3_per_min : float, optional
            Pump rate (default: ``config.PUMP_RATE_M3_PER_MIN``).
        control_md : float, optional
            Evaluation depth, clamped to [0, bit]; the bit when omitted.
        mpd_enabled : bool
            Solve SBP to hold ``target_ecd_kgm3`` at the control depth.
        target_ecd_kgm3 : float, optional
            Default ``config.TARGET_ECD``.
        active_fluid : FluidSpec, optional
            Density source for string segments without a fluid.

        Returns
        -------
        HydraulicsResult
        """
        cfg = self.config
        g = cfg.GRAVITY
        bit = self.geometry.bit_md
        rate = cfg.PUMP_RATE_M3_PER_MIN if pump_rate_m3_per_min is None else pump_rate_m3_per_min
        q = max(rate, 0.0) / 60.0
        cmd = bit if control_md is None else min(max(control_md, 0.0), bit)
        ctvd = self.mapper.md_to_tvd(cmd)

        annulus, string = list(annulus), list(string)
        string_fallback = active_fluid.density_kgm3 if active_fluid is not None else cfg.BASE_STRING_DENSITY
        ann_hyd = 1000.0 * hydrostatic_kpa(annulus, cmd, self.mapper, cfg.BASE_ANNULUS_DENSITY, cfg)
        str_hyd = 1000.0 * hydrostatic_kpa(string, cmd, self.mapper, string_fallback, cfg)
        ann_fric, miss_a = self._friction(ANNULUS, annulus, cmd, q)
        str_fric, miss_s = self._friction(STRING, string, cmd, q)

        sbp_kpa = 0.0
        if mpd_enabled:
            target = cfg.TARGET_ECD if target_ecd_kgm3 is None else target_ecd_kgm3
            sbp_kpa = max(0.0, (max(0.0, target) * g * ctvd - (ann_hyd + ann_fric)) / 1000.0)

        missing = miss_a + miss_s
        if missing:
            logger.warning("%d segment(s) without rheology; friction taken as 0", missing)

        ecd = (ann_hyd + ann_fric + sbp_kpa * 1000.0) / (g * ctvd) if ctvd > 0 else 0.0
        return HydraulicsResult(
            control_md=cmd,
            control_tvd=ctvd,
            annulus_hydrostatic_kpa=ann_hyd / 1000.0,
            string_hydrostatic_kpa=str_hyd / 1000.0,
            annulus_friction_kpa=ann_fric / 1000.0,
            string_friction_kpa=str_fric / 1000.0,
            sbp_kpa=sbp_kpa,
            bhp_kpa=ann_hyd / 1000.0 + sbp_kpa,
            ecd_kgm3=ecd,
            tcp_kpa=(ann_fric + str_fric) / 1000.0 + sbp_kpa,
            annulus_at_control_kpa=(ann_hyd + ann_fric) / 1000.0 + sbp_kpa,
            string_at_control_kpa=(str_hyd + str_fric) / 1000.0,
            missing_rheology_segments=missing,
        )

    def evaluate_state(self, state, **kwargs) -> HydraulicsResult:
        """Shorthand for a :class:`~wellcontrol.displacement.StackState`."""
        return self.evaluate(state.annulus, state.string, **kwargs)
