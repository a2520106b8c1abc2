"""
Power-law rheology and pipe/annulus friction.

This module derives power-law parameters (K, n) from lab data and computes
laminar friction gradients with the Mooney-Rabinowitsch wall shear rate,
plus the generalized Reynolds number used to classify the flow regime.

References
----------
Metzner, A. B., Reed, J. C. (1955): Flow of non-Newtonian fluids
API RP 13D: Rheology and Hydraulics of Oil-well Drilling Fluids
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .config import Config, DEFAULT_CONFIG
from .fluids import ANNULUS, FluidSpec

LAMINAR = "laminar"
TURBULENT = "turbulent"


@dataclass(frozen=True)
class PowerLaw:
    """
    Power-law parameters τ = K·γⁿ.

    Attributes
    ----------
    k : float
        Consistency index [Pa·sⁿ]
    n : float
        Flow behaviour index [-]
    source : str
        'lab', 'dial' or 'pv_yp'
    """

    k: float
    n: float
    source: str = "lab"


def power_law_from_dials(
    dial600: float,
    dial300: float,
    config: Optional[Config] = None,
) -> Optional[PowerLaw]:
    """
    Fit K and n from Fann 35 readings at 600 and 300 rpm.

        n = ln(θ600/θ300) / ln 2
        K = 0.4788·θ600 / 1022ⁿ

    Returns None for non-positive readings or a non-positive n.
    """
    cfg = config or DEFAULT_CONFIG
    if dial600 is None or dial300 is None or dial600 <= 0 or dial300 <= 0:
        return None
    n = float(np.log(dial600 / dial300) / np.log(2.0))
    if n <= 0:
        return None
    tau600 = cfg.FANN_DIAL_TO_PA * dial600
    k = tau600 / cfg.FANN_600_SHEAR_RATE ** n
    return PowerLaw(k=k, n=n, source="dial")


def dials_from_pv_yp(pv_pa_s: float, yp_pa: float, config: Optional[Config] = None) -> Tuple[float, float]:
    """
    Bingham PV/YP to equivalent Fann readings.

        θ300 = PV[cP] + YP[lbf/100ft²]
        θ600 = 2·PV[cP] + YP[lbf/100ft²]
    """
    cfg = config or DEFAULT_CONFIG
    pv_cp = pv_pa_s * 1000.0
    yp_field = yp_pa / cfg.FANN_DIAL_TO_PA
    return 2.0 * pv_cp + yp_field, pv_cp + yp_field


def power_law_for(
    fluid: Optional[FluidSpec],
    domain: str,
    config: Optional[Config] = None,
    allow_pv_yp: bool = True,
) -> Optional[PowerLaw]:
    """
    Resolve (K, n) for a fluid flowing in ``domain``.

    Priority: the domain's direct lab fit, then dial readings, then PV/YP
    when ``allow_pv_yp`` is set. Returns None when the fluid carries no
    usable rheology.
    """
    if fluid is None:
        return None
    if domain == ANNULUS:
        k, n = fluid.k_annulus, fluid.n_annulus
    else:
        k, n = fluid.k_pipe, fluid.n_pipe
    if k is not None and n is not None and k > 0 and n > 0:
        return PowerLaw(k=float(k), n=float(n), source="lab")

    fit = power_law_from_dials(fluid.dial600, fluid.dial300, config)
    if fit is not None:
        return fit

    if allow_pv_yp and fluid.pv_pa_s is not None and fluid.yp_pa is not None and fluid.pv_pa_s > 0:
        d600, d300 = dials_from_pv_yp(fluid.pv_pa_s, max(0.0, fluid.yp_pa), config)
        fit = power_law_from_dials(d600, d300, config)
        if fit is not None:
            return PowerLaw(k=fit.k, n=fit.n, source="pv_yp")
    return None


def wall_shear_rate(velocity: float, d_h: float, n: float) -> float:
    """
    Mooney-Rabinowitsch wall shear rate [1/s].

        γw = ((3n+1)/(4n))·(8V/Dh)
    """
    return (3.0 * n + 1.0) / (4.0 * n) * 8.0 * velocity / d_h


def friction_gradient(velocity: float, d_h: float, law: PowerLaw) -> float:
    """
    Laminar power-law friction gradient [Pa/m].

        τw = K·γwⁿ,  dP/dL = 4τw/Dh

    Returns 0 for non-positive velocity or hydraulic diameter.
    """
    if velocity <= 0 or d_h <= 0:
        return 0.0
    tau_w = law.k * wall_shear_rate(velocity, d_h, law.n) ** law.n
    return 4.0 * tau_w / d_h


def generalized_reynolds(density: float, velocity: float, d_h: float, law: PowerLaw) -> float:
    """
    Metzner-Reed generalized Reynolds number [-].

        Re = ρ·V^(2−n)·Dh^n / (K·8^(n−1))
    """
    if velocity <= 0 or d_h <= 0 or law.k <= 0:
        return 0.0
    return density * velocity ** (2.0 - law.n) * d_h ** law.n / (law.k * 8.0 ** (law.n - 1.0))


def flow_regime(reynolds: float, config: Optional[Config] = None) -> str:
    cfg = config or DEFAULT_CONFIG
    return LAMINAR if reynolds < cfg.LAMINAR_RE_THRESHOLD else TURBULENT


def fanning_turbulent(reynolds: float) -> float:
    """Blasius-type Fanning friction factor f = 0.079/Re^0.25."""
    if reynolds <= 0:
        return 0.0
    return 0.079 / reynolds ** 0.25


def regime_gradient(
    density: float,
    velocity: float,
    d_h: float,
    law: PowerLaw,
    config: Optional[Config] = None,
) -> Tuple[float, str, float]:
    """
    Friction gradient [Pa/m] with regime selection.

    Laminar flow uses :func:`friction_gradient`. In turbulent flow the
    gradient is the larger of the laminar value and 2·f·ρ·V²/Dh.

    Returns
    -------
    gradient : float
    regime : str
    reynolds : float
    """
    laminar = friction_gradient(velocity, d_h, law)
    re = generalized_reynolds(density, velocity, d_h, law)
    regime = flow_regime(re, config)
    if regime == LAMINAR or d_h <= 0:
        return laminar, regime, re
    turbulent = 2.0 * fanning_turbulent(re) * density * velocity ** 2 / d_h
    return max(laminar, turbulent), regime, re


if __name__ == "__main__":
    # Quick check of the power-law fit and friction gradient
    print("Testing power-law rheology...")

    law = power_law_from_dials(52.0, 32.0)
    print(f"Dials 52/32: n = {law.n:.4f}, K = {law.k:.4f} Pa·sⁿ")

    # Annulus 8.5in hole x 5in pipe at 1.2 m³/min
    d_hole, d_pipe = 0.2159, 0.127
    area = np.pi / 4.0 * (d_hole ** 2 - d_pipe ** 2)
    v = 1.2 / 60.0 / area
    grad, regime, re = regime_gradient(1250.0, v, d_hole - d_pipe, law)
    print(f"V = {v:.3f} m/s, Re = {re:.0f} ({regime}), dP/dL = {grad:.1f} Pa/m")
