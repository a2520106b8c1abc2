"""
Mud mixing helpers.

Volume-weighted blending of two fluids and the inverse problems used when
weighting up a mud system.
"""

from typing import Optional

BARITE_DENSITY = 4200.0  # kg/m³


def blend_density(rho1: float, v1: float, rho2: float, v2: float) -> float:
    """
    Density of a volume-weighted blend [kg/m³].

    Returns 0 when the total volume is not positive.
    """
    total = v1 + v2
    if total <= 0:
        return 0.0
    return (rho1 * v1 + rho2 * v2) / total


def volume_for_target_density(
    rho1: float,
    v1: float,
    rho2: float,
    rho_target: float,
) -> Optional[float]:
    """
    Volume of fluid 2 to add to V1 of fluid 1 to reach ``rho_target``.

        V2 = V1·(ρt − ρ1)/(ρ2 − ρt)

    Returns None when the target cannot be reached (denominator ~0 or
    negative volume).
    """
    denom = rho2 - rho_target
    if abs(denom) < 1e-12:
        return None
    v2 = v1 * (rho_target - rho1) / denom
    if v2 < 0:
        return None
    return v2


def barite_mass_for_target(
    rho_mud: float,
    v_mud: float,
    rho_target: float,
    rho_barite: float = BARITE_DENSITY,
) -> Optional[float]:
    """
    Barite mass [kg] to weight V_m of mud from ρm to ρt.

        m = (ρt − ρm)·Vm / (1 − ρt/ρB)

    Valid only for ρm < ρt < ρB and Vm > 0; otherwise None.
    """
    if not (rho_target > rho_mud and rho_target < rho_barite and v_mud > 0):
        return None
    return (rho_target - rho_mud) * v_mud / (1.0 - rho_target / rho_barite)
