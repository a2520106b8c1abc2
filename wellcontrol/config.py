"""
Centralized configuration for the well-control geometry and hydraulics core.

All constants in one place. Units are SI (metres, kg, seconds, Pascals)
unless otherwise noted; pressures reported to callers are in kPa.

Configuration Groups:
    - Physical: gravity
    - Tolerances: boundary de-duplication, diameter equality
    - Root finding: iteration cap, relative tolerance, rescale cap
    - Fluids: fallback and base densities
    - Rheology: Fann 35 viscometer constants, laminar threshold
    - Surge/Swab: clinging constant, safety factor
    - Hydraulics: default pump rate and managed-pressure target
"""

import sys
from dataclasses import dataclass

# Smallest relative tolerance scipy.optimize.bisect accepts
MIN_ROOT_RTOL = 4.0 * sys.float_info.epsilon


@dataclass
class Config:
    """
    Centralized configuration with all constants for the well-control core.

    Attributes
    ----------
    Physical:
        GRAVITY : float
            Standard gravity [m/s²] (default: 9.80665)

    Tolerances:
        BOUNDARY_TOL : float
            Depth boundary de-duplication tolerance [m] (default: 1e-6)
        DIAMETER_TOL : float
            OD/ID equality and contiguity tolerance (default: 1e-9)
        SEGMENT_TOL : float
            Minimum segment length and contiguity tolerance for fluid
            segments [m] (default: 1e-6)

    Root finding:
        ROOT_MAX_ITER : int
            Bisection iteration cap (default: 96)
        ROOT_RTOL : float
            Relative volume tolerance for bisection (default: 1e-9,
            at least ``MIN_ROOT_RTOL``)
        RESCALE_TOL : float
            Relative deviation that triggers annulus length rescaling
            (default: 1e-6)
        RESCALE_CAP : float
            Maximum uniform rescale factor (default: 10.0)

    Fluids:
        FALLBACK_DENSITY : float
            Hard default density when no fluid or base applies [kg/m³]
            (default: 1260)
        BASE_ANNULUS_DENSITY : float
            Base fill density for the annulus column [kg/m³] (default: 1260)
        BASE_STRING_DENSITY : float
            Base fill density for the string column [kg/m³] (default: 1260)

    Rheology:
        FANN_DIAL_TO_PA : float
            Dial reading to shear stress factor [Pa/dial] (default: 0.4788)
        FANN_600_SHEAR_RATE : float
            Shear rate at 600 rpm [1/s] (default: 1022)
        FANN_300_SHEAR_RATE : float
            Shear rate at 300 rpm [1/s] (default: 511)
        LAMINAR_RE_THRESHOLD : float
            Generalized Reynolds number laminar limit (default: 2100)

    Surge/Swab:
        CLINGING_BASE : float
            Burkhardt clinging constant base value (default: 0.45)
        SWAB_SAFETY_FACTOR : float
            Multiplier on swab pressure for recommended SABP (default: 1.15)

    Hydraulics:
        PUMP_RATE_M3_PER_MIN : float
            Default pump rate [m³/min] (default: 0.5)
        TARGET_ECD : float
            Default managed-pressure target ECD [kg/m³] (default: 1300)
    """

    # =========================================================================
    # Physical
    # =========================================================================
    GRAVITY: float = 9.80665                # m/s²

    # =========================================================================
    # Tolerances
    # =========================================================================
    BOUNDARY_TOL: float = 1e-6              # m
    DIAMETER_TOL: float = 1e-9              # m
    SEGMENT_TOL: float = 1e-6               # m

    # =========================================================================
    # Root finding
    # =========================================================================
    ROOT_MAX_ITER: int = 96
    ROOT_RTOL: float = 1e-9
    RESCALE_TOL: float = 1e-6
    RESCALE_CAP: float = 10.0

    # =========================================================================
    # Fluids
    # =========================================================================
    FALLBACK_DENSITY: float = 1260.0        # kg/m³
    BASE_ANNULUS_DENSITY: float = 1260.0    # kg/m³
    BASE_STRING_DENSITY: float = 1260.0     # kg/m³

    # =========================================================================
    # Rheology (Fann 35)
    # =========================================================================
    FANN_DIAL_TO_PA: float = 0.4788         # Pa per dial unit
    FANN_600_SHEAR_RATE: float = 1022.0     # 1/s
    FANN_300_SHEAR_RATE: float = 511.0      # 1/s
    LAMINAR_RE_THRESHOLD: float = 2100.0

    # =========================================================================
    # Surge / Swab
    # =========================================================================
    CLINGING_BASE: float = 0.45
    SWAB_SAFETY_FACTOR: float = 1.15

    # =========================================================================
    # Hydraulics
    # =========================================================================
    PUMP_RATE_M3_PER_MIN: float = 0.5       # m³/min
    TARGET_ECD: float = 1300.0              # kg/m³

    @property
    def KPA_PER_M_PER_KGM3(self) -> float:
        """Hydrostatic gradient per unit density [kPa/m per kg/m³]."""
        return self.GRAVITY / 1000.0

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.GRAVITY <= 0:
            raise ValueError(f"GRAVITY ({self.GRAVITY}) must be positive.")

        if self.ROOT_MAX_ITER < 1 or self.ROOT_MAX_ITER > 96:
            raise ValueError(
                f"ROOT_MAX_ITER ({self.ROOT_MAX_ITER}) must be in [1, 96]."
            )

        if self.RESCALE_CAP < 1.0:
            raise ValueError(
                f"RESCALE_CAP ({self.RESCALE_CAP}) must be >= 1 "
                "so rescaling can restore a short annulus column."
            )

        for name in ("BOUNDARY_TOL", "DIAMETER_TOL", "SEGMENT_TOL", "ROOT_RTOL", "RESCALE_TOL"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive.")

        # scipy.optimize.bisect rejects rtol below 4 machine epsilons
        if self.ROOT_RTOL < MIN_ROOT_RTOL:
            raise ValueError(
                f"ROOT_RTOL ({self.ROOT_RTOL}) must be >= {MIN_ROOT_RTOL:.3e}."
            )

        for name in ("FALLBACK_DENSITY", "BASE_ANNULUS_DENSITY", "BASE_STRING_DENSITY"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative.")


# Default configuration instance
DEFAULT_CONFIG = Config()
