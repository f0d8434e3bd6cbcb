"""
Numerical flux schemes for the 1D hydrodynamics solver.

Fluxes are computed for all faces at once from reconstructed primitive face
states of shape (n_eq, n_faces).
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import Tuple

from .errors import ConfigurationError
from .physics import Physics, JXI

# |S_R - S_L| below this, relative to max(1, |S_L|, |S_R|), counts as a zero-width fan
DEGENERATE_FAN_TOL = 1e-12


class NumericalFlux(ABC):
    """Abstract base class for numerical flux schemes."""

    @abstractmethod
    def signal_speeds(self, WL: np.ndarray, WR: np.ndarray,
                      physics: Physics) -> Tuple[np.ndarray, np.ndarray]:
        """
        Estimate the slowest and fastest signal speed at each face.

        Args:
            WL: Left primitive states (n_eq, n_faces)
            WR: Right primitive states (n_eq, n_faces)
            physics: Equation system

        Returns:
            SL, SR: Signal speed bounds (n_faces,)
        """
        pass

    @abstractmethod
    def compute_flux(self, WL: np.ndarray, WR: np.ndarray,
                     physics: Physics) -> np.ndarray:
        """
        Compute numerical fluxes at all faces.

        Args:
            WL: Left primitive states (n_eq, n_faces)
            WR: Right primitive states (n_eq, n_faces)
            physics: Equation system

        Returns:
            Fluxes at all faces (n_eq, n_faces)
        """
        pass

    def max_signal_speed(self, WL: np.ndarray, WR: np.ndarray,
                         physics: Physics) -> float:
        """Largest |S_L|, |S_R| over all faces."""
        SL, SR = self.signal_speeds(WL, WR, physics)
        return float(np.max(np.maximum(np.abs(SL), np.abs(SR))))


class HLLFlux(NumericalFlux):
    """
    HLL approximate Riemann solver.

    Bounds the Riemann fan by two signal speeds S_L <= S_R and averages the
    states in between:

        F = F_L                                             if S_L >= 0
        F = F_R                                             if S_R <= 0
        F = (S_R F_L - S_L F_R + S_L S_R (U_R - U_L)) / (S_R - S_L)  otherwise

    Wave speed estimates:
        'davis'    - S_L = min(u_L - a_L, u_R - a_R), S_R = max(u_L + a_L, u_R + a_R)
        'einfeldt' - S_L = min(u_L - a_L, u_roe - a_roe), S_R = max(u_R + a_R, u_roe + a_roe)
    """

    WAVE_SPEED_ESTIMATES = ('davis', 'einfeldt')

    def __init__(self, wave_speeds: str = 'davis'):
        if wave_speeds not in self.WAVE_SPEED_ESTIMATES:
            raise ConfigurationError(f"Unknown wave speed estimate: {wave_speeds}. "
                                     f"Options: {', '.join(self.WAVE_SPEED_ESTIMATES)}")
        self.wave_speeds = wave_speeds

    def signal_speeds(self, WL: np.ndarray, WR: np.ndarray,
                      physics: Physics) -> Tuple[np.ndarray, np.ndarray]:
        aL = physics.sound_speed(WL)
        aR = physics.sound_speed(WR)
        uL = WL[JXI]
        uR = WR[JXI]

        if self.wave_speeds == 'davis':
            SL = np.minimum(uL - aL, uR - aR)
            SR = np.maximum(uL + aL, uR + aR)
        else:
            roe_min, roe_max = physics.roe_speeds(WL, WR)
            SL = np.minimum(uL - aL, roe_min)
            SR = np.maximum(uR + aR, roe_max)
        return SL, SR

    def compute_flux(self, WL: np.ndarray, WR: np.ndarray,
                     physics: Physics) -> np.ndarray:
        UL = physics.cons_from_prim(WL)
        UR = physics.cons_from_prim(WR)
        FL = physics.physical_flux(UL, WL)
        FR = physics.physical_flux(UR, WR)

        SL, SR = self.signal_speeds(WL, WR, physics)

        # Compute wave structure masks
        mask_left = SL >= 0  # Use left flux
        mask_right = (SR <= 0) & ~mask_left  # Use right flux
        mask_fan = ~(mask_left | mask_right)

        width = SR - SL
        degenerate = mask_fan & (width <= DEGENERATE_FAN_TOL * np.maximum(1.0, np.maximum(np.abs(SL), np.abs(SR))))
        mask_hll = mask_fan & ~degenerate

        F = np.empty_like(FL)
        F[:, mask_left] = FL[:, mask_left]
        F[:, mask_right] = FR[:, mask_right]

        if np.any(mask_hll):
            sl = SL[mask_hll]
            sr = SR[mask_hll]
            F[:, mask_hll] = (sr * FL[:, mask_hll] - sl * FR[:, mask_hll]
                              + sl * sr * (UR[:, mask_hll] - UL[:, mask_hll])) / (sr - sl)

        # zero-width fan: average of the physical fluxes
        if np.any(degenerate):
            F[:, degenerate] = 0.5 * (FL[:, degenerate] + FR[:, degenerate])

        return F


FLUX_SCHEMES = {
    'hll': HLLFlux,
}


def make_flux(name: str = 'hll', wave_speeds: str = 'davis') -> NumericalFlux:
    """Select a numerical flux scheme by name."""
    if name not in FLUX_SCHEMES:
        raise ConfigurationError(f"Unknown flux scheme: {name}. Options: {', '.join(FLUX_SCHEMES)}")
    return FLUX_SCHEMES[name](wave_speeds=wave_speeds)
