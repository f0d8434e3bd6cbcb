"""
Equation systems for 1D hydrodynamics.

Variables are stored equation-major, i.e. arrays of shape (n_eq, n_cells):

    Euler1DAdiabatic
        conserved: rho, rho*u, E       (E = p/(gamma-1) + rho*u²/2)
        primitive: rho, u, p
    Euler1DIsothermal
        conserved: rho, rho*u
        primitive: rho, u              (p = c_sound² * rho)

All methods operate on whole arrays, so they work for cells and for face
states alike.
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import Tuple

from .eos import EquationOfState

JRHO = 0
JXI = 1
JPRESSURE = 2
JENERGY = 2


class Physics(ABC):
    """Abstract base class for a system of conservation laws."""

    n_eq: int
    has_pressure: bool
    prim_names: Tuple[str, ...]
    cons_names: Tuple[str, ...]

    def __init__(self, eos: EquationOfState):
        self.eos = eos

    @abstractmethod
    def prim_from_cons(self, U: np.ndarray) -> np.ndarray:
        """Convert conserved to primitive variables."""

    @abstractmethod
    def cons_from_prim(self, W: np.ndarray) -> np.ndarray:
        """Convert primitive to conserved variables."""

    @abstractmethod
    def pressure(self, W: np.ndarray) -> np.ndarray:
        """Thermal pressure from primitive variables."""

    @abstractmethod
    def sound_speed(self, W: np.ndarray) -> np.ndarray:
        """Local speed of sound."""

    @abstractmethod
    def roe_speeds(self, WL: np.ndarray, WR: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Slowest and fastest eigenvalue of the Roe-averaged state."""

    def physical_flux(self, U: np.ndarray, W: np.ndarray) -> np.ndarray:
        """
        Exact flux of the equations for the given states.

        Args:
            U: Conserved variables (n_eq, n)
            W: Primitive variables matching U

        Returns:
            F: Physical flux (n_eq, n)
        """
        u = W[JXI]
        p = self.pressure(W)
        F = np.empty_like(U)
        F[JRHO] = U[JXI]
        F[JXI] = U[JXI] * u + p
        if self.has_pressure:
            F[JENERGY] = (U[JENERGY] + p) * u
        return F

    def eigen_speeds(self, W: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Slowest and fastest characteristic speed, u - a and u + a."""
        a = self.sound_speed(W)
        return W[JXI] - a, W[JXI] + a

    def __repr__(self):
        return f"{type(self).__name__}({self.eos!r})"


class Euler1DAdiabatic(Physics):
    """1D Euler equations for a calorically perfect gas."""

    n_eq = 3
    has_pressure = True
    prim_names = ('density', 'velocity', 'pressure')
    cons_names = ('density', 'momentum', 'energy')

    def prim_from_cons(self, U: np.ndarray) -> np.ndarray:
        W = np.empty_like(U)
        rho = U[JRHO]
        W[JRHO] = rho
        W[JXI] = U[JXI] / rho
        # p = (gamma - 1) * (E - 0.5 * rho * u²)
        W[JPRESSURE] = self.eos.gm1 * (U[JENERGY] - 0.5 * U[JXI]**2 / rho)
        return W

    def cons_from_prim(self, W: np.ndarray) -> np.ndarray:
        U = np.empty_like(W)
        rho = W[JRHO]
        u = W[JXI]
        U[JRHO] = rho
        U[JXI] = rho * u
        U[JENERGY] = W[JPRESSURE] / self.eos.gm1 + 0.5 * rho * u**2
        return U

    def pressure(self, W: np.ndarray) -> np.ndarray:
        return W[JPRESSURE]

    def sound_speed(self, W: np.ndarray) -> np.ndarray:
        return np.sqrt(self.eos.gamma * W[JPRESSURE] / W[JRHO])

    def enthalpy(self, W: np.ndarray) -> np.ndarray:
        """Total specific enthalpy H = (E + p) / rho."""
        rho, u, p = W[JRHO], W[JXI], W[JPRESSURE]
        return self.eos.gamma / self.eos.gm1 * p / rho + 0.5 * u**2

    def roe_speeds(self, WL: np.ndarray, WR: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        sqrt_rhoL = np.sqrt(WL[JRHO])
        sqrt_rhoR = np.sqrt(WR[JRHO])
        denom_inv = 1.0 / (sqrt_rhoL + sqrt_rhoR)

        u_roe = (sqrt_rhoL * WL[JXI] + sqrt_rhoR * WR[JXI]) * denom_inv
        H_roe = (sqrt_rhoL * self.enthalpy(WL) + sqrt_rhoR * self.enthalpy(WR)) * denom_inv
        a_roe = np.sqrt(np.maximum(self.eos.gm1 * (H_roe - 0.5 * u_roe**2), 0.0))
        return u_roe - a_roe, u_roe + a_roe


class Euler1DIsothermal(Physics):
    """1D isothermal Euler equations with a fixed speed of sound."""

    n_eq = 2
    has_pressure = False
    prim_names = ('density', 'velocity')
    cons_names = ('density', 'momentum')

    def prim_from_cons(self, U: np.ndarray) -> np.ndarray:
        W = np.empty_like(U)
        W[JRHO] = U[JRHO]
        W[JXI] = U[JXI] / U[JRHO]
        return W

    def cons_from_prim(self, W: np.ndarray) -> np.ndarray:
        U = np.empty_like(W)
        U[JRHO] = W[JRHO]
        U[JXI] = W[JRHO] * W[JXI]
        return U

    def pressure(self, W: np.ndarray) -> np.ndarray:
        return self.eos.c_sound**2 * W[JRHO]

    def sound_speed(self, W: np.ndarray) -> np.ndarray:
        return np.full_like(W[JRHO], self.eos.c_sound)

    def roe_speeds(self, WL: np.ndarray, WR: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        sqrt_rhoL = np.sqrt(WL[JRHO])
        sqrt_rhoR = np.sqrt(WR[JRHO])
        u_roe = (sqrt_rhoL * WL[JXI] + sqrt_rhoR * WR[JXI]) / (sqrt_rhoL + sqrt_rhoR)
        return u_roe - self.eos.c_sound, u_roe + self.eos.c_sound


def make_physics(eos: EquationOfState) -> Physics:
    """Select the equation system matching the equation of state."""
    if eos.is_adiabatic:
        return Euler1DAdiabatic(eos)
    return Euler1DIsothermal(eos)
