"""
Right-hand side of the semi-discrete conservation law dU/dt = RHS(U) and the
explicit CFL time step bound.
"""

import numpy as np
from typing import Callable, Tuple

from .boundary import BoundaryHandler
from .errors import ConfigurationError
from .flux import NumericalFlux
from .mesh import Mesh1D
from .physics import Physics
from .reconstruction import reconstruct_first_order, required_ghosts


class RightHandSide:
    """
    Assembles the time derivative of the conserved variables.

    Uses the finite volume formulation on a uniform mesh:
        dU_i/dt = -(F_{i+1/2} - F_{i-1/2}) / dx

    Every evaluation first refreshes the ghost cells, so intermediate
    Runge-Kutta stages always see up-to-date boundary values.
    """

    def __init__(self, physics: Physics, mesh: Mesh1D, flux_scheme: NumericalFlux,
                 boundaries: BoundaryHandler,
                 reconstruct: Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray]] = reconstruct_first_order):
        if mesh.n_ghost < required_ghosts(reconstruct):
            raise ConfigurationError(f"Reconstruction needs {required_ghosts(reconstruct)} ghost cells per edge, "
                                     f"mesh has n_ghost = {mesh.n_ghost}")
        self.physics = physics
        self.mesh = mesh
        self.flux_scheme = flux_scheme
        self.boundaries = boundaries
        self.reconstruct = reconstruct

        # Fluxes of the last evaluation, one per face (n_eq, n_all - 1)
        self.flux = np.zeros((physics.n_eq, mesh.n_faces))

    def face_states(self, state) -> Tuple[np.ndarray, np.ndarray]:
        """Apply boundary conditions and reconstruct left/right primitive states at all faces."""
        self.boundaries.apply(state)
        return self.reconstruct(state.prim)

    def evaluate(self, state) -> np.ndarray:
        """
        Compute the right-hand side for a state.

        Args:
            state: PhysicsState; its ghost cells are overwritten

        Returns:
            RHS: Time derivative (n_eq, n_all), zero in ghost cells
        """
        WL, WR = self.face_states(state)

        # Compute fluxes at all faces (vectorized)
        F = self.flux_scheme.compute_flux(WL, WR, self.physics)
        self.flux = F

        mesh = self.mesh
        RHS = np.zeros((self.physics.n_eq, mesh.n_all))
        # cell i is bounded by face i - 1 (left) and face i (right)
        RHS[:, mesh.interior] = -(F[:, mesh.i_in:mesh.i_out + 1] - F[:, mesh.i_in - 1:mesh.i_out]) / mesh.dx
        return RHS

    def max_signal_speed(self, state) -> float:
        """Fastest signal speed estimate across all faces."""
        WL, WR = self.face_states(state)
        return self.flux_scheme.max_signal_speed(WL, WR, self.physics)

    def cfl_timestep(self, state, cfl: float) -> float:
        """
        Compute time step based on CFL condition.

            dt_cfl = cfl * dx / max(|S_L|, |S_R|)

        Args:
            state: Current state
            cfl: Courant number, 0 < cfl < 1

        Returns:
            dt: Time step; inf if no signal propagates
        """
        smax = self.max_signal_speed(state)
        if smax == 0.0:
            return np.inf
        return cfl * self.mesh.dx / smax
