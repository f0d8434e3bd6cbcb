"""
Boundary conditions for the 1D hydrodynamics solver.

Boundary conditions only ever write ghost cells. They are formulated on the
primitive variables of the cells next to the boundary; the conserved ghost
values are re-derived afterwards by the BoundaryHandler.
"""

import numpy as np
from abc import ABC, abstractmethod

from .errors import ConfigurationError
from .mesh import Mesh1D
from .physics import Physics, JXI

LEFT = 'left'
RIGHT = 'right'


def ghost_indices(mesh: Mesh1D, side: str) -> np.ndarray:
    """Ghost cell indices on one edge, ordered from the outer edge inwards for 'left'."""
    if side == LEFT:
        return np.arange(mesh.n_ghost)
    return np.arange(mesh.i_out + 1, mesh.n_all)


class BoundaryCondition(ABC):
    """Abstract base class for boundary conditions."""

    name: str = ''

    @abstractmethod
    def apply(self, W: np.ndarray, mesh: Mesh1D, physics: Physics,
              side: str) -> np.ndarray:
        """
        Apply boundary condition to ghost cells.

        Args:
            W: Primitive variables including ghost cells (n_eq, n_all)
            mesh: Computational mesh
            physics: Equation system
            side: 'left' or 'right'

        Returns:
            Modified W with ghost cells set
        """
        pass

    def __repr__(self):
        return f"{type(self).__name__}()"


class OutflowBC(BoundaryCondition):
    """
    No-gradient outflow: copies the cell closest to the boundary into all
    ghost cells.
    """

    name = 'outflow'

    def apply(self, W: np.ndarray, mesh: Mesh1D, physics: Physics,
              side: str) -> np.ndarray:
        if side == LEFT:
            W[:, :mesh.i_in] = W[:, mesh.i_in:mesh.i_in + 1]
        elif side == RIGHT:
            W[:, mesh.i_out + 1:] = W[:, mesh.i_out:mesh.i_out + 1]
        return W


class ReflectingBC(BoundaryCondition):
    """
    Reflecting wall: ghost cells mirror the interior about the boundary face,
    with the velocity reversed.
    """

    name = 'reflecting'

    def apply(self, W: np.ndarray, mesh: Mesh1D, physics: Physics,
              side: str) -> np.ndarray:
        ghosts = ghost_indices(mesh, side)
        if side == LEFT:
            mirror = 2 * mesh.i_in - 1 - ghosts
        else:
            mirror = 2 * mesh.i_out + 1 - ghosts

        W[:, ghosts] = W[:, mirror]
        W[JXI, ghosts] = -W[JXI, mirror]  # Reflect velocity
        return W


class FixedBC(BoundaryCondition):
    """Ghost cells hold a constant primitive state, e.g. an inflow."""

    name = 'fixed'

    def __init__(self, primitives):
        """
        Args:
            primitives: Primitive state (rho, u[, p]) held in the ghost cells
        """
        self.primitives = np.asarray(primitives, dtype=float)
        if self.primitives.ndim != 1:
            raise ConfigurationError(f"Fixed boundary value must be a flat vector, got shape {self.primitives.shape}")

    def apply(self, W: np.ndarray, mesh: Mesh1D, physics: Physics,
              side: str) -> np.ndarray:
        if self.primitives.shape[0] != physics.n_eq:
            raise ConfigurationError(
                f"Fixed boundary value needs {physics.n_eq} entries ({', '.join(physics.prim_names)}), "
                f"got {self.primitives.shape[0]}")
        W[:, ghost_indices(mesh, side)] = self.primitives[:, np.newaxis]
        return W

    def __repr__(self):
        return f"FixedBC({self.primitives.tolist()})"


class PeriodicBC(BoundaryCondition):
    """
    Periodic: ghost cells copy the interior cells at the opposite edge.
    Must be used on both edges.
    """

    name = 'periodic'

    def apply(self, W: np.ndarray, mesh: Mesh1D, physics: Physics,
              side: str) -> np.ndarray:
        g = mesh.n_ghost
        if side == LEFT:
            W[:, :g] = W[:, mesh.i_out - g + 1:mesh.i_out + 1]
        elif side == RIGHT:
            W[:, mesh.i_out + 1:] = W[:, mesh.i_in:mesh.i_in + g]
        return W


class BoundaryHandler:
    """Applies a pair of boundary conditions, one per domain edge."""

    def __init__(self, left: BoundaryCondition, right: BoundaryCondition):
        if isinstance(left, PeriodicBC) != isinstance(right, PeriodicBC):
            raise ConfigurationError("Periodic boundaries must be set on both edges, "
                                     f"got left = {left!r}, right = {right!r}")
        self.left = left
        self.right = right

    def apply(self, state):
        """
        Write the ghost cells of state from its interior primitives.

        Args:
            state: PhysicsState, modified in place (ghost cells only)
        """
        W = state.prim.copy()
        self.left.apply(W, state.mesh, state.physics, LEFT)
        self.right.apply(W, state.mesh, state.physics, RIGHT)
        state.assign_ghost_prim(W)
        return state

    def __repr__(self):
        return f"BoundaryHandler(left={self.left!r}, right={self.right!r})"


BOUNDARY_TYPES = {
    'outflow': OutflowBC,
    'reflecting': ReflectingBC,
    'fixed': FixedBC,
    'periodic': PeriodicBC,
}


def make_boundary(kind: str, value=None) -> BoundaryCondition:
    """
    Build a boundary condition by name.

    Args:
        kind: One of 'outflow', 'reflecting', 'fixed', 'periodic'
        value: Primitive state for 'fixed', ignored otherwise
    """
    if kind not in BOUNDARY_TYPES:
        raise ConfigurationError(f"Unknown boundary condition: {kind}. "
                                 f"Options: {', '.join(repr(k) for k in BOUNDARY_TYPES)}")
    if kind == 'fixed':
        if value is None:
            raise ConfigurationError("Fixed boundary condition needs a value")
        return FixedBC(value)
    return BOUNDARY_TYPES[kind]()
