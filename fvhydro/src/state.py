"""
Physical state on the mesh.

The conserved variables are the authoritative state advanced by the time
integrator; primitive variables are derived from them through the equation
of state and cached until the conserved variables change.

State is defined by (adiabatic Euler):
    rho - density
    rhoU - momentum per volume
    E   - total energy per volume
"""

import numpy as np
from dataclasses import dataclass

from .errors import ConfigurationError
from .mesh import Mesh1D
from .physics import Physics, JRHO, JXI, make_physics


def _read_only(a: np.ndarray) -> np.ndarray:
    view = a.view()
    view.flags.writeable = False
    return view


class PhysicsState:
    """
    Conserved and primitive variables over all cells of a mesh, ghost cells
    included.

    Both arrays have shape (n_eq, mesh.n_all). They are exposed read-only;
    use assign_cons / assign_prim / assign_ghost_prim to change them, which
    keeps the two representations consistent.
    """

    def __init__(self, physics: Physics, mesh: Mesh1D, cons: np.ndarray):
        cons = np.array(cons, dtype=float)
        if cons.shape != (physics.n_eq, mesh.n_all):
            raise ConfigurationError(
                f"Conserved array must have shape {(physics.n_eq, mesh.n_all)}, got {cons.shape}")
        self.physics = physics
        self.mesh = mesh
        self._cons = cons
        self._prim = physics.prim_from_cons(cons)

    @classmethod
    def from_primitives(cls, physics: Physics, mesh: Mesh1D, prim: np.ndarray) -> 'PhysicsState':
        """Create a state from primitive variables of shape (n_eq, n_all)."""
        return cls(physics, mesh, physics.cons_from_prim(np.asarray(prim, dtype=float)))

    # --- Array access ---

    @property
    def cons(self) -> np.ndarray:
        return _read_only(self._cons)

    @property
    def prim(self) -> np.ndarray:
        return _read_only(self._prim)

    def cons_cell(self, i: int) -> np.ndarray:
        """Conserved vector of cell i."""
        return self._cons[:, i].copy()

    def prim_cell(self, i: int) -> np.ndarray:
        """Primitive vector of cell i."""
        return self._prim[:, i].copy()

    def assign_cons(self, cons: np.ndarray):
        """Overwrite the conserved variables and re-derive the primitives."""
        self._cons[...] = cons
        self._prim = self.physics.prim_from_cons(self._cons)

    def assign_prim(self, prim: np.ndarray):
        """Overwrite the primitive variables and re-derive the conserved ones."""
        self._prim[...] = prim
        self._cons = self.physics.cons_from_prim(self._prim)

    def assign_ghost_prim(self, prim: np.ndarray):
        """
        Copy the ghost-cell columns of prim into this state.

        Interior cells are left untouched, so their conserved values never
        pick up round-off from a primitive round trip.
        """
        g = self.mesh.n_ghost
        for ghosts in (slice(0, g), slice(self.mesh.n_all - g, self.mesh.n_all)):
            self._prim[:, ghosts] = prim[:, ghosts]
            self._cons[:, ghosts] = self.physics.cons_from_prim(self._prim[:, ghosts])

    def copy(self) -> 'PhysicsState':
        return PhysicsState(self.physics, self.mesh, self._cons)

    # --- Primitive variables as properties ---

    @property
    def rho(self) -> np.ndarray:
        """Density."""
        return self.prim[JRHO]

    @property
    def u(self) -> np.ndarray:
        """Velocity."""
        return self.prim[JXI]

    @property
    def p(self) -> np.ndarray:
        """Pressure (c_sound² * rho for isothermal gas)."""
        return self.physics.pressure(self._prim)

    @property
    def a(self) -> np.ndarray:
        """Speed of sound."""
        return self.physics.sound_speed(self._prim)

    @property
    def M(self) -> np.ndarray:
        """Mach number."""
        return self.u / self.a

    def total(self) -> np.ndarray:
        """Integral of each conserved quantity over the computational area."""
        return np.sum(self._cons[:, self.mesh.interior], axis=1) * self.mesh.dx


@dataclass(frozen=True, eq=False)
class Snapshot:
    """
    Read-only copy of a state at a given time, handed to output collaborators.

    Arrays cover all cells, ghost cells included; interior selects the
    computational area.
    """
    time: float
    conserved: np.ndarray
    primitive: np.ndarray
    x: np.ndarray
    interior: slice
    prim_names: tuple
    cons_names: tuple

    def field(self, name: str, interior_only: bool = True) -> np.ndarray:
        """Primitive variable by name, e.g. 'density'."""
        values = self.primitive[self.prim_names.index(name)]
        return values[self.interior] if interior_only else values


def take_snapshot(state: PhysicsState, time: float) -> Snapshot:
    """Copy the state into an immutable Snapshot that shares no storage with it."""
    cons = state.cons.copy()
    prim = state.prim.copy()
    cons.flags.writeable = False
    prim.flags.writeable = False
    return Snapshot(
        time=float(time),
        conserved=cons,
        primitive=prim,
        x=state.mesh.x_cells,
        interior=state.mesh.interior,
        prim_names=state.physics.prim_names,
        cons_names=state.physics.cons_names,
    )


def initialize(mesh: Mesh1D, eos, boundaries, initial_primitives: np.ndarray,
               physics: Physics = None) -> PhysicsState:
    """
    Build the initial state.

    Args:
        mesh: Computational mesh
        eos: Equation-of-state parameters
        boundaries: BoundaryHandler filling the ghost cells
        initial_primitives: Primitive variables, either for the computational
            area only (n_eq, n_comp) or for all cells (n_eq, n_all)
        physics: Equation system; derived from eos when omitted

    Returns:
        State with ghost cells set by the boundary conditions
    """
    if physics is None:
        physics = make_physics(eos)

    W0 = np.asarray(initial_primitives, dtype=float)
    if W0.ndim != 2 or W0.shape[0] != physics.n_eq:
        raise ConfigurationError(
            f"Initial primitives need {physics.n_eq} rows ({', '.join(physics.prim_names)}), got shape {W0.shape}")

    W = np.empty((physics.n_eq, mesh.n_all))
    if W0.shape[1] == mesh.n_comp:
        W[:, mesh.interior] = W0
        # placeholder ghost values until the boundary conditions overwrite them
        W[:, :mesh.i_in] = W0[:, :1]
        W[:, mesh.i_out + 1:] = W0[:, -1:]
    elif W0.shape[1] == mesh.n_all:
        W[...] = W0
    else:
        raise ConfigurationError(
            f"Initial primitives must cover {mesh.n_comp} or {mesh.n_all} cells, got {W0.shape[1]}")

    state = PhysicsState.from_primitives(physics, mesh, W)
    boundaries.apply(state)
    return state
