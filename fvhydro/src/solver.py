"""
Simulation driver for 1D hydrodynamics.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

import numpy as np
import matplotlib.pyplot as plt

from .boundary import BoundaryHandler, make_boundary
from .config import SolverConfig
from .errors import ConfigurationError, SimulationFailed
from .flux import make_flux
from .mesh import Mesh1D
from .physics import make_physics
from .reconstruction import make_reconstruction
from .rhs import RightHandSide
from .state import PhysicsState, Snapshot, initialize, take_snapshot
from .timestepping import RungeKuttaFehlberg, StepOutcome
from .validation import Failure, Validator

logger = logging.getLogger(__name__)


class RunStatus(Enum):
    COMPLETED = 'completed'  # Reached t_end
    MAX_ITER = 'max_iter'    # Stopped after max_iter steps
    FAILED = 'failed'        # Stopped on a fatal failure


@dataclass(frozen=True)
class SimulationResult:
    """
    Outcome of Solver1D.solve.

    last_snapshot is the last known-good state: the final state of a
    successful run, or the state before the failing step otherwise.
    """
    status: RunStatus
    time: float
    iterations: int
    n_rejected: int
    last_snapshot: Snapshot
    failure: Optional[Failure] = None

    @property
    def success(self) -> bool:
        return self.status is not RunStatus.FAILED

    def raise_for_status(self):
        """Raise SimulationFailed if the run stopped on a fatal failure."""
        if self.status is RunStatus.FAILED:
            raise SimulationFailed(self.failure)


class Solver1D:
    """
    1D finite volume solver for the Euler equations.

    Features:
    - Adiabatic or isothermal equation of state
    - HLL approximate Riemann solver (Davis or Einfeldt wave speeds)
    - First order or MUSCL reconstruction
    - Adaptive embedded Runge-Kutta time integration under a CFL bound
    - Outflow, reflecting, fixed and periodic boundary conditions
    - Positivity and finiteness validation after every step
    """

    def __init__(self, config: SolverConfig = None):
        """
        Initialize the solver.

        Args:
            config: Solver configuration
        """
        self.config = config if config is not None else SolverConfig()
        cfg = self.config

        self.mesh = Mesh1D.uniform(cfg.mesh.x_min, cfg.mesh.x_max, cfg.mesh.n_cells, cfg.mesh.n_ghost)
        self.physics = make_physics(cfg.eos)

        # Numerical components
        self.flux_scheme = make_flux(cfg.flux, cfg.wave_speeds)
        self.boundaries = BoundaryHandler(
            make_boundary(cfg.boundary_left.kind, cfg.boundary_left.value),
            make_boundary(cfg.boundary_right.kind, cfg.boundary_right.value),
        )
        self.rhs = RightHandSide(self.physics, self.mesh, self.flux_scheme, self.boundaries,
                                 make_reconstruction(cfg.reconstruction, cfg.limiter))
        self.validator = Validator(enabled=cfg.validate)
        self.integrator = RungeKuttaFehlberg.from_config(self.rhs, cfg, self.validator)

        # Solution storage
        self.state: Optional[PhysicsState] = None
        self.dt: Optional[float] = None
        self.failure: Optional[Failure] = None
        self.observers: List[Callable[[Snapshot], None]] = []
        self._last_notified: Optional[float] = None

    @property
    def time(self) -> float:
        return self.integrator.timestep.t

    @property
    def iteration(self) -> int:
        return self.integrator.timestep.iter

    def set_initial_condition(self, initial_primitives: np.ndarray, t0: float = 0.0):
        """
        Set the initial state from primitive variables.

        Args:
            initial_primitives: (n_eq, n_cells) or (n_eq, n_cells + 2 * n_ghost)
            t0: Initial time
        """
        self.state = initialize(self.mesh, self.config.eos, self.boundaries,
                                initial_primitives, physics=self.physics)
        self.integrator.reset(t0)
        self.dt = self.config.time_integration.dt_init
        self.failure = None
        self._last_notified = None

    def add_observer(self, callback: Callable[[Snapshot], None]):
        """Register a callback receiving snapshots at output times."""
        self.observers.append(callback)

    def snapshot(self) -> Snapshot:
        """Read-only copy of the current state."""
        if self.state is None:
            raise ConfigurationError("Initial condition must be set first")
        return take_snapshot(self.state, self.time)

    def _notify(self):
        if self._last_notified is not None and self._close(self._last_notified, self.time):
            return
        snap = self.snapshot()
        for callback in self.observers:
            callback(snap)
        self._last_notified = self.time

    def step(self, dt_limit: float = None) -> StepOutcome:
        """
        Perform one adaptive time step.

        Args:
            dt_limit: Upper bound on the step size, e.g. the time left to an output

        Returns:
            Outcome of the step; a fatal outcome leaves the state unchanged
        """
        if self.state is None:
            raise ConfigurationError("Initial condition must be set before solving")
        if self.failure is not None:
            raise SimulationFailed(self.failure)

        dt = self.dt
        kind = 'init' if self.iteration == 0 else None
        if dt_limit is not None and (dt is None or dt_limit < dt):
            dt, kind = dt_limit, 'output'

        self.state, dt_new, outcome = self.integrator.step(self.state, dt, kind)
        if outcome.fatal:
            self.failure = outcome.failure
        else:
            self.dt = dt_new
        return outcome

    @staticmethod
    def _close(t: float, target: float) -> bool:
        return abs(t - target) <= 1e-12 * max(1.0, abs(target))

    def _snap_time(self, target: float) -> bool:
        """Round the current time onto target if within floating point distance."""
        ts = self.integrator.timestep
        if self._close(ts.t, target):
            ts.t = target
            return True
        return ts.t > target

    def solve(self, t_end: float = None) -> SimulationResult:
        """
        Run the solver up to t_end or the maximum number of iterations.

        Args:
            t_end: Final simulation time; config.t_end when omitted

        Returns:
            SimulationResult with the final (or last good) snapshot
        """
        cfg = self.config
        if t_end is None:
            t_end = cfg.t_end
        if t_end is None:
            raise ConfigurationError("No final time given")
        if self.state is None:
            raise ConfigurationError("Initial condition must be set before solving")

        logger.info("Starting 1D hydrodynamics solver")
        logger.info(f"Cells: {self.mesh.n_comp}, Equations: {', '.join(self.physics.cons_names)}")
        logger.info(f"CFL: {cfg.cfl}, Time scheme: {self.integrator.tableau.description}, "
                    f"rtol: {cfg.time_integration.rtol}, atol: {cfg.time_integration.atol}")
        logger.info(f"Boundaries: {self.boundaries}")

        self._notify()
        t_start = self.time
        n_output = 1
        next_output = t_start + cfg.output_interval if cfg.output_interval is not None else None

        status = RunStatus.COMPLETED
        n_steps = 0
        while not self._snap_time(t_end):
            if n_steps >= cfg.max_iter:
                status = RunStatus.MAX_ITER
                logger.warning(f"Reached maximum number of iterations {cfg.max_iter} at t = {self.time:.6e}")
                break

            dt_limit = t_end - self.time
            if next_output is not None:
                dt_limit = min(dt_limit, next_output - self.time)

            outcome = self.step(dt_limit)
            n_steps += 1
            if outcome.fatal:
                status = RunStatus.FAILED
                break

            if next_output is not None and self._snap_time(next_output):
                self._notify()
                n_output += 1
                next_output = t_start + n_output * cfg.output_interval

            if self.iteration % cfg.log_interval == 0:
                ts = self.integrator.timestep
                logger.info(f"Iter {ts.iter:6d}, t = {ts.t:.4e}, dt = {ts.dt:.4e} ({ts.dt_kind}), "
                            f"err = {ts.err:.3e}, rejected = {ts.n_rejected}, "
                            f"M_max = {np.max(np.abs(self.state.M[self.mesh.interior])):.4f}")

        self._notify()
        ts = self.integrator.timestep
        if status is RunStatus.COMPLETED:
            logger.info(f"Reached final time {t_end:.4e} after {ts.iter} iterations "
                        f"({ts.n_rejected} rejected)")

        return SimulationResult(
            status=status,
            time=self.time,
            iterations=ts.iter,
            n_rejected=ts.n_rejected,
            last_snapshot=self.snapshot(),
            failure=self.failure,
        )

    def plot_solution(self, filename: str = None, exact: dict = None, show: bool = True):
        """
        Plot the current solution.

        Args:
            filename: Save the figure here if given
            exact: Optional reference solution with keys of the primitive names
            show: Open the figure window
        """
        snap = self.snapshot()
        x = self.mesh.x_interior

        fields = list(self.physics.prim_names) + ['mach']
        fig, axes = plt.subplots(2, 2, figsize=(10, 8))
        fig.suptitle(f'1D Hydrodynamics Solution (t = {self.time:.4e}, iter = {self.iteration})')

        for ax, name in zip(axes.flat, fields):
            if name == 'mach':
                values = self.state.M[self.mesh.interior]
            else:
                values = snap.field(name)
            ax.plot(x, values, 'b.-', linewidth=1, markersize=3, label='Numerical')
            if exact is not None and name in exact:
                ax.plot(x, exact[name], 'k-', linewidth=1.5, alpha=0.7, label='Exact')
                ax.legend()
            ax.set_xlabel('x')
            ax.set_ylabel(name.capitalize())
            ax.set_title(name.capitalize())
            ax.grid(True)

        # Hide unused axes
        for ax in axes.flat[len(fields):]:
            ax.axis('off')

        plt.tight_layout()

        if filename:
            plt.savefig(filename, dpi=150, bbox_inches='tight')
            logger.info(f"Saved plot to {filename}")

        if show:
            plt.show()
        else:
            plt.close(fig)
