"""
Adaptive time integration with embedded Runge-Kutta pairs.

One call to RungeKuttaFehlberg.step advances the state by one accepted step:

    IDLE -> STAGE_EVALUATION -> ERROR_CHECK -> ACCEPTED
                  ^                 |
                  +--- REJECTED <---+        (dt shrunk, same start state)

A rejection that would push dt below dt_min, or a committed state failing
validation, ends in FATAL. The state passed in is left untouched in that case.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np

from .errors import ConfigurationError
from .rhs import RightHandSide
from .state import PhysicsState
from .tableau import ButcherTableau, get_tableau
from .validation import Failure, FailureKind, Validator

logger = logging.getLogger(__name__)

# Step size controller constants
SAFETY = 0.9       # Safety margin on the optimal step size
MAX_GROWTH = 4.0   # Largest factor between consecutive step sizes
MIN_SHRINK = 0.25  # Smallest factor applied on a rejection


class IntegratorPhase(Enum):
    IDLE = 'idle'
    STAGE_EVALUATION = 'stage_evaluation'
    ERROR_CHECK = 'error_check'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'
    FATAL = 'fatal'


class StepStatus(Enum):
    ACCEPTED = 'accepted'
    FATAL = 'fatal'


@dataclass(frozen=True)
class StepOutcome:
    """Result of one call to TimeIntegrator.step."""
    status: StepStatus
    dt: float  # Committed step size, or the last one attempted
    err: float = math.nan
    n_rejected: int = 0
    failure: Optional[Failure] = None

    @property
    def accepted(self) -> bool:
        return self.status is StepStatus.ACCEPTED

    @property
    def fatal(self) -> bool:
        return self.status is StepStatus.FATAL


@dataclass
class TimeStep:
    """
    Time-step state of a run.

    Attributes:
        t: Simulation time of the committed state
        dt: Last committed step size
        iter: Number of accepted steps
        err: Scaled error estimate of the last accepted step
        n_rejected: Total number of rejected attempts
        dt_kind: What limited the last committed step size:
            'init', 'cfl', 'error', 'min', 'max' or 'output'
    """
    t: float = 0.0
    dt: float = math.nan
    iter: int = 0
    err: float = math.nan
    n_rejected: int = 0
    dt_kind: str = 'init'


class TimeIntegrator(ABC):
    """Abstract base class for time integrators."""

    def __init__(self, rhs: RightHandSide, validator: Validator = None):
        self.rhs = rhs
        self.validator = validator if validator is not None else Validator()
        self.timestep = TimeStep()
        self.phase = IntegratorPhase.IDLE

    @abstractmethod
    def step(self, state: PhysicsState, dt: Optional[float] = None,
             dt_kind: Optional[str] = None) -> Tuple[PhysicsState, float, StepOutcome]:
        """
        Advance the state by one step.

        Args:
            state: State at self.timestep.t, updated in place when accepted
            dt: Requested step size; None to start from the CFL bound
            dt_kind: Origin of the requested dt, recorded in self.timestep

        Returns:
            (state, dt_new, outcome): dt_new is the proposal for the next step
        """
        pass

    def reset(self, t: float = 0.0):
        self.timestep = TimeStep(t=t)
        self.phase = IntegratorPhase.IDLE


class RungeKuttaFehlberg(TimeIntegrator):
    """
    Explicit embedded Runge-Kutta integrator with adaptive step size control.

    Both solutions of the pair share the same stages. The error estimate is
    the root mean square over interior cells and equations of

        (U_high - U_low) / (atol + rtol * max(|U|, |U_high|))

    and a step is accepted if it does not exceed 1. The next step size is

        dt * min(MAX_GROWTH, max(MIN_SHRINK, SAFETY * err^(-1 / (q + 1))))

    with q the lower order of the pair, bounded by dt_max and the CFL limit.
    """

    def __init__(self, rhs: RightHandSide, tableau: Union[str, ButcherTableau] = 'rkf45',
                 validator: Validator = None, cfl: float = 0.5,
                 rtol: float = 1e-3, atol: float = 1e-6,
                 dt_min: float = 1e-12, dt_max: float = math.inf):
        super().__init__(rhs, validator)
        if isinstance(tableau, str):
            tableau = get_tableau(tableau)
        if not 0.0 < cfl < 1.0:
            raise ConfigurationError(f"This must hold: 0 < cfl < 1! Got cfl = {cfl}")
        if not 0.0 < dt_min <= dt_max:
            raise ConfigurationError(f"This must hold: 0 < dt_min <= dt_max! Got dt_min = {dt_min}, dt_max = {dt_max}")
        self.tableau = tableau
        self.cfl = cfl
        self.rtol = rtol
        self.atol = atol
        self.dt_min = dt_min
        self.dt_max = dt_max
        # Origin of the last proposed step size
        self.proposal_kind = 'init'

    @classmethod
    def from_config(cls, rhs: RightHandSide, config, validator: Validator = None) -> 'RungeKuttaFehlberg':
        """Build from a SolverConfig."""
        ti = config.time_integration
        return cls(rhs, ti.scheme, validator=validator, cfl=config.cfl,
                   rtol=ti.rtol, atol=ti.atol, dt_min=ti.dt_min, dt_max=ti.dt_max)

    def error_norm(self, U0: np.ndarray, U_high: np.ndarray, U_low: np.ndarray) -> float:
        """Scaled RMS error estimate over the interior cells; nan if any candidate is non-finite."""
        interior = self.rhs.mesh.interior
        scale = self.atol + self.rtol * np.maximum(np.abs(U0[:, interior]), np.abs(U_high[:, interior]))
        ratio = (U_high[:, interior] - U_low[:, interior]) / scale
        return float(np.sqrt(np.mean(ratio**2)))

    def step_factor(self, err: float) -> float:
        """Ratio of the next to the current step size for a given error estimate."""
        if not math.isfinite(err):
            return MIN_SHRINK
        if err == 0.0:
            return MAX_GROWTH
        return min(MAX_GROWTH, max(MIN_SHRINK, SAFETY * err**(-self.tableau.error_exponent)))

    def _stages(self, work: PhysicsState, U0: np.ndarray, dt: float) -> Tuple[np.ndarray, np.ndarray]:
        """Evaluate all stages from U0 and return the high and low order candidates."""
        tab = self.tableau
        K = np.zeros((tab.stages,) + U0.shape)
        for s in range(tab.stages):
            U_stage = U0 + dt * np.tensordot(tab.a[s, :s], K[:s], axes=1) if s > 0 else U0
            work.assign_cons(U_stage)
            # evaluate refreshes the ghost cells of the stage state first
            K[s] = self.rhs.evaluate(work)

        U_high = U0 + dt * np.tensordot(tab.b_high, K, axes=1)
        U_low = U0 + dt * np.tensordot(tab.b_low, K, axes=1)
        return U_high, U_low

    def _fatal(self, state: PhysicsState, failure: Failure, dt: float, err: float,
               n_rejected: int) -> Tuple[PhysicsState, float, StepOutcome]:
        self.phase = IntegratorPhase.FATAL
        self.timestep.n_rejected += n_rejected
        logger.error(f"Integration stopped at iteration {self.timestep.iter}: {failure}")
        return state, dt, StepOutcome(StepStatus.FATAL, dt=dt, err=err,
                                      n_rejected=n_rejected, failure=failure)

    def step(self, state: PhysicsState, dt: Optional[float] = None,
             dt_kind: Optional[str] = None) -> Tuple[PhysicsState, float, StepOutcome]:
        ts = self.timestep
        self.phase = IntegratorPhase.IDLE

        with np.errstate(all='ignore'):
            dt_cfl = self.rhs.cfl_timestep(state, self.cfl)
        if not dt_cfl >= self.dt_min:
            failure = Failure(kind=FailureKind.NON_CONVERGENCE,
                              message=f"CFL time step bound {dt_cfl:.6e} is below dt_min = {self.dt_min:.6e}",
                              time=ts.t, dt=dt_cfl)
            return self._fatal(state, failure, dt_cfl, math.nan, 0)

        # Limit the requested step size; only a step landing on an output time may undercut dt_min
        if dt is None:
            dt, kind = dt_cfl, 'init'
        else:
            kind = dt_kind if dt_kind is not None else self.proposal_kind
        if not dt > 0.0:
            raise ValueError(f"Time step must be positive, got dt = {dt}")
        if dt < self.dt_min and kind != 'output':
            dt, kind = self.dt_min, 'min'
        if dt > self.dt_max:
            dt, kind = self.dt_max, 'max'
        if dt > dt_cfl:
            dt, kind = dt_cfl, 'cfl'

        U0 = state.cons.copy()
        work = state.copy()
        n_rejected = 0

        with np.errstate(all='ignore'):
            while True:
                self.phase = IntegratorPhase.STAGE_EVALUATION
                U_high, U_low = self._stages(work, U0, dt)

                self.phase = IntegratorPhase.ERROR_CHECK
                err = self.error_norm(U0, U_high, U_low)
                if err <= 1.0:
                    break

                self.phase = IntegratorPhase.REJECTED
                n_rejected += 1
                dt_retry = dt * self.step_factor(err)
                logger.debug(f"Step rejected at t = {ts.t:.6e}: err = {err:.4e}, "
                             f"dt = {dt:.4e} -> {dt_retry:.4e}")
                if dt_retry < self.dt_min:
                    failure = Failure(kind=FailureKind.NON_CONVERGENCE,
                                      message=f"Step size {dt_retry:.6e} fell below dt_min = {self.dt_min:.6e} "
                                              f"after {n_rejected} rejections (err = {err:.4e})",
                                      time=ts.t, dt=dt)
                    return self._fatal(state, failure, dt, err, n_rejected)
                dt, kind = dt_retry, 'error'

            # Validate the candidate before it replaces the committed state
            work.assign_cons(U_high)
            self.rhs.boundaries.apply(work)
            result = self.validator.check(work)
            if not result.ok:
                f = result.failure
                failure = Failure(kind=f.kind, message=f.message, cell=f.cell, field=f.field,
                                  value=f.value, time=ts.t + dt, dt=dt)
                return self._fatal(state, failure, dt, err, n_rejected)

            state.assign_cons(work.cons)
            self.phase = IntegratorPhase.ACCEPTED

            ts.t += dt
            ts.dt = dt
            ts.iter += 1
            ts.err = err
            ts.n_rejected += n_rejected
            ts.dt_kind = kind

            # Propose the next step size
            dt_new = dt * self.step_factor(err)
            self.proposal_kind = 'error'
            if dt_new > self.dt_max:
                dt_new, self.proposal_kind = self.dt_max, 'max'
            dt_cfl_new = self.rhs.cfl_timestep(state, self.cfl)
            if dt_new > dt_cfl_new:
                dt_new, self.proposal_kind = dt_cfl_new, 'cfl'

        return state, dt_new, StepOutcome(StepStatus.ACCEPTED, dt=dt, err=err, n_rejected=n_rejected)
