"""
1D Finite Volume Hydrodynamics Package
======================================

A modular solver for the one-dimensional Euler equations.

Features:
- Adiabatic and isothermal Euler equations
- HLL approximate Riemann solver
- First order or MUSCL reconstruction
- Adaptive embedded Runge-Kutta time integration (RKF 4(5) by default)
- Outflow, reflecting, fixed and periodic boundary conditions
- Positivity and finiteness validation with tagged failures

State representation (conservative variables):
    rho   - density
    rhoU  - momentum per volume
    E     - total energy per volume (adiabatic only)

Arrays are stored equation-major, shape (n_eq, n_all), ghost cells included.

Example:
    config = SolverConfig(mesh=MeshConfig(n_cells=200), t_end=0.2)
    solver = Solver1D(config)
    solver.set_initial_condition(sod_shock_tube(solver.mesh, config.eos))
    result = solver.solve()
    result.raise_for_status()
"""

from .errors import HydroError, ConfigurationError, SimulationFailed
from .mesh import Mesh1D
from .eos import EquationOfState
from .physics import Physics, Euler1DAdiabatic, Euler1DIsothermal, make_physics
from .state import PhysicsState, Snapshot, initialize, take_snapshot
from .boundary import (BoundaryCondition, BoundaryHandler, OutflowBC, ReflectingBC,
                       FixedBC, PeriodicBC, make_boundary)
from .flux import NumericalFlux, HLLFlux, make_flux
from .rhs import RightHandSide
from .validation import Validator, ValidationResult, Failure, FailureKind
from .tableau import ButcherTableau, get_tableau
from .timestepping import (TimeIntegrator, RungeKuttaFehlberg, TimeStep, StepOutcome,
                           StepStatus, IntegratorPhase)
from .config import SolverConfig, MeshConfig, BoundaryConfig, TimeIntegrationConfig
from .solver import Solver1D, SimulationResult, RunStatus
from .output import SnapshotRecorder, write_hdf5, read_hdf5
from .initial_conditions import uniform, sod_shock_tube, noh, sod_exact

__all__ = [
    # Errors
    'HydroError',
    'ConfigurationError',
    'SimulationFailed',

    # Mesh and physics
    'Mesh1D',
    'EquationOfState',
    'Physics',
    'Euler1DAdiabatic',
    'Euler1DIsothermal',
    'make_physics',

    # State
    'PhysicsState',
    'Snapshot',
    'initialize',
    'take_snapshot',

    # Boundary conditions
    'BoundaryCondition',
    'BoundaryHandler',
    'OutflowBC',
    'ReflectingBC',
    'FixedBC',
    'PeriodicBC',
    'make_boundary',

    # Flux schemes
    'NumericalFlux',
    'HLLFlux',
    'make_flux',
    'RightHandSide',

    # Validation
    'Validator',
    'ValidationResult',
    'Failure',
    'FailureKind',

    # Time integration
    'ButcherTableau',
    'get_tableau',
    'TimeIntegrator',
    'RungeKuttaFehlberg',
    'TimeStep',
    'StepOutcome',
    'StepStatus',
    'IntegratorPhase',

    # Solver
    'SolverConfig',
    'MeshConfig',
    'BoundaryConfig',
    'TimeIntegrationConfig',
    'Solver1D',
    'SimulationResult',
    'RunStatus',

    # Output and setup
    'SnapshotRecorder',
    'write_hdf5',
    'read_hdf5',
    'uniform',
    'sod_shock_tube',
    'noh',
    'sod_exact',
]

__version__ = '0.1.0'
