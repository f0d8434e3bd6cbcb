"""
fvhydro - 1D Finite Volume Hydrodynamics Solver
===============================================

Re-exports the main public components from fvhydro.src
"""

from fvhydro.src import (
    # Errors
    HydroError,
    ConfigurationError,
    SimulationFailed,
    # Mesh and physics
    Mesh1D,
    EquationOfState,
    PhysicsState,
    Snapshot,
    # Boundary conditions
    BoundaryHandler,
    OutflowBC,
    ReflectingBC,
    FixedBC,
    PeriodicBC,
    # Flux and time integration
    HLLFlux,
    RungeKuttaFehlberg,
    Validator,
    Failure,
    FailureKind,
    # Solver
    Solver1D,
    SolverConfig,
    SimulationResult,
    SnapshotRecorder,
    __version__,
)

__all__ = [
    'HydroError',
    'ConfigurationError',
    'SimulationFailed',
    'Mesh1D',
    'EquationOfState',
    'PhysicsState',
    'Snapshot',
    'BoundaryHandler',
    'OutflowBC',
    'ReflectingBC',
    'FixedBC',
    'PeriodicBC',
    'HLLFlux',
    'RungeKuttaFehlberg',
    'Validator',
    'Failure',
    'FailureKind',
    'Solver1D',
    'SolverConfig',
    'SimulationResult',
    'SnapshotRecorder',
]
