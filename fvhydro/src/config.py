"""
Configuration for the 1D hydrodynamics solver.

Configurations are plain dataclasses. Nested sections may be given as dicts,
so a whole configuration can be loaded from JSON:

    config = SolverConfig.from_json('sod.json')
"""

import dataclasses
import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

from .boundary import BOUNDARY_TYPES
from .eos import EquationOfState
from .errors import ConfigurationError
from .flux import FLUX_SCHEMES, HLLFlux
from .reconstruction import LIMITERS
from .tableau import TABLEAUX


class ConfigJSONEncoder(json.JSONEncoder):
    def default(self, o):
        if dataclasses.is_dataclass(o):
            return dataclasses.asdict(o)
        if isinstance(o, np.ndarray):
            return o.tolist()
        if isinstance(o, np.generic):
            return o.item()
        return super().default(o)


@dataclass
class MeshConfig:
    n_cells: int = 100
    x_min: float = 0.0
    x_max: float = 1.0
    n_ghost: int = 2


@dataclass
class BoundaryConfig:
    kind: str = 'outflow'
    value: Optional[Sequence[float]] = None  # Primitive state for 'fixed'

    def __post_init__(self):
        if self.kind not in BOUNDARY_TYPES:
            raise ConfigurationError(f"Unknown boundary condition: {self.kind}. "
                                     f"Options: {', '.join(BOUNDARY_TYPES)}")
        if self.kind == 'fixed' and self.value is None:
            raise ConfigurationError("Fixed boundary condition needs a value")
        if self.value is not None:
            self.value = [float(v) for v in self.value]


@dataclass
class TimeIntegrationConfig:
    """Embedded Runge-Kutta scheme and its step size control."""
    scheme: str = 'rkf45'  # Options: 'rkf45', 'rkf12', 'heun_euler', 'ssprk3'
    rtol: float = 1e-3     # Relative error tolerance
    atol: float = 1e-6     # Absolute error tolerance
    dt_min: float = 1e-12
    dt_max: float = math.inf
    dt_init: Optional[float] = None  # First step size; the CFL bound when omitted

    def __post_init__(self):
        if self.scheme not in TABLEAUX:
            raise ConfigurationError(f"Unknown time scheme: {self.scheme}. Options: {', '.join(TABLEAUX)}")
        if not self.rtol > 0.0:
            raise ConfigurationError(f"This must hold: rtol > 0! Got rtol = {self.rtol}")
        if not self.atol > 0.0:
            raise ConfigurationError(f"This must hold: atol > 0! Got atol = {self.atol}")
        if not 0.0 < self.dt_min <= self.dt_max:
            raise ConfigurationError(f"This must hold: 0 < dt_min <= dt_max! "
                                     f"Got dt_min = {self.dt_min}, dt_max = {self.dt_max}")
        if self.dt_init is not None and not self.dt_min <= self.dt_init <= self.dt_max:
            raise ConfigurationError(f"This must hold: dt_min <= dt_init <= dt_max! Got dt_init = {self.dt_init}")


@dataclass
class SolverConfig:
    """Configuration for the 1D hydrodynamics solver."""
    mesh: MeshConfig = field(default_factory=MeshConfig)
    eos: EquationOfState = field(default_factory=EquationOfState)
    boundary_left: BoundaryConfig = field(default_factory=BoundaryConfig)
    boundary_right: BoundaryConfig = field(default_factory=BoundaryConfig)
    time_integration: TimeIntegrationConfig = field(default_factory=TimeIntegrationConfig)
    cfl: float = 0.5
    flux: str = 'hll'
    wave_speeds: str = 'davis'  # Options: 'davis', 'einfeldt'
    reconstruction: str = 'first_order'  # Options: 'first_order', 'muscl'
    limiter: str = 'minmod'  # Options: 'minmod', 'vanleer'
    validate: bool = True  # Check positivity and finiteness after every step
    t_end: Optional[float] = None
    max_iter: int = 100000
    log_interval: int = 100
    output_interval: Optional[float] = None  # Simulation time between snapshots

    def __post_init__(self):
        if isinstance(self.mesh, dict):
            self.mesh = MeshConfig(**self.mesh)
        if isinstance(self.eos, dict):
            self.eos = EquationOfState(**self.eos)
        if isinstance(self.boundary_left, dict):
            self.boundary_left = BoundaryConfig(**self.boundary_left)
        if isinstance(self.boundary_right, dict):
            self.boundary_right = BoundaryConfig(**self.boundary_right)
        if isinstance(self.time_integration, dict):
            self.time_integration = TimeIntegrationConfig(**self.time_integration)

        if not 0.0 < self.cfl < 1.0:
            raise ConfigurationError(f"This must hold: 0 < cfl < 1! Got cfl = {self.cfl}")
        if self.flux not in FLUX_SCHEMES:
            raise ConfigurationError(f"Unknown flux scheme: {self.flux}. Options: {', '.join(FLUX_SCHEMES)}")
        if self.wave_speeds not in HLLFlux.WAVE_SPEED_ESTIMATES:
            raise ConfigurationError(f"Unknown wave speed estimate: {self.wave_speeds}. "
                                     f"Options: {', '.join(HLLFlux.WAVE_SPEED_ESTIMATES)}")
        if self.reconstruction not in ('first_order', 'muscl'):
            raise ConfigurationError(f"Unknown reconstruction: {self.reconstruction}. "
                                     "Options: 'first_order', 'muscl'")
        if self.limiter not in LIMITERS:
            raise ConfigurationError(f"Unknown limiter: {self.limiter}. Options: {', '.join(LIMITERS)}")
        if self.reconstruction == 'muscl' and self.mesh.n_ghost < 2:
            raise ConfigurationError(f"MUSCL reconstruction needs n_ghost >= 2! Got n_ghost = {self.mesh.n_ghost}")
        if (self.boundary_left.kind == 'periodic') != (self.boundary_right.kind == 'periodic'):
            raise ConfigurationError("Periodic boundaries must be set on both edges")
        if self.t_end is not None and self.t_end < 0.0:
            raise ConfigurationError(f"This must hold: t_end >= 0! Got t_end = {self.t_end}")
        if self.max_iter < 1:
            raise ConfigurationError(f"This must hold: max_iter >= 1! Got max_iter = {self.max_iter}")
        if self.output_interval is not None and not self.output_interval > 0.0:
            raise ConfigurationError(f"This must hold: output_interval > 0! Got {self.output_interval}")

    @classmethod
    def from_dict(cls, d: dict) -> 'SolverConfig':
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(d) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration options: {', '.join(sorted(unknown))}")
        return cls(**d)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> 'SolverConfig':
        with open(path, 'r') as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> dict:
        return json.loads(json.dumps(self, cls=ConfigJSONEncoder))

    def to_json(self, path: Union[str, Path]):
        with open(path, 'w') as f:
            json.dump(self, f, cls=ConfigJSONEncoder, indent=2)
