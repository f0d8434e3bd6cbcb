"""
Pytest tests for the solver configuration.

Tests verify:
1. Defaults and conversion of nested dict sections
2. Dict and JSON round trips
3. Invalid values raise ConfigurationError
"""

import math

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from fvhydro.src import (
    BoundaryConfig, ConfigurationError, EquationOfState, MeshConfig, SolverConfig,
    TimeIntegrationConfig,
)


class TestDefaults:
    """Tests for default values and nested sections."""

    def test_defaults(self):
        config = SolverConfig()
        assert config.mesh.n_cells == 100
        assert config.eos.is_adiabatic and config.eos.gamma == 1.4
        assert config.boundary_left.kind == 'outflow'
        assert config.time_integration.scheme == 'rkf45'
        assert config.time_integration.dt_max == math.inf
        assert config.flux == 'hll' and config.wave_speeds == 'davis'

    def test_nested_dicts(self):
        config = SolverConfig(
            mesh={'n_cells': 64, 'x_min': -1.0, 'x_max': 1.0},
            eos={'kind': 'isothermal', 'c_sound': 2.0},
            boundary_left={'kind': 'fixed', 'value': [1, 0.5]},
            boundary_right={'kind': 'reflecting'},
            time_integration={'scheme': 'heun_euler', 'rtol': 1e-4},
        )
        assert config.mesh == MeshConfig(n_cells=64, x_min=-1.0, x_max=1.0)
        assert config.eos == EquationOfState.isothermal(c_sound=2.0)
        assert config.boundary_left.value == [1.0, 0.5]
        assert config.boundary_right == BoundaryConfig('reflecting')
        assert config.time_integration.rtol == 1e-4


class TestSerialization:
    """Tests for dict and JSON conversion."""

    def test_dict_round_trip(self):
        config = SolverConfig(mesh=MeshConfig(n_cells=32), cfl=0.3, t_end=0.1,
                              boundary_left=BoundaryConfig('fixed', [1.0, 0.0, 1.0]))
        d = config.to_dict()

        assert d['mesh']['n_cells'] == 32
        assert d['eos']['kind'] == 'adiabatic'
        assert SolverConfig.from_dict(d) == config

    def test_json_round_trip(self, tmp_path):
        config = SolverConfig(reconstruction='muscl', limiter='vanleer', output_interval=0.05,
                              time_integration=TimeIntegrationConfig(dt_max=1e-2, dt_init=1e-4))
        path = tmp_path / 'config.json'

        config.to_json(path)
        loaded = SolverConfig.from_json(path)

        assert loaded == config
        assert isinstance(loaded.time_integration, TimeIntegrationConfig)


class TestValidation:
    """Invalid configurations are rejected when constructed."""

    @pytest.mark.parametrize("kwargs", [
        dict(cfl=0.0),
        dict(cfl=1.0),
        dict(flux='roe'),
        dict(wave_speeds='toro'),
        dict(reconstruction='weno'),
        dict(limiter='superbee'),
        dict(t_end=-1.0),
        dict(max_iter=0),
        dict(output_interval=0.0),
        dict(boundary_left=BoundaryConfig('periodic')),
    ])
    def test_invalid_solver_config(self, kwargs):
        with pytest.raises(ConfigurationError):
            SolverConfig(**kwargs)

    @pytest.mark.parametrize("kwargs", [
        dict(scheme='rk4'),
        dict(rtol=0.0),
        dict(atol=-1.0),
        dict(dt_min=0.0),
        dict(dt_min=1e-2, dt_max=1e-3),
        dict(dt_init=10.0, dt_max=1.0),
    ])
    def test_invalid_time_integration(self, kwargs):
        with pytest.raises(ConfigurationError):
            TimeIntegrationConfig(**kwargs)

    def test_invalid_boundary(self):
        with pytest.raises(ConfigurationError):
            BoundaryConfig('inlet')
        with pytest.raises(ConfigurationError):
            BoundaryConfig('fixed')

    def test_muscl_ghost_cells(self):
        with pytest.raises(ConfigurationError, match='n_ghost'):
            SolverConfig(mesh=MeshConfig(n_ghost=1), reconstruction='muscl')
        assert SolverConfig(mesh=MeshConfig(n_ghost=1)).mesh.n_ghost == 1
        assert SolverConfig(mesh=MeshConfig(n_ghost=2), reconstruction='muscl').reconstruction == 'muscl'

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match='courant'):
            SolverConfig.from_dict({'courant': 0.5})

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            SolverConfig(cfl=2.0)
