"""
Pytest tests for the Sod shock tube problem.

Sod shock tube initial conditions:
- Left state (x < 0.5): rho = 1.0, u = 0, p = 1.0
- Right state (x > 0.5): rho = 0.125, u = 0, p = 0.1

Tests verify:
1. The run reaches t_end exactly
2. A shock forms and moves to the right
3. Agreement with the exact Riemann solution
4. Density and pressure stay positive and bounded by the initial states
5. Mass and energy conservation between reflecting walls
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from fvhydro.src import (
    BoundaryConfig, EquationOfState, MeshConfig, RunStatus, Solver1D, SolverConfig,
    sod_exact, sod_shock_tube,
)


@pytest.fixture
def solver_config():
    """Standard shock tube configuration."""
    return SolverConfig(
        mesh=MeshConfig(n_cells=100),
        eos=EquationOfState.adiabatic(gamma=1.4),
        cfl=0.5,
        t_end=0.2,
    )


def create_shock_tube_solver(config):
    """Create solver with the Sod shock tube initial condition."""
    solver = Solver1D(config)
    solver.set_initial_condition(sod_shock_tube(solver.mesh, config.eos))
    return solver


@pytest.fixture(scope='module')
def sod_result():
    """Sod shock tube run to t = 0.2, shared by the comparison tests."""
    config = SolverConfig(mesh=MeshConfig(n_cells=100), t_end=0.2)
    solver = create_shock_tube_solver(config)
    return solver.solve()


class TestShockCapturing:
    """Tests for shock capturing and wave propagation."""

    def test_reaches_final_time(self, sod_result):
        assert sod_result.status is RunStatus.COMPLETED
        assert sod_result.success
        assert sod_result.time == 0.2, f"Run ended at t = {sod_result.time!r}"
        assert sod_result.last_snapshot.time == 0.2
        assert sod_result.failure is None

    def test_shock_moves_right(self, sod_result):
        snap = sod_result.last_snapshot
        x = snap.x[snap.interior]
        p = snap.field('pressure')

        # Shock at x = 0.5 + 1.75 t for Sod, between p* = 0.303 and p_R = 0.1
        i_shock = np.nonzero(p > 0.2)[0][-1]
        x_shock = 0.5 * (x[i_shock] + x[i_shock + 1])
        assert x_shock > 0.6, f"Shock at x = {x_shock:.3f}, should have moved right"
        assert abs(x_shock - 0.85) < 0.05, f"Shock at x = {x_shock:.3f}, exact 0.85"

    def test_gas_accelerates_right(self, sod_result):
        u = sod_result.last_snapshot.field('velocity')
        assert np.max(u) > 0.5, "No flow into the low pressure region"
        assert np.min(u) > -1e-3, "Spurious left moving flow"


class TestExactSolutionComparison:
    """Comparison with the exact Riemann solution."""

    def test_exact_star_state(self):
        # Star region of Sod's problem (Toro, table 4.3)
        sol = sod_exact(np.array([0.7]), 0.2)
        assert sol['pressure'][0] == pytest.approx(0.30313, rel=1e-4)
        assert sol['velocity'][0] == pytest.approx(0.92745, rel=1e-4)
        assert sol['density'][0] == pytest.approx(0.26557, rel=1e-4)

    def test_exact_initial_time(self):
        x = np.linspace(0.0, 1.0, 11)
        sol = sod_exact(x, 0.0)
        assert np.allclose(sol['density'], np.where(x < 0.5, 1.0, 0.125))
        assert np.allclose(sol['pressure'], np.where(x < 0.5, 1.0, 0.1))

    @pytest.mark.parametrize("name", ['density', 'pressure', 'velocity'])
    def test_l1_error(self, sod_result, name):
        snap = sod_result.last_snapshot
        x = snap.x[snap.interior]
        exact = sod_exact(x, 0.2)[name]
        numerical = snap.field(name)

        l1 = np.mean(np.abs(numerical - exact))
        scale = np.max(np.abs(exact))
        assert l1 < 0.06 * scale, f"L1 error of {name} = {l1:.4e} exceeds {0.06 * scale:.4e}"

    def test_muscl_improves_accuracy(self):
        errors = {}
        for reconstruction in ('first_order', 'muscl'):
            config = SolverConfig(mesh=MeshConfig(n_cells=100), t_end=0.2, reconstruction=reconstruction)
            snap = create_shock_tube_solver(config).solve().last_snapshot
            exact = sod_exact(snap.x[snap.interior], 0.2)['density']
            errors[reconstruction] = np.mean(np.abs(snap.field('density') - exact))

        assert errors['muscl'] < errors['first_order'], f"MUSCL not more accurate: {errors}"


class TestPhysicalBounds:
    """Positivity and boundedness of the solution."""

    @pytest.mark.parametrize("reconstruction", ['first_order', 'muscl'])
    @pytest.mark.parametrize("wave_speeds", ['davis', 'einfeldt'])
    def test_positivity(self, solver_config, reconstruction, wave_speeds):
        solver_config.reconstruction = reconstruction
        solver_config.wave_speeds = wave_speeds
        result = create_shock_tube_solver(solver_config).solve()

        assert result.status is RunStatus.COMPLETED, f"Run failed: {result.failure}"
        snap = result.last_snapshot
        assert np.all(snap.field('density') > 0), "Negative density detected"
        assert np.all(snap.field('pressure') > 0), "Negative pressure detected"
        assert np.all(np.isfinite(snap.conserved))

    def test_bounded_by_initial_states(self, sod_result):
        rho = sod_result.last_snapshot.field('density')
        assert np.max(rho) < 1.0 + 1e-2, f"Density overshoot: {np.max(rho)}"
        assert np.min(rho) > 0.125 - 1e-2, f"Density undershoot: {np.min(rho)}"

    def test_isothermal_shock_tube(self):
        config = SolverConfig(mesh=MeshConfig(n_cells=100), eos=EquationOfState.isothermal(c_sound=1.0),
                              t_end=0.2)
        solver = create_shock_tube_solver(config)
        result = solver.solve()

        assert result.status is RunStatus.COMPLETED, f"Run failed: {result.failure}"
        assert result.last_snapshot.primitive.shape == (2, solver.mesh.n_all)
        assert np.all(result.last_snapshot.field('density') > 0)


class TestConservation:
    """Conservation between reflecting walls."""

    def test_mass_and_energy(self, solver_config):
        solver_config.boundary_left = BoundaryConfig('reflecting')
        solver_config.boundary_right = BoundaryConfig('reflecting')
        solver_config.t_end = 0.3
        solver = create_shock_tube_solver(solver_config)
        mass_0, _, energy_0 = solver.state.total()

        result = solver.solve()

        assert result.status is RunStatus.COMPLETED
        mass, _, energy = solver.state.total()
        assert abs(mass - mass_0) / mass_0 < 1e-12, f"Mass changed by {mass - mass_0:.3e}"
        assert abs(energy - energy_0) / energy_0 < 1e-12, f"Energy changed by {energy - energy_0:.3e}"
