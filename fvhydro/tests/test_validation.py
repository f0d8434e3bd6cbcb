"""
Pytest tests for the state validator.

Tests verify:
1. Valid states pass
2. Injected negative density is reported with its cell index
3. Non-finite values and non-positive pressure are detected
4. Ghost cells are ignored and the state is never modified
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
    EquationOfState, FailureKind, Mesh1D, PhysicsState, Validator, make_physics,
)


@pytest.fixture
def mesh():
    return Mesh1D.uniform(0.0, 1.0, 20)


@pytest.fixture
def physics():
    return make_physics(EquationOfState.adiabatic(gamma=1.4))


def make_state(physics, mesh, cell=None, rho=1.0, p=1.0):
    """Uniform state with an optional modified cell."""
    W = np.array([np.ones(mesh.n_all), np.zeros(mesh.n_all), np.ones(mesh.n_all)])[:physics.n_eq]
    if cell is not None:
        W[0, cell] = rho
        if physics.has_pressure:
            W[2, cell] = p
    return PhysicsState.from_primitives(physics, mesh, W)


class TestValidator:
    """Tests for the validation checks."""

    def test_valid_state(self, physics, mesh):
        result = Validator().check(make_state(physics, mesh))
        assert result.ok
        assert result.failure is None

    @pytest.mark.parametrize("cell", [2, 10, 21])
    def test_negative_density(self, physics, mesh, cell):
        state = make_state(physics, mesh, cell=cell, rho=-0.5)

        result = Validator().check(state)

        assert not result.ok
        assert result.failure.kind is FailureKind.NON_PHYSICAL_DENSITY
        assert result.failure.cell == cell, f"Reported cell {result.failure.cell}, injected at {cell}"
        assert result.failure.field == 'density'
        assert result.failure.value == pytest.approx(-0.5)

    def test_zero_density(self, physics, mesh):
        # zero density makes the velocity non-finite, which is found first
        result = Validator().check(make_state(physics, mesh, cell=5, rho=0.0))
        assert result.failure.kind in (FailureKind.NON_FINITE, FailureKind.NON_PHYSICAL_DENSITY)
        assert result.failure.cell == 5

    def test_negative_pressure(self, physics, mesh):
        result = Validator().check(make_state(physics, mesh, cell=7, p=-1e-3))
        assert result.failure.kind is FailureKind.NON_PHYSICAL_PRESSURE
        assert result.failure.cell == 7
        assert result.failure.field == 'pressure'

    def test_non_finite(self, physics, mesh):
        state = make_state(physics, mesh)
        U = state.cons.copy()
        U[2, 12] = np.inf
        U[1, 15] = np.nan
        state.assign_cons(U)

        result = Validator().check(state)

        assert result.failure.kind is FailureKind.NON_FINITE
        assert result.failure.cell == 12, "First offending cell should be reported"
        assert result.failure.field == 'energy'

    def test_non_finite_primitive_before_conserved(self, physics, mesh):
        """A non-finite velocity at a lower cell is reported before a non-finite energy further right."""
        state = make_state(physics, mesh)
        U = state.cons.copy()
        U[0, 4] = 0.0
        U[1, 4] = 0.0
        U[2, 10] = np.inf
        state.assign_cons(U)

        result = Validator().check(state)

        assert result.failure.kind is FailureKind.NON_FINITE
        assert result.failure.cell == 4, f"Reported cell {result.failure.cell}, first offending cell is 4"
        assert result.failure.field == 'velocity'

    def test_first_failing_cell_reported(self, physics, mesh):
        state = make_state(physics, mesh, cell=15, rho=-1.0)
        W = state.prim.copy()
        W[0, 4] = -2.0
        state.assign_prim(W)

        assert Validator().check(state).failure.cell == 4

    def test_ghost_cells_ignored(self, physics, mesh):
        state = make_state(physics, mesh, cell=0, rho=-1.0)
        assert Validator().check(state).ok

    def test_state_not_modified(self, physics, mesh):
        state = make_state(physics, mesh, cell=9, rho=-1.0)
        cons_before = state.cons.copy()
        prim_before = state.prim.copy()

        Validator().check(state)

        assert np.array_equal(state.cons, cons_before)
        assert np.array_equal(state.prim, prim_before)

    def test_disabled(self, physics, mesh):
        state = make_state(physics, mesh, cell=9, rho=-1.0)
        assert Validator(enabled=False).check(state).ok

    def test_isothermal_has_no_pressure_check(self, mesh):
        physics = make_physics(EquationOfState.isothermal(c_sound=1.0))
        result = Validator().check(make_state(physics, mesh, cell=3, rho=-1.0))
        assert result.failure.kind is FailureKind.NON_PHYSICAL_DENSITY
        assert Validator().check(make_state(physics, mesh)).ok

    def test_failure_message(self, physics, mesh):
        failure = Validator().check(make_state(physics, mesh, cell=6, rho=-3.0)).failure
        text = str(failure)
        assert 'non_physical_density' in text
        assert 'cell = 6' in text
