"""
Pytest tests for the boundary conditions.

Tests verify:
1. Outflow ghost cells equal the adjacent interior cell
2. Reflecting ghost cells mirror the interior with reversed velocity
3. Fixed ghost cells hold the given state
4. Periodic ghost cells copy the opposite edge
5. Interior cells are never modified
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
    BoundaryHandler, ConfigurationError, EquationOfState, FixedBC, Mesh1D, OutflowBC,
    PeriodicBC, PhysicsState, ReflectingBC, make_boundary, make_physics,
)


@pytest.fixture
def mesh():
    return Mesh1D.uniform(0.0, 1.0, 10, n_ghost=2)


@pytest.fixture
def physics():
    return make_physics(EquationOfState.adiabatic(gamma=1.4))


@pytest.fixture
def state(mesh, physics):
    """Smoothly varying state with distinct values in every cell."""
    x = mesh.x_cells
    W = np.array([1.0 + x, 0.5 - x, 2.0 + x**2])
    return PhysicsState.from_primitives(physics, mesh, W)


class TestBoundaryConditions:
    """Tests for each boundary policy."""

    def test_outflow(self, state, mesh):
        BoundaryHandler(OutflowBC(), OutflowBC()).apply(state)
        W = state.prim

        for i in range(mesh.i_in):
            assert np.array_equal(W[:, i], W[:, mesh.i_in]), f"Left ghost {i} differs from first interior cell"
        for i in range(mesh.i_out + 1, mesh.n_all):
            assert np.array_equal(W[:, i], W[:, mesh.i_out]), f"Right ghost {i} differs from last interior cell"

    def test_reflecting(self, state, mesh):
        BoundaryHandler(ReflectingBC(), ReflectingBC()).apply(state)
        W = state.prim

        for k in range(mesh.n_ghost):
            left_ghost, left_mirror = mesh.i_in - 1 - k, mesh.i_in + k
            right_ghost, right_mirror = mesh.i_out + 1 + k, mesh.i_out - k

            assert W[0, left_ghost] == W[0, left_mirror]
            assert W[2, left_ghost] == W[2, left_mirror]
            assert W[1, left_ghost] == -W[1, left_mirror], "Velocity not reversed at left wall"

            assert W[0, right_ghost] == W[0, right_mirror]
            assert W[2, right_ghost] == W[2, right_mirror]
            assert W[1, right_ghost] == -W[1, right_mirror], "Velocity not reversed at right wall"

    def test_fixed(self, state, mesh):
        inflow = [3.0, 1.5, 7.0]
        BoundaryHandler(FixedBC(inflow), OutflowBC()).apply(state)

        assert np.allclose(state.prim[:, :mesh.i_in], np.array(inflow)[:, np.newaxis])
        # conserved ghost values follow the primitives
        assert np.allclose(state.cons[:, 0], state.physics.cons_from_prim(np.array(inflow)[:, np.newaxis])[:, 0])

    def test_fixed_wrong_length(self, state):
        with pytest.raises(ConfigurationError):
            BoundaryHandler(FixedBC([1.0, 0.0]), OutflowBC()).apply(state)

    def test_periodic(self, state, mesh):
        BoundaryHandler(PeriodicBC(), PeriodicBC()).apply(state)
        W = state.prim
        g = mesh.n_ghost

        assert np.array_equal(W[:, :g], W[:, mesh.i_out - g + 1:mesh.i_out + 1])
        assert np.array_equal(W[:, mesh.i_out + 1:], W[:, mesh.i_in:mesh.i_in + g])

    def test_periodic_needs_both_sides(self):
        with pytest.raises(ConfigurationError):
            BoundaryHandler(PeriodicBC(), OutflowBC())

    @pytest.mark.parametrize("kind, value", [
        ('outflow', None), ('reflecting', None), ('fixed', [1.0, 0.0, 1.0]), ('periodic', None),
    ])
    def test_interior_untouched(self, state, mesh, kind, value):
        cons_before = state.cons[:, mesh.interior].copy()
        prim_before = state.prim[:, mesh.interior].copy()

        bc = make_boundary(kind, value)
        BoundaryHandler(bc, make_boundary(kind, value)).apply(state)

        assert np.array_equal(state.cons[:, mesh.interior], cons_before), f"{kind} modified interior cells"
        assert np.array_equal(state.prim[:, mesh.interior], prim_before)


class TestMakeBoundary:
    """Tests for boundary construction by name."""

    def test_known_kinds(self):
        assert isinstance(make_boundary('outflow'), OutflowBC)
        assert isinstance(make_boundary('reflecting'), ReflectingBC)
        assert isinstance(make_boundary('periodic'), PeriodicBC)
        assert isinstance(make_boundary('fixed', [1.0, 0.0, 1.0]), FixedBC)

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError):
            make_boundary('inlet')

    def test_fixed_needs_value(self):
        with pytest.raises(ConfigurationError):
            make_boundary('fixed')
