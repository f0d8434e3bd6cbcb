"""
Tests for the 1D hydrodynamics solver.

Run tests with pytest:
    pytest fvhydro/tests/ -v

Or run individual test files:
    pytest fvhydro/tests/test_flux.py -v
    pytest fvhydro/tests/test_shock_tube.py -v
"""
