"""
Run Sod's shock tube test case with visualization and comparison to the exact solution.

This script demonstrates:
1. Time-accurate simulation with adaptive Runge-Kutta-Fehlberg steps
2. Shock capturing with the HLL flux scheme
3. Comparison to the exact Riemann solution
4. Resolution study

Run from the project root:
    python fvhydro/scripts/run_shock_tube.py -v
    python fvhydro/scripts/run_shock_tube.py --config sod.json --output sod.h5
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import numpy as np
import matplotlib.pyplot as plt

from fvhydro.src import (
    BoundaryConfig, MeshConfig, Solver1D, SolverConfig, SnapshotRecorder,
    TimeIntegrationConfig, sod_exact, sod_shock_tube,
)

logger = logging.getLogger('fvhydro')


def setup_logging(args):
    if args.very_verbose:
        logger.setLevel(logging.DEBUG)
        ch = logging.StreamHandler(stream=sys.stdout)
        ch.setLevel(logging.DEBUG)
    elif args.verbose:
        logger.setLevel(logging.INFO)
        ch = logging.StreamHandler(stream=sys.stdout)
        ch.setLevel(logging.INFO)
    else:
        logger.setLevel(logging.WARNING)
        ch = logging.StreamHandler(stream=sys.stderr)
        ch.setLevel(logging.WARNING)

    # Create formatter for message output
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    ch.setFormatter(formatter)
    logger.addHandler(ch)


def sod_config(n_cells: int, t_end: float, cfl: float, reconstruction: str) -> SolverConfig:
    return SolverConfig(
        mesh=MeshConfig(n_cells=n_cells, x_min=0.0, x_max=1.0),
        boundary_left=BoundaryConfig('outflow'),
        boundary_right=BoundaryConfig('outflow'),
        time_integration=TimeIntegrationConfig(scheme='rkf45', rtol=1e-3, atol=1e-6),
        cfl=cfl,
        reconstruction=reconstruction,
        t_end=t_end,
        log_interval=50,
    )


def run_shock_tube(config: SolverConfig, recorder: SnapshotRecorder = None):
    """
    Run Sod's shock tube for a configuration.

    Returns:
        solver: Solver object with final solution
        result: SimulationResult of the run
        exact: Exact solution at the final time
    """
    solver = Solver1D(config)
    if recorder is not None:
        solver.add_observer(recorder)
    solver.set_initial_condition(sod_shock_tube(solver.mesh, config.eos))

    result = solver.solve()
    result.raise_for_status()

    exact = sod_exact(solver.mesh.x_interior, solver.time, gamma=config.eos.gamma)
    return solver, result, exact


def error_norms(solver, exact) -> dict:
    """L1 and L∞ errors of density, velocity and pressure."""
    snap = solver.snapshot()
    norms = {}
    for name in ('density', 'velocity', 'pressure'):
        err = np.abs(snap.field(name) - exact[name])
        norms[name] = (np.mean(err), np.max(err))
    return norms


def plot_shock_tube_results(solver, exact, filename: str = 'shock_tube_results.png'):
    """Create comparison plots."""
    snap = solver.snapshot()
    x = solver.mesh.x_interior
    gamma = solver.config.eos.gamma

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle(f'Sod Shock Tube: t = {solver.time:.3f}', fontsize=14, fontweight='bold')

    energy = snap.field('pressure') / ((gamma - 1) * snap.field('density'))
    panels = [
        (axes[0, 0], snap.field('density'), exact['density'], 'Density'),
        (axes[0, 1], snap.field('velocity'), exact['velocity'], 'Velocity'),
        (axes[1, 0], snap.field('pressure'), exact['pressure'], 'Pressure'),
        (axes[1, 1], energy, exact['energy'], 'Specific Internal Energy'),
    ]
    for ax, numerical, reference, title in panels:
        ax.plot(x, numerical, 'b-', linewidth=2, label='Numerical')
        ax.plot(x, reference, 'r--', linewidth=2, label='Exact')
        ax.axvline(x=0.5, color='gray', linestyle=':', alpha=0.5)
        ax.set_xlabel('x')
        ax.set_ylabel(title)
        ax.set_title(title)
        ax.legend()
        ax.grid(True, alpha=0.3)
        ax.set_xlim([0, 1])

    plt.tight_layout()
    plt.savefig(filename, dpi=150, bbox_inches='tight')
    print(f"Saved plot to: {filename}")
    return fig


def resolution_study(args):
    """Run the shock tube at multiple resolutions and plot the L1 error convergence."""
    resolutions = [50, 100, 200, 400]
    l1 = {'density': [], 'velocity': [], 'pressure': []}

    for n_cells in resolutions:
        print(f"Running with {n_cells} cells...")
        config = sod_config(n_cells, args.t_end, args.cfl, args.reconstruction)
        solver, _, exact = run_shock_tube(config)
        for name, (e1, _) in error_norms(solver, exact).items():
            l1[name].append(e1)

    dx = 1.0 / np.array(resolutions)
    fig, ax = plt.subplots(figsize=(7, 5))
    for name, values in l1.items():
        ax.loglog(dx, values, '-o', linewidth=2, label=name.capitalize())
    ax.loglog(dx, dx, 'k--', alpha=0.5, label='1st order')
    ax.set_xlabel('Grid spacing Δx')
    ax.set_ylabel('L1 error')
    ax.set_title('Convergence Study: Error vs Grid Resolution')
    ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig('shock_tube_convergence.png', dpi=150, bbox_inches='tight')
    print("Saved convergence plot to: shock_tube_convergence.png")
    return fig


def main(args):
    setup_logging(args)

    if args.resolution_study:
        resolution_study(args)
    else:
        if args.config:
            config = SolverConfig.from_json(args.config)
        else:
            config = sod_config(args.cells, args.t_end, args.cfl, args.reconstruction)
        if args.output and config.output_interval is None and config.t_end:
            config.output_interval = config.t_end / 10

        recorder = SnapshotRecorder()
        solver, result, exact = run_shock_tube(config, recorder)

        print(f"Time reached: {result.time:.4f}")
        print(f"Iterations: {result.iterations} ({result.n_rejected} rejected)")
        print("\nError Analysis:")
        for name, (e1, einf) in error_norms(solver, exact).items():
            print(f"  {name.capitalize():9s} L1 error: {e1:.6f}, L∞ error: {einf:.6f}")

        if args.output:
            recorder.write_hdf5(args.output)
        plot_shock_tube_results(solver, exact)

    if not args.no_display:
        plt.show()


if __name__ == "__main__":
    parser = argparse.ArgumentParser("Run Sod's shock tube and compare with the exact solution.")
    parser.add_argument("-c", "--config", help="path to a JSON solver configuration")
    parser.add_argument("-n", "--cells", type=int, default=200, help="number of computational cells")
    parser.add_argument("-t", "--t-end", type=float, default=0.2, help="final simulation time")
    parser.add_argument("--cfl", type=float, default=0.4, help="Courant number")
    parser.add_argument("-r", "--reconstruction", default='first_order', choices=['first_order', 'muscl'],
                        help="face reconstruction scheme")
    parser.add_argument("-o", "--output", help="write snapshots to this HDF5 file")
    parser.add_argument("--resolution-study", action="store_true", help="run at several resolutions")
    parser.add_argument("--no-display", action="store_true", help="do not display the plots in a window")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable verbose output")
    parser.add_argument("-vv", "--very-verbose", action="store_true", help="enable very verbose output")

    args = parser.parse_args()

    main(args)
