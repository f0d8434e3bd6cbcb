"""
Standard initial conditions and reference solutions.

Initial conditions return primitive variables for the computational cells,
shape (n_eq, n_cells), ready for Solver1D.set_initial_condition.
"""

import numpy as np

from .eos import EquationOfState
from .errors import ConfigurationError
from .mesh import Mesh1D
from .physics import JRHO, JXI, JPRESSURE


def _allocate(mesh: Mesh1D, eos: EquationOfState) -> np.ndarray:
    n_eq = 3 if eos.is_adiabatic else 2
    return np.zeros((n_eq, mesh.n_comp))


def uniform(mesh: Mesh1D, eos: EquationOfState, rho: float = 1.0, u: float = 0.0,
            p: float = 1.0) -> np.ndarray:
    """Constant state everywhere; p is ignored for isothermal gas."""
    W = _allocate(mesh, eos)
    W[JRHO] = rho
    W[JXI] = u
    if eos.is_adiabatic:
        W[JPRESSURE] = p
    return W


def sod_shock_tube(mesh: Mesh1D, eos: EquationOfState, x0: float = 0.5,
                   left=(1.0, 0.0, 1.0), right=(0.125, 0.0, 0.1)) -> np.ndarray:
    """
    Sod's shock tube (Sod, 1978): two gases at rest separated at x0.

    Args:
        mesh: Computational mesh
        eos: Equation of state
        x0: Position of the diaphragm
        left, right: (rho, u, p) on either side of x0

    Returns:
        Primitive variables (n_eq, n_cells)
    """
    W = _allocate(mesh, eos)
    is_left = mesh.x_interior < x0
    for j in range(W.shape[0]):
        W[j] = np.where(is_left, left[j], right[j])
    return W


def noh(mesh: Mesh1D, eos: EquationOfState, p0: float = 1.0e-5) -> np.ndarray:
    """
    Noh's problem: uniform density colliding at the domain center with
    velocity +1 from the left and -1 from the right, at negligible pressure.
    """
    W = _allocate(mesh, eos)
    W[JRHO] = 1.0
    W[JXI] = np.where(mesh.x_interior < 0.5 * (mesh.x_min + mesh.x_max), 1.0, -1.0)
    if eos.is_adiabatic:
        W[JPRESSURE] = p0
    return W


def sod_exact(x: np.ndarray, t: float, gamma: float = 1.4, x0: float = 0.5,
              left=(1.0, 0.0, 1.0), right=(0.125, 0.0, 0.1)) -> dict:
    """
    Exact solution of a shock tube with a left rarefaction and a right shock.

    The star pressure solves f_L(p) + f_R(p) + (u_R - u_L) = 0 by Newton
    iteration (Toro, chapter 4).

    Args:
        x: Positions
        t: Time
        gamma: Ratio of specific heats
        x0: Initial position of the discontinuity
        left, right: (rho, u, p) initial states, p_L > p_R

    Returns:
        Dictionary with density, velocity, pressure and internal energy
    """
    rho_L, u_L, p_L = left
    rho_R, u_R, p_R = right
    if not p_L > p_R:
        raise ConfigurationError(f"Expected a left rarefaction and a right shock (p_L > p_R), "
                                 f"got p_L = {p_L}, p_R = {p_R}")

    gm1 = gamma - 1
    gp1 = gamma + 1
    a_L = np.sqrt(gamma * p_L / rho_L)
    a_R = np.sqrt(gamma * p_R / rho_R)

    def pressure_function(p, rho_k, p_k, a_k):
        if p > p_k:
            A = 2 / (gp1 * rho_k)
            B = gm1 / gp1 * p_k
            f = (p - p_k) * np.sqrt(A / (p + B))
            df = np.sqrt(A / (p + B)) * (1 - 0.5 * (p - p_k) / (p + B))
        else:
            f = 2 * a_k / gm1 * ((p / p_k)**(gm1 / (2 * gamma)) - 1)
            df = 1 / (rho_k * a_k) * (p / p_k)**(-gp1 / (2 * gamma))
        return f, df

    p_star = 0.5 * (p_L + p_R)
    for _ in range(50):
        f_L, df_L = pressure_function(p_star, rho_L, p_L, a_L)
        f_R, df_R = pressure_function(p_star, rho_R, p_R, a_R)
        p_new = max(1e-3 * p_R, p_star - (f_L + f_R + (u_R - u_L)) / (df_L + df_R))
        converged = abs(p_new - p_star) / p_star < 1e-12
        p_star = p_new
        if converged:
            break

    f_L, _ = pressure_function(p_star, rho_L, p_L, a_L)
    f_R, _ = pressure_function(p_star, rho_R, p_R, a_R)
    u_star = 0.5 * (u_L + u_R) + 0.5 * (f_R - f_L)

    # Star region densities
    p_ratio = p_star / p_R
    rho_star_R = rho_R * (p_ratio + gm1 / gp1) / (gm1 / gp1 * p_ratio + 1)
    rho_star_L = rho_L * (p_star / p_L)**(1 / gamma)

    # Wave speeds: rarefaction head and tail, contact, shock
    head = u_L - a_L
    tail = u_star - a_L * (p_star / p_L)**(gm1 / (2 * gamma))
    contact = u_star
    shock = u_R + a_R * np.sqrt(gp1 / (2 * gamma) * p_ratio + gm1 / (2 * gamma))

    x = np.asarray(x, dtype=float)
    if t > 0:
        s = (x - x0) / t
    else:
        s = np.where(x < x0, -np.inf, np.inf)

    # Inside the rarefaction fan
    u_fan = 2 / gp1 * (a_L + 0.5 * gm1 * u_L + s)
    a_fan = 2 / gp1 * (a_L + 0.5 * gm1 * (u_L - s))
    with np.errstate(invalid='ignore', over='ignore'):
        rho_fan = rho_L * (a_fan / a_L)**(2 / gm1)
        p_fan = p_L * (a_fan / a_L)**(2 * gamma / gm1)

    regions = [s < head, s < tail, s < contact, s < shock]
    rho = np.select(regions, [rho_L, rho_fan, rho_star_L, rho_star_R], default=rho_R)
    u = np.select(regions, [u_L, u_fan, u_star, u_star], default=u_R)
    p = np.select(regions, [p_L, p_fan, p_star, p_star], default=p_R)

    return {
        'density': rho,
        'velocity': u,
        'pressure': p,
        'energy': p / (gm1 * rho),
    }
