"""
Reconstruction of left/right face states from cell averages.

Faces are the S - 1 interfaces between adjacent cells of the full mesh
(ghost cells included): face j sits between cell j and cell j + 1.
Reconstruction works on primitive variables.
"""

import numpy as np
from functools import partial
from typing import Callable, Tuple

from .errors import ConfigurationError


def reconstruct_first_order(W: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    First-order reconstruction (piecewise constant) - most stable.

    Args:
        W: Primitive variables of all cells (n_eq, n_all)

    Returns:
        WL: Left states at each face (n_eq, n_all - 1)
        WR: Right states at each face (n_eq, n_all - 1)
    """
    return W[:, :-1].copy(), W[:, 1:].copy()


def minmod(dL: np.ndarray, dR: np.ndarray) -> np.ndarray:
    """Minmod limited slope."""
    same_sign = (dL * dR) > 0
    use_dL = np.abs(dL) < np.abs(dR)

    slopes = np.zeros_like(dL)
    slopes[same_sign & use_dL] = dL[same_sign & use_dL]
    slopes[same_sign & ~use_dL] = dR[same_sign & ~use_dL]
    return slopes


def vanleer(dL: np.ndarray, dR: np.ndarray) -> np.ndarray:
    """Van Leer limited slope, 2 dL dR / (dL + dR) for dL * dR > 0."""
    prod = dL * dR
    slopes = np.zeros_like(dL)
    mask = prod > 0
    slopes[mask] = 2.0 * prod[mask] / (dL[mask] + dR[mask])
    return slopes


LIMITERS = {
    'minmod': minmod,
    'vanleer': vanleer,
}


def reconstruct_muscl(W: np.ndarray, limiter: Callable = minmod) -> Tuple[np.ndarray, np.ndarray]:
    """
    MUSCL reconstruction with a slope limiter for 2nd order accuracy.

    The outermost cell on each side has no neighbour to limit against and
    keeps a zero slope.

    Args:
        W: Primitive variables of all cells (n_eq, n_all)
        limiter: Slope limiter function(dL, dR) -> slope

    Returns:
        WL: Left states at each face (n_eq, n_all - 1)
        WR: Right states at each face (n_eq, n_all - 1)
    """
    dL = W[:, 1:-1] - W[:, :-2]  # Backward differences
    dR = W[:, 2:] - W[:, 1:-1]   # Forward differences

    slopes = np.zeros_like(W)
    slopes[:, 1:-1] = limiter(dL, dR)

    WL = W[:, :-1] + 0.5 * slopes[:, :-1]
    WR = W[:, 1:] - 0.5 * slopes[:, 1:]
    return WL, WR


def required_ghosts(reconstruct: Callable) -> int:
    """
    Ghost cells per edge a reconstruction needs.

    MUSCL needs the slope of the first ghost cell, limited against the
    second one; the outermost cell always keeps a zero slope.
    """
    if getattr(reconstruct, 'func', reconstruct) is reconstruct_muscl:
        return 2
    return 1


def make_reconstruction(name: str = 'first_order',
                        limiter: str = 'minmod') -> Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray]]:
    """
    Select a reconstruction scheme.

    Args:
        name: 'first_order' or 'muscl'
        limiter: 'minmod' or 'vanleer', used by 'muscl'
    """
    if name == 'first_order':
        return reconstruct_first_order
    if name == 'muscl':
        if limiter not in LIMITERS:
            raise ConfigurationError(f"Unknown limiter: {limiter}. Options: {', '.join(LIMITERS)}")
        limiter_func = LIMITERS[limiter]
        return partial(reconstruct_muscl, limiter=limiter_func)
    raise ConfigurationError(f"Unknown reconstruction: {name}. Options: 'first_order', 'muscl'")
