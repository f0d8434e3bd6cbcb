"""
Uniform 1D Cartesian mesh with ghost cells at both edges.
"""

import numpy as np
from dataclasses import dataclass, field

from .errors import ConfigurationError


@dataclass(frozen=True)
class Mesh1D:
    """
    Cell-centered finite volume mesh.

    The computational area [x_min, x_max] is split into n_comp cells of equal
    width, padded with n_ghost ghost cells on each side:

    - n_all: Total cell count S = n_comp + 2 * n_ghost
    - x_cells: Cell centers (n_all)
    - x_faces: Cell borders (n_all + 1)
    - dx: Uniform cell width
    - i_in, i_out: First and last non-ghost cell index
    """
    n_comp: int
    x_min: float
    x_max: float
    n_ghost: int = 2

    x_cells: np.ndarray = field(init=False, repr=False, compare=False)
    x_faces: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.n_comp < 1:
            raise ConfigurationError(f"Mesh needs at least one computational cell, got n_comp = {self.n_comp}")
        if self.n_ghost < 1:
            raise ConfigurationError(f"Mesh needs at least one ghost cell per edge, got n_ghost = {self.n_ghost}")
        if self.n_comp < self.n_ghost:
            raise ConfigurationError(f"Mesh needs at least as many computational cells as ghost cells per edge, "
                                     f"got n_comp = {self.n_comp}, n_ghost = {self.n_ghost}")
        if not self.x_min < self.x_max:
            raise ConfigurationError(f"This must hold: x_min < x_max! Got x_min = {self.x_min}, x_max = {self.x_max}")

        dx = (self.x_max - self.x_min) / self.n_comp
        i = np.arange(self.n_all)
        x_cells = self.x_min + (i - self.n_ghost + 0.5) * dx
        x_faces = self.x_min + (np.arange(self.n_all + 1) - self.n_ghost) * dx
        x_cells.flags.writeable = False
        x_faces.flags.writeable = False

        # frozen dataclass, so bypass __setattr__ for the derived arrays
        object.__setattr__(self, 'x_cells', x_cells)
        object.__setattr__(self, 'x_faces', x_faces)

    @property
    def n_all(self) -> int:
        """Total number of cells, ghost cells included."""
        return self.n_comp + 2 * self.n_ghost

    @property
    def n_faces(self) -> int:
        """Number of interfaces between adjacent cells."""
        return self.n_all - 1

    @property
    def dx(self) -> float:
        """Uniform cell width."""
        return (self.x_max - self.x_min) / self.n_comp

    @property
    def i_in(self) -> int:
        """Index of the first non-ghost cell."""
        return self.n_ghost

    @property
    def i_out(self) -> int:
        """Index of the last non-ghost cell."""
        return self.n_ghost + self.n_comp - 1

    @property
    def interior(self) -> slice:
        """Slice selecting the non-ghost cells."""
        return slice(self.i_in, self.i_out + 1)

    @property
    def x_interior(self) -> np.ndarray:
        """Cell centers of the computational area."""
        return self.x_cells[self.interior]

    @classmethod
    def uniform(cls, x_min: float, x_max: float, n_cells: int,
                n_ghost: int = 2) -> 'Mesh1D':
        """
        Create a uniform mesh.

        Args:
            x_min, x_max: Bounds of the computational area
            n_cells: Number of computational (non-ghost) cells
            n_ghost: Number of ghost cells per edge
        """
        return cls(n_comp=n_cells, x_min=x_min, x_max=x_max, n_ghost=n_ghost)
