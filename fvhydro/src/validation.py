"""
Physical validity checks and the failure taxonomy.

A failure carries enough context (cell index, field name, value, time) to
reproduce the condition. Non-physical values are reported, never clamped.
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .physics import JRHO, JPRESSURE


class FailureKind(Enum):
    NON_CONVERGENCE = 'non_convergence'
    NON_FINITE = 'non_finite'
    NON_PHYSICAL_DENSITY = 'non_physical_density'
    NON_PHYSICAL_PRESSURE = 'non_physical_pressure'

    @property
    def is_physical(self) -> bool:
        return self is not FailureKind.NON_CONVERGENCE


@dataclass(frozen=True)
class Failure:
    """Reason a step or a run could not proceed."""
    kind: FailureKind
    message: str
    cell: Optional[int] = None
    field: Optional[str] = None
    value: Optional[float] = None
    time: Optional[float] = None
    dt: Optional[float] = None

    def __str__(self):
        parts = [f"{self.kind.value}: {self.message}"]
        if self.cell is not None:
            parts.append(f"cell = {self.cell}")
        if self.field is not None:
            parts.append(f"{self.field} = {self.value}")
        if self.time is not None:
            parts.append(f"t = {self.time:.6e}")
        if self.dt is not None:
            parts.append(f"dt = {self.dt:.6e}")
        return ", ".join(parts)


@dataclass(frozen=True)
class ValidationResult:
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def __bool__(self):
        return self.ok


OK = ValidationResult()


class Validator:
    """
    Scans the non-ghost cells of a state for non-finite values, non-positive
    density and, where the system has one, non-positive pressure.

    Checks run in that order; the first offending cell of the first failing
    check is reported. Cell indices are absolute mesh indices.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def check(self, state) -> ValidationResult:
        if not self.enabled:
            return OK

        interior = state.mesh.interior
        offset = state.mesh.i_in
        physics = state.physics
        cons = state.cons[:, interior]
        prim = state.prim[:, interior]

        bad_cons = ~np.isfinite(cons)
        bad_prim = ~np.isfinite(prim)
        bad = np.any(bad_cons, axis=0) | np.any(bad_prim, axis=0)
        if np.any(bad):
            i = int(np.argmax(bad))
            # report the conserved field if both are non-finite in that cell
            if np.any(bad_cons[:, i]):
                values, names, mask = cons, physics.cons_names, bad_cons
            else:
                values, names, mask = prim, physics.prim_names, bad_prim
            j = int(np.argmax(mask[:, i]))
            return ValidationResult(Failure(
                kind=FailureKind.NON_FINITE,
                message="State turned non-finite",
                cell=offset + i, field=names[j], value=float(values[j, i])))

        rho = prim[JRHO]
        bad = ~(rho > 0.0)
        if np.any(bad):
            i = int(np.argmax(bad))
            return ValidationResult(Failure(
                kind=FailureKind.NON_PHYSICAL_DENSITY,
                message="Density must be positive",
                cell=offset + i, field='density', value=float(rho[i])))

        if physics.has_pressure:
            p = prim[JPRESSURE]
            bad = ~(p > 0.0)
            if np.any(bad):
                i = int(np.argmax(bad))
                return ValidationResult(Failure(
                    kind=FailureKind.NON_PHYSICAL_PRESSURE,
                    message="Pressure must be positive",
                    cell=offset + i, field='pressure', value=float(p[i])))

        return OK
