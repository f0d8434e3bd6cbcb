"""
Equation-of-state parameters for ideal and isothermal gases.
"""

from dataclasses import dataclass

from .errors import ConfigurationError

ADIABATIC = 'adiabatic'
ISOTHERMAL = 'isothermal'


@dataclass(frozen=True)
class EquationOfState:
    """
    Immutable equation-of-state constants for a run.

    kind selects the closure:
        adiabatic  - calorically perfect gas, p = (gamma - 1) * rho * e
        isothermal - p = c_sound² * rho, no energy equation
    """
    kind: str = ADIABATIC
    gamma: float = 1.4          # Ratio of specific heats
    c_sound: float = 1.0        # Isothermal speed of sound

    def __post_init__(self):
        if self.kind not in (ADIABATIC, ISOTHERMAL):
            raise ConfigurationError(f"Unknown equation of state: {self.kind}. "
                                     f"Options: '{ADIABATIC}', '{ISOTHERMAL}'")
        if not self.gamma > 1.0:
            raise ConfigurationError(f"This must hold: gamma > 1! Got gamma = {self.gamma}")
        if not self.c_sound > 0.0:
            raise ConfigurationError(f"This must hold: c_sound > 0! Got c_sound = {self.c_sound}")

    @property
    def is_adiabatic(self) -> bool:
        return self.kind == ADIABATIC

    @property
    def gm1(self) -> float:
        """gamma - 1"""
        return self.gamma - 1

    @classmethod
    def adiabatic(cls, gamma: float = 1.4) -> 'EquationOfState':
        return cls(kind=ADIABATIC, gamma=gamma)

    @classmethod
    def isothermal(cls, c_sound: float = 1.0) -> 'EquationOfState':
        return cls(kind=ISOTHERMAL, c_sound=c_sound)
