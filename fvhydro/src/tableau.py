"""
Butcher tableaux of embedded Runge-Kutta pairs.

Each tableau yields two solutions from one set of stages: b_high of order
order_high (committed) and b_low of order order_low (error estimate only).
"""

import numpy as np
from dataclasses import dataclass, field

from .errors import ConfigurationError


@dataclass(frozen=True, eq=False)
class ButcherTableau:
    name: str
    a: np.ndarray
    b_high: np.ndarray
    b_low: np.ndarray
    c: np.ndarray
    order_high: int
    order_low: int
    description: str = field(default='', repr=False)

    @property
    def stages(self) -> int:
        return len(self.b_high)

    @property
    def error_exponent(self) -> float:
        """Exponent of the step size controller, 1 / (min order + 1)."""
        return 1.0 / (min(self.order_high, self.order_low) + 1)


def _tableau(name, a, b_high, b_low, c, order_high, order_low, description):
    return ButcherTableau(
        name=name,
        a=np.array(a, dtype=float),
        b_high=np.array(b_high, dtype=float),
        b_low=np.array(b_low, dtype=float),
        c=np.array(c, dtype=float),
        order_high=order_high,
        order_low=order_low,
        description=description,
    )


RKF45 = _tableau(
    'rkf45',
    a=[[0.0,            0.0,            0.0,            0.0,           0.0,        0.0],
       [1/4,            0.0,            0.0,            0.0,           0.0,        0.0],
       [3/32,           9/32,           0.0,            0.0,           0.0,        0.0],
       [1932/2197,     -7200/2197,      7296/2197,      0.0,           0.0,        0.0],
       [439/216,       -8.0,            3680/513,      -845/4104,      0.0,        0.0],
       [-8/27,          2.0,           -3544/2565,      1859/4104,    -11/40,      0.0]],
    b_high=[16/135, 0.0, 6656/12825, 28561/56430, -9/50, 2/55],
    b_low=[25/216, 0.0, 1408/2565, 2197/4104, -1/5, 0.0],
    c=[0.0, 1/4, 3/8, 12/13, 1.0, 1/2],
    order_high=5, order_low=4,
    description="Runge-Kutta-Fehlberg 4(5)",
)

RKF12 = _tableau(
    'rkf12',
    a=[[0.0,     0.0,       0.0],
       [1/2,     0.0,       0.0],
       [1/256,   255/256,   0.0]],
    b_high=[1/512, 255/256, 1/512],
    b_low=[1/256, 255/256, 0.0],
    c=[0.0, 1/2, 1.0],
    order_high=2, order_low=1,
    description="Runge-Kutta-Fehlberg 1(2)",
)

HEUN_EULER = _tableau(
    'heun_euler',
    a=[[0.0, 0.0],
       [1.0, 0.0]],
    b_high=[1/2, 1/2],
    b_low=[1.0, 0.0],
    c=[0.0, 1.0],
    order_high=2, order_low=1,
    description="Heun-Euler 2(1)",
)

SSPRK3 = _tableau(
    'ssprk3',
    a=[[0.0,  0.0,  0.0],
       [1.0,  0.0,  0.0],
       [1/4,  1/4,  0.0]],
    b_high=[1/6, 1/6, 2/3],
    b_low=[1/2, 1/2, 0.0],
    c=[0.0, 1.0, 1/2],
    order_high=3, order_low=2,
    description="Strong stability preserving Runge-Kutta 3(2)",
)

TABLEAUX = {t.name: t for t in (RKF45, RKF12, HEUN_EULER, SSPRK3)}


def get_tableau(name: str) -> ButcherTableau:
    if name not in TABLEAUX:
        raise ConfigurationError(f"Unknown time scheme: {name}. Options: {', '.join(TABLEAUX)}")
    return TABLEAUX[name]
