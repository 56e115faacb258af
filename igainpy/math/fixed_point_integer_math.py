"""Integer math on 18-decimal fixed-point scaled values.

Every function here takes and returns plain ints holding ``FixedPoint.scaled_value`` numbers.
Python ints never overflow, so ``a * b`` is the full-width intermediate product and the only
rounding is the explicit floor (or ceiling) of the final division.
"""
from __future__ import annotations

import math

from fixedpointmath import FixedPoint

ONE_18 = 10**18


def mul_div_down(x: int, y: int, d: int) -> int:
    r"""Returns :math:`\lfloor x y / d \rfloor`.

    Arguments
    ---------
    x : int
        First multiplicand, as a scaled value.
    y : int
        Second multiplicand, as a scaled value.
    d : int
        The denominator; a zero denominator is a broken pool invariant and raises ZeroDivisionError.

    Returns
    -------
    int
        The floored quotient.
    """
    if x < 0 or y < 0 or d < 0:
        raise ValueError(f"mul_div_down is only defined for unsigned values, got {x=}, {y=}, {d=}")
    return (x * y) // d


def mul_div_up(x: int, y: int, d: int) -> int:
    r"""Returns :math:`\lceil x y / d \rceil`."""
    if x < 0 or y < 0 or d < 0:
        raise ValueError(f"mul_div_up is only defined for unsigned values, got {x=}, {y=}, {d=}")
    return -((-x * y) // d)


def div_up(x: int, d: int) -> int:
    r"""Returns :math:`\lceil x / d \rceil`."""
    return mul_div_up(x, 1, d)


def sqrt_floor(x: int) -> int:
    """Largest integer y such that y * y <= x."""
    if x < 0:
        raise ValueError(f"sqrt_floor is only defined for unsigned values, got {x=}")
    return math.isqrt(x)


def from_scaled(value: int) -> FixedPoint:
    """Wrap a scaled integer back into a FixedPoint"""
    return FixedPoint(scaled_value=value)
