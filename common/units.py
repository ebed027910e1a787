"""
Angle Units for Map Configuration.

This module provides a centralized unit registry using the `pint` library so
that angular settings (grid spacing, indicatrix radius) can be given in any
angular unit and are normalized to degrees before they reach the rendering
core.

Example Usage
-------------
>>> from common.units import Q_, angle_in_degrees
>>> angle_in_degrees(Q_(0.5, 'radian'))
28.64788975654116
>>> angle_in_degrees("120 arcminute")
2.0
"""

from typing import Union

import pint
from pint import UnitRegistry as PintUnitRegistry

# Create the global unit registry
ureg = PintUnitRegistry()

# Convenience alias for creating quantities
Q_ = ureg.Quantity

AngleLike = Union[float, int, str, pint.Quantity]


def _parse(value: AngleLike) -> pint.Quantity:
    if isinstance(value, pint.Quantity):
        return value
    if isinstance(value, str):
        try:
            # A plain number in a string carries no unit
            return Q_(float(value), "degree")
        except ValueError:
            pass
        parsed = ureg.parse_expression(value)
        if not isinstance(parsed, pint.Quantity) or parsed.unitless:
            raise TypeError(f"{value!r} has no unit")
        return parsed
    return Q_(float(value), "degree")


def angle_in_degrees(value: AngleLike) -> float:
    """Normalize an angle to float degrees.

    Parameters
    ----------
    value : float, str or pint.Quantity
        Bare numbers are taken as degrees. Strings are parsed by the unit
        registry (e.g. ``"20 degree"``, ``"0.1 radian"``).

    Returns
    -------
    float
        The angle in degrees.

    Raises
    ------
    ValueError
        If the value cannot be parsed or is not an angle.
    """
    try:
        quantity = _parse(value)
        return float(quantity.to("degree").magnitude)
    except pint.DimensionalityError as e:
        raise ValueError(f"{value!r} is not an angle") from e
    except (pint.UndefinedUnitError, TypeError) as e:
        raise ValueError(f"Cannot parse angle {value!r}") from e


def angle_in_radians(value: AngleLike) -> float:
    """Normalize an angle to float radians (bare numbers are degrees)."""
    return float(Q_(angle_in_degrees(value), "degree").to("radian").magnitude)
