"""Mathematical functions with Lua number semantics."""

from __future__ import annotations

import math as _math
import random as _random
from typing import Any

from .auxlib import _NONE, _argerror, _tonumber, _typeerror
from .objects import LuaError

__all__ = [
    "PI",
    "pi",
    "RADIANS_PER_DEGREE",
    "Random",
    "abs",
    "sin",
    "cos",
    "tan",
    "asin",
    "acos",
    "atan",
    "atan2",
    "ceil",
    "floor",
    "mod",
    "sqrt",
    "pow",
    "log",
    "log10",
    "exp",
    "deg",
    "rad",
    "frexp",
    "ldexp",
    "min",
    "max",
    "random",
    "randomseed",
]

PI = 3.14159265358979323846
pi = PI
RADIANS_PER_DEGREE = PI / 180.0


def _checknumber(value: Any, narg: int, fname: str) -> float:
    number = _tonumber(value)
    if number is None:
        raise _typeerror(narg, fname, "number", value)
    return float(number)


def _checkint(value: Any, narg: int, fname: str) -> int:
    return int(_checknumber(value, narg, fname))


def _domain(func: Any, *args: float) -> float:
    """Call a libm-like function, giving NaN or infinity where C would."""
    try:
        return func(*args)
    except ValueError:
        return _math.nan
    except OverflowError:
        return _math.inf


def _odd_integer(y: float) -> bool:
    return _math.isfinite(y) and y.is_integer() and int(y) % 2 == 1


def abs(x: Any) -> float:
    """Absolute value of ``x``."""
    return _math.fabs(_checknumber(x, 1, "abs"))


def sin(x: Any) -> float:
    """Sine of ``x`` (radians)."""
    return _domain(_math.sin, _checknumber(x, 1, "sin"))


def cos(x: Any) -> float:
    """Cosine of ``x`` (radians)."""
    return _domain(_math.cos, _checknumber(x, 1, "cos"))


def tan(x: Any) -> float:
    """Tangent of ``x`` (radians)."""
    return _domain(_math.tan, _checknumber(x, 1, "tan"))


def asin(x: Any) -> float:
    """Arc sine of ``x``; NaN outside [-1, 1]."""
    return _domain(_math.asin, _checknumber(x, 1, "asin"))


def acos(x: Any) -> float:
    """Arc cosine of ``x``; NaN outside [-1, 1]."""
    return _domain(_math.acos, _checknumber(x, 1, "acos"))


def atan(x: Any) -> float:
    """Arc tangent of ``x``."""
    return _math.atan(_checknumber(x, 1, "atan"))


def atan2(y: Any, x: Any) -> float:
    """Arc tangent of ``y / x`` using the signs of both to find the quadrant."""
    return _math.atan2(_checknumber(y, 1, "atan2"), _checknumber(x, 2, "atan2"))


def ceil(x: Any) -> float:
    """Smallest integral value not less than ``x``."""
    value = _checknumber(x, 1, "ceil")
    if not _math.isfinite(value):
        return value
    return float(_math.ceil(value))


def floor(x: Any) -> float:
    """Largest integral value not greater than ``x``."""
    value = _checknumber(x, 1, "floor")
    if not _math.isfinite(value):
        return value
    return float(_math.floor(value))


def mod(a: Any, b: Any) -> float:
    """Remainder of ``a / b`` with the sign of ``a`` (C fmod)."""
    return _domain(_math.fmod, _checknumber(a, 1, "mod"), _checknumber(b, 2, "mod"))


def sqrt(x: Any) -> float:
    """Square root of ``x``; NaN for negative numbers."""
    return _domain(_math.sqrt, _checknumber(x, 1, "sqrt"))


def pow(a: Any, b: Any) -> float:
    """``a`` raised to the power ``b``."""
    x = _checknumber(a, 1, "pow")
    y = _checknumber(b, 2, "pow")
    try:
        return _math.pow(x, y)
    except ValueError:
        if x == 0:
            return _math.copysign(_math.inf, x) if _odd_integer(y) else _math.inf
        return _math.nan
    except OverflowError:
        if x < 0 and _odd_integer(y):
            return -_math.inf
        return _math.inf


def _logarithm(func: Any, x: float) -> float:
    if x == 0:
        return -_math.inf
    if x < 0 or _math.isnan(x):
        return _math.nan
    return func(x)


def log(x: Any) -> float:
    """Natural logarithm of ``x``."""
    return _logarithm(_math.log, _checknumber(x, 1, "log"))


def log10(x: Any) -> float:
    """Base-10 logarithm of ``x``."""
    return _logarithm(_math.log10, _checknumber(x, 1, "log10"))


def exp(x: Any) -> float:
    """e raised to the power ``x``."""
    return _domain(_math.exp, _checknumber(x, 1, "exp"))


def deg(x: Any) -> float:
    """Convert radians to degrees."""
    return _checknumber(x, 1, "deg") / RADIANS_PER_DEGREE


def rad(x: Any) -> float:
    """Convert degrees to radians."""
    return _checknumber(x, 1, "rad") * RADIANS_PER_DEGREE


def frexp(x: Any) -> tuple[float, int]:
    """Split ``x`` into a mantissa in [0.5, 1) and a power of two."""
    return _math.frexp(_checknumber(x, 1, "frexp"))


def ldexp(m: Any, e: Any) -> float:
    """Return ``m * 2**e``."""
    mantissa = _checknumber(m, 1, "ldexp")
    exponent = _checkint(e, 2, "ldexp")
    try:
        return _math.ldexp(mantissa, exponent)
    except OverflowError:
        return _math.copysign(_math.inf, mantissa)


def min(*args: Any) -> float:
    """Smallest of the arguments (at least one is required)."""
    result = _checknumber(args[0] if args else _NONE, 1, "min")
    for narg, value in enumerate(args[1:], start=2):
        number = _checknumber(value, narg, "min")
        if number < result:
            result = number
    return result


def max(*args: Any) -> float:
    """Largest of the arguments (at least one is required)."""
    result = _checknumber(args[0] if args else _NONE, 1, "max")
    for narg, value in enumerate(args[1:], start=2):
        number = _checknumber(value, narg, "max")
        if number > result:
            result = number
    return result


class Random:
    """A pseudo-random generator with the calling conventions of ``math.random``."""

    def __init__(self, seed: Any = None) -> None:
        self._rng = _random.Random(seed)

    def random(self, *args: Any) -> float | int:
        """random() gives [0, 1); random(u) gives 1..u; random(l, u) gives l..u."""
        r = self._rng.random()
        if not args:
            return r
        if len(args) == 1:
            upper = _checkint(args[0], 1, "random")
            if not 1 <= upper:
                raise _argerror(1, "random", "interval is empty")
            return int(_math.floor(r * upper)) + 1
        if len(args) == 2:
            lower = _checkint(args[0], 1, "random")
            upper = _checkint(args[1], 2, "random")
            if not lower <= upper:
                raise _argerror(2, "random", "interval is empty")
            return int(_math.floor(r * (upper - lower + 1))) + lower
        raise LuaError("wrong number of arguments")

    def randomseed(self, seed: Any) -> None:
        """Restart the sequence from an integer seed."""
        self._rng.seed(_checkint(seed, 1, "randomseed"))


_DEFAULT_RANDOM = Random()


def random(*args: Any) -> float | int:
    """Draw from the shared generator; see :meth:`Random.random`."""
    return _DEFAULT_RANDOM.random(*args)


def randomseed(seed: Any) -> None:
    """Seed the shared generator."""
    _DEFAULT_RANDOM.randomseed(seed)