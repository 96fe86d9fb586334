import math

import pytest

from luastd import mathlib
from luastd.objects import LuaError

XS = [-3.5, -1.0, -0.25, 0.0, 0.3, 1.0, 2.75, 10.0]
UNIT = [-1.0, -0.5, 0.0, 0.25, 0.5, 1.0]


def test_pi_converts_to_half_turn():
    assert mathlib.pi == mathlib.PI
    assert mathlib.deg(mathlib.PI) == pytest.approx(180.0)
    assert mathlib.cos(mathlib.pi) == pytest.approx(-1.0)


@pytest.mark.parametrize("x", XS)
def test_sin_cos_identity(x):
    assert mathlib.sin(x) ** 2 + mathlib.cos(x) ** 2 == pytest.approx(1.0)


@pytest.mark.parametrize("x", XS)
def test_tan_is_sin_over_cos(x):
    assert mathlib.tan(x) == pytest.approx(mathlib.sin(x) / mathlib.cos(x))


@pytest.mark.parametrize("x", UNIT)
def test_inverse_trig_round_trip(x):
    assert mathlib.sin(mathlib.asin(x)) == pytest.approx(x, abs=1e-12)
    assert mathlib.cos(mathlib.acos(x)) == pytest.approx(x, abs=1e-12)
    assert mathlib.tan(mathlib.atan(x)) == pytest.approx(x, abs=1e-12)


def test_asin_out_of_domain_is_nan():
    assert mathlib.asin(2) == pytest.approx(math.nan, nan_ok=True)
    assert mathlib.acos(-2) == pytest.approx(math.nan, nan_ok=True)


@pytest.mark.parametrize("y,x", [(1.0, 2.0), (-3.0, 0.5), (0.0, 4.0)])
def test_atan2_matches_atan_in_right_half(y, x):
    assert mathlib.atan2(y, x) == pytest.approx(mathlib.atan(y / x))


@pytest.mark.parametrize("x", XS + [0.999, -0.001])
def test_floor_ceil_bracket(x):
    lo, hi = mathlib.floor(x), mathlib.ceil(x)
    assert lo <= x <= hi
    assert lo.is_integer() and hi.is_integer()
    assert hi - lo in (0.0, 1.0)


def test_floor_of_infinity_keeps_it():
    assert mathlib.floor(math.inf) == math.inf
    assert mathlib.ceil(-math.inf) == -math.inf


@pytest.mark.parametrize("a,b", [(7.0, 3.0), (-7.0, 3.0), (7.5, -2.0), (1.0, 4.0)])
def test_mod_invariants(a, b):
    r = mathlib.mod(a, b)
    assert math.fabs(r) < math.fabs(b)
    assert r == 0 or math.copysign(1, r) == math.copysign(1, a)
    q = (a - r) / b
    assert q == pytest.approx(round(q))


def test_mod_by_zero_is_nan():
    assert mathlib.mod(5, 0) == pytest.approx(math.nan, nan_ok=True)


@pytest.mark.parametrize("x", [0.0, 0.5, 2.0, 1e6])
def test_sqrt_squares_back(x):
    assert mathlib.sqrt(x) ** 2 == pytest.approx(x)


def test_sqrt_negative_is_nan():
    assert mathlib.sqrt(-4) == pytest.approx(math.nan, nan_ok=True)


@pytest.mark.parametrize("a,b", [(2.0, 3.0), (9.0, 0.5), (1.5, -2.0)])
def test_pow_matches_exp_log(a, b):
    assert mathlib.pow(a, b) == pytest.approx(mathlib.exp(b * mathlib.log(a)))


def test_pow_edge_cases():
    assert mathlib.pow(0, -1) == math.inf
    assert mathlib.pow(-8, 0.5) == pytest.approx(math.nan, nan_ok=True)
    big = mathlib.pow(10, 400)
    assert math.isinf(big) and big > 0


@pytest.mark.parametrize("x", [-2.0, 0.0, 1.0, 5.5])
def test_log_exp_round_trip(x):
    assert mathlib.log(mathlib.exp(x)) == pytest.approx(x, abs=1e-12)


@pytest.mark.parametrize("k", [0, 1, 3, -2])
def test_log10_of_powers(k):
    assert mathlib.log10(10.0**k) == pytest.approx(k)


def test_log_of_zero_and_negative():
    assert mathlib.log(0) == -math.inf
    assert mathlib.log10(0) == -math.inf
    assert mathlib.log(-1) == pytest.approx(math.nan, nan_ok=True)


def test_exp_overflow_is_infinite():
    assert mathlib.exp(1000.0) == math.inf


@pytest.mark.parametrize("x", XS)
def test_deg_rad_round_trip(x):
    assert mathlib.deg(mathlib.rad(x)) == pytest.approx(x)


def test_rad_of_half_turn_is_pi():
    assert mathlib.rad(180.0) == pytest.approx(mathlib.PI)


@pytest.mark.parametrize("x", [1.0, -3.75, 0.1, 1e300, 12345.678])
def test_frexp_ldexp_round_trip(x):
    m, e = mathlib.frexp(x)
    assert 0.5 <= math.fabs(m) < 1.0
    assert mathlib.ldexp(m, e) == x


def test_ldexp_overflow_is_infinite():
    assert mathlib.ldexp(1.0, 5000) == math.inf
    assert mathlib.ldexp(-1.0, 5000) == -math.inf


def test_numeric_strings_are_accepted():
    assert mathlib.abs("-2.5") == 2.5
    assert mathlib.min("3", 5) == 3


@pytest.mark.parametrize("args", [(3, 1, 2), (-1.5, 8, 0), (4,)])
def test_min_max(args):
    lo, hi = mathlib.min(*args), mathlib.max(*args)
    assert lo in args and hi in args
    assert all(lo <= a <= hi for a in args)


def test_min_without_arguments():
    with pytest.raises(LuaError, match="bad argument #1 to `min' \\(number expected, got no value\\)"):
        mathlib.min()


def test_bad_argument_type():
    with pytest.raises(LuaError, match="bad argument #1 to `abs'"):
        mathlib.abs("x")
    with pytest.raises(LuaError, match="bad argument #3 to `max'"):
        mathlib.max(1, 2, None)


def test_random_same_seed_same_sequence():
    a, b = mathlib.Random(42), mathlib.Random(42)
    assert [a.random() for _ in range(5)] == [b.random() for _ in range(5)]


def test_random_ranges():
    rng = mathlib.Random(7)
    for _ in range(200):
        r = rng.random()
        assert 0.0 <= r < 1.0
        assert 1 <= rng.random(5) <= 5
        assert 3 <= rng.random(3, 7) <= 7
    assert rng.random(1) == 1
    assert rng.random(-4, -4) == -4


def test_random_errors():
    rng = mathlib.Random(1)
    with pytest.raises(LuaError, match="interval is empty"):
        rng.random(0)
    with pytest.raises(LuaError, match="bad argument #2 to `random' \\(interval is empty\\)"):
        rng.random(5, 3)
    with pytest.raises(LuaError, match="wrong number of arguments"):
        rng.random(1, 2, 3)


def test_randomseed_restarts_sequence():
    rng = mathlib.Random()
    rng.randomseed(99)
    first = [rng.random(100) for _ in range(10)]
    rng.randomseed(99)
    assert [rng.random(100) for _ in range(10)] == first


def test_module_level_random_is_reproducible():
    mathlib.randomseed(5)
    first = [mathlib.random() for _ in range(4)]
    mathlib.randomseed(5)
    assert [mathlib.random() for _ in range(4)] == first