import copy
import math

import mpmath
import numpy as np
import pytest

from nameddual import Dual, make_dual


class XYZ(Dual, variables=("x", "y", "z")):
    pass


class UV(Dual, variables=("u", "v")):
    pass


def test_const_ops():
    assert XYZ.seed_x(5.0) + 3 == XYZ.seed_x(8.0)
    assert XYZ.seed_y(5.0) - 3 == XYZ.seed_y(2.0)
    assert 3 - XYZ.seed_y(5.0) == XYZ.eps_y(-2.0, -1.0)
    assert XYZ.seed_z(2.0) * 3 == XYZ(6.0, [0.0, 0.0, 3.0])
    assert XYZ.seed_x(10.0).pow(2) == XYZ(100.0, [20.0, 0.0, 0.0])
    r = XYZ.seed_y(10.0).invert()
    assert pytest.approx(r.value) == 0.1
    assert pytest.approx(r.derivatives.tolist()) == [0.0, -0.01, 0.0]
    assert XYZ.seed_x(4.0) / 2 == XYZ(2.0, [0.5, 0.0, 0.0])
    assert 2 / XYZ.seed_x(4.0) == XYZ(0.5, [-0.125, 0.0, 0.0])

    v = XYZ.seed_x(3.0)
    w = v
    v += 7
    assert v == XYZ.seed_x(10.0)
    assert w == XYZ.seed_x(3.0)


def test_distributive():
    x = XYZ.seed_x(1.0)
    assert (x + 1) * (x + 1) == x * x + 2 * x + 1
    assert (x + 1) * (x + 1) == (x + 1).pow(2)
    assert (x + 1) * (x - 1) == x * x - 1


def test_worked_example():
    x = XYZ.seed_x(5.0)
    y = XYZ.seed_y(7.0)
    z = x.pow(2) + y * y.sin()
    assert pytest.approx(z.value) == 25 + 7 * math.sin(7)
    assert z.derivative_wrt_x() == 10.0
    assert pytest.approx(z.derivative_wrt_y()) == 5.934302379121921
    assert z.derivative_wrt_z() == 0.0


def test_sum_and_product_rules():
    x = XYZ(1.5, [1.0, 2.0, -1.0])
    y = XYZ(-0.5, [0.0, 3.0, 4.0])

    for k in range(3):
        assert (x + y).derivatives[k] == x.derivatives[k] + y.derivatives[k]
        assert (x - y).derivatives[k] == x.derivatives[k] - y.derivatives[k]
        expected = x.derivatives[k] * y.value + x.value * y.derivatives[k]
        assert pytest.approx((x * y).derivatives[k]) == expected
        expected = (x.derivatives[k] * y.value - x.value * y.derivatives[k]) / y.value**2
        assert pytest.approx((x / y).derivatives[k]) == expected


def test_elementary_functions():
    x = XYZ(0.7, [1.0, -2.0, 0.5])
    cases = [
        (x.sin(), math.sin, math.cos),
        (x.cos(), math.cos, lambda a: -math.sin(a)),
        (x.tan(), math.tan, lambda a: 1 / math.cos(a) ** 2),
        (x.exp(), math.exp, math.exp),
        (x.log(), math.log, lambda a: 1 / a),
        (x.ln(), math.log, lambda a: 1 / a),
        (x.sqrt(), math.sqrt, lambda a: 0.5 / math.sqrt(a)),
    ]

    for result, fun, deriv in cases:
        assert pytest.approx(result.value) == fun(0.7)
        expected = [deriv(0.7) * d for d in (1.0, -2.0, 0.5)]
        assert pytest.approx(result.derivatives.tolist()) == expected


def test_trig_at_zero():
    x = XYZ.seed_x(0.0)
    assert x.sin() == XYZ.eps_x(0.0, 1.0)
    assert x.cos() == XYZ.eps_x(1.0, 0.0)
    assert x.tan() == XYZ.eps_x(0.0, 1.0)


def test_pow():
    x = XYZ.seed_x(2.0)
    y = XYZ.seed_y(3.0)

    r = x.pow(2.5)
    assert pytest.approx(r.value) == 2.0**2.5
    assert pytest.approx(r.derivative_wrt_x()) == 2.5 * 2.0**1.5

    r = x**y
    assert r.value == 8.0
    assert pytest.approx(r.derivative_wrt_x()) == 3 * 2.0**2
    assert pytest.approx(r.derivative_wrt_y()) == 8.0 * math.log(2.0)
    assert r.derivative_wrt_z() == 0.0

    r = 2**y
    assert r.value == 8.0
    assert pytest.approx(r.derivative_wrt_y()) == 8.0 * math.log(2.0)
    assert pytest.approx(r.derivative_wrt_x()) == 0.0


def test_constants():
    c = XYZ.constant(4.0)
    assert c.derivatives.tolist() == [0.0, 0.0, 0.0]

    x = XYZ.seed_x(2.0)
    assert (x * c).derivatives.tolist() == [4.0, 0.0, 0.0]
    assert (x + np.float64(1.0)) == XYZ.seed_x(3.0)
    assert (np.float64(1.0) + x) == XYZ.seed_x(3.0)
    assert (x * mpmath.mpf(3)) == XYZ(6.0, [3.0, 0.0, 0.0])


def test_division_by_zero():
    r = XYZ.seed_x(1.0) / XYZ.seed_x(0.0)
    assert math.isinf(r.value)
    assert not np.isfinite(r.derivatives).any()

    r = XYZ.seed_x(1.0) / 0
    assert math.isinf(r.value)
    assert not np.isfinite(r.derivatives).any()

    r = 1 / XYZ.seed_y(0.0)
    assert math.isinf(r.value)
    assert not np.isfinite(r.derivatives).any()


def test_domain_errors():
    r = XYZ.seed_x(-1.0).log()
    assert math.isnan(r.value)
    assert np.isnan(r.derivatives).all()

    r = XYZ.seed_y(-4.0).sqrt()
    assert math.isnan(r.value)
    assert np.isnan(r.derivatives).all()

    r = XYZ.seed_x(-2.0) ** XYZ.seed_y(0.5)
    assert math.isnan(r.value)
    assert np.isnan(r.derivatives).all()

    r = XYZ.seed_x(0.0).log()
    assert r.value == -math.inf
    assert r.derivative_wrt_x() == math.inf


def test_nan_propagation():
    r = XYZ.seed_x(-1.0).log() + XYZ.seed_y(2.0) * 3
    assert math.isnan(r.value)
    assert np.isnan(r.derivatives).all()


def test_mixed_variable_sets():
    with pytest.raises(TypeError):
        XYZ.seed_x(1.0) + UV.seed_u(1.0)

    with pytest.raises(TypeError):
        XYZ.seed_x(1.0) * UV.seed_u(1.0)

    with pytest.raises(TypeError):
        XYZ.seed_x(1.0) ** UV.seed_u(1.0)

    with pytest.raises(TypeError):
        XYZ.seed_x(1.0) < UV.seed_u(1.0)

    # same names, different declaration
    Other = make_dual("Other", "x", "y", "z")

    with pytest.raises(TypeError):
        XYZ.seed_x(1.0) - Other.seed_x(1.0)

    assert XYZ.seed_x(1.0) != Other.seed_x(1.0)


def test_unsupported_operands():
    x = XYZ.seed_x(1.0)

    with pytest.raises(TypeError):
        x + "1"

    with pytest.raises(TypeError):
        x * [1.0]

    with pytest.raises(TypeError):
        np.ones(3) + x

    with pytest.raises(TypeError):
        1j * x


def test_construction():
    with pytest.raises(ValueError):
        XYZ(1.0, [1.0, 0.0])

    with pytest.raises(ValueError, match=r"got shape \(1, 3\)"):
        XYZ(1.0, [[1.0, 0.0, 0.0]])

    with pytest.raises(TypeError):
        Dual(1.0, [])

    arr = np.array([1.0, 2.0, 3.0])
    x = XYZ(0.5, arr)
    arr[0] = 7.0
    assert x.derivatives.tolist() == [1.0, 2.0, 3.0]
    assert arr.flags.writeable


def test_immutable():
    x = XYZ.seed_x(1.0)

    with pytest.raises(AttributeError):
        x.value = 2.0  # type: ignore

    with pytest.raises(AttributeError):
        del x.derivatives

    with pytest.raises(ValueError):
        x.derivatives[0] = 2.0

    y = x * 2
    with pytest.raises(ValueError):
        y.derivatives[1] = 1.0

    assert copy.copy(x) is x
    assert copy.deepcopy(x) is x


def test_comparison():
    x = XYZ.seed_x(1.0)
    y = XYZ.seed_y(2.0)
    assert x < y and x <= y and y > x and y >= x
    assert x < 1.5 and x >= 1
    assert not x == XYZ.eps_x(1.0, 2.0)
    assert float(y) == 2.0


def test_repr():
    x = XYZ.seed_x(1.5)
    assert repr(x) == "XYZ(value=1.5, derivatives=[1.0, 0.0, 0.0])"
    assert str(x) == "XYZ(1.5, d/dx=1.0, d/dy=0.0, d/dz=0.0)"
    assert eval(repr(x)) == x
