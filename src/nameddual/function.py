"""
##################################################
Mathematical functions (:mod:`nameddual.function`)
##################################################

.. currentmodule:: nameddual.function

This module provides the elementary functions. Each function accepts plain reals,
:mod:`mpmath` numbers, and dual numbers.

Trigonometric functions
=======================

.. autosummary::
    :toctree: generated/

    cos
    sin
    tan

Power, exponents, and logarithmic functions
===========================================

.. autosummary::
    :toctree: generated/

    exp
    log
    pow
    sqrt

Notes
-----
Floats are evaluated in double precision with numpy under the error policy of the
current :class:`~nameddual.context.Context`. Thus ``log(-1.0)`` is NaN and
``log(0.0)`` is negative infinity by default, unlike :func:`math.log`.

"""

from typing import Any, overload

import mpmath
import mpmath.ctx_mp_python
import numpy as np

from nameddual.context import getcontext

_mpnumeric = mpmath.ctx_mp_python.mpnumeric
_real = (float, int, np.floating, np.integer)


def _unary(fun, mpfun, npfun, x):
    if overload_ := getattr(type(x), "_nameddual_overload_", None):
        if (res := overload_(x, fun, x)) is not NotImplemented:
            return res

        raise TypeError

    match x:
        case _mpnumeric():
            return mpfun(x)

        case float() | int() | np.floating() | np.integer():
            with getcontext().errstate():
                return float(npfun(float(x)))

        case _:
            raise TypeError


@overload
def cos(x: float | int, /) -> float: ...


@overload
def cos(x: Any, /) -> Any: ...


def cos(x, /):
    """Cosine.

    Examples
    --------
    >>> print(format(cos(1.0), ".6f"))
    0.540302
    """
    return _unary(cos, mpmath.cos, np.cos, x)


@overload
def exp(x: float | int, /) -> float: ...


@overload
def exp(x: Any, /) -> Any: ...


def exp(x, /):
    """Exponential.

    Examples
    --------
    >>> print(format(exp(2), ".6f"))
    7.389056
    """
    return _unary(exp, mpmath.exp, np.exp, x)


@overload
def log(x: float | int, /) -> float: ...


@overload
def log(x: Any, /) -> Any: ...


def log(x, /):
    """Natural logarithm.

    Examples
    --------
    >>> print(format(log(5), ".6f"))
    1.609438
    >>> log(-1.0)
    nan
    """
    return _unary(log, mpmath.log, np.log, x)


@overload
def pow(x: float | int, y: float | int, /) -> float: ...


@overload
def pow(x: Any, y: Any, /) -> Any: ...


def pow(x, y, /):
    """`x` raised to the power `y`.

    Examples
    --------
    >>> print(format(pow(3.25, 1.25), ".6f"))
    4.363693
    >>> pow(-8.0, 1 / 3)
    nan
    """
    for z in (x, y):
        if overload_ := getattr(type(z), "_nameddual_overload_", None):
            if (res := overload_(z, pow, x, y)) is not NotImplemented:
                return res

    match x, y:
        case (_mpnumeric(), _) | (_, _mpnumeric()):
            return mpmath.power(x, y)

        case _ if isinstance(x, _real) and isinstance(y, _real):
            with getcontext().errstate():
                return float(np.power(float(x), float(y)))

        case _:
            raise TypeError


@overload
def sin(x: float | int, /) -> float: ...


@overload
def sin(x: Any, /) -> Any: ...


def sin(x, /):
    """Sine.

    Examples
    --------
    >>> print(format(sin(1.0), ".6f"))
    0.841471
    """
    return _unary(sin, mpmath.sin, np.sin, x)


@overload
def sqrt(x: float | int, /) -> float: ...


@overload
def sqrt(x: Any, /) -> Any: ...


def sqrt(x, /):
    """Square root.

    Examples
    --------
    >>> print(format(sqrt(2.0), ".6f"))
    1.414214
    >>> sqrt(-1.0)
    nan
    """
    return _unary(sqrt, mpmath.sqrt, np.sqrt, x)


@overload
def tan(x: float | int, /) -> float: ...


@overload
def tan(x: Any, /) -> Any: ...


def tan(x, /):
    """Tangent.

    Examples
    --------
    >>> print(format(tan(1.0), ".6f"))
    1.557408
    """
    return _unary(tan, mpmath.tan, np.tan, x)
