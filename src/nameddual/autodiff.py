"""
#####################################################
Automatic differentiation (:mod:`nameddual.autodiff`)
#####################################################

.. currentmodule:: nameddual.autodiff

This module provides differential operators on ordinary functions and a way to
register new elementary functions with their derivatives.

Differential operators
----------------------

.. autosummary::
    :toctree: generated/

    deriv
    grad
    jacobian

Primitives
----------

.. autosummary::
    :toctree: generated/

    primitive
    defderiv

"""

import functools
from collections.abc import Callable
from typing import Any

import numpy as np

from nameddual.context import getcontext
from nameddual.dual import Dual, make_dual
from nameddual.logger import nameddual_logger
from nameddual.typing import Real


@functools.cache
def _anonymous(n: int) -> type[Dual]:
    nameddual_logger.debug("creating anonymous dual type of width %d", n)
    return make_dual(f"Dual{n}", *(f"x{i}" for i in range(n)), module=__name__)


def _derivatives(value: Any, n: int) -> tuple[float, ...]:
    if isinstance(value, Dual):
        return tuple(value.derivatives.tolist())

    if isinstance(value, Real):
        return (0.0,) * n

    raise TypeError(f"expected a real or a dual number, got {type(value).__name__}")


def deriv[**P](fun: Callable[P, Any]) -> Callable[P, float]:
    """Return a function that evaluates the derivative of the univariate scalar-valued
    function.

    Parameters
    ----------
    fun : Callable
        Differentiated function.

    Returns
    -------
    Callable
        Derivative of `fun`.

    Warnings
    --------
    The derivative is that of the branch taken at the evaluation point; conditional
    branches in `fun` are not differentiated across.

    Examples
    --------
    >>> from nameddual import function as ndf
    >>> f = lambda x: x**2 + ndf.sqrt(x + 3)
    >>> df = deriv(f)
    >>> print(format(df(1.2), ".6g"))
    2.64398
    """

    def result(*args, **kwargs):
        (tmp,) = _derivatives(fun(*_anonymous(1).variable(*args), **kwargs), 1)
        return tmp

    return result  # type: ignore


def grad[**P](fun: Callable[P, Any]) -> Callable[P, tuple[float, ...]]:
    """Return a function that evaluates the gradient of the multivariate scalar-valued
    function.

    Parameters
    ----------
    fun : Callable
        Differentiated function.

    Returns
    -------
    Callable
        Gradient of `fun`.

    Examples
    --------
    >>> from nameddual import function as ndf
    >>> f = lambda x, y: ndf.sqrt(x * y + 3)
    >>> df = grad(f)
    >>> c = df(0.5, 1.0)
    >>> print(format(c[0], ".6g"), format(c[1], ".6g"))
    0.267261 0.133631
    """

    def result(*args, **kwargs):
        n = len(args)
        return _derivatives(fun(*_anonymous(n).variable(*args), **kwargs), n)

    return result  # type: ignore


def jacobian[**P](fun: Callable[P, Any]) -> Callable[P, tuple[tuple[float, ...], ...]]:
    """Return a function that evaluates the Jacobian matrix of the multivariate
    vector-valued function.

    Parameters
    ----------
    fun : Callable
        Differentiated function. It must return a sequence.

    Returns
    -------
    Callable
        Jacobian of `fun`; the i-th row is the gradient of the i-th component.
    """

    def result(*args, **kwargs):
        n = len(args)
        tmp = fun(*_anonymous(n).variable(*args), **kwargs)
        return tuple(_derivatives(x, n) for x in tmp)

    return result  # type: ignore


def defderiv(
    fun: Callable[..., Any], deriv: Callable[..., Any], *, argnum: int = 0
) -> None:
    """Define the partial derivative of a primitive with respect to an argument.

    Parameters
    ----------
    fun : Callable
        Function decorated with :func:`primitive`.
    deriv : Callable
        Partial derivative of `fun` with respect to the `argnum`-th argument. It is
        called with the same arguments as `fun`, with dual numbers replaced by their
        values.
    argnum : int, default=0

    Raises
    ------
    ValueError
        If `fun` is not a primitive.
    """
    if not getattr(fun, "_nameddual_is_primitive", False):
        raise ValueError(f"{fun.__name__} is not a primitive")

    fun.__dict__["_nameddual_derivs"][argnum] = deriv


def primitive[T, **P](fun: Callable[P, T]) -> Callable[P, T]:
    """Make a real function accept dual numbers.

    The returned function evaluates `fun` on the values of its dual arguments and
    combines the partial derivatives registered with :func:`defderiv` by the chain
    rule. Other arguments are passed through as constants. Registered derivatives
    may return any real number, including :mod:`mpmath` numbers; they are converted
    to float.

    Raises
    ------
    TypeError
        If dual arguments belong to different types, or a dual number is passed as a
        keyword argument.
    ValueError
        If the derivative with respect to a dual argument is not defined.

    Examples
    --------
    >>> import math
    >>> erf = primitive(math.erf)
    >>> defderiv(erf, lambda x: 2 / math.sqrt(math.pi) * math.exp(-x * x))
    >>> X = make_dual("X", "x")
    >>> y = erf(X.seed_x(0.0))
    >>> print(format(y.derivative_wrt_x(), ".6f"))
    1.128379
    """
    derivs: dict[int, Callable[..., Any]] = {}

    @functools.wraps(fun)
    def wrapper(*args, **kwargs):
        args_dual = [(i, x) for i, x in enumerate(args) if isinstance(x, Dual)]

        if any(isinstance(x, Dual) for x in kwargs.values()):
            raise TypeError("dual numbers must be passed as positional arguments")

        if not args_dual:
            return fun(*args, **kwargs)

        head = args_dual[0][1]

        for argnum, arg in args_dual:
            head._check(arg)

            if argnum not in derivs:
                raise ValueError(f"derivative w.r.t. argument {argnum} is not defined")

        args_real = [x.value if isinstance(x, Dual) else x for x in args]

        with getcontext().errstate():
            derivatives = np.zeros(head.width)

            for argnum, arg in args_dual:
                tmp = float(derivs[argnum](*args_real, **kwargs))
                derivatives = derivatives + tmp * arg.derivatives

            value = fun(*args_real, **kwargs)

        return head._new(value, derivatives)

    wrapper.__dict__["_nameddual_is_primitive"] = True
    wrapper.__dict__["_nameddual_derivs"] = derivs
    return wrapper  # type: ignore
