"""
####################################
Dual numbers (:mod:`nameddual.dual`)
####################################

.. currentmodule:: nameddual.dual

This module provides dual numbers whose derivative slots are named after a fixed
set of variables.

.. autosummary::
    :toctree: generated/

    Dual
    make_dual

"""

import functools
import sys
import types
from collections.abc import Iterable
from typing import Any, ClassVar, Self

import numpy as np
import numpy.typing as npt

from nameddual import function as ndf
from nameddual.context import getcontext
from nameddual.logger import nameddual_logger
from nameddual.typing import Real, Scalar
from nameddual.variables import VariableSet, bind


def _numeric(method):
    @functools.wraps(method)
    def wrapper(self, *args):
        with getcontext().errstate():
            return method(self, *args)

    return wrapper


class Dual(Scalar):
    r"""Base class for dual numbers over a declared set of variables.

    A concrete dual number type is declared by subclassing with the keyword argument
    `variables`, or with :func:`make_dual`. Instances are immutable.

    Parameters
    ----------
    value : float
    derivatives : Iterable[float]
        Partial derivatives, one for each declared variable in declaration order.

    Attributes
    ----------
    value : float
        Value at the evaluation point.
    derivatives : numpy.ndarray
        Read-only array of the partial derivatives.
    variables : tuple[str, ...]
        Declared variable names.
    width : int
        Number of declared variables.

    Raises
    ------
    TypeError
        If the class has no declared variables.
    ValueError
        If the length of `derivatives` differs from the number of variables.

    Notes
    -----
    Instances behave like elements of the ring

    .. math::

        \mathbb{R}[\varepsilon_1,\dotsc,\varepsilon_n]/(\varepsilon_i\varepsilon_j
        \mid i,j\in\{1,\dotsc,n\}),

    where :math:`n` is the number of declared variables. Every operation maps the
    value through the real function and the derivatives through its first-order
    Taylor expansion, so that an expression built from seeded variables carries its
    gradient.

    Plain reals (``int``, ``float``, numpy scalars, and :class:`mpmath.mpf`) are
    treated as constants whose derivatives are all zero. Combining instances of two
    different classes raises :class:`TypeError`, even if the variable names coincide.

    Floating-point anomalies follow the current :class:`~nameddual.context.Context`.
    By default they propagate as infinities and NaNs.

    Examples
    --------
    >>> class XY(Dual, variables=("x", "y")):
    ...     pass
    >>> x, y = XY.seed_x(5.0), XY.seed_y(7.0)
    >>> z = x.pow(2) + y * y.sin()
    >>> print(format(z.value, ".6f"))
    29.598906
    >>> z.derivative_wrt_x()
    10.0
    >>> print(format(z.derivative_wrt_y(), ".6f"))
    5.934302
    """

    __slots__ = ("value", "derivatives")
    __array_ufunc__ = None
    _variableset: ClassVar[VariableSet | None] = None
    variables: ClassVar[tuple[str, ...]] = ()
    width: ClassVar[int] = 0
    value: float
    derivatives: npt.NDArray[np.float64]

    def __init__(self, value: Any, derivatives: Iterable[Any]):
        if self._variableset is None:
            raise TypeError(f"{type(self).__name__} has no declared variables")

        if not isinstance(derivatives, np.ndarray):
            derivatives = list(derivatives)

        tmp = np.array(derivatives, dtype=np.float64)

        if tmp.shape != (self.width,):
            raise ValueError(
                f"expected {self.width} derivatives, got shape {tmp.shape}"
            )

        tmp.flags.writeable = False
        object.__setattr__(self, "value", float(value))
        object.__setattr__(self, "derivatives", tmp)

    def __init_subclass__(cls, /, variables: Iterable[str] | None = None, **kwargs):
        super().__init_subclass__(**kwargs)

        if cls._variableset is not None:
            raise TypeError("subclassing is forbidden")

        if variables is None:
            raise TypeError("variables must be declared")

        variableset = VariableSet(variables)
        bind(cls, variableset)
        cls._variableset = variableset
        cls.variables = variableset.names
        cls.width = len(variableset)
        nameddual_logger.debug(
            "declared %s with variables %s", cls.__qualname__, variableset.names
        )

    @classmethod
    def _new(cls, value: Any, derivatives: npt.NDArray[np.float64]) -> Self:
        result = object.__new__(cls)
        derivatives.flags.writeable = False
        object.__setattr__(result, "value", float(value))
        object.__setattr__(result, "derivatives", derivatives)
        return result

    @classmethod
    def slot(cls, key: str | int) -> int:
        """Return the slot index of a variable name, or check an index.

        Raises
        ------
        KeyError
            If `key` is not a declared name.
        IndexError
            If `key` is an index out of range.
        """
        if cls._variableset is None:
            raise TypeError(f"{cls.__name__} has no declared variables")

        return cls._variableset.slot(key)

    @classmethod
    def constant(cls, value: Real) -> Self:
        """Return `value` as a constant, i.e., with zero derivatives.

        Examples
        --------
        >>> XY = make_dual("XY", "x", "y")
        >>> XY.constant(3.0)
        XY(value=3.0, derivatives=[0.0, 0.0])
        """
        return cls(value, np.zeros(cls.width))

    @classmethod
    def eps(cls, key: str | int, value: Real, eps: Real) -> Self:
        """Return `value` whose only nonzero derivative is `eps` w.r.t. `key`."""
        derivatives = np.zeros(cls.width)
        derivatives[cls.slot(key)] = eps
        return cls(value, derivatives)

    @classmethod
    def seed(cls, key: str | int, point: Real) -> Self:
        """Return `point` seeded as the variable `key`.

        The result has the value `point`, the derivative one with respect to `key`,
        and zero with respect to every other variable.
        """
        return cls.eps(key, point, 1.0)

    @classmethod
    def variable(cls, *points: Real) -> tuple[Self, ...]:
        """Seed every declared variable at once, in declaration order.

        Examples
        --------
        >>> XY = make_dual("XY", "x", "y")
        >>> x, y = XY.variable(1.0, 2.0)
        >>> (x * y).gradient()
        {'x': 2.0, 'y': 1.0}
        """
        if len(points) != cls.width:
            raise ValueError(f"expected {cls.width} points, got {len(points)}")

        return tuple(cls.seed(k, point) for k, point in enumerate(points))

    def derivative_at(self, key: str | int) -> float:
        """Return the partial derivative with respect to `key`."""
        return float(self.derivatives[self.slot(key)])

    def gradient(self) -> dict[str, float]:
        """Return the partial derivatives keyed by variable name."""
        return dict(zip(self.variables, self.derivatives.tolist()))

    def _check(self, other: "Dual") -> None:
        if type(other) is not type(self):
            raise TypeError(
                f"cannot combine {type(self).__name__} with {type(other).__name__}"
            )

    def _nameddual_overload_(self, fun, *args):
        match fun:
            case ndf.sin:
                return self.sin()

            case ndf.cos:
                return self.cos()

            case ndf.tan:
                return self.tan()

            case ndf.exp:
                return self.exp()

            case ndf.log:
                return self.log()

            case ndf.sqrt:
                return self.sqrt()

            case ndf.pow:
                return args[0] ** args[1]

        return NotImplemented

    @_numeric
    def _chain(self, value: Any, slope: Any) -> Self:
        # outside the domain, the derivative is undefined as well
        if np.isnan(value):
            slope = np.nan

        return self._new(value, slope * self.derivatives)

    def pow(self, exponent: Self | Real) -> Self:
        """`self` raised to the power `exponent`.

        If `exponent` is a constant, the power rule applies everywhere the real power
        is defined. Otherwise, the base must be positive; a nonpositive base yields
        NaN derivatives.
        """
        return self**exponent

    def invert(self) -> Self:
        """Return the reciprocal."""
        return self.pow(-1.0)

    @_numeric
    def sin(self) -> Self:
        return self._chain(np.sin(self.value), np.cos(self.value))

    @_numeric
    def cos(self) -> Self:
        return self._chain(np.cos(self.value), -np.sin(self.value))

    def tan(self) -> Self:
        return self.sin() / self.cos()

    @_numeric
    def exp(self) -> Self:
        value = np.exp(self.value)
        return self._chain(value, value)

    @_numeric
    def log(self) -> Self:
        """Natural logarithm.

        A negative value yields NaN in the value and every derivative, and zero yields
        negative infinity.
        """
        return self._chain(np.log(self.value), np.divide(1.0, self.value))

    ln = log

    @_numeric
    def sqrt(self) -> Self:
        value = np.sqrt(self.value)
        return self._chain(value, np.divide(0.5, value))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__!r} object is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__!r} object is immutable")

    def __reduce__(self):
        return (type(self), (self.value, self.derivatives.tolist()))

    def __copy__(self) -> Self:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        return self

    def __repr__(self) -> str:
        derivatives = self.derivatives.tolist()
        name = type(self).__name__
        return f"{name}(value={self.value!r}, derivatives={derivatives!r})"

    def __str__(self) -> str:
        slots = "".join(f", d/d{k}={v}" for k, v in self.gradient().items())
        return f"{type(self).__name__}({self.value}{slots})"

    def __float__(self) -> float:
        return self.value

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented

        return other.value == self.value and bool(  # type: ignore
            np.array_equal(other.derivatives, self.derivatives)  # type: ignore
        )

    def __lt__(self, rhs: Self | Real) -> bool:
        if not isinstance(rhs, Dual | Real):
            return NotImplemented

        if isinstance(rhs, Dual):
            self._check(rhs)
            return self.value < rhs.value

        return self.value < float(rhs)

    def __le__(self, rhs: Self | Real) -> bool:
        if not isinstance(rhs, Dual | Real):
            return NotImplemented

        if isinstance(rhs, Dual):
            self._check(rhs)
            return self.value <= rhs.value

        return self.value <= float(rhs)

    def __gt__(self, rhs: Self | Real) -> bool:
        if not isinstance(rhs, Dual | Real):
            return NotImplemented

        if isinstance(rhs, Dual):
            self._check(rhs)
            return self.value > rhs.value

        return self.value > float(rhs)

    def __ge__(self, rhs: Self | Real) -> bool:
        if not isinstance(rhs, Dual | Real):
            return NotImplemented

        if isinstance(rhs, Dual):
            self._check(rhs)
            return self.value >= rhs.value

        return self.value >= float(rhs)

    @_numeric
    def __add__(self, rhs: Self | Real) -> Self:
        if not isinstance(rhs, Dual | Real):
            return NotImplemented

        if not isinstance(rhs, Dual):
            return self._new(np.add(self.value, float(rhs)), self.derivatives)

        self._check(rhs)
        value = np.add(self.value, rhs.value)
        return self._new(value, self.derivatives + rhs.derivatives)

    @_numeric
    def __sub__(self, rhs: Self | Real) -> Self:
        if not isinstance(rhs, Dual | Real):
            return NotImplemented

        if not isinstance(rhs, Dual):
            return self._new(np.subtract(self.value, float(rhs)), self.derivatives)

        self._check(rhs)
        value = np.subtract(self.value, rhs.value)
        return self._new(value, self.derivatives - rhs.derivatives)

    @_numeric
    def __mul__(self, rhs: Self | Real) -> Self:
        if not isinstance(rhs, Dual | Real):
            return NotImplemented

        if not isinstance(rhs, Dual):
            c = float(rhs)
            return self._new(np.multiply(self.value, c), self.derivatives * c)

        self._check(rhs)
        value = np.multiply(self.value, rhs.value)
        derivatives = self.derivatives * rhs.value + self.value * rhs.derivatives
        return self._new(value, derivatives)

    @_numeric
    def __truediv__(self, rhs: Self | Real) -> Self:
        if not isinstance(rhs, Dual | Real):
            return NotImplemented

        if not isinstance(rhs, Dual):
            c = float(rhs)
            return self._new(np.divide(self.value, c), self.derivatives / c)

        self._check(rhs)
        value = np.divide(self.value, rhs.value)
        s = np.square(rhs.value)
        derivatives = (self.derivatives * rhs.value - self.value * rhs.derivatives) / s
        return self._new(value, derivatives)

    @_numeric
    def __pow__(self, rhs: Self | Real, mod: None = None) -> Self:
        if mod is not None or not isinstance(rhs, Dual | Real):
            return NotImplemented

        if not isinstance(rhs, Dual):
            c = float(rhs)
            slope = c * np.power(self.value, c - 1.0)
            return self._new(np.power(self.value, c), slope * self.derivatives)

        self._check(rhs)
        value = np.power(self.value, rhs.value)
        tmp = rhs.derivatives * np.log(self.value)
        tmp = tmp + rhs.value * self.derivatives / self.value
        return self._new(value, value * tmp)

    @_numeric
    def __neg__(self) -> Self:
        return self._new(-self.value, -self.derivatives)

    def __pos__(self) -> Self:
        return self._new(self.value, self.derivatives)

    @_numeric
    def __radd__(self, lhs: Real) -> Self:
        if not isinstance(lhs, Real):
            return NotImplemented

        return self._new(np.add(float(lhs), self.value), self.derivatives)

    @_numeric
    def __rsub__(self, lhs: Real) -> Self:
        if not isinstance(lhs, Real):
            return NotImplemented

        return self._new(np.subtract(float(lhs), self.value), -self.derivatives)

    @_numeric
    def __rmul__(self, lhs: Real) -> Self:
        if not isinstance(lhs, Real):
            return NotImplemented

        c = float(lhs)
        return self._new(np.multiply(c, self.value), c * self.derivatives)

    @_numeric
    def __rtruediv__(self, lhs: Real) -> Self:
        if not isinstance(lhs, Real):
            return NotImplemented

        c = float(lhs)
        s = np.square(self.value)
        return self._new(np.divide(c, self.value), -c * self.derivatives / s)

    @_numeric
    def __rpow__(self, lhs: Real, mod: None = None) -> Self:
        if mod is not None or not isinstance(lhs, Real):
            return NotImplemented

        c = float(lhs)
        value = np.power(c, self.value)
        return self._new(value, value * np.log(c) * self.derivatives)


def make_dual(name: str, *variables: str, module: str | None = None) -> type[Dual]:
    """Declare a dual number type for the given variables.

    This is the functional form of ``class name(Dual, variables=variables)``.

    Parameters
    ----------
    name : str
        Name of the class.
    *variables : str
        Variable names in slot order.
    module : str, optional
        Value of ``__module__`` of the class. Defaults to the module of the caller.

    Returns
    -------
    type[Dual]

    Raises
    ------
    ValueError
        If a name is not an identifier or occurs twice.

    Examples
    --------
    >>> XYZ = make_dual("XYZ", "x", "y", "z")
    >>> x = XYZ.seed_x(3.0)
    >>> w = 2 * x**3 - XYZ.seed_z(1.0)
    >>> w.gradient()
    {'x': 54.0, 'y': 0.0, 'z': -1.0}
    """

    if module is None:
        module = sys._getframe(1).f_globals.get("__name__", "__main__")

    def exec_body(ns: dict[str, Any]) -> None:
        ns["__slots__"] = ()
        ns["__module__"] = module

    return types.new_class(name, (Dual,), {"variables": variables}, exec_body)
