"""
################################
Typing (:mod:`nameddual.typing`)
################################

This module provides type definitions commonly used between modules.

.. autoclass:: Scalar
    :show-inheritance:
    :no-members:

.. data:: Real

    Union of the plain real types that combine with dual numbers as constants.

"""

from abc import abstractmethod
from typing import Protocol, Self

import mpmath
import numpy as np


class Scalar(Protocol):
    """Protocol that ensures scalar-like behavior.

    Objects implementing this protocol must have four arithmetic operations and
    power defined, and four arithmetic operations must be compatible with floats.
    """

    __slots__ = ()

    @abstractmethod
    def __add__(self, rhs: Self | float) -> Self: ...

    @abstractmethod
    def __sub__(self, rhs: Self | float) -> Self: ...

    @abstractmethod
    def __mul__(self, rhs: Self | float) -> Self: ...

    @abstractmethod
    def __truediv__(self, rhs: Self | float) -> Self: ...

    @abstractmethod
    def __pow__(self, rhs: Self | float) -> Self: ...

    @abstractmethod
    def __radd__(self, lhs: Self | float) -> Self: ...

    @abstractmethod
    def __rsub__(self, lhs: Self | float) -> Self: ...

    @abstractmethod
    def __rmul__(self, lhs: Self | float) -> Self: ...

    @abstractmethod
    def __rtruediv__(self, lhs: Self | float) -> Self: ...

    @abstractmethod
    def __neg__(self) -> Self: ...

    @abstractmethod
    def __pos__(self) -> Self: ...


Real = int | float | np.integer | np.floating | mpmath.mpf
