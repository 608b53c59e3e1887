"""
########################################
Error context (:mod:`nameddual.context`)
########################################

.. currentmodule:: nameddual.context

This module controls how floating-point anomalies of dual arithmetic are signaled.

.. autosummary::
    :toctree: generated/

    Context
    getcontext
    localcontext
    setcontext

"""

import contextlib
import contextvars
from typing import Literal, Self

import numpy as np

type ErrorPolicy = Literal["IEEE", "RAISE"]


class Context:
    """Create a new context.

    Parameters
    ----------
    errors : Literal["IEEE", "RAISE"], default="IEEE"
        Error policy. If `errors` is ``"IEEE"``, division by zero, overflow, and
        domain errors produce infinities or NaNs that propagate through the value and
        the derivatives, as in plain floating-point arithmetic. If `errors` is
        ``"RAISE"``, the same conditions raise :class:`FloatingPointError`.

    Examples
    --------
    >>> ctx = Context("RAISE")
    >>> ctx.errors
    'RAISE'
    """

    __slots__ = ("_errors",)
    _errors: ErrorPolicy

    def __init__(self, errors: ErrorPolicy = "IEEE"):
        if errors not in ("IEEE", "RAISE"):
            raise ValueError(f"unknown error policy: {errors!r}")

        self._errors = errors

    @property
    def errors(self) -> ErrorPolicy:
        return self._errors

    def copy(self) -> Self:
        return self.__class__(self._errors)

    def errstate(self) -> np.errstate:
        """Return a :class:`numpy.errstate` implementing the error policy."""
        if self._errors == "RAISE":
            return np.errstate(
                divide="raise", over="raise", invalid="raise", under="ignore"
            )

        return np.errstate(all="ignore")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._errors!r})"


_var: contextvars.ContextVar[Context] = contextvars.ContextVar("nameddual")


def getcontext() -> Context:
    """Return the current context for the active thread."""
    if context := _var.get(None):
        return context

    context = Context()
    _var.set(context)
    return context


def setcontext(ctx: Context) -> None:
    """Set the current context for the active thread to `ctx`."""
    _var.set(ctx)


@contextlib.contextmanager
def localcontext(ctx: Context | None = None, *, errors: ErrorPolicy | None = None):
    """Return a context manager that will set the current context for the active thread
    to a copy of `ctx` on entry to the with-statement and restore the previous context
    when exiting the with-statement.

    Examples
    --------
    >>> with localcontext(errors="RAISE") as ctx:
    ...     print(ctx.errors)
    RAISE
    >>> print(getcontext().errors)
    IEEE
    """
    if ctx is None:
        ctx = getcontext()

    if errors is None:
        errors = ctx.errors

    ctx = Context(errors)
    token = _var.set(ctx)

    try:
        yield ctx
    finally:
        _var.reset(token)
