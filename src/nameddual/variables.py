"""
############################################
Named variables (:mod:`nameddual.variables`)
############################################

.. currentmodule:: nameddual.variables

This module binds names to the derivative slots of a dual number type.

A set of variables is declared once, in order. The position of each name is the
index of its slot in :attr:`Dual.derivatives <nameddual.Dual.derivatives>`, and the
declaration generates, for each name ``v``, the constructors ``seed_v`` and ``eps_v``
and the accessor ``derivative_wrt_v``.

.. autosummary::
    :toctree: generated/

    VariableSet
    bind

"""

import operator
from collections.abc import Iterable, Iterator
from typing import Any, overload


class VariableSet:
    """Ordered set of distinct variable names.

    Parameters
    ----------
    names : Iterable[str]
        Variable names. Each name must be a valid Python identifier.

    Raises
    ------
    TypeError
        If `names` is a string.
    ValueError
        If a name is not an identifier or occurs twice.

    Examples
    --------
    >>> xyz = VariableSet(["x", "y", "z"])
    >>> xyz.slot("y")
    1
    >>> VariableSet(["x", "x"])
    Traceback (most recent call last):
        ...
    ValueError: duplicate variable name: 'x'
    """

    __slots__ = ("_names", "_index")
    _names: tuple[str, ...]
    _index: dict[str, int]

    def __init__(self, names: Iterable[str]):
        if isinstance(names, str):
            raise TypeError("variables must be a sequence of names, not a string")

        self._names = tuple(names)
        self._index = {}

        for k, name in enumerate(self._names):
            if not isinstance(name, str) or not name.isidentifier():
                raise ValueError(f"invalid variable name: {name!r}")

            if name in self._index:
                raise ValueError(f"duplicate variable name: {name!r}")

            self._index[name] = k

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    def slot(self, key: str | int) -> int:
        """Return the slot index of `key`.

        `key` is either a variable name or an index, which is returned after a bounds
        check. Negative indices are not accepted.

        Raises
        ------
        KeyError
            If `key` is not a declared name.
        IndexError
            If `key` is an index out of range.
        """
        if isinstance(key, str):
            try:
                return self._index[key]
            except KeyError:
                raise KeyError(f"unknown variable: {key!r}") from None

        index = operator.index(key)

        if not 0 <= index < len(self._names):
            raise IndexError(f"slot index out of range: {index}")

        return index

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    @overload
    def __getitem__(self, key: int) -> str: ...

    @overload
    def __getitem__(self, key: slice) -> tuple[str, ...]: ...

    def __getitem__(self, key):
        return self._names[key]

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented

        return other._names == self._names  # type: ignore

    def __hash__(self) -> int:
        return hash(self._names)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._names)!r})"


def _seeder(name: str, k: int) -> Any:
    def seed(cls, point):
        return cls.eps(k, point, 1.0)

    seed.__name__ = f"seed_{name}"
    seed.__doc__ = (
        f"Return `point` seeded as the variable ``{name}``: unit derivative with "
        f"respect to ``{name}`` and zero with respect to every other variable."
    )
    return classmethod(seed)


def _perturber(name: str, k: int) -> Any:
    def eps(cls, value, eps):
        return cls.eps(k, value, eps)

    eps.__name__ = f"eps_{name}"
    eps.__doc__ = (
        f"Return `value` whose only nonzero derivative is `eps` w.r.t. ``{name}``."
    )
    return classmethod(eps)


def _accessor(name: str, k: int) -> Any:
    def derivative(self):
        return float(self.derivatives[k])

    derivative.__name__ = f"derivative_wrt_{name}"
    derivative.__doc__ = f"Partial derivative with respect to ``{name}``."
    return derivative


def bind(cls: type, variables: VariableSet) -> None:
    """Attach the named constructors and accessors of `variables` to `cls`.

    For the variable ``v`` at slot ``k``, the following attributes are created:

    ``seed_v(point)``
        Class method; same as ``cls.seed(k, point)``.
    ``eps_v(value, eps)``
        Class method; same as ``cls.eps(k, value, eps)``.
    ``derivative_wrt_v()``
        Method; same as ``float(self.derivatives[k])``.

    Raises
    ------
    ValueError
        If an attribute to be created already exists on `cls`.
    """
    generated: dict[str, Any] = {}

    for k, name in enumerate(variables):
        generated[f"seed_{name}"] = _seeder(name, k)
        generated[f"eps_{name}"] = _perturber(name, k)
        generated[f"derivative_wrt_{name}"] = _accessor(name, k)

    for attr in generated:
        if hasattr(cls, attr):
            raise ValueError(f"variable would shadow {cls.__name__}.{attr}")

    for attr, value in generated.items():
        fun = value.__func__ if isinstance(value, classmethod) else value
        fun.__qualname__ = f"{cls.__qualname__}.{attr}"
        fun.__module__ = cls.__module__
        setattr(cls, attr, value)
