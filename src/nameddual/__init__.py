from .autodiff import defderiv, deriv, grad, jacobian, primitive
from .context import Context, getcontext, localcontext, setcontext
from .dual import Dual, make_dual
from .function import cos, exp, log, pow, sin, sqrt, tan
from .variables import VariableSet

__all__ = [
    "defderiv",
    "deriv",
    "grad",
    "jacobian",
    "primitive",
    "Context",
    "getcontext",
    "localcontext",
    "setcontext",
    "Dual",
    "make_dual",
    "cos",
    "exp",
    "log",
    "pow",
    "sin",
    "sqrt",
    "tan",
    "VariableSet",
]
