# -*- coding: utf-8 -*-
"""Typing prototypes"""

from typing import Any
from typing_extensions import Protocol


class StateLikeT(Protocol):
    """Anything the operator algebra accepts as a factor.

    Attributes
    ----------
    basis_l : Basis or None
        Row space; None for a bra.
    basis_r : Basis or None
        Column space; None for a ket.
    data : ArrayLike
        Coefficients or matrix elements.
    """
    basis_l: Any
    basis_r: Any
    data: Any


class DerivativeT(Protocol):

    def __call__(self, t: float, state: Any, dstate: Any) -> Any:
        pass


class OutputT(Protocol):

    def __call__(self, t: float, state: Any) -> Any:
        pass


class GeneratorFunctionT(Protocol):
    """Protocol for time and state dependent generators.

    Called as ``f(t, psi)`` with a borrowed view of the current state; must
    return the generator (an Operator) to use at that evaluation.
    """

    def __call__(self, t: float, state: Any) -> Any:
        pass
