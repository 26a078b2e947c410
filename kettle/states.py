# -*- coding: utf-8 -*-
"""State vectors and the evolvable-state interface"""

from __future__ import annotations

import numpy as np

from typing import Any, Tuple
from .bases import Basis

LEFT = "left"
RIGHT = "right"


class EvolvableState:
    """Interface shared by everything that can be evolved by the Schrödinger equation.

    A variant fixes the convention of its equation of motion through two
    class attributes, which the derivative routine reads instead of
    dispatching on the concrete type.

    Attributes
    ----------
    prefactor : complex
        Scalar multiplying the generator product in d/dt of the state.
    generator_side : str
        ``"left"`` if the generator acts as ``H * psi``, ``"right"`` if it
        acts as ``psi * H``.
    """
    prefactor: complex = -1j
    generator_side: str = LEFT

    @property
    def shape(self) -> Tuple[int, ...]:
        """Shape of the data buffer"""
        raise NotImplementedError

    def copy(self) -> EvolvableState:
        raise NotImplementedError


class StateVector(EvolvableState):
    """Base class for kets and bras

    Parameters
    ----------
    basis : Basis
        Hilbert space of the state.
    data : ArrayLike, optional
        Coefficients; defaults to the zero vector.
    """
    __array_ufunc__ = None

    def __init__(self, basis: Basis, data: Any = None) -> None:
        if not isinstance(basis, Basis):
            raise TypeError(f"Expected a Basis, got {type(basis).__name__}")
        self.basis = basis
        if data is None:
            self.data = np.zeros(basis.dim, dtype=np.complex128)
        else:
            data = np.asarray(data, dtype=np.complex128)
            if data.shape != (basis.dim,):
                raise ValueError(f"Data of shape {data.shape} does not fit a basis of dimension {basis.dim}")
            self.data = data

    @property
    def shape(self) -> Tuple[int, ...]:
        return (self.basis.dim,)

    def copy(self) -> StateVector:
        """Return an independent copy of the state"""
        return type(self)(self.basis, np.array(self.data, dtype=np.complex128, copy=True))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.basis!r}, {self.data!r})"

    def __eq__(self, other: Any) -> bool:
        return type(self) is type(other) and self.basis == other.basis \
                and np.array_equal(self.data, other.data)

    __hash__ = None

    def __mul__(self, other: Any) -> Any:
        from .operators import product
        return product(self, other)

    def __rmul__(self, other: Any) -> Any:
        from .operators import product
        return product(other, self)

    def __add__(self, other: Any) -> StateVector:
        if type(self) is not type(other) or self.basis != other.basis:
            return NotImplemented
        return type(self)(self.basis, self.data + other.data)

    def __sub__(self, other: Any) -> StateVector:
        if type(self) is not type(other) or self.basis != other.basis:
            return NotImplemented
        return type(self)(self.basis, self.data - other.data)

    def __neg__(self) -> StateVector:
        return type(self)(self.basis, -self.data)


class Ket(StateVector):
    """Column state vector |psi>, evolved as d|psi>/dt = -i H |psi>"""
    prefactor = -1j
    generator_side = LEFT

    @property
    def basis_l(self) -> Basis:
        return self.basis

    @property
    def basis_r(self) -> None:
        return None


class Bra(StateVector):
    """Row state vector <psi|, evolved as d<psi|/dt = +i <psi| H"""
    prefactor = 1j
    generator_side = RIGHT

    @property
    def basis_l(self) -> None:
        return None

    @property
    def basis_r(self) -> Basis:
        return self.basis


def basisstate(basis: Basis, index: int) -> Ket:
    """Ket with a single unit coefficient at position ``index``"""
    data = np.zeros(basis.dim, dtype=np.complex128)
    data[index] = 1.0
    return Ket(basis, data)
