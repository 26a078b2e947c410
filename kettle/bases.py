# -*- coding: utf-8 -*-
"""Hilbert space bases

A basis only carries the identity of a Hilbert space and its dimension.
Two bases are the same space only if their identity tags agree; having
the same dimension is never enough.
"""

from fractions import Fraction
from typing import Any, Hashable


class Basis:
    """Base class for Hilbert space bases.

    Parameters
    ----------
    dim : int
        Dimension of the Hilbert space.
    """

    def __init__(self, dim: int) -> None:
        if int(dim) != dim or dim < 1:
            raise ValueError(f"Basis dimension must be a positive integer, got {dim}")
        self.dim = int(dim)

    def _tag(self) -> Hashable:
        """Identity tag of the space; subclasses decide what makes two instances equal"""
        raise NotImplementedError

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if type(self) is not type(other):
            return False
        return self.dim == other.dim and self._tag() == other._tag()

    def __ne__(self, other: Any) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.dim, self._tag()))


class GenericBasis(Basis):
    """Basis without physical structure.

    Every instance is its own space: two separately constructed
    ``GenericBasis(4)`` objects are not interchangeable.
    """

    def __init__(self, dim: int) -> None:
        super().__init__(dim)
        self._token = object()

    def _tag(self) -> Hashable:
        return id(self._token)

    def __repr__(self) -> str:
        return f"GenericBasis({self.dim})"


class SpinBasis(Basis):
    """Basis of a single spin

    States are ordered from m = +spin down to m = -spin.

    Parameters
    ----------
    spin : float or Fraction
        Spin quantum number, a positive multiple of 1/2.
    """

    def __init__(self, spin: Any) -> None:
        spin = Fraction(spin)
        if spin <= 0 or (2 * spin).denominator != 1:
            raise ValueError(f"Spin must be a positive multiple of 1/2, got {spin}")
        self.spin = spin
        super().__init__(int(2 * spin + 1))

    def _tag(self) -> Hashable:
        return self.spin

    def __repr__(self) -> str:
        return f"SpinBasis({self.spin})"
