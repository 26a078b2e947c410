# -*- coding: utf-8 -*-
"""Operators and basis-aware products

Kets, bras, operators and views of them are all handled through the same
three attributes: ``basis_l`` (row space, ``None`` for a bra), ``basis_r``
(column space, ``None`` for a ket) and ``data``. Every product goes through
:func:`check_multiplicable` first.
"""

from __future__ import annotations

import numpy as np
import scipy.sparse as sp
import scipy.sparse.linalg as spla

from typing import Any, Tuple

from .bases import Basis, SpinBasis
from .exceptions import IncompatibleBases
from .states import EvolvableState, Ket, Bra, LEFT, basisstate
from .typing import StateLikeT


class Operator:
    """Linear map from the space ``basis_r`` into ``basis_l``

    Parameters
    ----------
    basis_l : Basis
        Left (row) basis.
    basis_r : Basis, optional
        Right (column) basis; defaults to ``basis_l``.
    data : ArrayLike or scipy.sparse matrix, optional
        Matrix elements; defaults to a dense zero matrix. Sparse input stays
        sparse (CSR), dense input is stored as a complex ndarray.
    """
    # numpy scalars must defer to __rmul__
    __array_ufunc__ = None

    def __init__(self, basis_l: Basis, basis_r: Basis = None, data: Any = None) -> None:
        if basis_r is None:
            basis_r = basis_l
        if not isinstance(basis_l, Basis) or not isinstance(basis_r, Basis):
            raise TypeError("Operator bases must be Basis instances")
        self.basis_l = basis_l
        self.basis_r = basis_r

        shape = (basis_l.dim, basis_r.dim)
        if data is None:
            data = np.zeros(shape, dtype=np.complex128)
        elif sp.issparse(data):
            data = sp.csr_matrix(data, dtype=np.complex128)
        else:
            data = np.asarray(data, dtype=np.complex128)
        if data.shape != shape:
            raise ValueError(f"Data of shape {data.shape} does not fit bases of dimensions {shape}")
        self.data = data

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.basis_l.dim, self.basis_r.dim)

    @property
    def is_sparse(self) -> bool:
        return sp.issparse(self.data)

    def copy(self) -> Operator:
        """Return an independent copy of the operator"""
        return type(self)(self.basis_l, self.basis_r, self.data.copy())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.basis_l!r}, {self.basis_r!r})"

    def __mul__(self, other: Any) -> Any:
        return product(self, other)

    def __rmul__(self, other: Any) -> Any:
        return product(other, self)

    def __add__(self, other: Any) -> Operator:
        if not isinstance(other, Operator):
            return NotImplemented
        _check_samespace(self, other)
        return Operator(self.basis_l, self.basis_r, self.data + other.data)

    def __sub__(self, other: Any) -> Operator:
        if not isinstance(other, Operator):
            return NotImplemented
        _check_samespace(self, other)
        return Operator(self.basis_l, self.basis_r, self.data - other.data)

    def __neg__(self) -> Operator:
        return Operator(self.basis_l, self.basis_r, -self.data)


class Propagator(Operator, EvolvableState):
    """Operator U(t) evolved like a ket, dU/dt = -i H U

    Data is always stored dense since the evolution fills it in.
    """
    prefactor = -1j
    generator_side = LEFT

    def __init__(self, basis_l: Basis, basis_r: Basis = None, data: Any = None) -> None:
        if sp.issparse(data):
            data = data.toarray()
        super().__init__(basis_l, basis_r, data)
        if self.basis_l != self.basis_r:
            raise ValueError("A propagator must act within a single basis")
        self.data = np.ascontiguousarray(self.data)


def _check_samespace(a: Any, b: Any) -> None:
    if a.basis_l != b.basis_l or a.basis_r != b.basis_r:
        raise IncompatibleBases("Operands do not act on the same spaces")


def check_samebases(op: Any) -> None:
    """Raise IncompatibleBases unless ``op`` maps a basis onto itself"""
    if op.basis_l != op.basis_r:
        raise IncompatibleBases(
            f"Operator is not square: left basis {op.basis_l!r} differs from right basis {op.basis_r!r}")


def check_multiplicable(a: Any, b: Any) -> None:
    """Raise IncompatibleBases unless the product ``a * b`` is defined"""
    if a.basis_r != b.basis_l:
        raise IncompatibleBases(
            f"Cannot multiply: right basis {a.basis_r!r} of the first factor "
            f"differs from left basis {b.basis_l!r} of the second")


def _wrap(basis_l: Basis, basis_r: Basis, data: Any) -> Any:
    """Build the object type matching a pair of bases"""
    if basis_r is None:
        return Ket(basis_l, data)
    if basis_l is None:
        return Bra(basis_r, data)
    return Operator(basis_l, basis_r, data)


def _matmul(a: Any, b: Any) -> Any:
    if a.basis_r is None and b.basis_l is None:
        return np.outer(a.data, b.data)
    if sp.issparse(b.data) and not sp.issparse(a.data):
        return (b.data.T @ a.data.T).T
    return a.data @ b.data


def mul(result: Any, a: StateLikeT, b: StateLikeT, alpha: complex = 1.0, beta: complex = 0.0) -> Any:
    """Scaled multiply-accumulate, ``result = alpha * a * b + beta * result``

    With ``beta == 0`` the previous content of ``result`` is discarded. When
    both factors are dense the product is written straight into
    ``result.data`` without a temporary.

    Parameters
    ----------
    result : Ket, Bra or Operator
        Output, overwritten in place. Its data must be a dense ndarray that
        does not share memory with ``a`` or ``b``.
    a, b : Ket, Bra, Operator or StateView
        Factors.
    alpha, beta : complex
        Scalars.

    Returns
    -------
    The ``result`` object.

    Raises
    ------
    IncompatibleBases
        If the factors cannot be multiplied or ``result`` lives elsewhere.
    """
    check_multiplicable(a, b)
    if result.basis_l != a.basis_l or result.basis_r != b.basis_r:
        raise IncompatibleBases("Result does not live in the space of the product")

    outer = a.basis_r is None and b.basis_l is None
    if beta == 0:
        if not outer and not sp.issparse(a.data) and not sp.issparse(b.data):
            np.matmul(a.data, b.data, out=result.data)
            if alpha != 1:
                result.data *= alpha
        else:
            prod = _matmul(a, b)
            if sp.issparse(prod):
                prod = prod.toarray()
            np.multiply(alpha, prod, out=result.data)
    else:
        prod = _matmul(a, b)
        if sp.issparse(prod):
            prod = prod.toarray()
        result.data *= beta
        result.data += alpha * prod
    return result


def product(a: Any, b: Any) -> Any:
    """Allocating product ``a * b``; a bra times a ket gives a complex number"""
    if np.isscalar(a):
        return _wrap(b.basis_l, b.basis_r, a * b.data)
    if np.isscalar(b):
        return _wrap(a.basis_l, a.basis_r, b * a.data)
    if not hasattr(a, "basis_l") or not hasattr(b, "basis_l"):
        raise TypeError(f"Cannot multiply {type(a).__name__} and {type(b).__name__}")
    check_multiplicable(a, b)
    if a.basis_l is None and b.basis_r is None:
        return complex(np.dot(a.data, b.data))
    return _wrap(a.basis_l, b.basis_r, _matmul(a, b))


def dagger(x: Any) -> Any:
    """Hermitian conjugate: kets become bras, bras become kets"""
    if x.data.ndim == 1:
        return _wrap(x.basis_r, x.basis_l, np.conj(x.data))
    if sp.issparse(x.data):
        return Operator(x.basis_r, x.basis_l, x.data.conj().T)
    return Operator(x.basis_r, x.basis_l, np.ascontiguousarray(x.data.conj().T))


def norm(x: Any) -> float:
    """Euclidean norm of a state, Frobenius norm of an operator"""
    if sp.issparse(x.data):
        return float(spla.norm(x.data))
    return float(np.linalg.norm(x.data))


def expect(op: Any, psi: Any) -> complex:
    """Expectation value of ``op`` in the state ``psi``.

    For a ket this is <psi|op|psi>, for a bra <psi| op (<psi|)^dagger, and
    for an operator ``rho`` the trace of ``op * rho``. The state is not
    normalized first.
    """
    if psi.basis_r is None:
        check_multiplicable(op, psi)
        return complex(np.vdot(psi.data, op.data @ psi.data))
    if psi.basis_l is None:
        check_multiplicable(psi, op)
        return complex(np.dot(psi.data, op.data @ np.conj(psi.data)))
    check_multiplicable(op, psi)
    return complex(_matmul(op, psi).diagonal().sum())


def identityoperator(basis_l: Basis, basis_r: Basis = None) -> Operator:
    """Sparse identity between two bases"""
    if basis_r is None:
        basis_r = basis_l
    return Operator(basis_l, basis_r,
                    sp.eye(basis_l.dim, basis_r.dim, dtype=np.complex128, format="csr"))


def dense(op: Operator) -> Operator:
    if sp.issparse(op.data):
        return Operator(op.basis_l, op.basis_r, op.data.toarray())
    return op.copy()


def sparse(op: Operator) -> Operator:
    return Operator(op.basis_l, op.basis_r, sp.csr_matrix(op.data))


def _spin_raising(basis: SpinBasis) -> sp.csr_matrix:
    if not isinstance(basis, SpinBasis):
        raise TypeError(f"Spin operators need a SpinBasis, got {type(basis).__name__}")
    s = float(basis.spin)
    m = s - np.arange(basis.dim)
    elements = np.sqrt(s * (s + 1) - m[1:] * (m[1:] + 1))
    return sp.diags(elements, offsets=1, shape=(basis.dim, basis.dim),
                    dtype=np.complex128, format="csr")


def sigmap(basis: SpinBasis) -> Operator:
    """Raising operator S+"""
    return Operator(basis, basis, _spin_raising(basis))


def sigmam(basis: SpinBasis) -> Operator:
    """Lowering operator S-"""
    return Operator(basis, basis, _spin_raising(basis).T.tocsr())


def sigmax(basis: SpinBasis) -> Operator:
    """2 Sx; the Pauli x matrix for spin 1/2"""
    raising = _spin_raising(basis)
    return Operator(basis, basis, raising + raising.T)


def sigmay(basis: SpinBasis) -> Operator:
    """2 Sy; the Pauli y matrix for spin 1/2"""
    raising = _spin_raising(basis)
    return Operator(basis, basis, -1j * (raising - raising.T))


def sigmaz(basis: SpinBasis) -> Operator:
    """2 Sz; the Pauli z matrix for spin 1/2"""
    if not isinstance(basis, SpinBasis):
        raise TypeError(f"Spin operators need a SpinBasis, got {type(basis).__name__}")
    m = float(basis.spin) - np.arange(basis.dim)
    return Operator(basis, basis, sp.diags(2.0 * m, dtype=np.complex128, format="csr"))


def spinup(basis: SpinBasis) -> Ket:
    return basisstate(basis, 0)


def spindown(basis: SpinBasis) -> Ket:
    return basisstate(basis, basis.dim - 1)
