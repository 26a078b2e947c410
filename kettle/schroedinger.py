# -*- coding: utf-8 -*-
"""Time evolution under the Schrödinger equation

Kets, bras and propagators are evolved by

    d|psi>/dt = -i H |psi>,    d<psi|/dt = +i <psi| H,    dU/dt = -i H U

either with a fixed generator (:func:`evolve_static`) or with a generator
recomputed from the time and current state at every derivative evaluation
(:func:`evolve_dynamic`).
"""

from __future__ import annotations

from typing import Any, List, Tuple

import numpy as np

from .integration import as_timespan, integrate
from .operators import Operator, Propagator, check_multiplicable, check_samebases, mul
from .states import EvolvableState, LEFT
from .typing import GeneratorFunctionT, OutputT
from .views import StateView


def as_evolvable(psi: Any) -> EvolvableState:
    """Return ``psi`` as a state the Schrödinger equation can evolve

    Kets, bras and propagators pass through; a plain square operator is
    taken as the initial value of a propagator.

    :raises ValueError: for a non-square operator
    :raises TypeError: for anything else
    """
    if isinstance(psi, EvolvableState):
        return psi
    if isinstance(psi, Operator):
        return Propagator(psi.basis_l, psi.basis_r, psi.data)
    if isinstance(psi, StateView):
        raise TypeError("A borrowed StateView cannot start an evolution; pass view.copy()")
    raise TypeError(f"Cannot evolve an object of type {type(psi).__name__}")


def check_schroedinger(psi: EvolvableState, H: Operator) -> None:
    """Make sure ``H`` can generate the evolution of ``psi``

    :param psi: ket, bra or propagator
    :param H: generator

    :raises IncompatibleBases: if ``H`` is not square or does not act on the space of ``psi``
    """
    if psi.generator_side == LEFT:
        check_multiplicable(H, psi)
    else:
        check_multiplicable(psi, H)
    check_samebases(H)


def dschroedinger(psi: EvolvableState, H: Any, dpsi: EvolvableState) -> EvolvableState:
    """Overwrite ``dpsi`` with the time derivative of ``psi`` under ``H``"""
    if psi.generator_side == LEFT:
        mul(dpsi, H, psi, psi.prefactor)
    else:
        mul(dpsi, psi, H, psi.prefactor)
    return dpsi


def dschroedinger_dynamic(t: float, psi: EvolvableState, f: GeneratorFunctionT,
                          dpsi: EvolvableState) -> EvolvableState:
    """Derivative with the generator ``f(t, psi)`` evaluated for this time and state"""
    H = f(t, StateView(psi))
    return dschroedinger(psi, H, dpsi)


def _working_copies(psi0: EvolvableState) -> Tuple[EvolvableState, EvolvableState]:
    state = psi0.copy()
    dstate = psi0.copy()
    return state, dstate


def evolve_static(tspan: Any, psi0: Any, H: Operator, fout: OutputT = None,
                  options: Any = None, **kwargs: Any) -> Tuple[np.ndarray, List[Any]]:
    """Integrate the Schrödinger equation with a time-independent generator.

    Parameters
    ----------
    tspan : ArrayLike
        Times at which output is produced; the first entry is the initial time.
    psi0 : Ket, Bra or Operator
        Initial state, or initial propagator (typically the identity).
    H : Operator
        Generator; must be square and act on the space of ``psi0``.
    fout : Callable, optional
        ``fout(t, psi)`` called at every output time with a borrowed,
        read-only :class:`StateView`. The view is still used by the solver:
        keep ``psi.copy()`` if the state is needed after the call returns.
        By default copies of the state are collected.
    options : IntegratorOptions or dict, optional
        Solver settings, or pass them as keywords (``rtol``, ``atol``, ...).

    Returns
    -------
    tout : np.ndarray
        Output times.
    results : list
        States (or ``fout`` return values) at the output times.

    Raises
    ------
    IncompatibleBases
        Before any integration work if ``H`` does not match ``psi0``.
    """
    tspan = as_timespan(tspan)
    psi0 = as_evolvable(psi0)
    check_schroedinger(psi0, H)
    state, dstate = _working_copies(psi0)

    def dschroedinger_(t: float, psi: EvolvableState, dpsi: EvolvableState) -> EvolvableState:
        return dschroedinger(psi, H, dpsi)

    return integrate(tspan, dschroedinger_, psi0.data, state, dstate, fout, options, **kwargs)


def evolve_dynamic(tspan: Any, psi0: Any, f: GeneratorFunctionT, fout: OutputT = None,
                   options: Any = None, **kwargs: Any) -> Tuple[np.ndarray, List[Any]]:
    """Integrate the Schrödinger equation with a time and/or state dependent generator.

    Same as :func:`evolve_static`, except that the generator is
    ``f(t, psi)``, called at every derivative evaluation with the time and a
    borrowed view of the current state. Nothing is checked up front; a
    generator that does not fit the state raises
    :class:`~kettle.exceptions.IncompatibleBases` at the evaluation that
    returns it, after any outputs already delivered.
    """
    tspan = as_timespan(tspan)
    psi0 = as_evolvable(psi0)
    if not callable(f):
        raise TypeError("The generator of a dynamic evolution must be callable as f(t, psi)")
    state, dstate = _working_copies(psi0)

    def dschroedinger_(t: float, psi: EvolvableState, dpsi: EvolvableState) -> EvolvableState:
        return dschroedinger_dynamic(t, psi, f, dpsi)

    return integrate(tspan, dschroedinger_, psi0.data, state, dstate, fout, options, **kwargs)


schroedinger = evolve_static
schroedinger_dynamic = evolve_dynamic
