# -*- coding: utf-8 -*-
"""Generic ODE driver for typed quantum states

:func:`integrate` steps one of the explicit Runge-Kutta solvers of
``scipy.integrate`` over a flat complex buffer, translating between that
buffer and the typed working state on every derivative and output
evaluation.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.integrate import RK23, RK45, DOP853

from typing import Any, Dict, List, Tuple

from .config import get_config
from .exceptions import ConfigurationError, IntegrationError
from .typing import DerivativeT, OutputT
from .util import check_options, is_string
from .views import StateView, recast

logger = logging.getLogger("kettle")

solvers = {
        "RK45": RK45,
        "RK23": RK23,
        "DOP853": DOP853
        }

_defaults: Dict[str, Any] = {
        "method": "DOP853",
        "rtol": 1e-6,
        "atol": 1e-8,
        "max_steps": 100000,
        "max_step": np.inf,
        "first_step": None,
        "dense": False
        }


def _positive_float(name: str, value: Any) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if not out > 0.0:
        raise ConfigurationError(f"{name} must be positive, got {value!r}")
    return out


class IntegratorOptions:
    """Validated settings of the ODE solver.

    Every option missing from the keywords is looked up in the
    ``integrator`` section of the user config file before falling back to
    the built-in default.

    Parameters
    ----------
    method : str, optional
        Step-size adapter, one of ``RK45``, ``RK23`` or ``DOP853``.
        Default is ``DOP853``.
    rtol : float, optional
        Relative tolerance. Default is 1e-6.
    atol : float, optional
        Absolute tolerance. Default is 1e-8.
    max_steps : int, optional
        Maximum number of accepted steps. Default is 100000.
    max_step : float, optional
        Largest allowed step size. Default is unbounded.
    first_step : float or None, optional
        Initial step size; chosen by the solver when None.
    dense : bool, optional
        Also deliver the state after every accepted internal step, not only
        at the requested times. Default is False.

    Raises
    ------
    ConfigurationError
        For unknown option names or invalid values.
    """

    recognized_options: List[str] = list(_defaults)

    def __init__(self, **options: Any) -> None:
        check_options(options, self.recognized_options)

        def pick(name: str) -> Any:
            if name in options:
                return options[name]
            return get_config(f"integrator.{name}", _defaults[name])

        method = pick("method")
        if not is_string(method) or method.upper() not in solvers:
            raise ConfigurationError(
                f"method must be one of {', '.join(solvers)}, got {method!r}")
        self.method = method.upper()

        self.rtol = _positive_float("rtol", pick("rtol"))
        self.atol = _positive_float("atol", pick("atol"))
        self.max_step = _positive_float("max_step", pick("max_step"))

        max_steps = pick("max_steps")
        try:
            valid = not isinstance(max_steps, bool) and int(max_steps) == max_steps and max_steps >= 1
        except (TypeError, ValueError, OverflowError):
            valid = False
        if not valid:
            raise ConfigurationError(f"max_steps must be a positive integer, got {max_steps!r}")
        self.max_steps = int(max_steps)

        first_step = pick("first_step")
        self.first_step = None if first_step is None else _positive_float("first_step", first_step)

        dense = pick("dense")
        if not isinstance(dense, (bool, np.bool_)):
            raise ConfigurationError(f"dense must be True or False, got {dense!r}")
        self.dense = bool(dense)

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> IntegratorOptions:
        return cls(**options)

    @classmethod
    def coerce(cls, options: Any = None, **kwargs: Any) -> IntegratorOptions:
        """Build options from an IntegratorOptions, a dict, or keywords (only one of them)"""
        if options is None:
            return cls(**kwargs)
        if kwargs:
            raise ConfigurationError("Pass integrator options either as an object or as keywords, not both")
        if isinstance(options, IntegratorOptions):
            return options
        if isinstance(options, dict):
            return cls.from_dict(options)
        raise ConfigurationError(f"Cannot build integrator options from {type(options).__name__}")

    def as_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.recognized_options}

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.as_dict().items())
        return f"IntegratorOptions({args})"


def as_timespan(tspan: Any) -> np.ndarray:
    """Coerce output times to a float array and check they can be integrated over

    :param tspan: sequence of output times

    :returns: 1D float64 array
    :raises ValueError: if the times are empty, not finite, or not strictly monotonic
    """
    out = np.asarray(tspan, dtype=np.float64)
    if out.ndim == 0:
        out = out.reshape(1)
    if out.ndim != 1:
        raise ValueError(f"Output times must form a 1D sequence, got shape {out.shape}")
    if out.size == 0:
        raise ValueError("At least one output time is required")
    if not np.all(np.isfinite(out)):
        raise ValueError("Output times must be finite")
    if out.size > 1:
        steps = np.diff(out)
        if not (np.all(steps > 0.0) or np.all(steps < 0.0)):
            raise ValueError("Output times must be strictly increasing or strictly decreasing")
    return out


def _copy_state(t: float, state: StateView) -> Any:
    return state.copy()


def integrate(tspan: Any, df: DerivativeT, x0: np.ndarray, state: Any, dstate: Any,
              fout: OutputT = None, options: Any = None,
              **kwargs: Any) -> Tuple[np.ndarray, List[Any]]:
    """Integrate ``d(state)/dt = df`` and report the state at the requested times

    Parameters
    ----------
    tspan : ArrayLike
        Output times; the first one is the initial time.
    df : Callable
        Derivative callback ``df(t, state, dstate)``; must overwrite
        ``dstate`` with the time derivative of ``state``.
    x0 : ArrayLike
        Initial buffer. It is copied once and never written.
    state : EvolvableState
        Working state; its data is replaced by the solver buffer before each
        callback.
    dstate : EvolvableState
        Working derivative; its data is the single derivative buffer.
    fout : Callable, optional
        Output callback ``fout(t, view)`` receiving a borrowed
        :class:`StateView`. By default an owned copy of the state is stored.
    options : IntegratorOptions or dict, optional
        Solver settings; alternatively pass them as keyword arguments.

    Returns
    -------
    tout : np.ndarray
        Times at which output was delivered.
    results : list
        Return values of ``fout``, one per entry of ``tout``.

    Raises
    ------
    IntegrationError
        If the solver fails or exceeds ``max_steps``.
    """
    tspan = as_timespan(tspan)
    options = IntegratorOptions.coerce(options, **kwargs)
    if fout is None:
        fout = _copy_state

    x = np.array(x0, dtype=np.complex128).ravel()
    dx = np.zeros_like(x)
    xout = np.empty_like(x)
    recast(dx, dstate)
    view = StateView(state)

    def df_(t: float, y: np.ndarray) -> np.ndarray:
        recast(y, state)
        df(t, state, dstate)
        # scipy keeps the returned derivative of the last step by reference
        return dx.copy()

    tout: List[float] = []
    results: List[Any] = []

    def deliver(t: float, y: np.ndarray) -> None:
        xout[:] = y
        recast(xout, state)
        tout.append(t)
        results.append(fout(t, view))

    logger.debug('integrating over [{}, {}] with {} (rtol={}, atol={}), {} output times'.format(
        tspan[0], tspan[-1], options.method, options.rtol, options.atol, tspan.size))

    deliver(tspan[0], x)
    if tspan.size == 1:
        return np.array(tout), results

    solver = solvers[options.method](df_, tspan[0], x, tspan[-1],
                                     max_step=options.max_step,
                                     rtol=options.rtol,
                                     atol=options.atol,
                                     first_step=options.first_step)
    direction = np.sign(tspan[-1] - tspan[0])

    index = 1
    nsteps = 0
    while index < tspan.size:
        if nsteps >= options.max_steps:
            raise IntegrationError(
                f"Maximum number of steps ({options.max_steps}) exceeded at t = {solver.t}")
        message = solver.step()
        if solver.status == "failed":
            raise IntegrationError(f"ODE solver failed at t = {solver.t}: {message}")
        nsteps += 1

        interpolant = None
        while index < tspan.size and direction * (tspan[index] - solver.t) <= 0.0:
            t = tspan[index]
            if t == solver.t:
                deliver(t, solver.y)
            else:
                if interpolant is None:
                    interpolant = solver.dense_output()
                deliver(t, interpolant(t))
            index += 1

        if options.dense and index < tspan.size and solver.t != tout[-1]:
            deliver(solver.t, solver.y)

    logger.debug('integration finished after {} steps and {} derivative evaluations'.format(
        nsteps, solver.nfev))

    return np.array(tout), results
