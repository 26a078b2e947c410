# -*- coding: utf-8 -*-
"""Borrowed views of the state owned by the ODE solver

The solver owns a flat complex buffer. Before every derivative or output
evaluation that buffer is installed as the data of a typed working state
with :func:`recast`, without copying. Callbacks never see the working state
itself; they get a :class:`StateView`, whose data is read-only and which is
only valid for the duration of the call. Anything that has to outlive the
call must be taken with :meth:`StateView.copy`.
"""

from __future__ import annotations

import numpy as np

from typing import Any, Tuple

from .states import EvolvableState


def recast(x: np.ndarray, state: EvolvableState) -> None:
    """Install the flat solver buffer ``x`` as the live data of ``state``

    ``x`` must be C-contiguous, so the reshape is a view and never a copy.
    """
    state.data = x.reshape(state.shape)


class StateView:
    """Read-only, non-owning view of an evolving state

    Parameters
    ----------
    state : EvolvableState
        Working state whose buffer is being borrowed.
    """
    __slots__ = ("_state",)

    def __init__(self, state: EvolvableState) -> None:
        self._state = state

    @property
    def data(self) -> np.ndarray:
        """Read-only view of the current buffer"""
        view = self._state.data.view()
        view.flags.writeable = False
        return view

    @property
    def basis(self) -> Any:
        return getattr(self._state, "basis", None)

    @property
    def basis_l(self) -> Any:
        return self._state.basis_l

    @property
    def basis_r(self) -> Any:
        return self._state.basis_r

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._state.shape

    @property
    def kind(self) -> type:
        """Type of the owned object returned by :meth:`copy`"""
        return type(self._state)

    def copy(self) -> EvolvableState:
        """Owned snapshot of the state, unaffected by later solver steps"""
        return self._state.copy()

    def __repr__(self) -> str:
        return f"StateView({self._state!r})"
