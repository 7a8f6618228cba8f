"""
Concrete variable implementation.

This module defines `Variable`, a minimal NumPy-backed implementation of the
domain contract `IVariable`. It carries an array, a gradient-tracking flag
and an optional accumulated gradient. Autograd proper lives elsewhere; the
engine only needs `accumulate_grad` to push gradients in.

Design notes
------------
- `calc_grad` defaults to True, mirroring trainable parameters.
- Gradient hooks run after every accumulation and receive the variable
  itself, which is what distributed reducers consume.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional

import numpy as np

from ..domain._variable import IVariable


class Variable(IVariable):
    """
    NumPy-backed autograd-capable value.

    Parameters
    ----------
    data : array-like
        Initial contents. NumPy arrays are stored as given; anything else is
        converted to a float32 array.
    calc_grad : bool, optional
        Whether gradients are accumulated for this variable. Defaults to True.
    """

    def __init__(self, data: Any, calc_grad: bool = True) -> None:
        if isinstance(data, np.ndarray):
            arr = data
        else:
            arr = np.asarray(data, dtype=np.float32)
        self._data: np.ndarray = arr
        self._calc_grad: bool = bool(calc_grad)
        self._grad: Optional[np.ndarray] = None
        self._grad_hooks: List[Callable[["Variable"], None]] = []

    @property
    def data(self) -> np.ndarray:
        return self._data

    @data.setter
    def data(self, value: Any) -> None:
        self._data = np.asarray(value, dtype=self._data.dtype)

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(self._data.shape)

    @property
    def calc_grad(self) -> bool:
        return self._calc_grad

    def set_calc_grad(self, calc_grad: bool) -> None:
        self._calc_grad = bool(calc_grad)

    @property
    def grad(self) -> Optional[np.ndarray]:
        return self._grad

    def set_grad(self, grad: Optional[Any]) -> None:
        """
        Overwrite the stored gradient without running hooks.
        """
        if grad is None:
            self._grad = None
        else:
            self._grad = np.asarray(grad, dtype=self._data.dtype)

    def zero_grad(self) -> None:
        self._grad = None

    def add_grad_hook(self, hook: Callable[["Variable"], None]) -> None:
        """
        Register a callable invoked after each gradient accumulation.

        Parameters
        ----------
        hook : Callable[[Variable], None]
            Callback receiving this variable.
        """
        self._grad_hooks.append(hook)

    def clear_grad_hooks(self) -> None:
        self._grad_hooks.clear()

    def accumulate_grad(self, grad: Any) -> None:
        """
        Accumulate an incoming gradient into this variable.

        Parameters
        ----------
        grad : array-like
            Gradient contribution with the same shape as `data`.

        Raises
        ------
        ValueError
            If the gradient shape does not match the variable shape.

        Notes
        -----
        - If `calc_grad` is False, the gradient is ignored and no hook runs.
        - Hooks run in registration order after the buffer is updated.
        """
        if not self._calc_grad:
            return

        g = np.asarray(grad, dtype=self._data.dtype)
        if g.shape != self._data.shape:
            raise ValueError(
                f"Gradient shape {g.shape} does not match variable shape "
                f"{self._data.shape}"
            )

        if self._grad is None:
            self._grad = g.copy()
        else:
            self._grad = self._grad + g

        for hook in self._grad_hooks:
            hook(self)

    def copy(self) -> "Variable":
        """
        Return an independent copy of this variable.

        The data is copied and the gradient-tracking flag is kept; the
        gradient buffer and hooks are not carried over.
        """
        return Variable(self._data.copy(), calc_grad=self._calc_grad)

    def __deepcopy__(self, memo: dict) -> "Variable":
        out = self.copy()
        memo[id(self)] = out
        return out

    def __repr__(self) -> str:
        return (
            f"Variable(shape={self.shape}, dtype={self._data.dtype}, "
            f"calc_grad={self._calc_grad})"
        )
