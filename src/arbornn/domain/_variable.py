"""
Variable interface definitions.

This module defines the domain-level interface for autograd-capable values
consumed by modules and containers. Containers never inspect tensor
contents; they only move variables around and toggle their gradient-tracking
flag, so the contract is intentionally narrow.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, runtime_checkable


@runtime_checkable
class IVariable(Protocol):
    """
    Domain-level variable interface.

    A variable carries data and, optionally, gradient-tracking state.

    Notes
    -----
    - `set_calc_grad` is the only hook containers rely on for train/eval
      switching.
    - Gradient hooks are used by distributed synchronization collaborators
      to learn when a gradient becomes available.
    """

    @property
    def data(self) -> Any:
        """
        Return the underlying array storage.
        """
        ...

    @property
    def calc_grad(self) -> bool:
        """
        Indicate whether gradients are computed for this variable.
        """
        ...

    def set_calc_grad(self, calc_grad: bool) -> None:
        """
        Enable or disable gradient computation for this variable.

        Parameters
        ----------
        calc_grad : bool
            If True, gradients are accumulated during backpropagation.
        """
        ...

    @property
    def grad(self) -> Optional[Any]:
        """
        Return the accumulated gradient, or None.
        """
        ...

    def set_grad(self, grad: Optional[Any]) -> None:
        """
        Overwrite the accumulated gradient, or clear it with None.
        """
        ...

    def zero_grad(self) -> None:
        """
        Clear the accumulated gradient.
        """
        ...

    def add_grad_hook(self, hook: Callable[["IVariable"], None]) -> None:
        """
        Register a callable invoked after a gradient is accumulated.
        """
        ...
