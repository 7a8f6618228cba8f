"""
Module (layer) interface definitions.

This module defines the domain-level capability contract for neural network
modules using structural subtyping via `typing.Protocol`.

Containers depend on children only through this capability set, so any
object implementing the methods below can be composed, whether it is a
leaf layer or another container.
"""

from __future__ import annotations

from typing import Protocol, Sequence, List, runtime_checkable

from ._variable import IVariable


@runtime_checkable
class IModule(Protocol):
    """
    Domain-level module interface.

    A module is a unit of computation exposing forward execution, mode
    switching and parameter access. It may be a leaf (single layer) or a
    composite (container).

    Notes
    -----
    - Parameter positions are indices into the module's flat parameter list.
    - `clone` must return an independent deep copy; containers rely on it to
      implement copy-on-copy for uniquely owned children.
    """

    def forward(self, inputs: Sequence[IVariable]) -> List[IVariable]:
        """
        Execute the forward computation of the module.

        Parameters
        ----------
        inputs : Sequence[IVariable]
            Input variables.

        Returns
        -------
        List[IVariable]
            Output variables.
        """
        ...

    def train(self) -> None:
        """
        Switch the module to training mode.
        """
        ...

    def eval(self) -> None:
        """
        Switch the module to evaluation mode.
        """
        ...

    def params(self) -> List[IVariable]:
        """
        Return the module's flat parameter list.
        """
        ...

    def set_params(self, var: IVariable, position: int) -> None:
        """
        Replace the parameter at `position` with `var`.
        """
        ...

    def clone(self) -> "IModule":
        """
        Return an independent deep copy of the module.
        """
        ...

    def pretty_string(self) -> str:
        """
        Return a human-readable description of the module.
        """
        ...
