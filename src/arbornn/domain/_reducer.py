"""
Gradient reducer interface definitions.

A reducer is the distributed-synchronization collaborator attached to a
model. The transport behind it is out of scope here; this contract only
fixes how parameters are handed over.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ._variable import IVariable


@runtime_checkable
class IReducer(Protocol):
    """
    Domain-level gradient reducer interface.

    Notes
    -----
    Reducers receive variables in the order their gradients become ready.
    They may rely on the model's flat parameter ordering being stable to
    associate each variable with a gradient buffer.
    """

    def add(self, var: IVariable) -> None:
        """
        Queue the gradient of `var` for reduction.
        """
        ...

    def finalize(self) -> None:
        """
        Complete all pending reductions.
        """
        ...
