"""
Distributed synchronization hooks.

This module connects a model's flat parameter list to a gradient reducer.
The reducer owns the transport; here we only hand it parameters, in a way
that relies on the flat order being stable:

- `distribute_module_grads` registers a gradient hook on every parameter so
  the reducer sees each gradient as soon as it is accumulated.
- `all_reduce_parameters` synchronizes parameter values, typically once
  before training so that every replica starts from the same weights.

`LocalReducer` is the single-process reducer. It satisfies the reducer
contract without any communication and is what tests and single-device
runs attach.
"""

from __future__ import annotations

from typing import Callable, List

import numpy as np

from ...domain._module import IModule
from ...domain._reducer import IReducer
from ...domain._variable import IVariable


def distribute_module_grads(module: IModule, reducer: IReducer) -> None:
    """
    Forward every gradient of `module` to `reducer`.

    Parameters
    ----------
    module : IModule
        Model whose flat parameters receive the hook.
    reducer : IReducer
        Receives each variable after its gradient is accumulated.
    """
    for param in module.params():
        param.add_grad_hook(reducer.add)


def all_reduce_parameters(
    module: IModule,
    all_reduce: Callable[[np.ndarray], np.ndarray],
    *,
    world_size: int = 1,
    average: bool = True,
) -> None:
    """
    Synchronize parameter values across replicas.

    Parameters
    ----------
    module : IModule
        Model whose parameters are reduced, in flat order.
    all_reduce : Callable[[np.ndarray], np.ndarray]
        Sum-reduction across replicas.
    world_size : int, optional
        Number of replicas.
    average : bool, optional
        Divide the reduced sum by `world_size`.

    Raises
    ------
    ValueError
        If `world_size` is not positive.
    """
    if world_size < 1:
        raise ValueError(f"world_size must be positive, got {world_size}")

    scale = 1.0 / world_size if average else 1.0
    for param in module.params():
        reduced = np.asarray(all_reduce(np.asarray(param.data)))
        param.data = reduced * scale


class LocalReducer(IReducer):
    """
    Single-process gradient reducer.

    Parameters
    ----------
    scale : float, optional
        Factor applied to every pending gradient on `finalize()`.

    Attributes
    ----------
    pending : List[IVariable]
        Variables added since the last `finalize()`, in arrival order.
    finalized_count : int
        Total number of variables handed over across all `finalize()` calls.
    """

    def __init__(self, scale: float = 1.0) -> None:
        self.scale = float(scale)
        self.pending: List[IVariable] = []
        self.finalized_count = 0

    def add(self, var: IVariable) -> None:
        self.pending.append(var)

    def finalize(self) -> None:
        if self.scale != 1.0:
            # A variable may arrive several times per step; scale it once.
            seen = set()
            for var in self.pending:
                if id(var) in seen or var.grad is None:
                    continue
                seen.add(id(var))
                var.set_grad(var.grad * self.scale)
        self.finalized_count += len(self.pending)
        self.pending.clear()

    @staticmethod
    def all_reduce(arr: np.ndarray) -> np.ndarray:
        # One replica: the sum is the value itself.
        return arr
