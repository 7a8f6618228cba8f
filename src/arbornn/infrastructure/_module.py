"""
Infrastructure module base class.

This module provides a concrete `Module` implementation that satisfies the
domain-level `IModule` protocol. It implements the capability set shared by
every layer and container:

- a flat, ordered parameter list with bounds-checked access and replacement
- train/eval mode switching that toggles gradient tracking on parameters
- cloning via deep copy
- `__call__` forwarding to `forward` for ergonomic invocation

This class is part of the infrastructure layer and is intended to be subclassed
by concrete layers and by containers.
"""

from __future__ import annotations

import copy
from typing import Iterable, List, Optional, Sequence

from ..domain._errors import ParamIndexError
from ..domain._module import IModule
from ..domain._variable import IVariable
from ._config import MODULE_DEFAULTS


class Module(IModule):
    """
    Infrastructure base class for layers/modules.

    Subclasses typically:
    - create `Variable` instances and register them via `register_param`
      (or pass them to the constructor),
    - implement `forward` to define computation.

    Parameters
    ----------
    params : Optional[Iterable[IVariable]]
        Initial parameters, appended to the flat list in iteration order.

    Attributes
    ----------
    _params : List[IVariable]
        Flat, ordered parameter list of this module.
    _train : bool
        Current mode; True for training, False for evaluation. Initialized
        from `MODULE_DEFAULTS.train_mode`.

    Notes
    -----
    - Parameter positions are plain non-negative indices into `_params`.
      Negative positions are rejected rather than wrapped.
    - `params()` returns a copy of the list, so callers cannot restructure
      the module by mutating the result.
    """

    def __init__(self, params: Optional[Iterable[IVariable]] = None) -> None:
        self._params: List[IVariable] = list(params) if params is not None else []
        self._train: bool = MODULE_DEFAULTS.train_mode

    def _check_param_position(self, position: int) -> None:
        if not 0 <= position < len(self._params):
            raise ParamIndexError(position, len(self._params))

    def params(self) -> List[IVariable]:
        """
        Return the flat parameter list.

        Returns
        -------
        List[IVariable]
            Shallow copy of the parameter list, in flat order.
        """
        return list(self._params)

    def param(self, position: int) -> IVariable:
        """
        Return the parameter at `position`.

        Raises
        ------
        ParamIndexError
            If `position` is outside the flat parameter list.
        """
        self._check_param_position(position)
        return self._params[position]

    def register_param(self, var: IVariable) -> int:
        """
        Append a parameter to this module's flat list.

        Parameters
        ----------
        var : IVariable
            Parameter to append.

        Returns
        -------
        int
            Flat position assigned to the parameter.
        """
        self._params.append(var)
        return len(self._params) - 1

    def set_params(self, var: IVariable, position: int) -> None:
        """
        Replace the parameter at `position` with `var`.

        Parameters
        ----------
        var : IVariable
            Replacement parameter.
        position : int
            Flat parameter position.

        Raises
        ------
        ParamIndexError
            If `position` is invalid. Nothing is modified in that case.
        """
        self._check_param_position(position)
        self._params[position] = var

    @property
    def is_train(self) -> bool:
        return self._train

    def train(self) -> None:
        """
        Switch to training mode and enable gradients on every parameter.
        """
        self._train = True
        for p in self._params:
            p.set_calc_grad(True)

    def eval(self) -> None:
        """
        Switch to evaluation mode and disable gradients on every parameter.
        """
        self._train = False
        for p in self._params:
            p.set_calc_grad(False)

    def zero_grad(self) -> None:
        for p in self._params:
            p.zero_grad()

    def forward(self, inputs: Sequence[IVariable]) -> List[IVariable]:
        """
        Execute the forward computation of the module.

        Subclasses must implement this.
        """
        raise NotImplementedError

    def __call__(self, inputs: Sequence[IVariable]) -> List[IVariable]:
        """
        Call the module as a function, delegating to `forward`.
        """
        return self.forward(inputs)

    def clone(self) -> "Module":
        """
        Return an independent deep copy of this module.

        Notes
        -----
        Variables referenced from several places inside the module (e.g.
        a container's flat list and a child's own list) stay aliased to a
        single copy in the clone.
        """
        return copy.deepcopy(self)

    def pretty_string(self) -> str:
        return self.__class__.__name__

    def __str__(self) -> str:
        return self.pretty_string()
