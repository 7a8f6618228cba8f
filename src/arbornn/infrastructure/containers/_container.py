"""
Container module.

This module defines `Container`, the base class for modules composed of other
modules. A container keeps three pieces of bookkeeping in sync:

- `_modules`: ordered `ModuleWrapper` cells, one per child. Insertion order
  is the structural (and, for pipelines, the forward) order.
- `_params`: the flat parameter list. Every child's parameters appear in it
  contiguously, at the position where the child was registered.
- `_child_param_idx`: flat position -> (child index, local index) for every
  parameter contributed by a child.

Parameters registered directly on the container (not through a child) are
absent from the index map. They are the container's own parameters and the
only ones whose gradient flag the container toggles itself on train/eval.

Notes
-----
Flat parameter order is stable as long as no structural mutation happens,
which is what checkpointing and gradient reduction rely on.
"""

from __future__ import annotations

import copy
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple, Union

from ...domain._errors import EmptyModuleWrapperError, ModuleIndexError
from ...domain._module import IModule
from ...domain._variable import IVariable
from .._module import Module
from ._module_wrapper import ModuleWrapper, Ownership

logger = logging.getLogger(__name__)

# Key used by the orphan scan for parameters preceding every child.
NO_CHILD_IDX = -1


class Container(Module):
    """
    Module aggregating the parameters of its children.

    Attributes
    ----------
    _modules : List[ModuleWrapper]
        Children in insertion order.
    _child_param_idx : Dict[int, Tuple[int, int]]
        Flat parameter position -> (child index, local parameter index).

    Notes
    -----
    - Mutation is not synchronized. Adding children, switching modes and
      replacing parameters must not overlap with `forward` on the same
      instance.
    - `Container` itself has no forward semantics; see `Sequential`.
    """

    def __init__(self) -> None:
        super().__init__()
        self._modules: List[ModuleWrapper] = []
        self._child_param_idx: Dict[int, Tuple[int, int]] = {}

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------
    def add(
        self, module: Union[IModule, ModuleWrapper], *, shared: bool = False
    ) -> int:
        """
        Append a child and register its parameters.

        Parameters
        ----------
        module : Union[IModule, ModuleWrapper]
            Child to append. A bare module is wrapped under unique ownership,
            or shared ownership when `shared` is True. A wrapper hands its
            module and ownership mode over to a new cell and is left empty,
            like a move.
        shared : bool, optional
            Hold a bare module under shared ownership. Ignored for wrappers.

        Returns
        -------
        int
            Index of the new child.

        Raises
        ------
        EmptyModuleWrapperError
            If `module` is an empty or invalid wrapper.
        TypeError
            If `module` does not satisfy the module capability contract.
        """
        if isinstance(module, ModuleWrapper):
            if not module:
                raise EmptyModuleWrapperError("add")
            # Take over the cell so later resets of the source cannot empty
            # a registered child.
            wrapper = ModuleWrapper(module.get(), module.ownership)
            module.reset()
        elif isinstance(module, IModule):
            ownership = Ownership.SHARED if shared else Ownership.UNIQUE
            wrapper = ModuleWrapper(module, ownership)
        else:
            raise TypeError(f"Container.add expects a Module, got: {type(module)}")

        midx = len(self._modules)
        self._modules.append(wrapper)
        for pidx, param in enumerate(wrapper.params()):
            self._params.append(param)
            self._child_param_idx[len(self._params) - 1] = (midx, pidx)

        logger.debug(
            "%s: added child (%d) %s as %s, flat params now %d",
            self.__class__.__name__,
            midx,
            wrapper.get().__class__.__name__,
            wrapper.ownership.name,
            len(self._params),
        )
        return midx

    def clear(self) -> None:
        """
        Remove every child and every parameter.
        """
        self._child_param_idx.clear()
        self._modules.clear()
        self._params.clear()
        logger.debug("%s: cleared", self.__class__.__name__)

    def module(self, idx: int) -> ModuleWrapper:
        """
        Return the wrapper of the child at `idx`.

        Raises
        ------
        ModuleIndexError
            If `idx` is not a valid child index. Negative indices are invalid.
        """
        if not 0 <= idx < len(self._modules):
            raise ModuleIndexError(idx, len(self._modules))
        return self._modules[idx]

    def modules(self) -> List[ModuleWrapper]:
        """
        Return copies of all child wrappers.

        Returns
        -------
        List[ModuleWrapper]
            One copy per child, following each wrapper's copy contract:
            uniquely owned children are cloned, shared children are aliased.
        """
        return [w.copy() for w in self._modules]

    def __len__(self) -> int:
        return len(self._modules)

    # ------------------------------------------------------------------
    # Parameter introspection
    # ------------------------------------------------------------------
    def child_param_index(self, position: int) -> Optional[Tuple[int, int]]:
        """
        Resolve a flat parameter position to its owning child.

        Returns
        -------
        Optional[Tuple[int, int]]
            (child index, local parameter index), or None if the position
            is not contributed by a child.
        """
        return self._child_param_idx.get(position)

    def get_orphaned_params_idx_map(self) -> Dict[int, List[int]]:
        """
        Locate parameters not contributed by any child.

        The flat list is scanned by position. An indexed position marks the
        start of a child's block and the scan skips that child's current
        parameter count. Any other position is orphaned and is recorded
        under the index of the most recently seen child (`NO_CHILD_IDX`
        before any child).

        Returns
        -------
        Dict[int, List[int]]
            Preceding child index -> orphaned flat positions, ascending.

        Notes
        -----
        The key says which child an orphan *follows*, not which child owns
        it. Block contiguity is trusted, not re-verified. Use this for
        debugging only.
        """
        prev_midx = NO_CHILD_IDX
        orphaned: Dict[int, List[int]] = defaultdict(list)
        i = 0
        while i < len(self._params):
            entry = self._child_param_idx.get(i)
            if entry is not None:
                midx, _ = entry
                prev_midx = midx
                i += max(1, len(self._modules[midx].params()))
            else:
                orphaned[prev_midx].append(i)
                i += 1
        return dict(orphaned)

    # ------------------------------------------------------------------
    # Mode switching
    # ------------------------------------------------------------------
    def _set_mode(self, train: bool) -> None:
        self._train = train
        for i, param in enumerate(self._params):
            if i not in self._child_param_idx:
                param.set_calc_grad(train)

        for wrapper in self._modules:
            if train:
                wrapper.train()
            else:
                wrapper.eval()

    def train(self) -> None:
        """
        Switch to training mode.

        Gradients are enabled on the container's own parameters, then every
        child is switched recursively. Child parameters are left to the
        child's own `train()`.
        """
        self._set_mode(True)
        logger.debug("%s: train mode", self.__class__.__name__)

    def eval(self) -> None:
        """
        Switch to evaluation mode.

        Mirror image of `train()`.
        """
        self._set_mode(False)
        logger.debug("%s: eval mode", self.__class__.__name__)

    # ------------------------------------------------------------------
    # Parameter write-through
    # ------------------------------------------------------------------
    def set_params(self, var: IVariable, position: int) -> None:
        """
        Replace a flat parameter, writing through to its owning child.

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
        super().set_params(var, position)
        entry = self._child_param_idx.get(position)
        if entry is not None:
            midx, pidx = entry
            self._modules[midx].set_params(var, pidx)

    # ------------------------------------------------------------------
    # Cloning
    # ------------------------------------------------------------------
    def __deepcopy__(self, memo: dict) -> "Container":
        cls = self.__class__
        out = cls.__new__(cls)
        memo[id(self)] = out
        for name, value in self.__dict__.items():
            if name in ("_modules", "_params"):
                continue
            out.__dict__[name] = copy.deepcopy(value, memo)

        out._modules = [w.copy() for w in self._modules]

        # Child-contributed entries must alias the copied child's parameters.
        out._params = []
        for i, param in enumerate(self._params):
            entry = self._child_param_idx.get(i)
            child_params = out._modules[entry[0]].params() if entry else []
            if entry is not None and entry[1] < len(child_params):
                out._params.append(child_params[entry[1]])
            else:
                out._params.append(copy.deepcopy(param, memo))
        return out

    # ------------------------------------------------------------------
    # Representation
    # ------------------------------------------------------------------
    def _topology_string(self) -> str:
        parts = [" [input"]
        for i in range(len(self._modules)):
            parts.append(f" -> ({i})")
        parts.append(" -> output]")
        for i, wrapper in enumerate(self._modules):
            parts.append(f"\n\t({i}): {wrapper.pretty_string()}")
        return "".join(parts)

    def pretty_string(self) -> str:
        """
        Describe the container topology.

        Returns
        -------
        str
            `" [input -> (0) -> ... -> output]"` followed by one
            `"\\n\\t(i): <child>"` line per child.
        """
        return self._topology_string()
