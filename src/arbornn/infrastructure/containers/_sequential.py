"""
Sequential container module.

This module defines `Sequential`, a container that composes its children
into a linear pipeline:

    outputs = M_n(...M_2(M_1(inputs)))

Each child consumes the full list of variables produced by the previous one.
Besides the list-to-list form, `Sequential` supports a single-variable form
that requires the pipeline to produce exactly one output.
"""

from __future__ import annotations

from typing import List, Sequence, Union

from ...domain._errors import OutputArityError
from ...domain._module import IModule
from ...domain._variable import IVariable
from ._container import Container


class Sequential(Container):
    """
    Sequential container.

    Parameters
    ----------
    *modules : IModule
        Zero or more children, appended in order under unique ownership.

    Notes
    -----
    Use `add(module, shared=True)` to compose a child that is also held
    elsewhere.
    """

    def __init__(self, *modules: IModule) -> None:
        super().__init__()
        for module in modules:
            self.add(module)

    def _run(self, inputs: Sequence[IVariable]) -> List[IVariable]:
        output = list(inputs)
        for wrapper in self._modules:
            output = wrapper.forward(output)
        return output

    def forward(
        self, inputs: Union[IVariable, Sequence[IVariable]]
    ) -> Union[IVariable, List[IVariable]]:
        """
        Apply every child in insertion order.

        Parameters
        ----------
        inputs : Union[IVariable, Sequence[IVariable]]
            A list/tuple of variables, or a single variable.

        Returns
        -------
        Union[IVariable, List[IVariable]]
            For a list/tuple input, the final child's outputs unchanged.
            For a single variable, the single output variable.

        Raises
        ------
        OutputArityError
            If a single variable was given and the final stage produced
            zero or several outputs.
        """
        if isinstance(inputs, (list, tuple)):
            return self._run(inputs)

        output = self._run([inputs])
        if len(output) != 1:
            raise OutputArityError(len(output))
        return output[0]

    def __call__(self, inputs: IVariable) -> IVariable:
        """
        Run the single-variable pipeline.
        """
        if isinstance(inputs, (list, tuple)):
            raise TypeError(
                "Sequential.__call__ expects a single variable; "
                "use forward() for a list of variables."
            )
        return self.forward(inputs)

    def pretty_string(self) -> str:
        return "Sequential" + self._topology_string()
