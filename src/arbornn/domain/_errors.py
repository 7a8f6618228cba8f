"""
Container- and module-related exceptions for ArborNN.

This module defines the error taxonomy raised by module containers and
ownership wrappers. All of them derive from a builtin exception type so
callers can catch them either precisely or by category (`IndexError`,
`ValueError`, `AttributeError`).

Every error is raised synchronously and before any state is mutated.
"""


class ModuleIndexError(IndexError):
    """
    Raised when a child module is requested at an invalid index.

    Attributes
    ----------
    index : int
        The requested child index.
    size : int
        Number of children held by the container at the time of the call.
    """

    def __init__(self, index: int, size: int) -> None:
        super().__init__(
            f"Module index {index} is out of range for container "
            f"with {size} module(s)."
        )
        self.index = index
        self.size = size


class ParamIndexError(IndexError):
    """
    Raised when a parameter position is outside the flat parameter list.

    Attributes
    ----------
    position : int
        The requested flat parameter position.
    size : int
        Number of parameters held by the module at the time of the call.
    """

    def __init__(self, position: int, size: int) -> None:
        super().__init__(
            f"Parameter position {position} is out of range for module "
            f"with {size} parameter(s)."
        )
        self.position = position
        self.size = size


class OutputArityError(ValueError):
    """
    Raised when a single-output pipeline does not yield exactly one value.

    Attributes
    ----------
    count : int
        Number of outputs produced by the final stage.
    """

    def __init__(self, count: int) -> None:
        super().__init__(f"Module output size is not 1 (got {count}).")
        self.count = count


class EmptyModuleWrapperError(AttributeError):
    """
    Raised when a module member is accessed through an empty wrapper.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"Cannot access '{name}' through an empty ModuleWrapper.")
        self.name = name
