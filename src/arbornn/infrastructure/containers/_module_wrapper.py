"""
Polymorphic ownership cell for child modules.

This module defines `ModuleWrapper`, the cell a container stores for each
child. A wrapper holds at most one module under one of two ownership modes:

- UNIQUE: the container is the sole owner. Copying the wrapper clones the
  module, so copies never alias each other.
- SHARED: the module is shared with other holders. Copying the wrapper
  aliases the same module, and it lives as long as its longest holder.

The ownership tag is stored explicitly. Python reclaims memory on its own,
but the tag is what decides clone-on-copy versus alias-on-copy, so it can
never be inferred from reference counts.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from ...domain._errors import EmptyModuleWrapperError
from ...domain._module import IModule


class Ownership(enum.Enum):
    """
    Ownership mode of a `ModuleWrapper`.

    `INVALID` marks a wrapper whose last ownership transition failed part
    way (e.g. the module's `clone()` raised during copy-assignment). Such a
    wrapper tests false and exposes no module.
    """

    EMPTY = "empty"
    UNIQUE = "unique"
    SHARED = "shared"
    INVALID = "invalid"


class ModuleWrapper:
    """
    Ownership cell holding zero or one module.

    Parameters
    ----------
    module : Optional[IModule]
        Module to hold. If None, the wrapper starts empty.
    ownership : Ownership, optional
        `Ownership.UNIQUE` (default) or `Ownership.SHARED`. Ignored when
        `module` is None.

    Raises
    ------
    ValueError
        If `ownership` is neither UNIQUE nor SHARED for a non-None module.

    Notes
    -----
    - Attribute access on the wrapper is delegated to the held module, so
      `wrapper.train()` calls the module's `train`.
    - `get()` returns a non-owning observer. It must not be used to keep a
      uniquely owned module alive past the wrapper's `reset()`.
    """

    __slots__ = ("_module", "_ownership")

    def __init__(
        self,
        module: Optional[IModule] = None,
        ownership: Ownership = Ownership.UNIQUE,
    ) -> None:
        if module is None:
            self._module: Optional[IModule] = None
            self._ownership: Ownership = Ownership.EMPTY
            return
        if ownership not in (Ownership.UNIQUE, Ownership.SHARED):
            raise ValueError(
                f"A module must be held as UNIQUE or SHARED, got {ownership.name}"
            )
        self._module = module
        self._ownership = ownership

    @classmethod
    def unique(cls, module: IModule) -> "ModuleWrapper":
        """
        Wrap `module` under unique ownership.
        """
        return cls(module, Ownership.UNIQUE)

    @classmethod
    def shared(cls, module: IModule) -> "ModuleWrapper":
        """
        Wrap `module` under shared ownership.
        """
        return cls(module, Ownership.SHARED)

    # ------------------------------------------------------------------
    # Ownership introspection
    # ------------------------------------------------------------------
    @property
    def ownership(self) -> Ownership:
        return self._ownership

    @property
    def is_unique(self) -> bool:
        return self._ownership is Ownership.UNIQUE

    @property
    def is_shared(self) -> bool:
        return self._ownership is Ownership.SHARED

    # ------------------------------------------------------------------
    # Copy semantics
    # ------------------------------------------------------------------
    def copy(self) -> "ModuleWrapper":
        """
        Return a copy of this wrapper following its ownership mode.

        Returns
        -------
        ModuleWrapper
            - UNIQUE: a wrapper holding `clone()` of the module.
            - SHARED: a wrapper aliasing the same module.
            - EMPTY or INVALID: an empty wrapper.
        """
        out = ModuleWrapper()
        out.assign(self)
        return out

    def assign(self, other: "ModuleWrapper") -> None:
        """
        Copy-assign `other` into this wrapper.

        Parameters
        ----------
        other : ModuleWrapper
            Source wrapper. It is never modified.

        Notes
        -----
        The previous content is released first and the wrapper is marked
        INVALID until the new content is in place. If cloning a uniquely
        owned source raises, the exception propagates and this wrapper
        stays INVALID.
        """
        if other is self:
            return
        src_module, src_ownership = other._module, other._ownership

        self._module = None
        self._ownership = Ownership.INVALID

        if src_ownership is Ownership.UNIQUE and src_module is not None:
            self._module = src_module.clone()
            self._ownership = Ownership.UNIQUE
        elif src_ownership is Ownership.SHARED and src_module is not None:
            self._module = src_module
            self._ownership = Ownership.SHARED
        else:
            self._ownership = Ownership.EMPTY

    def __copy__(self) -> "ModuleWrapper":
        return self.copy()

    def __deepcopy__(self, memo: dict) -> "ModuleWrapper":
        out = self.copy()
        memo[id(self)] = out
        return out

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------
    def reset(self) -> None:
        """
        Release the held module and leave the wrapper empty.

        A uniquely owned module is dropped with the wrapper's reference; a
        shared module stays alive while any other holder references it.
        """
        self._module = None
        self._ownership = Ownership.EMPTY

    def make_shared(self) -> Optional[IModule]:
        """
        Promote the wrapper to shared ownership.

        Returns
        -------
        Optional[IModule]
            - UNIQUE: the module, now held as SHARED in place (transferred,
              not copied).
            - SHARED: the already shared module, unchanged.
            - EMPTY or INVALID: None.
        """
        if self._module is None:
            return None
        if self._ownership is Ownership.UNIQUE:
            self._ownership = Ownership.SHARED
        return self._module

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------
    def get(self) -> Optional[IModule]:
        """
        Return the held module, or None if the wrapper is empty.
        """
        if self._ownership in (Ownership.UNIQUE, Ownership.SHARED):
            return self._module
        return None

    def __bool__(self) -> bool:
        if self._ownership in (Ownership.UNIQUE, Ownership.SHARED):
            return self._module is not None
        return False

    def __getattr__(self, name: str) -> Any:
        # Only reached for names not found on the wrapper itself.
        if name in ModuleWrapper.__slots__ or (
            name.startswith("__") and name.endswith("__")
        ):
            raise AttributeError(name)
        module = self.get()
        if module is None:
            raise EmptyModuleWrapperError(name)
        return getattr(module, name)

    def __repr__(self) -> str:
        module = self.get()
        inner = module.__class__.__name__ if module is not None else "None"
        return f"ModuleWrapper({inner}, ownership={self._ownership.name})"
