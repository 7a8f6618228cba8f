"""
Module construction defaults.

Defaults that every `Module` reads at construction time are collected here
so that the initial train/eval mode is a configuration value rather than
behavior hardcoded into the base class.

Usage:
    >>> from src.arbornn.infrastructure._config import MODULE_DEFAULTS
    >>> MODULE_DEFAULTS.train_mode
    True
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ModuleDefaults:
    """
    Defaults applied to newly constructed modules.

    Parameters
    ----------
    train_mode : bool
        Initial mode of a module. True means training mode, which matches
        the usual convention that freshly built models are trainable.
    """

    train_mode: bool = True

    def validate(self) -> None:
        """
        Check that all fields hold values of the expected type.

        Raises
        ------
        TypeError
            If `train_mode` is not a bool.
        """
        if not isinstance(self.train_mode, bool):
            raise TypeError(
                f"train_mode must be a bool, got {type(self.train_mode).__name__}"
            )


MODULE_DEFAULTS = ModuleDefaults()
