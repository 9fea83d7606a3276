"""Typed errors raised inside the order-recovery subsystem.

None of these escape :class:`declorder_core.recovery.OrderRecovery`; they are
converted into an absent order there.
"""

from __future__ import annotations


class OrderRecoveryError(Exception):
    """Base type for order-recovery failures."""


class ClassFormatError(OrderRecoveryError):
    """The class file bytes do not parse as a valid class file."""

    def __init__(self, message: str, offset: int | None = None) -> None:
        if offset is not None:
            message = f"{message} (at byte {offset})"
        super().__init__(message)
        self.offset = offset


class IncompleteScanError(OrderRecoveryError):
    """The source scan ended with unbalanced type or brace nesting."""


class ConfigurationError(OrderRecoveryError):
    """A settings file could not be read or has the wrong shape."""
