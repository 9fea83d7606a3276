"""Recover the declaration order of abstract accessors from Java sources or class files."""

from .config import RecoverySettings, SettingsResolver, default_config_path
from .errors import ClassFormatError, ConfigurationError, IncompleteScanError, OrderRecoveryError
from .events import Event, EventBus
from .recovery import OrderRecovery, PropertyReorderer, recover_order, reorder
from .types import Member, OrderedNames, TypeIdentity

__version__ = "0.1.0"

__all__ = [
    "RecoverySettings",
    "SettingsResolver",
    "default_config_path",
    "ClassFormatError",
    "ConfigurationError",
    "IncompleteScanError",
    "OrderRecoveryError",
    "Event",
    "EventBus",
    "OrderRecovery",
    "PropertyReorderer",
    "recover_order",
    "reorder",
    "Member",
    "OrderedNames",
    "TypeIdentity",
]
