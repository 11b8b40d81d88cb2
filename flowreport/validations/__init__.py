"""
Leaf validators and their registration.
"""

from ..core.resolver import register_entry_point
from .registry import PLUGINS, PluginRegistry

TRV11_ENTRY_POINT = "flowreport.validations.trv11#validate"


def register_builtin_validators():
    """Register the bundled domain entry points with the resolver."""
    from . import trv11

    register_entry_point(TRV11_ENTRY_POINT, trv11.validate)
    return [TRV11_ENTRY_POINT]


__all__ = ['PLUGINS', 'PluginRegistry', 'register_builtin_validators', 'TRV11_ENTRY_POINT']
