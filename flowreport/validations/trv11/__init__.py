"""
Validators for the ONDC:TRV11 (metro/transit) domain.
Importing this package registers its plugins.
"""

from . import default, v2_0_0, v2_0_1  # noqa: F401
from .constants import DOMAIN
from .validator import validate

__all__ = ['DOMAIN', 'validate']
