"""
Routers package
"""

from . import health
from . import base

__all__ = [
    'health',
    'base',
]
