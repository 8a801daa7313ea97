"""
Services package
"""

from . import base_service

__all__ = [
    'base_service',
]
