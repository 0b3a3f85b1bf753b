"""
Routes API par domaine.
"""

from . import proxy

__all__ = [
    "proxy",
]
