"""
Position source adapters.
"""

from .polling import PollingPositionSource
from .homeassistant import HAPositionSource
from .static import StaticPositionSource

__all__ = ["PollingPositionSource", "HAPositionSource", "StaticPositionSource"]
