from .base import BaseSource
from .apd import ApdSource

__all__ = ["BaseSource", "ApdSource"]
