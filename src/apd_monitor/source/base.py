from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import Offer


class BaseSource(ABC):
    """Abstract base class for offer sources"""

    # Message of the last failed fetch, None after a successful one
    last_error: Optional[str] = None

    @abstractmethod
    def fetch(self) -> List[Offer]:
        """Fetch offers from the source, returning an empty list on failure"""
        pass

    @abstractmethod
    def get_source_name(self) -> str:
        """Return the name of this source for logging"""
        pass
