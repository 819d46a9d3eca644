"""Place lookup abstraction - turns partial text into candidate place names."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class PlaceCandidate:
    """One candidate returned by a place lookup."""
    name: str
    country: str
    state: Optional[str] = None

    @property
    def label(self) -> str:
        """Display string shown in the suggestion list, e.g. "Paris, FR"."""
        if not self.country:
            return self.name
        return f"{self.name}, {self.country}"


class PlaceLookupBase(ABC):
    """Abstract base class for place-name suggestion providers."""

    @abstractmethod
    def lookup(self, text: str) -> List[PlaceCandidate]:
        """
        Find places whose name matches partial text.

        Args:
            text: Partial place name typed by the user

        Returns:
            Up to a provider-specific number of candidates (may be empty)

        Raises:
            PlaceLookupError: If the lookup could not be performed
        """
        pass


class PlaceLookupError(Exception):
    """Exception raised when a place lookup fails (network or parse error)."""
    pass
