"""Base classes for source fact extractors."""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import SourceFacts


class SourceExtractor(ABC):
    """Contract for extractors that turn file text into structural facts."""

    @abstractmethod
    def language_for(self, path: str) -> Optional[str]:
        """Return the grammar key used for ``path``, or None when unsupported."""

    @abstractmethod
    def extract(self, text: str, language: str) -> SourceFacts:
        """Produce facts for ``text``; unparsable input yields degraded facts, never an error."""
