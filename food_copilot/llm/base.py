from abc import ABC, abstractmethod
from typing import Any, Dict, List


class DirectiveGenerator(ABC):
    """Abstract Base Class for the external model that emits candidate directives"""

    @abstractmethod
    def health_check(self) -> Dict:
        """Return system health info"""
        pass

    @abstractmethod
    def generate_directives(
        self,
        messages: List[Dict[str, Any]],
        temperature: float = 0.4
    ) -> Any:
        """
        Return the raw candidate payload, nominally {"uiComponents": [...]}.
        Raises GeneratorError when the call fails or returns nothing.
        """
        pass
