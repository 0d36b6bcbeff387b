from abc import ABC, abstractmethod

from market_pulse.news.schemas import RawResponse


class TextGenerator(ABC):
    @abstractmethod
    async def generate(
        self, prompt: str, instruction: str, use_search_grounding: bool
    ) -> RawResponse:
        """Run one generation call. Provider errors propagate unchanged."""
        ...
