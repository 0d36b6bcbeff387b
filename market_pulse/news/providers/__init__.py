from market_pulse.news.providers.base import TextGenerator
from market_pulse.news.providers.chat_model import ChatModelGenerator
from market_pulse.news.providers.gemini import GeminiGenerator

__all__ = ["ChatModelGenerator", "GeminiGenerator", "TextGenerator"]
