from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from market_pulse.config import settings
from market_pulse.exceptions import AppError
from market_pulse.llm.config import DEFAULT_MODELS, LLMProvider
from market_pulse.news.providers import ChatModelGenerator, GeminiGenerator, TextGenerator


class LLMFactory:
    @staticmethod
    def create(
        provider: str | None = None,
        model: str | None = None,
        **kwargs: object,
    ) -> BaseChatModel:
        provider = provider or settings.llm_provider
        model = model or settings.llm_model or DEFAULT_MODELS.get(provider, "")

        match provider:
            case LLMProvider.OPENAI:
                api_key = settings.openai_api_key
                if not api_key:
                    raise AppError("OpenAI API key is not configured", code="LLM_CONFIG_ERROR")
                return ChatOpenAI(model=model, api_key=api_key, **kwargs)  # type: ignore[arg-type]

            case LLMProvider.ANTHROPIC:
                api_key = settings.anthropic_api_key
                if not api_key:
                    raise AppError("Anthropic API key is not configured", code="LLM_CONFIG_ERROR")
                return ChatAnthropic(model=model, api_key=api_key, **kwargs)  # type: ignore[arg-type]

            case _:
                raise AppError(
                    f"No chat model for LLM provider: '{provider}'", code="LLM_CONFIG_ERROR"
                )

    @staticmethod
    def create_generator(provider: str | None = None, model: str | None = None) -> TextGenerator:
        provider = provider or settings.llm_provider
        model = model or settings.llm_model or DEFAULT_MODELS.get(provider, "")

        if provider == LLMProvider.GEMINI:
            api_key = settings.gemini_api_key
            if not api_key:
                raise AppError("Gemini API key is not configured", code="LLM_CONFIG_ERROR")
            return GeminiGenerator(api_key=api_key, model=model)

        return ChatModelGenerator(LLMFactory.create(provider, model))
