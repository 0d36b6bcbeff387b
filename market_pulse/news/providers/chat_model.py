import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from market_pulse.news.providers.base import TextGenerator
from market_pulse.news.schemas import RawResponse

logger = structlog.get_logger()


class ChatModelGenerator(TextGenerator):
    """Adapter for LangChain chat models. These have no search tool, so no citations."""

    def __init__(self, llm: BaseChatModel) -> None:
        self._llm = llm

    async def generate(
        self, prompt: str, instruction: str, use_search_grounding: bool
    ) -> RawResponse:
        if use_search_grounding:
            logger.debug("chat_model_grounding_unsupported")

        response = await self._llm.ainvoke(
            [SystemMessage(content=instruction), HumanMessage(content=prompt)]
        )
        raw = response.content
        content = raw if isinstance(raw, str) else str(raw)
        return RawResponse(text=content)
