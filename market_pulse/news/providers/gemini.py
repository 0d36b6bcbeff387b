import structlog
from google import genai
from google.genai import types

from market_pulse.news.providers.base import TextGenerator
from market_pulse.news.schemas import Citation, RawResponse

logger = structlog.get_logger()


def _citations_from_response(response: types.GenerateContentResponse) -> list[Citation]:
    """Read web citations from the first candidate's grounding metadata."""
    if not response.candidates:
        return []
    metadata = response.candidates[0].grounding_metadata
    if metadata is None or not metadata.grounding_chunks:
        return []

    citations: list[Citation] = []
    for chunk in metadata.grounding_chunks:
        if chunk.web is None:
            continue
        citations.append(Citation(uri=chunk.web.uri, title=chunk.web.title))
    return citations


class GeminiGenerator(TextGenerator):
    def __init__(self, api_key: str, model: str, client: genai.Client | None = None) -> None:
        self._client = client or genai.Client(api_key=api_key)
        self._model = model

    async def generate(
        self, prompt: str, instruction: str, use_search_grounding: bool
    ) -> RawResponse:
        tools = [types.Tool(google_search=types.GoogleSearch())] if use_search_grounding else None
        config = types.GenerateContentConfig(system_instruction=instruction, tools=tools)

        response = await self._client.aio.models.generate_content(
            model=self._model,
            contents=prompt,
            config=config,
        )
        citations = _citations_from_response(response)
        logger.debug("gemini_generate_done", model=self._model, citations=len(citations))
        return RawResponse(text=response.text, citations=citations)
