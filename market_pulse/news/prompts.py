from market_pulse.news.schemas import NewsCategory

SYSTEM_INSTRUCTION = (
    "You are a senior financial analyst specializing in the Indian market. "
    "Provide an unbiased, single-paragraph summary of the most impactful and very latest news. "
    "Focus on events within the last 24 hours relevant to India. "
    "Always provide your response as a valid JSON object. "
    "Do not use double quotes within the content strings; "
    "use single quotes instead to ensure valid JSON format."
)

CATEGORY_PROMPTS: dict[NewsCategory, str] = {
    NewsCategory.MARKET_MOVERS: (
        "Summarize the latest, most significant news regarding the Indian stock market "
        "(NSE/BSE). Identify the single most significant stock mover and provide its NSE or "
        "BSE ticker symbol. Return this as a JSON object with three keys: 'summary' (your text "
        "summary), 'ticker' (the stock symbol as a string, e.g., 'RELIANCE.NS'), and "
        "'sentiment' ('Positive', 'Negative', or 'Neutral')."
    ),
    NewsCategory.GLOBAL_MACRO: (
        "Summarize the most impactful global and Indian domestic news affecting India's "
        "financial markets, including recent RBI decisions, government policy changes, "
        "geopolitical developments impacting India, and significant commodity price shifts. "
        "Return this as a JSON object with two keys: 'summary' (your text summary) and "
        "'sentiment' ('Positive', 'Negative', or 'Neutral')."
    ),
    NewsCategory.INTRADAY_PULSE: (
        "Provide a concise summary of the top trending news stories and fastest-moving assets "
        "on the Indian market (stocks, derivatives, commodities) right now, capturing the "
        "immediate market sentiment in India. Return this as a JSON object with two keys: "
        "'summary' (your text summary) and 'sentiment' ('Positive', 'Negative', or 'Neutral')."
    ),
}

_SEARCH_PROMPT = """
User is searching for: "{query}".
Analyze the query. Determine if it's an Indian stock ticker (e.g., 'TCS.NS', 'RELIANCE.BSE') \
or a general news topic.

1. **If it is a stock ticker:** Provide a concise summary of the most recent, impactful news \
specifically for that stock. Include its performance, any recent announcements, and market \
sentiment.
2. **If it is a news topic:** Provide a concise summary of the latest developments regarding \
that topic, focusing on its impact on the Indian financial markets.

**CRITICAL:** Respond with a JSON object with the following structure:
- 'summary': (string) Your detailed summary. Use single quotes instead of double quotes within \
the text.
- 'sentiment': (string) 'Positive', 'Negative', or 'Neutral'.
- 'ticker': (string, optional) If a specific stock was identified, include its ticker symbol \
here. Otherwise, omit this key.
"""


def build_search_prompt(query: str) -> str:
    return _SEARCH_PROMPT.format(query=query)
