import json
import logging
from typing import Any, Callable, List, Optional, Sequence

from google import genai
from google.genai import types

from finai.config.settings import settings
from finai.core.models import StockHolding, StockPriceUpdate


logger = logging.getLogger(__name__)

ADVICE_UNAVAILABLE = "Advice is not available right now."
ADVICE_SERVICE_DOWN = "The analysis service is temporarily unavailable. Try again later."

PRICE_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "symbol": types.Schema(type=types.Type.STRING),
            "price": types.Schema(type=types.Type.NUMBER),
        },
        required=["symbol", "price"],
    ),
)


class GeminiServiceError(Exception):
    pass


class GeminiService:
    """Stock price estimates and advice text.

    Both calls degrade to an empty/fallback answer instead of raising, so the
    dashboard keeps working when the key is missing or the model misbehaves.
    """

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        client_factory: Callable[[str], Any] = lambda key: genai.Client(api_key=key),
    ) -> None:
        self.api_key = api_key
        self.model = model or settings.gemini_model
        self._client_factory = client_factory

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def _client(self) -> Any:
        if not self.enabled:
            raise GeminiServiceError("API_KEY not set")
        return self._client_factory(self.api_key)

    def fetch_stock_prices(self, holdings: Sequence[StockHolding]) -> List[StockPriceUpdate]:
        if not holdings:
            return []

        symbols = ", ".join(sorted({holding.symbol for holding in holdings}))
        prompt = (
            f"Provide the approximate current market price for the following stock symbols: {symbols}. "
            "Return the data as a JSON array of objects with 'symbol' and 'price' (number) properties. "
            "Output ONLY the JSON."
        )
        try:
            response = self._client().models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=PRICE_SCHEMA,
                ),
            )
            text = (getattr(response, "text", None) or "").strip()
            if not text:
                return []
            return _parse_prices(text)
        except Exception as exc:
            logger.error("Gemini failed to fetch prices: %s", exc)
            return []

    def get_financial_advice(self, summary: str) -> str:
        prompt = (
            "As a senior financial advisor, read the following summary of a person's finances "
            f"and give concise, insightful advice:\n{summary}"
        )
        try:
            response = self._client().models.generate_content(model=self.model, contents=prompt)
        except Exception as exc:
            logger.error("Gemini advice failed: %s", exc)
            return ADVICE_SERVICE_DOWN
        return (getattr(response, "text", None) or "").strip() or ADVICE_UNAVAILABLE


def _parse_prices(text: str) -> List[StockPriceUpdate]:
    rows = json.loads(text)
    if not isinstance(rows, list):
        raise GeminiServiceError("Expected a JSON array of prices")

    results: List[StockPriceUpdate] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        symbol = str(row.get("symbol") or "").strip().upper()
        price = row.get("price")
        if not symbol or not isinstance(price, (int, float)) or isinstance(price, bool):
            continue
        results.append(StockPriceUpdate(symbol=symbol, price=float(price)))
    return results
