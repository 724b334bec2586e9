"""A tool that scrapes stock information from Google Finance."""

from __future__ import annotations

import json
from typing import Any

from bs4 import BeautifulSoup

from .base import Tool, fetch_text, string_argument


def _text(element: Any) -> str:
    return "".join(element.strings)


def parse_stock_page(html: str) -> dict[str, str]:
    """Return the description/value pairs listed on a Google Finance quote page."""
    document = BeautifulSoup(html, "html.parser")
    description: dict[str, str] = {}
    for item in document.select("div.gyFHrc"):
        label = item.select_one("div.mfs7Fc")
        value = item.select_one("div.P6K39c")
        if label is not None and value is not None:
            description[_text(label)] = _text(value)
    return description


class StockScraper(Tool):
    """Scrapes stock information from Google Finance."""

    def __init__(
        self, base_url: str = "https://www.google.com/finance", language: str = "en"
    ) -> None:
        self.base_url = base_url
        self.language = language

    async def scrape(self, exchange: str, ticker: str) -> dict[str, str]:
        """Fetch the quote page of ``ticker`` on ``exchange`` and parse it."""
        url = f"{self.base_url}/quote/{ticker}:{exchange}?hl={self.language}"
        return parse_stock_page(await fetch_text(url))

    def name(self) -> str:
        return "stock_scraper"

    def description(self) -> str:
        return "Scrapes stock information from Google Finance."

    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "exchange": {
                    "type": "string",
                    "description": "The stock exchange market identifier code (MIC)",
                },
                "ticker": {
                    "type": "string",
                    "description": "The ticker symbol of the stock",
                },
            },
            "required": ["exchange", "ticker"],
        }

    async def run(self, arguments: Any) -> str:
        exchange = string_argument(arguments, "exchange")
        if exchange is None:
            raise ValueError("Exchange is required")
        ticker = string_argument(arguments, "ticker")
        if ticker is None:
            raise ValueError("Ticker is required")
        result = await self.scrape(exchange, ticker)
        return json.dumps(result, separators=(",", ":"), ensure_ascii=False)