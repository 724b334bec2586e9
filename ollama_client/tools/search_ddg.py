"""A tool that searches the web through DuckDuckGo's HTML interface."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any

from bs4 import BeautifulSoup

from .base import Tool, fetch_text, string_argument


@dataclass(frozen=True)
class SearchResult:
    """One search hit."""

    title: str
    link: str
    snippet: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def _part(result: Any, selector: str) -> str:
    element = result.select_one(selector)
    if element is None:
        raise ValueError(f"search result has no {selector} element")
    return "".join(element.strings)


def parse_search_results(html: str) -> list[SearchResult]:
    """Return the results listed on a DuckDuckGo HTML results page."""
    document = BeautifulSoup(html, "html.parser")
    return [
        SearchResult(
            title=_part(result, ".result__a"),
            link=_part(result, ".result__url").strip(),
            snippet=_part(result, ".result__snippet"),
        )
        for result in document.select(".web-result")
    ]


class DDGSearcher(Tool):
    """Searches the web using DuckDuckGo."""

    def __init__(self, base_url: str = "https://duckduckgo.com") -> None:
        self.base_url = base_url

    async def search(self, query: str) -> list[SearchResult]:
        """Search for ``query`` and return the results."""
        url = f"{self.base_url}/html/?q={query}"
        return parse_search_results(await fetch_text(url))

    def name(self) -> str:
        return "ddg_searcher"

    def description(self) -> str:
        return "Searches the web using DuckDuckGo's HTML interface."

    def parameters(self) -> dict[str, Any]:
        return {
            "description": "This tool lets you search the web using DuckDuckGo. "
            "The input should be a search query.",
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The search query to send to DuckDuckGo",
                }
            },
            "required": ["query"],
        }

    async def run(self, arguments: Any) -> str:
        query = string_argument(arguments, "query")
        if query is None:
            raise ValueError("Query is required")
        results = await self.search(query)
        return json.dumps([r.to_dict() for r in results], separators=(",", ":"), ensure_ascii=False)