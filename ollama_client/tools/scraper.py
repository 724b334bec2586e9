"""A tool that scrapes the text content of a web page."""

from __future__ import annotations

from typing import Any

from bs4 import BeautifulSoup

from .base import Tool, fetch_text, string_argument


def extract_text(html: str) -> str:
    """Return the paragraph and heading text of ``html``, one sentence per block."""
    document = BeautifulSoup(html, "html.parser")
    elements = (" ".join(el.strings) for el in document.select("p, h1, h2, h3, h4, h5, h6"))
    body = " ".join(elements)
    return "\n\n".join(body.split(". "))


class Scraper(Tool):
    """Scrapes text content from websites and splits it into chunks."""

    def name(self) -> str:
        return "website_scraper"

    def description(self) -> str:
        return "Scrapes text content from websites and splits it into manageable chunks."

    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "website": {
                    "type": "string",
                    "description": "The URL of the website to scrape",
                }
            },
            "required": ["website"],
        }

    async def run(self, arguments: Any) -> str:
        website = string_argument(arguments, "website")
        if website is None:
            raise ValueError("Website URL is required")
        return extract_text(await fetch_text(website))