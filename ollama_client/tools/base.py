"""Base class for tools that a model can call."""

from __future__ import annotations

import abc
import json
import logging
from typing import Any

_log = logging.getLogger(__name__)


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, sort_keys=True)


class Tool(abc.ABC):
    """A function that a model can ask to have run.

    Subclasses give the tool a name, a description and a ``run`` coroutine;
    ``parameters`` describes the arguments in JSON Schema form.
    """

    @abc.abstractmethod
    def name(self) -> str:
        """Return the name of the tool."""

    @abc.abstractmethod
    def description(self) -> str:
        """Describe what the tool does and when to use it."""

    def parameters(self) -> dict[str, Any]:
        """Return the JSON Schema of the tool's arguments."""
        return {
            "type": "object",
            "properties": {
                "input": {
                    "type": "string",
                    "description": self.description(),
                }
            },
            "required": ["input"],
        }

    async def call(self, text: str) -> str:
        """Parse ``text`` into arguments and run the tool with them."""
        arguments = await self.parse_input(text)
        return await self.run(arguments)

    @abc.abstractmethod
    async def run(self, arguments: Any) -> str:
        """Run the tool with parsed arguments and return its output."""

    async def parse_input(self, text: str) -> Any:
        """Turn raw input text into the value passed to :meth:`run`.

        A JSON object with a string ``input`` field gives that string; any
        other JSON value gives its compact JSON text; anything else is
        returned unchanged.
        """
        _log.info("Using default implementation: %s", text)
        try:
            value = json.loads(text)
        except (ValueError, TypeError):
            return text
        if isinstance(value, dict) and isinstance(value.get("input"), str):
            return value["input"]
        return _compact_json(value)


def string_argument(arguments: Any, key: str) -> str | None:
    """Return ``arguments[key]`` when ``arguments`` is a mapping holding a string there."""
    if isinstance(arguments, dict):
        value = arguments.get(key)
        if isinstance(value, str):
            return value
    return None


async def fetch_text(url: str) -> str:
    """Fetch ``url`` with a GET request and return the body as text."""
    import httpx

    async with httpx.AsyncClient(follow_redirects=True) as client:
        response = await client.get(url)
        return response.text