"""Error type for failures reported by an Ollama server or by the client."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any


class OllamaError(Exception):
    """An error reported by the Ollama server or raised by the client."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = str(message)

    @classmethod
    def from_json(cls, data: Any) -> "OllamaError":
        """Build an error from a server payload of the form ``{"error": "..."}``.

        Accepts a mapping, a JSON string or JSON bytes. Raises ``ValueError``
        when the payload is not such an object.
        """
        if isinstance(data, (bytes, bytearray)):
            try:
                data = data.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ValueError(f"invalid error payload: {exc}") from exc
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as exc:
                raise ValueError(f"invalid error payload: {exc}") from exc
        if not isinstance(data, Mapping) or not isinstance(data.get("error"), str):
            raise ValueError("error payload must be an object with a string 'error' field")
        return cls(data["error"])

    def __str__(self) -> str:
        return f"An error occurred with Ollama: {self.message}"

    def __repr__(self) -> str:
        return f"OllamaError({self.message!r})"