"""Base HTTP client: server address, request headers and JSON transport."""

from __future__ import annotations

import json
import re
from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any, TypeVar
from urllib.parse import urlsplit

import httpx

from .error import OllamaError

T = TypeVar("T")

DEFAULT_HOST = "http://127.0.0.1"
DEFAULT_PORT = 11434

_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*\Z")
_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


def _normalize_url(url: str, port: int | None = None) -> str:
    """Parse ``url``, optionally replace its port, and return its canonical form."""
    if not isinstance(url, str):
        raise TypeError("url must be a string")
    text = url.strip()
    parts = urlsplit(text)
    scheme = parts.scheme.lower()
    if not scheme or not _SCHEME.match(scheme):
        raise ValueError(f"invalid URL {url!r}: relative URL without a base")
    if not parts.hostname:
        raise ValueError(f"invalid URL {url!r}: empty host")
    try:
        current = parts.port
    except ValueError as exc:
        raise ValueError(f"invalid URL {url!r}: invalid port number") from exc
    if port is not None:
        if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= 65535:
            raise ValueError("port must be an integer between 0 and 65535")
        current = port
    if current == _DEFAULT_PORTS.get(scheme):
        current = None

    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    userinfo = parts.netloc.rpartition("@")[0]
    netloc = f"{userinfo}@{host}" if userinfo else host
    if current is not None:
        netloc = f"{netloc}:{current}"

    result = f"{scheme}://{netloc}{parts.path or '/'}"
    if parts.query:
        result += f"?{parts.query}"
    if parts.fragment:
        result += f"#{parts.fragment}"
    return result


def _check_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    if headers is None:
        return {}
    if not isinstance(headers, Mapping):
        raise TypeError("headers must be a mapping")
    for name, value in headers.items():
        if not isinstance(name, str) or not isinstance(value, str):
            raise TypeError("header names and values must be strings")
    return dict(headers)


def _parse_stream_item(line: str, parse: Callable[[Any], T]) -> T:
    try:
        return parse(json.loads(line))
    except (ValueError, TypeError, KeyError) as exc:
        try:
            error = OllamaError.from_json(line)
        except ValueError:
            raise OllamaError(f"Failed to deserialize response: {exc}") from exc
        raise error from None


class BaseClient:
    """Holds the server URL and headers and performs JSON requests."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._url = _normalize_url(host, port)
        self._headers: dict[str, str] = {}
        self.set_headers(headers)

    @classmethod
    def from_url(cls, url: str, **kwargs: Any):
        """Create a client for the full server ``url``; ``kwargs`` go to the constructor."""
        normalized = _normalize_url(url)
        instance = cls(**kwargs)
        instance._url = normalized
        return instance

    def uri(self) -> str:
        """Return the host name of the server."""
        host = urlsplit(self._url).hostname or ""
        return f"[{host}]" if ":" in host else host

    def url(self) -> str:
        """Return the full server URL."""
        return self._url

    @property
    def headers(self) -> dict[str, str]:
        """A copy of the headers sent with every request."""
        return dict(self._headers)

    def set_headers(self, headers: Mapping[str, str] | None) -> None:
        """Replace the request headers; ``None`` clears them."""
        self._headers = _check_headers(headers)

    def _endpoint(self, path: str) -> str:
        return f"{self._url}api/{path}"

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=None, headers=self._headers)

    async def _request(self, method: str, path: str, payload: Any = None) -> bytes:
        """Send a request and return the body of a successful response."""
        body = None if payload is None else json.dumps(payload).encode("utf-8")
        try:
            async with self._http() as http:
                response = await http.request(method, self._endpoint(path), content=body)
        except httpx.HTTPError as exc:
            raise OllamaError(str(exc)) from exc
        if not response.is_success:
            raise OllamaError(response.text)
        return response.content

    @staticmethod
    def _parse(content: bytes, parse: Callable[[Any], T]) -> T:
        try:
            return parse(json.loads(content))
        except (ValueError, TypeError, KeyError) as exc:
            raise OllamaError(str(exc)) from exc

    async def _stream(
        self, method: str, path: str, payload: Any, parse: Callable[[Any], T]
    ) -> AsyncIterator[T]:
        """Send a request and yield one parsed item per line of the response."""
        body = json.dumps(payload).encode("utf-8")
        connected = False
        try:
            async with self._http() as http:
                async with http.stream(method, self._endpoint(path), content=body) as response:
                    connected = True
                    if not response.is_success:
                        await response.aread()
                        raise OllamaError(response.text)
                    async for line in response.aiter_lines():
                        if line.strip():
                            yield _parse_stream_item(line, parse)
        except httpx.HTTPError as exc:
            if connected:
                raise OllamaError(f"Failed to read response: {exc}") from exc
            raise OllamaError(str(exc)) from exc