"""The Ollama client: chat, completion, embeddings and chat history."""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from dataclasses import replace
from typing import Any

from .history import MessagesHistory
from .messages import (
    ChatMessage,
    ChatMessageRequest,
    ChatMessageResponse,
    GenerateEmbeddingsRequest,
    GenerateEmbeddingsResponse,
    GenerationRequest,
    GenerationResponse,
)
from .models import ModelClient
from .transport import DEFAULT_HOST, DEFAULT_PORT

_FALLBACK_HISTORY_LIMIT = 2


def _generation_or_none(data: Any) -> GenerationResponse | None:
    try:
        return GenerationResponse.from_dict(data)
    except (ValueError, TypeError, KeyError):
        return None


class Ollama(ModelClient):
    """Client for an Ollama server, optionally keeping chat history.

    With ``history_limit`` set, conversations are remembered per id and
    capped at that many messages (at least 2).
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        headers: Mapping[str, str] | None = None,
        history_limit: int | None = None,
    ) -> None:
        super().__init__(host, port, headers)
        self._history: MessagesHistory | None = (
            None if history_limit is None else MessagesHistory(history_limit)
        )

    # History management

    def _add_history_message(self, entry_id: Any, message: ChatMessage) -> None:
        if self._history is not None:
            self._history.add_message(entry_id, message)

    def _ensure_history(self) -> MessagesHistory:
        if self._history is None:
            self._history = MessagesHistory(_FALLBACK_HISTORY_LIMIT)
        return self._history

    def add_assistant_response(self, entry_id: Any, message: str) -> None:
        """Add an assistant message to the history of ``entry_id``."""
        self._add_history_message(entry_id, ChatMessage.assistant(str(message)))

    def add_user_response(self, entry_id: Any, message: str) -> None:
        """Add a user message to the history of ``entry_id``."""
        self._add_history_message(entry_id, ChatMessage.user(str(message)))

    def set_system_response(self, entry_id: Any, message: str) -> None:
        """Set a system prompt for the history of ``entry_id``."""
        self._add_history_message(entry_id, ChatMessage.system(str(message)))

    def get_messages_history(self, entry_id: Any) -> list[ChatMessage] | None:
        """Return a copy of the messages of ``entry_id``, or ``None``."""
        if self._history is None:
            return None
        return self._history.get_messages(entry_id)

    def clear_messages_for_id(self, entry_id: Any) -> None:
        """Forget the conversation ``entry_id``."""
        if self._history is not None:
            self._history.clear_messages_for_id(entry_id)

    def clear_all_messages(self) -> None:
        """Forget every conversation."""
        if self._history is not None:
            self._history.clear_all_messages()

    def _request_with_history(self, request: ChatMessageRequest, entry: str) -> ChatMessageRequest:
        messages = self._ensure_history().get_messages(entry) or []
        if request.messages:
            messages.append(request.messages[0])
        return replace(request, messages=messages)

    # Chat

    async def send_chat_messages(self, request: ChatMessageRequest) -> ChatMessageResponse:
        """Send a chat request and return the whole response."""
        content = await self._request("POST", "chat", request.to_dict(stream=False))
        return self._parse(content, ChatMessageResponse.from_dict)

    def send_chat_messages_stream(
        self, request: ChatMessageRequest
    ) -> AsyncIterator[ChatMessageResponse]:
        """Send a chat request, yielding each response chunk as it arrives."""
        return self._stream(
            "POST", "chat", request.to_dict(stream=True), ChatMessageResponse.from_dict
        )

    async def send_chat_messages_with_history(
        self, request: ChatMessageRequest, history_id: Any
    ) -> ChatMessageResponse:
        """Send the first message of ``request`` after the stored conversation.

        On success the sent message and the reply are added to the history.
        """
        entry = str(history_id)
        request = self._request_with_history(request, entry)
        result = await self.send_chat_messages(request)
        history = self._ensure_history()
        if request.messages:
            history.add_message(entry, request.messages[-1])
        if result.message is not None:
            history.add_message(entry, result.message)
        return result

    async def send_chat_messages_with_history_stream(
        self, request: ChatMessageRequest, history_id: Any
    ) -> AsyncIterator[ChatMessageResponse]:
        """Streaming form of :meth:`send_chat_messages_with_history`.

        The history is updated when the final chunk arrives.
        """
        entry = str(history_id)
        request = self._request_with_history(request, entry)
        history = self._ensure_history()
        parts: list[str] = []
        async for item in self.send_chat_messages_stream(request):
            if item.done:
                if request.messages:
                    history.add_message(entry, request.messages[-1])
                history.add_message(entry, ChatMessage.assistant("".join(parts)))
            else:
                parts.append(item.message.content if item.message is not None else "")
            yield item

    # Completion

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Send a completion request and return the whole response."""
        content = await self._request("POST", "generate", request.to_dict(stream=False))
        return self._parse(content, GenerationResponse.from_dict)

    async def generate_stream(self, request: GenerationRequest) -> AsyncIterator[GenerationResponse]:
        """Send a completion request, yielding each response as it arrives.

        Objects that are not completion responses are skipped.
        """
        async for item in self._stream(
            "POST", "generate", request.to_dict(stream=True), _generation_or_none
        ):
            if item is not None:
                yield item

    # Embeddings

    async def generate_embeddings(
        self, request: GenerateEmbeddingsRequest
    ) -> GenerateEmbeddingsResponse:
        """Return embeddings for the input of ``request``."""
        content = await self._request("POST", "embed", request.to_dict())
        return self._parse(content, GenerateEmbeddingsResponse.from_dict)