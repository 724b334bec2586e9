"""In-memory store of chat messages, grouped by conversation id."""

from __future__ import annotations

from typing import Any

from .messages import ChatMessage, MessageRole

_MIN_LIMIT = 2
_MAX_LIMIT = 65535


class MessagesHistory:
    """Chat messages per conversation, capped at ``limit`` messages each.

    The limit is never below 2. When a conversation is full, its oldest
    message that is not a system message is dropped before a new one is added.
    System messages always go to the front of the conversation.
    """

    def __init__(self, limit: int) -> None:
        if isinstance(limit, bool) or not isinstance(limit, int) or not 0 <= limit <= _MAX_LIMIT:
            raise ValueError(f"limit must be an integer between 0 and {_MAX_LIMIT}")
        self.limit = max(limit, _MIN_LIMIT)
        self._messages_by_id: dict[str, list[ChatMessage]] = {}

    def add_message(self, entry_id: Any, message: ChatMessage) -> None:
        """Add ``message`` to the conversation ``entry_id``, creating it if needed.

        Messages with no content and no images are ignored.
        """
        if not message.content and message.images is None:
            return
        messages = self._messages_by_id.setdefault(str(entry_id), [])
        if len(messages) >= self.limit:
            oldest = next(
                (i for i, m in enumerate(messages) if m.role is not MessageRole.SYSTEM),
                None,
            )
            if oldest is not None:
                del messages[oldest]
        if message.role is MessageRole.SYSTEM:
            messages.insert(0, message)
        else:
            messages.append(message)

    def get_messages(self, entry_id: Any) -> list[ChatMessage] | None:
        """Return a copy of the messages of ``entry_id``, or ``None`` if it has none."""
        messages = self._messages_by_id.get(str(entry_id))
        return None if messages is None else list(messages)

    def clear_messages_for_id(self, entry_id: Any) -> None:
        """Forget the conversation ``entry_id``."""
        self._messages_by_id.pop(str(entry_id), None)

    def clear_all_messages(self) -> None:
        """Forget every conversation."""
        self._messages_by_id.clear()