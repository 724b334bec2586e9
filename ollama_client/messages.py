"""Request and response types for chat, completion and embeddings."""

from __future__ import annotations

import enum
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any

from .options import GenerationOptions
from .parameters import FormatType, KeepAlive


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"{what} must be a mapping")
    return data


def _require(data: Mapping[str, Any], key: str) -> Any:
    try:
        value = data[key]
    except KeyError:
        raise ValueError(f"missing field {key!r}") from None
    if value is None:
        raise ValueError(f"field {key!r} must not be null")
    return value


@dataclass(frozen=True)
class Image:
    """A base64-encoded image."""

    data: str

    @classmethod
    def from_base64(cls, data: str) -> "Image":
        return cls(data)

    def to_json(self) -> str:
        return self.data


class MessageRole(enum.Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"


@dataclass
class ChatMessage:
    """A chat message with optional images."""

    role: MessageRole
    content: str
    images: list[Image] | None = None

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(MessageRole.USER, content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(MessageRole.ASSISTANT, content)

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(MessageRole.SYSTEM, content)

    def with_images(self, images: Sequence[Image]) -> "ChatMessage":
        """Return a copy of this message carrying ``images``."""
        return replace(self, images=list(images))

    def add_image(self, image: Image) -> "ChatMessage":
        """Return a copy of this message with ``image`` appended."""
        return replace(self, images=[*(self.images or []), image])

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self.content,
            "images": None if self.images is None else [i.to_json() for i in self.images],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatMessage":
        data = _mapping(data, "message")
        role = MessageRole(_require(data, "role"))
        content = _require(data, "content")
        if not isinstance(content, str):
            raise ValueError("content must be a string")
        raw_images = data.get("images")
        images = None if raw_images is None else [Image(str(i)) for i in raw_images]
        return cls(role, content, images)


@dataclass
class ChatMessageRequest:
    """A chat request to Ollama."""

    model_name: str
    messages: list[ChatMessage]
    options: GenerationOptions | None = None
    template: str | None = None
    format: FormatType | None = None

    def to_dict(self, stream: bool) -> dict[str, Any]:
        return {
            "model": self.model_name,
            "messages": [m.to_dict() for m in self.messages],
            "options": None if self.options is None else self.options.to_dict(),
            "template": self.template,
            "format": None if self.format is None else self.format.value,
            "stream": stream,
        }


@dataclass
class ChatMessageFinalResponseData:
    """Statistics sent with the last chat response."""

    total_duration: int
    prompt_eval_count: int
    prompt_eval_duration: int
    eval_count: int
    eval_duration: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatMessageFinalResponseData":
        data = _mapping(data, "final data")
        values = {}
        for f in fields(cls):
            value = _require(data, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{f.name} must be an integer")
            values[f.name] = value
        return cls(**values)


@dataclass
class ChatMessageResponse:
    """A chat response, or one chunk of a streamed chat response."""

    model: str
    created_at: str
    message: ChatMessage | None
    done: bool
    final_data: ChatMessageFinalResponseData | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatMessageResponse":
        data = _mapping(data, "chat response")
        raw_message = data.get("message")
        try:
            final_data = ChatMessageFinalResponseData.from_dict(data)
        except ValueError:
            final_data = None
        return cls(
            model=str(_require(data, "model")),
            created_at=str(_require(data, "created_at")),
            message=None if raw_message is None else ChatMessage.from_dict(raw_message),
            done=bool(_require(data, "done")),
            final_data=final_data,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "model": self.model,
            "created_at": self.created_at,
            "message": None if self.message is None else self.message.to_dict(),
            "done": self.done,
        }
        if self.final_data is not None:
            result.update(asdict(self.final_data))
        return result


@dataclass
class GenerationRequest:
    """A completion request to Ollama."""

    model_name: str
    prompt: str
    suffix: str | None = None
    images: list[Image] = field(default_factory=list)
    options: GenerationOptions | None = None
    system: str | None = None
    template: str | None = None
    context: list[int] | None = None
    format: FormatType | None = None
    keep_alive: KeepAlive | None = None

    @classmethod
    def with_suffix(cls, model_name: str, prompt: str, suffix: str) -> "GenerationRequest":
        """Build a request with text after the completion, for code completion."""
        return cls(model_name, prompt, suffix=suffix)

    def add_image(self, image: Image) -> "GenerationRequest":
        """Return a copy of this request with ``image`` appended."""
        return replace(self, images=[*self.images, image])

    def to_dict(self, stream: bool) -> dict[str, Any]:
        return {
            "model": self.model_name,
            "prompt": self.prompt,
            "suffix": self.suffix,
            "images": [i.to_json() for i in self.images],
            "options": None if self.options is None else self.options.to_dict(),
            "system": self.system,
            "template": self.template,
            "context": None if self.context is None else list(self.context),
            "format": None if self.format is None else self.format.value,
            "keep_alive": None if self.keep_alive is None else self.keep_alive.to_json(),
            "stream": stream,
        }


@dataclass
class GenerationResponse:
    """A completion response, or one chunk of a streamed completion."""

    model: str
    created_at: str
    response: str
    done: bool
    context: list[int] | None = None
    total_duration: int | None = None
    prompt_eval_count: int | None = None
    prompt_eval_duration: int | None = None
    eval_count: int | None = None
    eval_duration: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GenerationResponse":
        data = _mapping(data, "generation response")
        context = data.get("context")
        return cls(
            model=str(_require(data, "model")),
            created_at=str(_require(data, "created_at")),
            response=str(_require(data, "response")),
            done=bool(_require(data, "done")),
            context=None if context is None else [int(c) for c in context],
            total_duration=data.get("total_duration"),
            prompt_eval_count=data.get("prompt_eval_count"),
            prompt_eval_duration=data.get("prompt_eval_duration"),
            eval_count=data.get("eval_count"),
            eval_duration=data.get("eval_duration"),
        )


@dataclass
class GenerateEmbeddingsRequest:
    """An embeddings request for one input string or a batch of them."""

    model_name: str
    input: str | list[str] = ""
    truncate: bool | None = None
    options: GenerationOptions | None = None
    keep_alive: KeepAlive | None = None

    def __post_init__(self) -> None:
        if isinstance(self.input, str):
            return
        if isinstance(self.input, Sequence) and all(isinstance(s, str) for s in self.input):
            self.input = list(self.input)
            return
        raise TypeError("input must be a string or a sequence of strings")

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model_name,
            "input": self.input if isinstance(self.input, str) else list(self.input),
            "truncate": self.truncate,
            "options": None if self.options is None else self.options.to_dict(),
            "keep_alive": None if self.keep_alive is None else self.keep_alive.to_json(),
        }


@dataclass
class GenerateEmbeddingsResponse:
    """Embeddings returned by Ollama, one vector per input."""

    embeddings: list[list[float]]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GenerateEmbeddingsResponse":
        data = _mapping(data, "embeddings response")
        raw = _require(data, "embeddings")
        try:
            embeddings = [[float(x) for x in vector] for vector in raw]
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid embeddings: {exc}") from exc
        return cls(embeddings)