"""Command-line chat and completion front end for an Ollama server."""

from __future__ import annotations

import argparse
import asyncio
import base64
import json
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any, TextIO

import httpx

from .client import Ollama
from .error import OllamaError
from .messages import ChatMessage, ChatMessageRequest, GenerationRequest, Image
from .options import GenerationOptions
from .transport import DEFAULT_HOST, DEFAULT_PORT

DEFAULT_MODEL = "llama2:latest"
DEFAULT_HISTORY_LIMIT = 30

_OPTION_FLAGS = {
    "temperature": float,
    "repeat_penalty": float,
    "top_k": int,
    "top_p": float,
    "seed": int,
    "num_predict": int,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ollama-client", description="Talk to a model served by Ollama."
    )
    parser.add_argument("--host", default=DEFAULT_HOST, help="server address")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="server port")
    parser.add_argument("--model", default=DEFAULT_MODEL, help="model to use")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("chat", help="interactive chat, conversation kept locally")
    commands.add_parser("generate", help="interactive completion, carrying the context")

    history = commands.add_parser("history", help="interactive chat using the client's history")
    history.add_argument("--stream", action="store_true", help="stream the replies")
    history.add_argument(
        "--limit", type=int, default=DEFAULT_HISTORY_LIMIT, help="messages kept in history"
    )

    ask = commands.add_parser("ask", help="answer one prompt")
    ask.add_argument("prompt")
    ask.add_argument(
        "--image", action="append", default=[], help="image file or http(s) URL; repeatable"
    )
    ask.add_argument("--options", help="generation options as JSON, or @FILE holding JSON")
    for name, kind in _OPTION_FLAGS.items():
        ask.add_argument(f"--{name.replace('_', '-')}", dest=name, type=kind)
    return parser


def _options(parser: argparse.ArgumentParser, args: argparse.Namespace) -> GenerationOptions | None:
    data: dict[str, Any] = {}
    if args.options is not None:
        text = args.options
        try:
            if text.startswith("@"):
                text = Path(text[1:]).read_text(encoding="utf-8")
            loaded = json.loads(text)
        except (OSError, ValueError) as exc:
            parser.error(f"invalid options: {exc}")
        if not isinstance(loaded, dict):
            parser.error("invalid options: expected a JSON object")
        data.update(loaded)
    data.update(
        {name: getattr(args, name) for name in _OPTION_FLAGS if getattr(args, name) is not None}
    )
    if not data:
        return None
    try:
        return GenerationOptions.from_dict(data)
    except (TypeError, ValueError) as exc:
        parser.error(f"invalid options: {exc}")


def _prompts(out: TextIO) -> Iterator[str]:
    """Yield lines typed by the user until ``exit`` or end of input."""
    while True:
        out.write("\n> ")
        out.flush()
        line = sys.stdin.readline()
        if not line:
            return
        text = line.rstrip()
        if text.lower() == "exit":
            return
        yield text


def _write(out: TextIO, text: str) -> None:
    out.write(text)
    out.flush()


def _dump_history(client: Ollama, entry_id: str) -> None:
    for message in client.get_messages_history(entry_id) or []:
        role = getattr(message.role, "value", message.role)
        sys.stderr.write(f"{role}: {message.content}\n")


async def _chat(client: Ollama, model: str) -> None:
    out = sys.stdout
    messages: list[ChatMessage] = []
    for text in _prompts(out):
        messages.append(ChatMessage.user(text))
        parts: list[str] = []
        async for chunk in client.send_chat_messages_stream(ChatMessageRequest(model, list(messages))):
            if chunk.message is not None:
                _write(out, chunk.message.content)
                parts.append(chunk.message.content)
        messages.append(ChatMessage.assistant("".join(parts)))


async def _generate(client: Ollama, model: str) -> None:
    out = sys.stdout
    context = None
    for text in _prompts(out):
        request = (
            GenerationRequest(model, text)
            if context is None
            else GenerationRequest(model, text, context=context)
        )
        async for response in client.generate_stream(request):
            _write(out, response.response)
            if response.context is not None:
                context = response.context


async def _history(client: Ollama, model: str, stream: bool) -> None:
    out = sys.stdout
    entry_id = "user" if stream else "default"
    for text in _prompts(out):
        request = ChatMessageRequest(model, [ChatMessage.user(text)])
        if stream:
            async for chunk in client.send_chat_messages_with_history_stream(request, entry_id):
                if chunk.message is not None:
                    _write(out, chunk.message.content)
        else:
            result = await client.send_chat_messages_with_history(request, entry_id)
            if result.message is None:
                raise OllamaError("response holds no message")
            _write(out, result.message.content)
    _dump_history(client, entry_id)


async def _load_image(source: str) -> Image:
    if source.startswith(("http://", "https://")):
        try:
            async with httpx.AsyncClient(follow_redirects=True) as http:
                response = await http.get(source)
                response.raise_for_status()
                data = response.content
        except httpx.HTTPError as exc:
            raise OllamaError(f"Failed to download image: {exc}") from exc
    else:
        data = Path(source).read_bytes()
    return Image.from_base64(base64.b64encode(data).decode("ascii"))


async def _ask(
    client: Ollama, model: str, prompt: str, images: list[str], options: GenerationOptions | None
) -> None:
    extras: dict[str, Any] = {}
    if options is not None:
        extras["options"] = options
    if images:
        extras["images"] = [await _load_image(source) for source in images]
    response = await client.generate(GenerationRequest(model, prompt, **extras))
    sys.stdout.write(f"{response.response}\n")


async def _run(args: argparse.Namespace, options: GenerationOptions | None) -> None:
    if args.command == "history":
        client = Ollama(args.host, args.port, history_limit=args.limit)
    else:
        client = Ollama(args.host, args.port)
    if args.command == "chat":
        await _chat(client, args.model)
    elif args.command == "generate":
        await _generate(client, args.model)
    elif args.command == "history":
        await _history(client, args.model, args.stream)
    else:
        await _ask(client, args.model, args.prompt, args.image, options)


def main(argv: list[str] | None = None) -> int:
    """Run the command line; return the exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    options = _options(parser, args) if args.command == "ask" else None
    try:
        asyncio.run(_run(args, options))
    except (OllamaError, OSError, ValueError) as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())