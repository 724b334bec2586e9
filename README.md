# ollama_client

An asynchronous Python client for a local or remote Ollama server, built on
`httpx`. By default it talks to `http://127.0.0.1:11434`.

It covers:

- text completion, whole or streamed (`Ollama.generate`, `Ollama.generate_stream`)
- chat, whole or streamed (`Ollama.send_chat_messages`, `Ollama.send_chat_messages_stream`)
- chat with a per-conversation history kept by the client
  (`Ollama.send_chat_messages_with_history`, `Ollama.send_chat_messages_with_history_stream`)
- embeddings (`Ollama.generate_embeddings`)
- model management: copy, create, delete, list, pull, push and show
  (`ModelClient` in `ollama_client.models`; `Ollama` inherits all of it)
- tools a model could be asked to use: a web page scraper, a DuckDuckGo search
  and a Google Finance stock scraper (`ollama_client.tools`)
- a terminal front end, `ollama-client`

## Installation

```
pip install ollama_client
```

## The client

```python
from ollama_client.client import Ollama

ollama = Ollama()                                  # http://127.0.0.1:11434
remote = Ollama("http://gpu-box.example.com", 8080, headers={"Authorization": "Bearer token"})
other = Ollama.from_url("https://ollama.example.com/")
print(remote.url(), remote.uri())                  # full URL, host name
```

`set_headers(mapping)` replaces the headers sent with every request;
`set_headers(None)` clears them. An invalid URL raises `ValueError`.

## Completion

```python
import asyncio

from ollama_client.client import Ollama
from ollama_client.messages import GenerationRequest
from ollama_client.options import GenerationOptions


async def run() -> None:
    ollama = Ollama()
    options = GenerationOptions(temperature=0.2, repeat_penalty=1.5, top_k=25, top_p=0.25)
    request = GenerationRequest("llama2:latest", "Why is the sky blue?", options=options)
    response = await ollama.generate(request)
    print(response.response)

    async for chunk in ollama.generate_stream(GenerationRequest("llama2:latest", "Hi")):
        print(chunk.response, end="", flush=True)


asyncio.run(run())
```

`GenerationRequest` also takes `suffix` (or use `GenerationRequest.with_suffix`
for code completion), `images`, `system`, `template`, `context` (the list of
integers returned in an earlier `GenerationResponse.context`), `format`
(`FormatType.JSON`) and `keep_alive`:

```python
from ollama_client.parameters import KeepAlive, TimeUnit

request = GenerationRequest("llama2:latest", "Hi", keep_alive=KeepAlive.until(5, TimeUnit.MINUTES))
```

`KeepAlive.indefinitely()` and `KeepAlive.unload_on_completion()` are the
other choices. Options can also be read from a mapping with
`GenerationOptions.from_dict`; unknown keys are ignored and values out of range
raise `ValueError`.

Images are base64 text: `Image.from_base64(...)`, attached with
`GenerationRequest.add_image` or `ChatMessage.add_image` (both return a copy).

## Chat

```python
from ollama_client.messages import ChatMessage, ChatMessageRequest

request = ChatMessageRequest("llama2:latest", [ChatMessage.user("Why is the sky blue?")])
reply = await ollama.send_chat_messages(request)
print(reply.message.content)

async for chunk in ollama.send_chat_messages_stream(request):
    if chunk.message is not None:
        print(chunk.message.content, end="")
```

## Chat with history

```python
ollama = Ollama(history_limit=30)
request = ChatMessageRequest("llama2:latest", [ChatMessage.user("Hello!")])
reply = await ollama.send_chat_messages_with_history(request, "default")
print(ollama.get_messages_history("default"))
```

The first message of the request is sent after the stored conversation; on
success it and the reply are added to the history. The streaming form updates
the history when the final chunk arrives.

Each conversation keeps at most `history_limit` messages (never fewer than
two). When it is full the oldest non-system message is dropped; a system
prompt always goes to the front. Messages with no content and no images are
not stored. The history can also be edited directly with
`add_user_response`, `add_assistant_response`, `set_system_response`,
`clear_messages_for_id` and `clear_all_messages`. The store itself is
`MessagesHistory` in `ollama_client.history`; it lives in memory only.

## Embeddings

```python
from ollama_client.messages import GenerateEmbeddingsRequest

one = await ollama.generate_embeddings(GenerateEmbeddingsRequest("llama2:latest", "Why is the sky blue?"))
many = await ollama.generate_embeddings(
    GenerateEmbeddingsRequest("llama2:latest", ["Why is the sky blue?", "Why is the sky red?"])
)
print(len(many.embeddings))
```

## Model management

```python
models = await ollama.list_local_models()
info = await ollama.show_model_info("llama2:latest")
await ollama.copy_model("mario", "mario_copy")
await ollama.delete_model("mario_copy")

from ollama_client.models import CreateModelRequest

status = await ollama.create_model(CreateModelRequest.from_path("model", "/tmp/Modelfile"))
async for status in ollama.pull_model_stream("llama2:latest"):
    print(status.message, status.completed, status.total)
```

`create_model_stream`, `pull_model`, `push_model` and `push_model_stream`
follow the same pattern; `allow_insecure` permits insecure connections to the
library.

## Tools

`ollama_client.tools.base.Tool` is an abstract class with `name`,
`description`, `parameters` (a JSON Schema dict), `run(arguments)` and
`call(text)`, which parses the text with `parse_input` and then runs the tool.
Three tools are included:

- `Scraper` (`ollama_client.tools.scraper`): fetches `{"website": url}` and
  returns the paragraph and heading text; `extract_text(html)` does the parsing.
- `DDGSearcher` (`ollama_client.tools.search_ddg`): searches for
  `{"query": ...}` and returns the results as JSON; `parse_search_results(html)`
  gives `SearchResult` objects.
- `StockScraper` (`ollama_client.tools.finance`): takes `{"exchange": ..., "ticker": ...}`
  and returns the quote page's figures as JSON; `parse_stock_page(html)` does the parsing.

## What the package does not do

There is no function-calling layer: nothing builds a system prompt describing
the tools, reads a tool call out of a model's reply or runs the tool for it.
The tools above must be called by your own code. Chat history is held in memory
only and is lost when the client goes away.

## Errors

Failures reported by the server, network errors and responses that cannot be
read raise `ollama_client.error.OllamaError`; its `message` attribute holds
the text of the error.

## Command line

```
ollama-client chat                        # interactive chat, conversation kept locally
ollama-client generate                    # interactive completion, carrying the context
ollama-client history [--stream] [--limit N]
ollama-client ask "Why is the sky blue?" [--image FILE_OR_URL] [--options JSON_OR_@FILE]
                  [--temperature T] [--repeat-penalty P] [--top-k K] [--top-p P]
                  [--seed S] [--num-predict N]
```

Global options `--host`, `--port` and `--model` (default `llama2:latest`) come
before the command. In the interactive commands type at the `>` prompt; `exit`
or end of input leaves. `history` prints the stored conversation to standard
error when it ends. The command exits with status 1 after an error.