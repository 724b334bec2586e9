import json

import httpx
import pytest
import respx

from ollama_client.client import Ollama
from ollama_client.error import OllamaError
from ollama_client.messages import (
    ChatMessage,
    ChatMessageRequest,
    GenerateEmbeddingsRequest,
    GenerationRequest,
    Image,
)
from ollama_client.options import GenerationOptions

BASE = "http://127.0.0.1:11434"
PROMPT = "Why is the sky blue?"
MODEL = "llama2:latest"


def _chat_reply(content="Because of scattering", done=True):
    return {
        "model": MODEL,
        "created_at": "2023-08-04T08:52:19.385406455-07:00",
        "message": {"role": "assistant", "content": content},
        "done": done,
    }


def _lines(*objects):
    return ("\n".join(json.dumps(o) for o in objects) + "\n").encode()


def _body(route, index=-1):
    return json.loads(route.calls[index].request.content)


# Chat history management


def test_chat_history_saved_as_should():
    ollama = Ollama(history_limit=30)
    chat_id = "default"
    ollama.add_user_response(chat_id, "Hello")
    ollama.add_assistant_response(chat_id, "Hi")
    ollama.add_user_response(chat_id, "Tell me 'hi' again")
    ollama.add_assistant_response(chat_id, "Hi again")
    history = ollama.get_messages_history(chat_id)
    assert len(history) == 4
    assert history[-1].content == "Hi again"


def test_chat_history_not_stored_if_no_content():
    ollama = Ollama(history_limit=30)
    chat_id = "default"
    ollama.add_user_response(chat_id, "Hello")
    ollama.add_assistant_response(chat_id, "")
    ollama.add_user_response(chat_id, "")
    ollama.add_assistant_response(chat_id, "Hi again")
    history = ollama.get_messages_history(chat_id)
    assert len(history) == 2
    assert history[-1].content == "Hi again"


def test_clear_chat_history_for_one_id_only():
    ollama = Ollama(history_limit=30)
    ollama.add_user_response("default", "Hello")
    ollama.add_user_response("not_default", "Hello")
    assert len(ollama.get_messages_history("default")) == 1
    assert len(ollama.get_messages_history("not_default")) == 1
    ollama.clear_messages_for_id("default")
    assert ollama.get_messages_history("default") is None
    assert len(ollama.get_messages_history("not_default")) == 1


def test_clear_chat_history_for_all():
    ollama = Ollama(history_limit=30)
    ollama.add_user_response("default", "Hello")
    ollama.add_user_response("not_default", "Hello")
    ollama.clear_all_messages()
    assert ollama.get_messages_history("default") is None
    assert ollama.get_messages_history("not_default") is None


def test_chat_history_freed_if_limit_exceeded():
    ollama = Ollama(history_limit=3)
    chat_id = "default"
    ollama.add_user_response(chat_id, "Hello")
    ollama.add_assistant_response(chat_id, "Hi")
    ollama.add_user_response(chat_id, "Tell me 'hi' again")
    ollama.add_assistant_response(chat_id, "Hi again")
    ollama.add_user_response(chat_id, "Tell me 'hi' again")
    ollama.add_assistant_response(chat_id, "Hi again")
    history = ollama.get_messages_history(chat_id)
    assert len(history) == 3
    assert history[-1].content == "Hi again"


def test_system_response_goes_first():
    ollama = Ollama(history_limit=30)
    ollama.add_user_response("default", "Hello")
    ollama.set_system_response("default", "Be brief")
    assert ollama.get_messages_history("default")[0].content == "Be brief"


def test_no_history_without_limit():
    ollama = Ollama()
    ollama.add_user_response("default", "Hello")
    assert ollama.get_messages_history("default") is None


# Chat


@pytest.mark.asyncio
async def test_send_chat_messages():
    ollama = Ollama()
    with respx.mock(base_url=BASE) as router:
        route = router.post("/api/chat").mock(return_value=httpx.Response(200, json=_chat_reply()))
        res = await ollama.send_chat_messages(
            ChatMessageRequest(MODEL, [ChatMessage.user(PROMPT)])
        )
    assert res.done
    assert res.message.content == "Because of scattering"
    body = _body(route)
    assert body["stream"] is False
    assert body["model"] == MODEL
    assert body["messages"] == [{"role": "user", "content": PROMPT, "images": None}]


@pytest.mark.asyncio
async def test_send_chat_messages_stream():
    ollama = Ollama()
    content = _lines(_chat_reply("Be", False), _chat_reply("cause", False), _chat_reply("", True))
    with respx.mock(base_url=BASE) as router:
        route = router.post("/api/chat").mock(return_value=httpx.Response(200, content=content))
        done = False
        parts = []
        async for res in ollama.send_chat_messages_stream(
            ChatMessageRequest(MODEL, [ChatMessage.user(PROMPT)])
        ):
            parts.append(res.message.content)
            if res.done:
                done = True
                break
    assert done
    assert "".join(parts) == "Because"
    assert _body(route)["stream"] is True


@pytest.mark.asyncio
async def test_send_chat_messages_stream_error_object():
    ollama = Ollama()
    with respx.mock(base_url=BASE) as router:
        router.post("/api/chat").mock(
            return_value=httpx.Response(200, content=_lines({"error": "model not found"}))
        )
        with pytest.raises(OllamaError) as info:
            async for _ in ollama.send_chat_messages_stream(
                ChatMessageRequest(MODEL, [ChatMessage.user(PROMPT)])
            ):
                pass
    assert info.value.message == "model not found"


@pytest.mark.asyncio
async def test_send_chat_messages_server_error():
    ollama = Ollama()
    with respx.mock(base_url=BASE) as router:
        router.post("/api/chat").mock(return_value=httpx.Response(500, text="broken"))
        with pytest.raises(OllamaError) as info:
            await ollama.send_chat_messages(ChatMessageRequest(MODEL, [ChatMessage.user(PROMPT)]))
    assert info.value.message == "broken"


@pytest.mark.asyncio
async def test_send_chat_messages_with_history_stream():
    ollama = Ollama(history_limit=30)
    content = _lines(_chat_reply("Hel", False), _chat_reply("lo", False), _chat_reply("", True))
    with respx.mock(base_url=BASE) as router:
        router.post("/api/chat").mock(return_value=httpx.Response(200, content=content))
        done = False
        async for res in ollama.send_chat_messages_with_history_stream(
            ChatMessageRequest(MODEL, [ChatMessage.user(PROMPT)]), "default"
        ):
            if res.done:
                done = True
    assert done
    history = ollama.get_messages_history("default")
    assert len(history) == 2
    assert history[0].content == PROMPT
    assert history[1].content == "Hello"


@pytest.mark.asyncio
async def test_send_chat_messages_with_history():
    ollama = Ollama(history_limit=30)
    with respx.mock(base_url=BASE) as router:
        route = router.post("/api/chat").mock(
            side_effect=lambda request: httpx.Response(200, json=_chat_reply())
        )
        res = await ollama.send_chat_messages_with_history(
            ChatMessageRequest(MODEL, [ChatMessage.user(PROMPT)]), "default"
        )
        assert res.done
        assert len(ollama.get_messages_history("default")) == 2

        res = await ollama.send_chat_messages_with_history(
            ChatMessageRequest(MODEL, [ChatMessage.user("Second message")]), "default"
        )
        assert res.done
        sent = _body(route)["messages"]
    history = ollama.get_messages_history("default")
    assert len(history) == 4
    assert history[2].content == "Second message"
    assert [m["content"] for m in sent] == [PROMPT, "Because of scattering", "Second message"]


@pytest.mark.asyncio
async def test_send_chat_messages_remove_old_history_with_limit_less_than_min():
    ollama = Ollama(history_limit=1)
    with respx.mock(base_url=BASE) as router:
        router.post("/api/chat").mock(return_value=httpx.Response(200, json=_chat_reply()))
        res = await ollama.send_chat_messages_with_history(
            ChatMessageRequest(MODEL, [ChatMessage.user(PROMPT)]), "default"
        )
    assert res.done
    assert len(ollama.get_messages_history("default")) == 2


@pytest.mark.asyncio
async def test_send_chat_messages_remove_old_history():
    ollama = Ollama(history_limit=3)
    with respx.mock(base_url=BASE) as router:
        router.post("/api/chat").mock(
            side_effect=lambda request: httpx.Response(200, json=_chat_reply())
        )
        res = await ollama.send_chat_messages_with_history(
            ChatMessageRequest(MODEL, [ChatMessage.user(PROMPT)]), "default"
        )
        assert res.done
        assert len(ollama.get_messages_history("default")) == 2
        res = await ollama.send_chat_messages_with_history(
            ChatMessageRequest(MODEL, [ChatMessage.user(PROMPT)]), "default"
        )
    assert res.done
    assert len(ollama.get_messages_history("default")) == 3


@pytest.mark.asyncio
async def test_history_unchanged_when_request_fails():
    ollama = Ollama(history_limit=30)
    with respx.mock(base_url=BASE) as router:
        router.post("/api/chat").mock(return_value=httpx.Response(500, text="broken"))
        with pytest.raises(OllamaError):
            await ollama.send_chat_messages_with_history(
                ChatMessageRequest(MODEL, [ChatMessage.user(PROMPT)]), "default"
            )
    assert not ollama.get_messages_history("default")


@pytest.mark.asyncio
async def test_send_with_history_creates_history_when_missing():
    ollama = Ollama()
    with respx.mock(base_url=BASE) as router:
        router.post("/api/chat").mock(return_value=httpx.Response(200, json=_chat_reply()))
        await ollama.send_chat_messages_with_history(
            ChatMessageRequest(MODEL, [ChatMessage.user(PROMPT)]), "default"
        )
    assert [m.content for m in ollama.get_messages_history("default")] == [
        PROMPT,
        "Because of scattering",
    ]


@pytest.mark.asyncio
async def test_send_chat_messages_with_images():
    ollama = Ollama()
    image = Image.from_base64("aGVsbG8=")
    with respx.mock(base_url=BASE) as router:
        route = router.post("/api/chat").mock(return_value=httpx.Response(200, json=_chat_reply()))
        res = await ollama.send_chat_messages(
            ChatMessageRequest(
                "llava:latest",
                [ChatMessage.user("What can we see in this image?").add_image(image)],
            )
        )
    assert res.done
    assert _body(route)["messages"][0]["images"] == ["aGVsbG8="]


# Completion


def _generation(response, done):
    return {"model": MODEL, "created_at": "2023-08-04T08:52:19Z", "response": response, "done": done}


@pytest.mark.asyncio
async def test_generation():
    ollama = Ollama()
    with respx.mock(base_url=BASE) as router:
        route = router.post("/api/generate").mock(
            return_value=httpx.Response(200, json=_generation("Rayleigh", True))
        )
        res = await ollama.generate(GenerationRequest(MODEL, PROMPT))
    assert res.response == "Rayleigh"
    assert res.done
    body = _body(route)
    assert body["prompt"] == PROMPT
    assert body["stream"] is False


@pytest.mark.asyncio
async def test_generation_stream():
    ollama = Ollama()
    content = _lines(
        _generation("Ray", False),
        {"unexpected": True},
        {**_generation("leigh", True), "context": [1, 2, 3]},
    )
    with respx.mock(base_url=BASE) as router:
        route = router.post("/api/generate").mock(return_value=httpx.Response(200, content=content))
        items = [item async for item in ollama.generate_stream(GenerationRequest(MODEL, PROMPT))]
    assert "".join(i.response for i in items) == "Rayleigh"
    assert items[-1].done
    assert items[-1].context == [1, 2, 3]
    assert _body(route)["stream"] is True


@pytest.mark.asyncio
async def test_generation_with_images():
    ollama = Ollama()
    image = Image.from_base64("aGVsbG8=")
    with respx.mock(base_url=BASE) as router:
        route = router.post("/api/generate").mock(
            return_value=httpx.Response(200, json=_generation("A dog", True))
        )
        res = await ollama.generate(
            GenerationRequest("llava:latest", "What can we see in this image?").add_image(image)
        )
    assert res.response == "A dog"
    assert _body(route)["images"] == ["aGVsbG8="]


@pytest.mark.asyncio
async def test_typical_c_code_main():
    ollama = Ollama()
    request = GenerationRequest.with_suffix("granite-code:3b", "int m", "(int argc, char **argv)")
    request.options = GenerationOptions(seed=146)
    with respx.mock(base_url=BASE) as router:
        route = router.post("/api/generate").mock(
            return_value=httpx.Response(200, json=_generation("ain", True))
        )
        res = await ollama.generate(request)
    assert res.response == "ain"
    body = _body(route)
    assert body["suffix"] == "(int argc, char **argv)"
    assert body["options"]["seed"] == 146


# Embeddings


@pytest.mark.asyncio
async def test_embeddings_generation():
    ollama = Ollama()
    with respx.mock(base_url=BASE) as router:
        route = router.post("/api/embed").mock(
            return_value=httpx.Response(200, json={"embeddings": [[0.5, 0.25]]})
        )
        res = await ollama.generate_embeddings(
            GenerateEmbeddingsRequest(MODEL, "Why is the sky blue")
        )
    assert res.embeddings == [[0.5, 0.25]]
    assert _body(route)["input"] == "Why is the sky blue"


@pytest.mark.asyncio
async def test_batch_embeddings_generation():
    ollama = Ollama()
    inputs = ["Why is the sky blue?", "Why is the sky red?"]
    with respx.mock(base_url=BASE) as router:
        route = router.post("/api/embed").mock(
            return_value=httpx.Response(200, json={"embeddings": [[0.5], [0.25]]})
        )
        res = await ollama.generate_embeddings(GenerateEmbeddingsRequest(MODEL, inputs))
    assert len(res.embeddings) == len(inputs)
    assert _body(route)["input"] == inputs


@pytest.mark.asyncio
async def test_embeddings_bad_payload():
    ollama = Ollama()
    with respx.mock(base_url=BASE) as router:
        router.post("/api/embed").mock(return_value=httpx.Response(200, json={"nothing": 1}))
        with pytest.raises(OllamaError):
            await ollama.generate_embeddings(GenerateEmbeddingsRequest(MODEL, "text"))