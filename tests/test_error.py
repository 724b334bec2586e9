import json

import pytest

from ollama_client.error import OllamaError


def test_message_is_kept():
    err = OllamaError("model not found")
    assert err.message == "model not found"


def test_str_contains_message():
    err = OllamaError("model not found")
    assert "model not found" in str(err)
    assert str(err).endswith(err.message)


def test_from_json_mapping():
    err = OllamaError.from_json({"error": "boom"})
    assert err.message == "boom"


def test_from_json_string():
    err = OllamaError.from_json(json.dumps({"error": "boom"}))
    assert err.message == "boom"


def test_from_json_bytes():
    err = OllamaError.from_json(json.dumps({"error": "boom"}).encode())
    assert err.message == "boom"


def test_from_json_missing_field():
    with pytest.raises(ValueError):
        OllamaError.from_json({"status": "success"})


def test_from_json_invalid_json():
    with pytest.raises(ValueError):
        OllamaError.from_json("{not json")


def test_from_json_non_object():
    with pytest.raises(ValueError):
        OllamaError.from_json("[1, 2]")


def test_from_json_renders_like_direct_construction():
    parsed = OllamaError.from_json({"error": "bad request"})
    direct = OllamaError("bad request")
    assert str(parsed) == str(direct)
    assert parsed.message == "bad request"