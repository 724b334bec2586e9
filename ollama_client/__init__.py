"""Asynchronous client for the Ollama HTTP API, with chat history, model management and tools."""

__version__ = "0.1.0"