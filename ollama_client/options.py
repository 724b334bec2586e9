"""Sampling and runtime options for generation requests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

_U32_MAX = 2**32 - 1
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1

_INT_RANGES = {
    "mirostat": (0, 255),
    "num_ctx": (0, _U32_MAX),
    "num_gqa": (0, _U32_MAX),
    "num_gpu": (0, _U32_MAX),
    "num_thread": (0, _U32_MAX),
    "repeat_last_n": (_I32_MIN, _I32_MAX),
    "seed": (_I32_MIN, _I32_MAX),
    "num_predict": (_I32_MIN, _I32_MAX),
    "top_k": (0, _U32_MAX),
}

_FLOAT_FIELDS = frozenset(
    {"mirostat_eta", "mirostat_tau", "repeat_penalty", "temperature", "tfs_z", "top_p"}
)


@dataclass
class GenerationOptions:
    """Options for generation requests; unset options are left to the server.

    mirostat: Mirostat sampling (0 = disabled, 1 = Mirostat, 2 = Mirostat 2.0).
    mirostat_eta: learning rate of Mirostat (default 0.1).
    mirostat_tau: balance between coherence and diversity (default 5.0).
    num_ctx: size of the context window (default 2048).
    num_gqa: number of GQA groups in the transformer layer.
    num_gpu: number of layers sent to the GPU(s).
    num_thread: number of threads used during computation.
    repeat_last_n: how far back to look to prevent repetition (default 64).
    repeat_penalty: how strongly to penalise repetitions (default 1.1).
    temperature: model temperature (default 0.8).
    seed: random seed for generation (default 0).
    stop: stop sequences.
    tfs_z: tail free sampling (default 1).
    num_predict: maximum number of tokens to predict (default 128).
    top_k: top-k sampling (default 40).
    top_p: top-p sampling (default 0.9).
    """

    mirostat: int | None = None
    mirostat_eta: float | None = None
    mirostat_tau: float | None = None
    num_ctx: int | None = None
    num_gqa: int | None = None
    num_gpu: int | None = None
    num_thread: int | None = None
    repeat_last_n: int | None = None
    repeat_penalty: float | None = None
    temperature: float | None = None
    seed: int | None = None
    stop: list[str] | None = None
    tfs_z: float | None = None
    num_predict: int | None = None
    top_k: int | None = None
    top_p: float | None = None

    def __post_init__(self) -> None:
        for name, (low, high) in _INT_RANGES.items():
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer")
            if not low <= value <= high:
                raise ValueError(f"{name} must be between {low} and {high}")
        for name in _FLOAT_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number")
            setattr(self, name, float(value))
        if self.stop is not None:
            if isinstance(self.stop, str) or not all(isinstance(s, str) for s in self.stop):
                raise ValueError("stop must be a list of strings")
            self.stop = list(self.stop)

    def to_dict(self) -> dict[str, Any]:
        """Return the options as a JSON-ready dict; unset options are null."""
        return {
            f.name: list(value) if isinstance(value := getattr(self, f.name), list) else value
            for f in fields(self)
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GenerationOptions":
        """Build options from a mapping, ignoring unknown keys."""
        if not isinstance(data, Mapping):
            raise TypeError("options must be a mapping")
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})