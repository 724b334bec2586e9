"""Model management: list, show, create, copy, delete, pull and push."""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from typing import Any

from .transport import BaseClient


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"{what} must be a mapping")
    return data


def _required_str(data: Mapping[str, Any], key: str) -> str:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _unsigned(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"field {key!r} must be a non-negative integer")
    return value


def _optional_unsigned(data: Mapping[str, Any], key: str) -> int | None:
    value = data.get(key)
    return None if value is None else _unsigned(value, key)


@dataclass(frozen=True)
class LocalModel:
    """A model available on the server."""

    name: str
    modified_at: str
    size: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LocalModel":
        data = _mapping(data, "local model")
        if "size" not in data:
            raise ValueError("missing field 'size'")
        return cls(
            name=_required_str(data, "name"),
            modified_at=_required_str(data, "modified_at"),
            size=_unsigned(data["size"], "size"),
        )


@dataclass(frozen=True)
class ModelInfo:
    """Details of a model; fields the model lacks are empty strings."""

    license: str = ""
    modelfile: str = ""
    parameters: str = ""
    template: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModelInfo":
        data = _mapping(data, "model info")
        return cls(
            license=_optional_str(data, "license") or "",
            modelfile=_optional_str(data, "modelfile") or "",
            parameters=_optional_str(data, "parameters") or "",
            template=_optional_str(data, "template") or "",
        )


@dataclass(frozen=True)
class CreateModelRequest:
    """A request to create a model from a Modelfile path or its contents."""

    model_name: str
    path: str | None = None
    modelfile: str | None = None

    @classmethod
    def from_path(cls, model_name: str, path: str) -> "CreateModelRequest":
        """Create a model described by the Modelfile at ``path``."""
        return cls(model_name, path=path)

    @classmethod
    def from_modelfile(cls, model_name: str, modelfile: str) -> "CreateModelRequest":
        """Create a model described by the Modelfile contents ``modelfile``."""
        return cls(model_name, modelfile=modelfile)

    def to_dict(self, stream: bool) -> dict[str, Any]:
        return {
            "name": self.model_name,
            "path": self.path,
            "modelfile": self.modelfile,
            "stream": stream,
        }


@dataclass(frozen=True)
class CreateModelStatus:
    """A status message sent while creating a model."""

    message: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CreateModelStatus":
        return cls(_required_str(_mapping(data, "status"), "status"))


@dataclass(frozen=True)
class PullModelStatus:
    """A status message sent while pulling a model."""

    message: str
    digest: str | None = None
    total: int | None = None
    completed: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PullModelStatus":
        data = _mapping(data, "status")
        return cls(
            message=_required_str(data, "status"),
            digest=_optional_str(data, "digest"),
            total=_optional_unsigned(data, "total"),
            completed=_optional_unsigned(data, "completed"),
        )


@dataclass(frozen=True)
class PushModelStatus:
    """A status message sent while pushing a model."""

    message: str
    digest: str | None = None
    total: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PushModelStatus":
        data = _mapping(data, "status")
        return cls(
            message=_required_str(data, "status"),
            digest=_optional_str(data, "digest"),
            total=_optional_unsigned(data, "total"),
        )


def _local_models(data: Any) -> list[LocalModel]:
    models = _mapping(data, "model list")
    if "models" not in models:
        raise ValueError("missing field 'models'")
    return [LocalModel.from_dict(item) for item in models["models"]]


class ModelClient(BaseClient):
    """Client for the model management endpoints."""

    async def copy_model(self, source: str, destination: str) -> None:
        """Create a model named ``destination`` from the existing model ``source``."""
        await self._request("POST", "copy", {"source": source, "destination": destination})

    async def create_model(self, request: CreateModelRequest) -> CreateModelStatus:
        """Create a model and return only the final status."""
        content = await self._request("POST", "create", request.to_dict(stream=False))
        return self._parse(content, CreateModelStatus.from_dict)

    def create_model_stream(
        self, request: CreateModelRequest
    ) -> AsyncIterator[CreateModelStatus]:
        """Create a model, yielding each status as it arrives."""
        return self._stream(
            "POST", "create", request.to_dict(stream=True), CreateModelStatus.from_dict
        )

    async def delete_model(self, model_name: str) -> None:
        """Delete a model and its data."""
        await self._request("DELETE", "delete", {"name": model_name})

    async def list_local_models(self) -> list[LocalModel]:
        """Return the models available on the server."""
        content = await self._request("GET", "tags")
        return self._parse(content, _local_models)

    async def pull_model(self, model_name: str, allow_insecure: bool = False) -> PullModelStatus:
        """Pull a model and return only the final status.

        ``allow_insecure`` permits insecure connections to the library.
        """
        payload = {"name": model_name, "insecure": allow_insecure, "stream": False}
        content = await self._request("POST", "pull", payload)
        return self._parse(content, PullModelStatus.from_dict)

    def pull_model_stream(
        self, model_name: str, allow_insecure: bool = False
    ) -> AsyncIterator[PullModelStatus]:
        """Pull a model, yielding each status as it arrives."""
        payload = {"name": model_name, "insecure": allow_insecure, "stream": True}
        return self._stream("POST", "pull", payload, PullModelStatus.from_dict)

    async def push_model(self, model_name: str, allow_insecure: bool = False) -> PushModelStatus:
        """Push a model named ``<namespace>/<model>:<tag>`` and return the final status."""
        payload = {"name": model_name, "insecure": allow_insecure, "stream": False}
        content = await self._request("POST", "push", payload)
        return self._parse(content, PushModelStatus.from_dict)

    def push_model_stream(
        self, model_name: str, allow_insecure: bool = False
    ) -> AsyncIterator[PushModelStatus]:
        """Push a model, yielding each status as it arrives."""
        payload = {"name": model_name, "insecure": allow_insecure, "stream": True}
        return self._stream("POST", "push", payload, PushModelStatus.from_dict)

    async def show_model_info(self, model_name: str) -> ModelInfo:
        """Return the modelfile, template, parameters and license of a model."""
        content = await self._request("POST", "show", {"name": model_name})
        return self._parse(content, ModelInfo.from_dict)