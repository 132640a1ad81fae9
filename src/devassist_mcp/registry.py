"""
Tool registry: named tools with a parameter model and a handler.

Every call is validated against the tool's pydantic model before the handler
runs. Handlers return an ``AdapterResult`` (or a plain value for tools that
do not touch an upstream service); the registry turns a success into JSON
text and a failure into ``ToolExecutionError``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Type

from pydantic import BaseModel, ValidationError

from devassist_common.errors import typed_error
from devassist_common.tooling import InstrumentConfig, instrument_sync_tool
from devassist_mcp.results import AdapterResult

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_ID = "devassist_mcp"


class ToolError(Exception):
    code = "tool_error"

    def __init__(self, message: str, *, details: dict | None = None, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.extra = extra

    def envelope(self) -> dict:
        return typed_error(self.code, self.message, details=self.details, **self.extra)

    def to_text(self) -> str:
        return to_text(self.envelope())


class UnknownToolError(ToolError):
    code = "unknown_tool"


class ToolValidationError(ToolError):
    code = "invalid_params"


class ToolExecutionError(ToolError):
    def __init__(self, code: str, message: str, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.code = code


def to_text(value: Any) -> str:
    """Canonical text form: key order kept, nested structures fully expanded."""
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    params: Type[BaseModel]
    handler: Callable[[Any], Any]

    def input_schema(self) -> dict:
        schema = self.params.model_json_schema()
        schema.setdefault("properties", {})
        return schema


def _validation_details(err: ValidationError) -> dict:
    return {
        "errors": [
            {"loc": ".".join(str(p) for p in e["loc"]), "type": e["type"], "msg": e["msg"]}
            for e in err.errors()
        ]
    }


class ToolRegistry:
    def __init__(self, *, client_id: str = DEFAULT_CLIENT_ID) -> None:
        self.client_id = client_id
        self._tools: Dict[str, ToolDescriptor] = {}
        self._dispatch: Dict[str, Callable[[dict], str]] = {}

    def register(self, descriptor: ToolDescriptor) -> None:
        if descriptor.name in self._tools:
            raise ValueError(f"Tool already registered: {descriptor.name}")
        self._tools[descriptor.name] = descriptor
        cfg = InstrumentConfig(kind="tool", name=descriptor.name, client_id=self.client_id)
        self._dispatch[descriptor.name] = instrument_sync_tool(cfg)(
            lambda arguments, _d=descriptor: self._invoke(_d, arguments)
        )
        logger.debug("Registered tool %s", descriptor.name)

    def tool(self, name: str, description: str, params: Type[BaseModel]):
        """Decorator form of ``register``."""

        def decorator(fn: Callable[[Any], Any]):
            self.register(ToolDescriptor(name=name, description=description, params=params, handler=fn))
            return fn

        return decorator

    def get(self, name: str) -> ToolDescriptor:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(f"Tool not found: {name}", tool=name) from None

    def names(self) -> List[str]:
        return list(self._tools)

    def descriptors(self) -> List[ToolDescriptor]:
        return list(self._tools.values())

    def call(self, name: str, arguments: Mapping[str, Any] | None = None) -> str:
        """Validate, run and serialize one tool call. Raises ``ToolError``."""
        self.get(name)
        return self._dispatch[name](dict(arguments or {}))

    def _invoke(self, descriptor: ToolDescriptor, arguments: dict) -> str:
        try:
            params = descriptor.params.model_validate(arguments)
        except ValidationError as e:
            raise ToolValidationError(
                f"Invalid parameters for {descriptor.name}",
                details=_validation_details(e),
                tool=descriptor.name,
            ) from None

        try:
            outcome = descriptor.handler(params)
        except Exception as e:
            logger.exception("Tool %s failed", descriptor.name)
            raise ToolExecutionError("internal", str(e), tool=descriptor.name) from e

        if isinstance(outcome, AdapterResult):
            if not outcome.ok:
                f = outcome.failure
                raise ToolExecutionError(
                    f.code,
                    f.message,
                    details={"status": f.status} if f.status is not None else None,
                    tool=descriptor.name,
                )
            outcome = outcome.value

        return to_text(outcome)
